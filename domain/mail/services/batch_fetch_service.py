"""批次收取服务接口"""

from abc import ABC, abstractmethod
from pathlib import Path

from domain.mail.value_objects.credentials import Credentials
from domain.mail.value_objects.fetch_range import FetchRange


class BatchFetchService(ABC):
    """
    批次收取服务接口

    定义通过 IMAP 协议下载邮件的契约。具体实现在基础设施层，
    每次调用都独占一个连接（TLS 传输、会话握手、响应解码器），
    调用之间不共享任何可变状态，可以在多个线程中并发调用。
    """

    @abstractmethod
    def count_messages(self, credentials: Credentials) -> int:
        """
        查询邮箱中当前的邮件数量

        单独打开一个连接完成 LOGIN 与 SELECT，读取 EXISTS 数量后登出。

        Args:
            credentials: 登录凭证

        Returns:
            邮件数量，服务器未报告时为 0

        Raises:
            ImapConnectionError: 连接失败
            ImapTlsError: TLS 握手失败
            ImapAuthenticationError: 认证失败
            ImapCommandError: SELECT 失败
        """
        raise NotImplementedError

    @abstractmethod
    def fetch_range(
        self,
        fetch_range: FetchRange,
        credentials: Credentials,
        destination: Path,
    ) -> int:
        """
        下载一个连续区间内的所有邮件并逐封保存为文件

        Args:
            fetch_range: 消息序号区间
            credentials: 登录凭证
            destination: 保存目录

        Returns:
            保存的邮件数量

        Raises:
            DomainException: 任一步骤遇到的第一个错误
        """
        raise NotImplementedError
