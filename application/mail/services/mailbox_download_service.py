"""邮箱下载服务接口"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from domain.mail.value_objects.batch_result import RunSummary
from domain.mail.value_objects.credentials import Credentials


class MailboxDownloadService(ABC):
    """
    邮箱下载服务接口

    定义批次下载调度器的契约，负责：
    - 将 [1, 邮件总数] 划分为固定大小的连续区间
    - 每个区间使用独立连接并发下载
    - 并发连接数限制
    - 相邻两次启动之间的固定间隔
    - 单批次失败不影响其他批次
    """

    DEFAULT_BATCH_SIZE: int = 10  # 默认每批邮件数
    DEFAULT_MAX_CONCURRENT: int = 5  # 默认最大并发连接数
    DEFAULT_LAUNCH_DELAY: float = 0.05  # 默认批次启动间隔（秒）
    DEFAULT_BATCH_TIMEOUT: Optional[float] = None  # 默认单批次超时（秒），None 表示不限制

    @property
    @abstractmethod
    def batch_size(self) -> int:
        """
        获取每批邮件数

        Returns:
            每个区间的最大消息数
        """
        raise NotImplementedError

    @property
    @abstractmethod
    def max_concurrent_connections(self) -> int:
        """
        获取默认最大并发连接数

        Returns:
            最大并发 IMAP 连接数
        """
        raise NotImplementedError

    @abstractmethod
    async def download(
        self,
        total_count: int,
        credentials: Credentials,
        destination: Path,
        max_concurrent: Optional[int] = None,
    ) -> RunSummary:
        """
        下载邮箱中的全部邮件

        邮件总数为 0 时直接返回空汇总，不打开任何连接。
        批次失败只计入汇总，不会使本方法抛出异常。

        Args:
            total_count: 邮件总数
            credentials: 登录凭证
            destination: 保存目录
            max_concurrent: 本次运行的并发上限，None 时使用默认值

        Returns:
            RunSummary 运行汇总
        """
        raise NotImplementedError
