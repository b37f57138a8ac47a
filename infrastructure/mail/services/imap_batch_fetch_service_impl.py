"""IMAP 批次收取服务实现"""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Generator, Optional

from domain.mail.repositories.message_store import MessageStore
from domain.mail.services.batch_fetch_service import BatchFetchService
from domain.mail.value_objects.command_tags import CommandTags
from domain.mail.value_objects.credentials import Credentials
from domain.mail.value_objects.fetch_range import FetchRange
from infrastructure.imap.imap_session import ImapSession
from infrastructure.imap.transport import ImapStream, ImapTransport
from infrastructure.mail.storage.eml_message_store import EmlMessageStore


class ImapBatchFetchServiceImpl(BatchFetchService):
    """
    IMAP 批次收取服务实现

    每次调用独占一个连接：
    - 打开 TLS 传输
    - LOGIN（先读取并丢弃问候行）
    - SELECT 邮箱
    - FETCH 区间内所有邮件的完整内容，逐封写入文件
    - LOGOUT（尽力而为，不影响结果）
    - 无论成功失败都关闭连接

    任一步骤的第一个错误直接向上抛出，不做重试。
    """

    def __init__(
        self,
        transport: ImapTransport,
        mailbox: str = "INBOX",
        tags: Optional[CommandTags] = None,
        message_store_factory: Callable[[Path], MessageStore] = EmlMessageStore,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化批次收取服务

        Args:
            transport: 传输层，每次调用 open() 得到一个新连接
            mailbox: 邮箱名称
            tags: 命令标签（每个连接内部使用）
            message_store_factory: 根据保存目录创建邮件存储
            logger: 可选的日志记录器
        """
        self._transport = transport
        self._mailbox = mailbox
        self._tags = tags or CommandTags()
        self._message_store_factory = message_store_factory
        self._logger = logger or logging.getLogger(__name__)

    def count_messages(self, credentials: Credentials) -> int:
        """
        查询邮箱中当前的邮件数量

        Args:
            credentials: 登录凭证

        Returns:
            邮件数量，服务器未报告 EXISTS 时为 0
        """
        self._logger.info("Connecting to get email count...")
        with self._session(credentials) as session:
            count = session.select_mailbox()

        if count is None:
            self._logger.warning(f"Server did not report EXISTS for {self._mailbox}")
            return 0
        return count

    def fetch_range(
        self,
        fetch_range: FetchRange,
        credentials: Credentials,
        destination: Path,
    ) -> int:
        """
        下载一个区间内的所有邮件

        Args:
            fetch_range: 消息序号区间
            credentials: 登录凭证
            destination: 保存目录

        Returns:
            保存的邮件数量
        """
        store = self._message_store_factory(Path(destination))

        def save_message(message_id: int, body: bytes) -> None:
            store.save(message_id, body)

        with self._session(credentials) as session:
            session.select_mailbox()
            saved = session.fetch(fetch_range, save_message)

        if saved != fetch_range.size:
            self._logger.warning(
                f"Range {fetch_range}: server returned {saved} of {fetch_range.size} emails"
            )
        return saved

    @contextmanager
    def _session(self, credentials: Credentials) -> Generator[ImapSession, None, None]:
        """
        已登录的 IMAP 会话上下文管理器

        正常退出时发送 LOGOUT，任何情况下都关闭连接。
        """
        stream = self._transport.open()
        try:
            session = ImapSession(
                stream,
                mailbox=self._mailbox,
                tags=self._tags,
                logger=self._logger,
            )
            session.login(credentials)
            yield session
            session.logout()
        finally:
            self._close(stream)

    def _close(self, stream: ImapStream) -> None:
        try:
            stream.close()
        except OSError as e:
            self._logger.debug(f"Error during close: {e}")
