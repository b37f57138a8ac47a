"""EML 文件存储实现"""

import logging
from pathlib import Path
from typing import Optional, Union

from domain.common.exceptions import MessageWriteError
from domain.mail.repositories.message_store import MessageStore
from domain.mail.value_objects.saved_message_file import SavedMessageFile


class EmlMessageStore(MessageStore):
    """
    将每封邮件写入 <destination>/email_XXXXX.eml

    不同批次的消息序号互不重叠，因此并发写入的文件名也互不冲突。
    目录由前端负责创建，这里不创建目录。
    """

    def __init__(
        self,
        destination: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化存储

        Args:
            destination: 保存目录
            logger: 可选的日志记录器
        """
        self._destination = Path(destination)
        self._logger = logger or logging.getLogger(__name__)

    @property
    def destination(self) -> Path:
        return self._destination

    def save(self, message_id: int, body: bytes) -> SavedMessageFile:
        """
        写入原始字节，已存在时覆盖

        Args:
            message_id: 消息序号
            body: 原始字节

        Returns:
            SavedMessageFile

        Raises:
            MessageWriteError: 写入失败
        """
        target = SavedMessageFile(destination=self._destination, message_id=message_id)
        try:
            target.path.write_bytes(body)
        except OSError as e:
            raise MessageWriteError(path=str(target.path), message=str(e)) from e

        self._logger.debug(f"Saved email {message_id} to {target.path} ({len(body)} bytes)")
        return target
