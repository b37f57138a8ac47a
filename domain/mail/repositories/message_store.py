"""邮件文件存储接口"""

from abc import ABC, abstractmethod

from domain.mail.value_objects.saved_message_file import SavedMessageFile


class MessageStore(ABC):
    """
    邮件存储接口

    保存单封邮件的原始字节，具体实现在基础设施层。
    """

    @abstractmethod
    def save(self, message_id: int, body: bytes) -> SavedMessageFile:
        """
        保存一封邮件，已存在时覆盖

        Args:
            message_id: 消息序号
            body: 服务器返回的原始字节

        Returns:
            保存后的文件描述

        Raises:
            MessageWriteError: 写入失败
        """
        raise NotImplementedError
