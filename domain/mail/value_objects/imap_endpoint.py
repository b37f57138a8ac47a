"""IMAP 服务端点值对象"""

from dataclasses import dataclass

from domain.common.base_value_object import BaseValueObject
from domain.common.exceptions import InvalidValueObjectException


@dataclass(frozen=True)
class ImapEndpoint(BaseValueObject):
    """
    IMAP 服务端点值对象

    一次运行只连接一个端点，只操作一个邮箱。

    Attributes:
        host: IMAP 服务器地址
        port: IMAP 服务器端口，默认 993 (隐式 TLS)
        mailbox: 要下载的邮箱名称，默认 INBOX
    """

    host: str = "imap.gmail.com"
    port: int = 993
    mailbox: str = "INBOX"

    def validate(self) -> None:
        """验证端点配置的有效性"""
        if not self.host or not self.host.strip():
            raise InvalidValueObjectException(
                value_object_type="ImapEndpoint",
                value=self.host,
                reason="IMAP host cannot be empty"
            )

        if not 1 <= self.port <= 65535:
            raise InvalidValueObjectException(
                value_object_type="ImapEndpoint",
                value=self.port,
                reason=f"Invalid port number: {self.port}. Must be between 1 and 65535"
            )

        if not self.mailbox or not self.mailbox.strip():
            raise InvalidValueObjectException(
                value_object_type="ImapEndpoint",
                value=self.mailbox,
                reason="Mailbox name cannot be empty"
            )

    @property
    def connection_string(self) -> str:
        """返回连接字符串格式"""
        return f"imaps://{self.host}:{self.port}/{self.mailbox}"
