"""
领域异常定义

所有领域异常都继承自 DomainException，携带可读消息和错误代码，
供上层（处理器、命令行）报告失败原因。

异常分类：
- 输入错误：InvalidInputException, InvalidValueObjectException
- 连接错误：ImapConnectionError, ImapTimeoutError
- TLS 错误：ImapTlsError
- 认证错误：ImapAuthenticationError
- 协议错误：ImapCommandError, ImapProtocolError
- 文件错误：MessageWriteError
- 任务错误：BatchTaskError
"""

from typing import Any, Optional


class DomainException(Exception):
    """领域异常基类"""

    default_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, code: Optional[str] = None):
        self.message = message
        self.code = code or self.default_code
        super().__init__(message)


class InvalidInputException(DomainException):
    """调用方提供的配置无效（在打开任何连接之前拒绝）"""

    default_code = "INVALID_INPUT"

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(f"Invalid {field}: {reason}")


class InvalidValueObjectException(DomainException):
    """值对象校验失败"""

    default_code = "INVALID_VALUE_OBJECT"

    def __init__(self, value_object_type: str, value: Any, reason: str):
        self.value_object_type = value_object_type
        self.value = value
        super().__init__(f"Invalid {value_object_type}: {reason}")


class ImapConnectionError(DomainException):
    """TCP 层连接失败（解析、连接、读写、连接被提前关闭）"""

    default_code = "IMAP_CONNECTION_ERROR"

    def __init__(self, message: str, server: str = "", port: int = 0):
        self.server = server
        self.port = port
        if server:
            message = f"{server}:{port} - {message}"
        super().__init__(message)


class ImapTimeoutError(ImapConnectionError):
    """单次读取超过截止时间"""

    default_code = "IMAP_TIMEOUT"


class ImapTlsError(DomainException):
    """TLS 握手或证书校验失败"""

    default_code = "IMAP_TLS_ERROR"

    def __init__(self, message: str, server: str = "", port: int = 0):
        self.server = server
        self.port = port
        if server:
            message = f"{server}:{port} - {message}"
        super().__init__(message)


class ImapAuthenticationError(DomainException):
    """LOGIN 被服务器拒绝"""

    default_code = "IMAP_AUTH_ERROR"

    def __init__(self, username: str, message: str):
        self.username = username
        super().__init__(f"Authentication failed for {username} - {message}")


class ImapCommandError(DomainException):
    """带标签的失败响应（NO / BAD），例如 SELECT 或 FETCH 被拒绝"""

    default_code = "IMAP_COMMAND_ERROR"

    def __init__(self, command: str, response: str):
        self.command = command
        self.response = response
        super().__init__(f"{command} command failed: {response}")


class ImapProtocolError(ImapCommandError):
    """服务器响应格式无法解析，数据流无法继续同步"""

    default_code = "IMAP_PROTOCOL_ERROR"


class MessageWriteError(DomainException):
    """邮件文件写入失败"""

    default_code = "MESSAGE_WRITE_ERROR"

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"Failed to write {path} - {message}")


class BatchTaskError(DomainException):
    """批次任务无法完成（超时或执行器异常）"""

    default_code = "BATCH_TASK_ERROR"
