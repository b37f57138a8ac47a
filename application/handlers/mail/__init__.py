"""邮件处理器模块"""

from application.handlers.mail.download_mailbox_handler import (
    DownloadMailboxHandler,
    DownloadMailboxResult,
)

__all__ = [
    "DownloadMailboxHandler",
    "DownloadMailboxResult",
]
