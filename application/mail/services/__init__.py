"""邮件应用服务"""

from application.mail.services.mailbox_download_service import MailboxDownloadService
from application.mail.services.async_mailbox_download_service import AsyncMailboxDownloadService

__all__ = ["MailboxDownloadService", "AsyncMailboxDownloadService"]
