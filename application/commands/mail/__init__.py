"""邮件命令模块"""

from application.commands.mail.download_mailbox import DownloadMailboxCommand

__all__ = ["DownloadMailboxCommand"]
