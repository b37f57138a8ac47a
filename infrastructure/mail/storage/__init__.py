"""邮件文件存储"""

from infrastructure.mail.storage.eml_message_store import EmlMessageStore

__all__ = ["EmlMessageStore"]
