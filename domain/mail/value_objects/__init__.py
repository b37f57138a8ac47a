"""邮件值对象模块"""

from domain.mail.value_objects.batch_result import BatchResult, RunSummary
from domain.mail.value_objects.command_tags import CommandTags
from domain.mail.value_objects.credentials import Credentials
from domain.mail.value_objects.fetch_range import FetchRange
from domain.mail.value_objects.imap_endpoint import ImapEndpoint
from domain.mail.value_objects.saved_message_file import SavedMessageFile

__all__ = [
    "BatchResult",
    "RunSummary",
    "CommandTags",
    "Credentials",
    "FetchRange",
    "ImapEndpoint",
    "SavedMessageFile",
]
