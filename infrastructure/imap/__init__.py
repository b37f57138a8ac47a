"""IMAP 基础设施层 - TLS 传输、响应解码、会话"""

from infrastructure.imap.transport import ImapStream, ImapTransport, TlsTransport
from infrastructure.imap.response_decoder import (
    DecoderState,
    PendingMessage,
    ResponseDecoder,
    TaggedResponse,
)
from infrastructure.imap.imap_session import ImapSession

__all__ = [
    "ImapStream",
    "ImapTransport",
    "TlsTransport",
    "DecoderState",
    "PendingMessage",
    "ResponseDecoder",
    "TaggedResponse",
    "ImapSession",
]
