"""
IMAP 响应增量解码器

服务器的响应在同一条字节流中混合了两种数据：
- 以 CRLF 结尾的状态行（无标签的 "* ..." 行和带标签的完成行）
- 由行尾 "{n}" 声明、紧随 CRLF 之后的 n 字节原始数据（literal）

解码器按任意大小的数据块增量处理字节流，跨块边界正确恢复，
除当前行和当前正在接收的 literal 之外不缓存任何数据。
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Tuple

from domain.common.exceptions import ImapProtocolError

CRLF = b"\r\n"
LITERAL_DELIMITER = b")"

SUCCESS_STATUS = "OK"

MessageHandler = Callable[[int, bytes], None]
LineHandler = Callable[[str], None]


class DecoderState(str, Enum):
    """解码器状态"""

    READING_LINE = "reading_line"
    """读取状态行"""

    READING_LITERAL = "reading_literal"
    """读取 literal 原始字节"""

    SKIPPING_TO_DELIMITER = "skipping_to_delimiter"
    """丢弃字节直到遇到右括号（FETCH 数据项的结束语法）"""


@dataclass
class PendingMessage:
    """
    正在接收的邮件

    只在 READING_LITERAL 状态下存在，收满声明的字节数后即被清除。

    Attributes:
        message_id: 消息序号（无法解析时为 None，内容会被丢弃）
        size: 声明的字节数
        data: 已接收的字节
    """

    message_id: Optional[int]
    size: int
    data: bytearray = field(default_factory=bytearray)

    @property
    def remaining(self) -> int:
        return self.size - len(self.data)


@dataclass(frozen=True)
class TaggedResponse:
    """
    命令完成行

    Attributes:
        tag: 命令标签（问候行为 None）
        status: 状态标记，例如 OK / NO / BAD
        text: 完整的行文本（不含 CRLF）
    """

    tag: Optional[str]
    status: str
    text: str

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS_STATUS


class ResponseDecoder:
    """
    IMAP 响应解码器（显式状态机）

    用法：
        decoder = ResponseDecoder(on_message=store.save)
        decoder.begin("A003")
        response = decoder.feed(b"")  # 先处理上一条命令遗留的字节
        while response is None:
            response = decoder.feed(stream.recv(4096))

    状态转换：
    - READING_LINE: 收到 CRLF 得到完整行。包含 "FETCH" 和 "{n}" 的行开始一个
      literal；以当前标签开头的行结束当前命令，状态不是 OK 即为失败；其他行
      交给 on_untagged 后忽略。
    - READING_LITERAL: 累积字节直到收满 n 字节，交给 on_message，
      然后进入 SKIPPING_TO_DELIMITER。
    - SKIPPING_TO_DELIMITER: 丢弃字节直到 ")"，回到 READING_LINE。

    格式错误的 literal 声明：
    - 字节数无法解析时抛出 ImapProtocolError，因为无法知道要跳过多少字节，
      字节流已经无法重新同步；
    - 字节数有效但消息序号无法解析时，照常读取并丢弃该 literal，记录警告。
    """

    def __init__(
        self,
        on_message: Optional[MessageHandler] = None,
        on_untagged: Optional[LineHandler] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化解码器

        Args:
            on_message: 每收完一个 literal 时调用 (message_id, body)
            on_untagged: 每收到一行无标签响应时调用
            logger: 可选的日志记录器
        """
        self._on_message = on_message
        self._on_untagged = on_untagged
        self._logger = logger or logging.getLogger(__name__)

        self._state = DecoderState.READING_LINE
        self._line = bytearray()
        self._pending: Optional[PendingMessage] = None
        self._backlog = b""
        self._tag: Optional[str] = None
        self._active = False
        self._saved_count = 0
        self._skipped_count = 0

    @property
    def state(self) -> DecoderState:
        """当前状态"""
        return self._state

    @property
    def remaining(self) -> int:
        """当前 literal 还需要接收的字节数，不在 READING_LITERAL 状态时为 0"""
        if self._pending is None:
            return 0
        return self._pending.remaining

    @property
    def saved_count(self) -> int:
        """已交给 on_message 的邮件数量"""
        return self._saved_count

    @property
    def skipped_count(self) -> int:
        """因消息序号无法解析而丢弃的 literal 数量"""
        return self._skipped_count

    def set_message_handler(self, on_message: Optional[MessageHandler]) -> None:
        """替换 literal 处理回调（不同命令可以有不同的接收方）"""
        self._on_message = on_message

    def set_untagged_handler(self, on_untagged: Optional[LineHandler]) -> None:
        """替换无标签行处理回调"""
        self._on_untagged = on_untagged

    def begin(self, tag: Optional[str]) -> None:
        """
        开始等待一条命令的完成行

        Args:
            tag: 命令标签；None 表示等待服务器问候行（第一条完整行即完成）
        """
        self._tag = tag
        self._active = True

    def feed(self, data: bytes) -> Optional[TaggedResponse]:
        """
        处理一块数据

        完成行之后的剩余字节会保留到下一条命令。

        Args:
            data: 从字节流读取的数据，可以为空

        Returns:
            当前命令完成时返回 TaggedResponse，否则返回 None

        Raises:
            ImapProtocolError: literal 声明的字节数无法解析
        """
        if not self._active:
            raise RuntimeError("begin() must be called before feed()")

        if self._backlog:
            buf = self._backlog + data
            self._backlog = b""
        else:
            buf = data

        pos = 0
        end = len(buf)
        while pos < end:
            if self._state is DecoderState.READING_LINE:
                pos, response = self._consume_line(buf, pos)
                if response is not None:
                    self._backlog = buf[pos:]
                    self._active = False
                    return response
            elif self._state is DecoderState.READING_LITERAL:
                pos = self._consume_literal(buf, pos)
            else:
                pos = self._skip_to_delimiter(buf, pos)

        return None

    def _consume_line(self, buf: bytes, pos: int) -> Tuple[int, Optional[TaggedResponse]]:
        newline = buf.find(b"\n", pos)
        if newline == -1:
            self._line.extend(buf[pos:])
            return len(buf), None

        self._line.extend(buf[pos:newline + 1])
        pos = newline + 1

        # 单独的 LF 不是行结束
        if not self._line.endswith(CRLF):
            return pos, None

        line = bytes(self._line[:-2])
        self._line.clear()
        return pos, self._dispatch_line(line)

    def _dispatch_line(self, line: bytes) -> Optional[TaggedResponse]:
        text = line.decode("utf-8", errors="replace")

        if self._tag is None:
            parts = text.split(" ", 2)
            status = parts[1].upper() if len(parts) > 1 else ""
            return TaggedResponse(tag=None, status=status, text=text)

        if "FETCH" in text and "{" in text:
            self._start_literal(text)
            return None

        if text.startswith(self._tag + " "):
            # NO / BAD / BYE 等非 OK 状态都按失败完成
            status = text[len(self._tag) + 1:].split(" ", 1)[0].upper()
            return TaggedResponse(tag=self._tag, status=status, text=text)

        if self._on_untagged is not None:
            self._on_untagged(text)
        return None

    def _start_literal(self, text: str) -> None:
        size = parse_literal_size(text)
        if size is None:
            raise ImapProtocolError(command="FETCH", response=f"malformed literal size in {text!r}")

        message_id = parse_fetch_message_id(text)
        if message_id is None:
            self._logger.warning(f"Cannot parse message id, discarding {size} bytes: {text}")

        self._pending = PendingMessage(message_id=message_id, size=size)
        if size == 0:
            self._complete_literal()
        else:
            self._state = DecoderState.READING_LITERAL

    def _consume_literal(self, buf: bytes, pos: int) -> int:
        pending = self._pending
        chunk = buf[pos:pos + pending.remaining]
        pending.data.extend(chunk)
        pos += len(chunk)
        if pending.remaining == 0:
            self._complete_literal()
        return pos

    def _complete_literal(self) -> None:
        pending = self._pending
        self._pending = None
        self._state = DecoderState.SKIPPING_TO_DELIMITER

        if pending.message_id is None:
            self._skipped_count += 1
            return

        if self._on_message is None:
            self._logger.debug(f"No receiver for message {pending.message_id}, discarding")
            return

        self._on_message(pending.message_id, bytes(pending.data))
        self._saved_count += 1

    def _skip_to_delimiter(self, buf: bytes, pos: int) -> int:
        index = buf.find(LITERAL_DELIMITER, pos)
        if index == -1:
            return len(buf)
        self._state = DecoderState.READING_LINE
        return index + 1


def parse_fetch_message_id(text: str) -> Optional[int]:
    """
    解析 "* <id> FETCH ..." 中的消息序号

    Returns:
        消息序号，格式错误时返回 None
    """
    start = text.find("* ")
    end = text.find(" FETCH")
    if start == -1 or end == -1 or end < start + 2:
        return None

    token = text[start + 2:end].strip()
    if not _is_number(token):
        return None
    message_id = int(token)
    return message_id if message_id > 0 else None


def parse_literal_size(text: str) -> Optional[int]:
    """
    解析行中 "{n}" 声明的 literal 字节数

    Returns:
        字节数，格式错误时返回 None
    """
    start = text.find("{")
    end = text.find("}", start + 1)
    if start == -1 or end == -1:
        return None

    token = text[start + 1:end]
    if not _is_number(token):
        return None
    return int(token)


def parse_exists_count(text: str) -> Optional[int]:
    """
    解析 "* <n> EXISTS" 中的邮件数量

    Returns:
        邮件数量，格式错误时返回 None
    """
    parts = text.split()
    if len(parts) < 3 or parts[0] != "*" or parts[2].upper() != "EXISTS":
        return None
    if not _is_number(parts[1]):
        return None
    return int(parts[1])


def _is_number(token: str) -> bool:
    return token.isascii() and token.isdigit()
