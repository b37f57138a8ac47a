"""测试公共夹具 - 内存 IMAP 服务器、字节流与可计数的传输层"""

import re
import threading
import time
from typing import Callable, Dict, List, Optional, Set

import pytest


GREETING = b"* OK Gimap ready for requests\r\n"


class FakeImapServer:
    """
    脚本化的 IMAP 服务器

    按命令返回预先编排的响应，可以模拟登录失败、SELECT/FETCH 失败、
    响应延迟以及任意大小的读取分块。
    """

    def __init__(
        self,
        messages: Optional[Dict[int, bytes]] = None,
        login_ok: bool = True,
        select_ok: bool = True,
        fetch_ok: bool = True,
        exists: Optional[int] = None,
        chunk_size: int = 4096,
        recv_delay: float = 0.0,
        failing_logins: Optional[Set[int]] = None,
    ):
        """
        Args:
            messages: 邮箱内容 {序号: 原始字节}
            login_ok: LOGIN 是否成功
            select_ok: SELECT 是否成功
            fetch_ok: FETCH 是否成功
            exists: SELECT 报告的数量，默认等于 messages 数量
            chunk_size: 每次 recv 最多返回的字节数
            recv_delay: 每次 recv 前的等待时间（秒）
            failing_logins: 第几次登录（从 1 开始）失败
        """
        self.messages = messages or {}
        self.login_ok = login_ok
        self.select_ok = select_ok
        self.fetch_ok = fetch_ok
        self.exists = len(self.messages) if exists is None else exists
        self.chunk_size = chunk_size
        self.recv_delay = recv_delay
        self.failing_logins = failing_logins or set()
        self.commands: List[str] = []
        self._login_count = 0
        self._lock = threading.Lock()

    def respond(self, line: str) -> bytes:
        with self._lock:
            self.commands.append(line)

        tag, verb, *rest = line.split(" ", 2)
        verb = verb.upper()
        args = rest[0] if rest else ""

        if verb == "LOGIN":
            with self._lock:
                self._login_count += 1
                failed = not self.login_ok or self._login_count in self.failing_logins
            if failed:
                return f"{tag} NO [AUTHENTICATIONFAILED] Invalid credentials\r\n".encode()
            return f"{tag} OK user authenticated (Success)\r\n".encode()

        if verb == "SELECT":
            if not self.select_ok:
                return f"{tag} NO [NONEXISTENT] Unknown Mailbox: {args}\r\n".encode()
            return (
                b"* FLAGS (\\Answered \\Flagged \\Draft \\Deleted \\Seen)\r\n"
                + f"* {self.exists} EXISTS\r\n".encode()
                + b"* 0 RECENT\r\n"
                + f"{tag} OK [READ-WRITE] {args} selected. (Success)\r\n".encode()
            )

        if verb == "FETCH":
            if not self.fetch_ok:
                return f"{tag} BAD Could not parse command\r\n".encode()
            match = re.match(r"(\d+):(\d+)", args)
            start, end = int(match.group(1)), int(match.group(2))
            out = bytearray()
            for message_id in range(start, end + 1):
                body = self.messages.get(message_id)
                if body is None:
                    continue
                out += f"* {message_id} FETCH (BODY[] {{{len(body)}}}\r\n".encode()
                out += body
                out += b")\r\n"
            out += f"{tag} OK Success\r\n".encode()
            return bytes(out)

        if verb == "LOGOUT":
            return f"* BYE LOGOUT Requested\r\n{tag} OK 73 good day (Success)\r\n".encode()

        return f"{tag} BAD Unknown command\r\n".encode()


class FakeImapStream:
    """内存字节流，把客户端命令交给 FakeImapServer 并缓存其响应"""

    def __init__(
        self,
        server: FakeImapServer,
        on_close: Optional[Callable[[], None]] = None,
        greeting: bytes = GREETING,
    ):
        self.server = server
        self.sent: List[bytes] = []
        self.closed = False
        self._outbox = bytearray(greeting)
        self._pending_command = bytearray()
        self._on_close = on_close

    def sendall(self, data: bytes) -> None:
        self.sent.append(data)
        self._pending_command += data
        while b"\r\n" in self._pending_command:
            line, _, rest = bytes(self._pending_command).partition(b"\r\n")
            self._pending_command = bytearray(rest)
            self._outbox += self.server.respond(line.decode())

    def recv(self, bufsize: int) -> bytes:
        if self.server.recv_delay:
            time.sleep(self.server.recv_delay)
        size = min(bufsize, self.server.chunk_size)
        chunk = bytes(self._outbox[:size])
        del self._outbox[:size]
        return chunk

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        if self._on_close is not None:
            self._on_close()


class InstrumentedTransport:
    """统计同时存活连接数的传输层"""

    def __init__(self, server: FakeImapServer):
        self.server = server
        self.opened = 0
        self.live = 0
        self.max_live = 0
        self.streams: List[FakeImapStream] = []
        self._lock = threading.Lock()

    def open(self) -> FakeImapStream:
        with self._lock:
            self.opened += 1
            self.live += 1
            self.max_live = max(self.max_live, self.live)
            stream = FakeImapStream(self.server, on_close=self._closed)
            self.streams.append(stream)
        return stream

    def _closed(self) -> None:
        with self._lock:
            self.live -= 1


def make_messages(count: int) -> Dict[int, bytes]:
    """生成 count 封内容互不相同的邮件"""
    return {
        i: (
            f"From: sender{i}@example.com\r\n"
            f"Subject: Message {i}\r\n"
            f"\r\n"
            f"Body of message {i} (with parentheses)\r\n"
        ).encode()
        for i in range(1, count + 1)
    }


@pytest.fixture
def imap_server_factory():
    """创建 FakeImapServer"""
    return FakeImapServer


@pytest.fixture
def imap_stream_factory():
    """创建 FakeImapStream"""
    return FakeImapStream


@pytest.fixture
def transport_factory():
    """创建 InstrumentedTransport"""
    return InstrumentedTransport


@pytest.fixture
def messages_factory():
    """生成测试邮件"""
    return make_messages
