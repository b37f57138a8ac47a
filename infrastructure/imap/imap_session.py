"""IMAP 会话：单个连接上的命令/响应交换"""

import logging
import socket
from typing import Callable, Optional

from domain.common.exceptions import (
    ImapAuthenticationError,
    ImapCommandError,
    ImapConnectionError,
    ImapTimeoutError,
)
from domain.mail.value_objects.command_tags import CommandTags
from domain.mail.value_objects.credentials import Credentials
from domain.mail.value_objects.fetch_range import FetchRange
from infrastructure.imap.response_decoder import (
    ResponseDecoder,
    TaggedResponse,
    parse_exists_count,
)
from infrastructure.imap.transport import ImapStream

# 需要使用引号字符串发送的字符（RFC 3501 atom-specials）
_ATOM_SPECIALS = frozenset('(){ %*"\\]')


def quote_astring(value: str) -> str:
    """
    将参数编码为 IMAP astring

    普通 atom 原样发送，含特殊字符或为空时使用引号字符串并转义 \\ 和 "。
    """
    if value and not any(c in _ATOM_SPECIALS or ord(c) < 0x21 or ord(c) > 0x7E for c in value):
        return value
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class ImapSession:
    """
    IMAP 会话

    在一个已打开的字节流上按严格顺序执行 LOGIN → SELECT → FETCH → LOGOUT。
    每条命令先完整写出，再读取响应直到对应标签的完成行，不做流水线。

    标签来自注入的 CommandTags，只在本会话内部匹配，
    不同连接之间复用相同标签是安全的。
    """

    READ_CHUNK_SIZE = 4096

    def __init__(
        self,
        stream: ImapStream,
        mailbox: str = "INBOX",
        tags: Optional[CommandTags] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        初始化会话

        Args:
            stream: 已建立的字节流（通常是 TLS socket）
            mailbox: 要选择的邮箱名称
            tags: 命令标签，默认 A001/A002/A003/A999
            logger: 可选的日志记录器
        """
        self._stream = stream
        self._mailbox = mailbox
        self._tags = tags or CommandTags()
        self._logger = logger or logging.getLogger(__name__)
        self._decoder = ResponseDecoder(logger=self._logger)

    @property
    def decoder(self) -> ResponseDecoder:
        return self._decoder

    def read_greeting(self) -> TaggedResponse:
        """
        读取并丢弃服务器问候行

        Raises:
            ImapConnectionError: 服务器以 BYE 拒绝连接或连接被关闭
        """
        greeting = self._read_response("GREETING", None)
        if greeting.status == "BYE":
            raise ImapConnectionError(f"Server refused connection: {greeting.text}")
        self._logger.debug(f"Server greeting: {greeting.text}")
        return greeting

    def login(self, credentials: Credentials) -> None:
        """
        读取问候行后执行 LOGIN

        Args:
            credentials: 登录凭证

        Raises:
            ImapAuthenticationError: 完成行不是 OK
        """
        self.read_greeting()

        tag = self._tags.login
        command = (
            f"LOGIN {quote_astring(credentials.username)} "
            f"{quote_astring(credentials.password)}"
        )
        self._send(tag, command, log_as="LOGIN ***")

        response = self._read_response("LOGIN", tag)
        if not response.ok:
            raise ImapAuthenticationError(
                username=credentials.username,
                message=response.text,
            )
        self._logger.debug(f"Logged in as {credentials.username}")

    def select_mailbox(self) -> Optional[int]:
        """
        执行 SELECT，并从 "* <n> EXISTS" 行解析邮件数量

        多条 EXISTS 行时以最后一条有效值为准，格式错误的行被忽略。

        Returns:
            邮件数量，服务器未报告时为 None

        Raises:
            ImapCommandError: 完成行不是 OK
        """
        exists: list = []

        def on_untagged(text: str) -> None:
            if "EXISTS" not in text.upper():
                return
            count = parse_exists_count(text)
            if count is None:
                self._logger.debug(f"Ignoring malformed EXISTS line: {text}")
                return
            exists.append(count)

        self._send(self._tags.select, f"SELECT {quote_astring(self._mailbox)}")
        self._decoder.set_untagged_handler(on_untagged)
        try:
            response = self._read_response("SELECT", self._tags.select)
        finally:
            self._decoder.set_untagged_handler(None)

        if not response.ok:
            raise ImapCommandError(command="SELECT", response=response.text)

        count = exists[-1] if exists else None
        self._logger.debug(f"Selected {self._mailbox} (exists={count})")
        return count

    def fetch(self, fetch_range: FetchRange, on_message: Callable[[int, bytes], None]) -> int:
        """
        执行 FETCH <start>:<end> (BODY[])，每收完一封邮件调用 on_message

        Args:
            fetch_range: 消息序号区间
            on_message: 邮件回调 (message_id, body)

        Returns:
            交给 on_message 的邮件数量

        Raises:
            ImapCommandError: 完成行不是 OK
            ImapProtocolError: literal 声明格式错误
        """
        saved_before = self._decoder.saved_count

        self._send(self._tags.fetch, f"FETCH {fetch_range.to_sequence_set()} (BODY[])")
        self._decoder.set_message_handler(on_message)
        try:
            response = self._read_response("FETCH", self._tags.fetch)
        finally:
            self._decoder.set_message_handler(None)

        if not response.ok:
            raise ImapCommandError(command="FETCH", response=response.text)

        if self._decoder.skipped_count:
            self._logger.warning(
                f"Discarded {self._decoder.skipped_count} message(s) with unparsable id "
                f"in range {fetch_range}"
            )
        return self._decoder.saved_count - saved_before

    def logout(self) -> None:
        """发送 LOGOUT（尽力而为，失败只记录日志）"""
        try:
            self._send(self._tags.logout, "LOGOUT")
        except ImapConnectionError as e:
            self._logger.debug(f"Error during logout: {e}")

    def _send(self, tag: str, command: str, log_as: Optional[str] = None) -> None:
        self._logger.debug(f"C: {tag} {log_as or command}")
        try:
            self._stream.sendall(f"{tag} {command}\r\n".encode("utf-8"))
        except OSError as e:
            raise ImapConnectionError(f"Failed to send {(log_as or command).split()[0]}: {e}") from e

    def _read_response(self, command: str, tag: Optional[str]) -> TaggedResponse:
        """驱动解码器直到当前命令完成"""
        self._decoder.begin(tag)

        response = self._decoder.feed(b"")
        while response is None:
            try:
                chunk = self._stream.recv(self.READ_CHUNK_SIZE)
            except socket.timeout as e:
                raise ImapTimeoutError(f"Timed out waiting for {command} response") from e
            except OSError as e:
                raise ImapConnectionError(f"Failed to read {command} response: {e}") from e

            if not chunk:
                raise ImapConnectionError(
                    f"Server closed connection before {command} completed"
                )
            response = self._decoder.feed(chunk)

        return response
