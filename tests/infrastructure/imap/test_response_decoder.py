"""ResponseDecoder 单元测试"""

import pytest

from domain.common.exceptions import ImapProtocolError
from infrastructure.imap.response_decoder import (
    DecoderState,
    ResponseDecoder,
    parse_exists_count,
    parse_fetch_message_id,
    parse_literal_size,
)


BODY = (b"From: a@example.com\r\nSubject: Hi (test)\r\n\r\n" + b"x" * 200)[:120]


def fetch_response(messages, tag=b"A003"):
    """构造 FETCH 响应字节流"""
    out = bytearray()
    for message_id, body in messages:
        out += b"* %d FETCH (BODY[] {%d}\r\n" % (message_id, len(body))
        out += body
        out += b")\r\n"
    out += tag + b" OK Success\r\n"
    return bytes(out)


def feed_in_chunks(decoder, data, chunk_size):
    """按固定大小分块喂给解码器，返回完成行"""
    response = None
    for i in range(0, len(data), chunk_size):
        response = decoder.feed(data[i:i + chunk_size])
        if response is not None:
            break
    return response


@pytest.fixture
def received():
    """收集 (message_id, body)"""
    return []


@pytest.fixture
def decoder(received):
    """创建解码器，等待 A003 完成"""
    decoder = ResponseDecoder(on_message=lambda i, b: received.append((i, b)))
    decoder.begin("A003")
    return decoder


class TestResponseDecoderFetch:
    """FETCH 响应解码测试"""

    def test_single_literal_delivered_exactly(self, decoder, received):
        """测试 literal 内容按声明字节数原样交付"""
        assert len(BODY) == 120
        response = decoder.feed(fetch_response([(7, BODY)]))

        assert response is not None
        assert response.ok
        assert response.tag == "A003"
        assert received == [(7, BODY)]
        assert decoder.saved_count == 1
        assert decoder.state is DecoderState.READING_LINE

    @pytest.mark.parametrize("chunk_size", [1, 2, 3, 7, 13, 64, 4096])
    def test_arbitrary_chunking(self, decoder, received, chunk_size):
        """测试任意分块方式得到相同结果"""
        messages = [(1, BODY), (2, b"short"), (3, b"crlf inside\r\nA003 OK fake\r\n")]
        response = feed_in_chunks(decoder, fetch_response(messages), chunk_size)

        assert response is not None and response.ok
        assert received == messages

    def test_literal_containing_parentheses_and_tag(self, decoder, received):
        """测试 literal 内部的括号和标签文本不影响解析"""
        body = b")))\r\nA003 OK not really\r\n* 9 FETCH (BODY[] {3}\r\n"
        response = decoder.feed(fetch_response([(4, body)]))

        assert response.ok
        assert received == [(4, body)]

    def test_zero_length_literal(self, decoder, received):
        """测试零字节 literal 交付空内容"""
        response = decoder.feed(b"* 5 FETCH (BODY[] {0}\r\n)\r\nA003 OK done\r\n")

        assert response.ok
        assert received == [(5, b"")]

    def test_remaining_tracks_partial_literal(self, decoder):
        """测试 literal 接收过程中的剩余字节数"""
        decoder.feed(b"* 1 FETCH (BODY[] {10}\r\nabcd")

        assert decoder.state is DecoderState.READING_LITERAL
        assert decoder.remaining == 6

        decoder.feed(b"efghij")
        assert decoder.state is DecoderState.SKIPPING_TO_DELIMITER
        assert decoder.remaining == 0

    def test_malformed_literal_size_raises_protocol_error(self, decoder):
        """测试无法解析的字节数抛出 ImapProtocolError"""
        with pytest.raises(ImapProtocolError) as exc_info:
            decoder.feed(b"* 1 FETCH (BODY[] {12x}\r\n")
        assert exc_info.value.code == "IMAP_PROTOCOL_ERROR"

    def test_malformed_message_id_discards_literal(self, decoder, received):
        """测试无法解析的消息序号：丢弃内容并继续解析"""
        data = (
            b"* abc FETCH (BODY[] {5}\r\nhello)\r\n"
            + fetch_response([(2, b"world")])
        )
        response = decoder.feed(data)

        assert response.ok
        assert received == [(2, b"world")]
        assert decoder.skipped_count == 1
        assert decoder.saved_count == 1

    def test_bare_lf_is_not_line_end(self, decoder, received):
        """测试单独的 LF 不结束一行"""
        response = decoder.feed(b"* 1 FETCH (BODY[]\n {3}\r\nabc)\r\nA003 OK\r\n")

        assert response.ok
        assert received == [(1, b"abc")]


class TestResponseDecoderCompletion:
    """完成行测试"""

    @pytest.mark.parametrize("status", ["NO", "BAD"])
    def test_failure_status(self, decoder, status):
        """测试 NO / BAD 完成行"""
        response = decoder.feed(f"A003 {status} Something went wrong\r\n".encode())

        assert response is not None
        assert not response.ok
        assert response.status == status
        assert response.text == f"A003 {status} Something went wrong"

    def test_other_tag_is_untagged(self, received):
        """测试其他标签的行不会结束当前命令"""
        lines = []
        decoder = ResponseDecoder(on_untagged=lines.append)
        decoder.begin("A002")

        assert decoder.feed(b"A0021 OK wrong tag\r\n* 3 EXISTS\r\n") is None
        assert lines == ["A0021 OK wrong tag", "* 3 EXISTS"]

    @pytest.mark.parametrize("line", [b"A003 BYE go away\r\n", b"A003 PREAUTH hmm\r\n"])
    def test_other_status_completes_with_failure(self, decoder, line):
        """测试其他状态的带标签行按失败完成"""
        response = decoder.feed(line)

        assert response is not None
        assert response.tag == "A003"
        assert not response.ok

    def test_literal_without_receiver_is_not_counted(self):
        """测试没有接收方时丢弃 literal 且不计入 saved_count"""
        decoder = ResponseDecoder()
        decoder.begin("A002")

        response = decoder.feed(b"* 1 FETCH (BODY[] {3}\r\nabc)\r\nA002 OK\r\n")

        assert response.ok
        assert decoder.saved_count == 0
        assert decoder.skipped_count == 0

    def test_backlog_kept_for_next_command(self):
        """测试完成行之后的字节保留给下一条命令"""
        decoder = ResponseDecoder()
        decoder.begin("A001")

        response = decoder.feed(b"A001 OK logged in\r\nA002 OK selected\r\n")
        assert response.tag == "A001"

        decoder.begin("A002")
        response = decoder.feed(b"")
        assert response is not None
        assert response.tag == "A002"

    def test_greeting_mode(self):
        """测试问候行模式：第一行即完成"""
        decoder = ResponseDecoder()
        decoder.begin(None)

        response = decoder.feed(b"* OK Gimap ready\r\n")

        assert response.tag is None
        assert response.status == "OK"

    def test_feed_before_begin_raises(self):
        """测试未调用 begin 时 feed 抛出异常"""
        with pytest.raises(RuntimeError):
            ResponseDecoder().feed(b"* OK\r\n")

    def test_handlers_can_be_replaced(self, received):
        """测试替换 literal 回调"""
        decoder = ResponseDecoder()
        decoder.set_message_handler(lambda i, b: received.append(i))
        decoder.begin("A003")

        decoder.feed(fetch_response([(1, b"a"), (2, b"b")]))

        assert received == [1, 2]


class TestParsers:
    """行解析函数测试"""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("* 7 FETCH (BODY[] {120}", 7),
            ("* 12345 FETCH (BODY[] {1}", 12345),
            ("* abc FETCH (BODY[] {1}", None),
            ("* 0 FETCH (BODY[] {1}", None),
            ("* FETCH (BODY[] {1}", None),
        ],
    )
    def test_parse_fetch_message_id(self, text, expected):
        """测试解析消息序号"""
        assert parse_fetch_message_id(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("* 7 FETCH (BODY[] {120}", 120),
            ("* 7 FETCH (BODY[] {0}", 0),
            ("* 7 FETCH (BODY[] {-1}", None),
            ("* 7 FETCH (BODY[] {}", None),
            ("* 7 FETCH (BODY[] {12", None),
        ],
    )
    def test_parse_literal_size(self, text, expected):
        """测试解析 literal 字节数"""
        assert parse_literal_size(text) == expected

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("* 42 EXISTS", 42),
            ("* 0 EXISTS", 0),
            ("* x EXISTS", None),
            ("* 42 RECENT", None),
            ("A002 OK EXISTS", None),
        ],
    )
    def test_parse_exists_count(self, text, expected):
        """测试解析 EXISTS 数量"""
        assert parse_exists_count(text) == expected
