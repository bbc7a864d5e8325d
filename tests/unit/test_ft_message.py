"""Tests for the FTMSG/1.0 envelope codec."""

from annotations_mapper.infrastructure.ft_message import (
    decode_ft_message,
    encode_ft_message,
)
from annotations_mapper.schemas.models import RawMessage


class TestEncode:
    def test_envelope_layout(self):
        message = RawMessage(
            headers={"Message-Id": "m1", "X-Request-Id": "tid_1"},
            body='{"uuid":"u1"}',
        )

        assert encode_ft_message(message) == (
            b"FTMSG/1.0\r\n"
            b"Message-Id: m1\r\n"
            b"X-Request-Id: tid_1\r\n"
            b"\r\n"
            b'{"uuid":"u1"}'
        )

    def test_empty_headers_and_body(self):
        assert encode_ft_message(RawMessage()) == b"FTMSG/1.0\r\n\r\n"


class TestDecode:
    def test_envelope_is_parsed(self):
        raw = (
            b"FTMSG/1.0\r\n"
            b"Origin-System-Id: http://cmdb.ft.com/systems/pac\r\n"
            b"X-Request-Id: tid_1\r\n"
            b"\r\n"
            b'{"uuid":"u1"}'
        )

        message = decode_ft_message(raw)

        assert message.headers == {
            "Origin-System-Id": "http://cmdb.ft.com/systems/pac",
            "X-Request-Id": "tid_1",
        }
        assert message.body == '{"uuid":"u1"}'

    def test_body_may_contain_blank_lines(self):
        raw = b"FTMSG/1.0\r\nA: 1\r\n\r\nline one\r\n\r\nline two"

        assert decode_ft_message(raw).body == "line one\r\n\r\nline two"

    def test_header_value_keeps_colons(self):
        raw = b"FTMSG/1.0\r\nOrigin-System-Id: http://cmdb.ft.com/systems/pac\r\n\r\n"

        message = decode_ft_message(raw)

        assert message.headers["Origin-System-Id"] == "http://cmdb.ft.com/systems/pac"
        assert message.body == ""

    def test_malformed_header_lines_are_skipped(self):
        raw = b"FTMSG/1.0\r\nno colon here\r\n: empty name\r\nA: 1\r\n\r\nbody"

        assert decode_ft_message(raw).headers == {"A": "1"}

    def test_plain_value_uses_record_headers(self):
        message = decode_ft_message(
            b'{"uuid":"u1"}',
            [("X-Request-Id", b"tid_1"), ("Origin-System-Id", None)],
        )

        assert message.headers == {"X-Request-Id": "tid_1", "Origin-System-Id": ""}
        assert message.body == '{"uuid":"u1"}'

    def test_empty_value(self):
        message = decode_ft_message(None)

        assert message.headers == {}
        assert message.body == ""

    def test_decode_reverses_encode(self):
        original = RawMessage(
            headers={"Message-Id": "m1", "Content-Type": "application/json"},
            body='{"uuid":"u1","annotations":[]}',
        )

        assert decode_ft_message(encode_ft_message(original)) == original
