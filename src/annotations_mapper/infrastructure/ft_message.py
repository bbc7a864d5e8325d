"""FTMSG/1.0 envelope: message headers framed inside the Kafka record value."""

from typing import Iterable, Optional, Tuple

from ..schemas.models import RawMessage

ENVELOPE_PREFIX = "FTMSG/"
ENVELOPE_VERSION_LINE = "FTMSG/1.0"
_CRLF = "\r\n"


def encode_ft_message(message: RawMessage) -> bytes:
    """Frame ``message`` as an FTMSG/1.0 envelope."""
    lines = [ENVELOPE_VERSION_LINE]
    lines.extend(f"{name}: {value}" for name, value in message.headers.items())
    return (_CRLF.join(lines) + _CRLF + _CRLF + message.body).encode("utf-8")


def decode_ft_message(
    value: Optional[bytes],
    record_headers: Optional[Iterable[Tuple[str, bytes]]] = None,
) -> RawMessage:
    """Decode a Kafka record value into a RawMessage.

    Values that are not FTMSG envelopes are taken as a bare body, with the
    headers read from the Kafka record headers instead.
    """
    text = value.decode("utf-8", errors="replace") if value else ""
    if not text.startswith(ENVELOPE_PREFIX):
        headers = {
            name: (raw.decode("utf-8", errors="replace") if raw is not None else "")
            for name, raw in (record_headers or ())
        }
        return RawMessage(headers=headers, body=text)

    head, separator, body = text.partition(_CRLF + _CRLF)
    if not separator:
        # Headers only, no body
        head, body = text, ""

    headers = {}
    # First line is the protocol version
    for line in head.split(_CRLF)[1:]:
        name, colon, header_value = line.partition(":")
        if not colon or not name.strip():
            continue
        headers[name.strip()] = header_value.strip()
    return RawMessage(headers=headers, body=body)
