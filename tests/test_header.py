import logging

import pytest

from wire.buffer import Buffer
from wire.consts import HEADER_FIELD_COUNT, MsgType, Scope
from wire.errors import DecodingUnderflowError
from wire.header import MessageHeader

CHAT_TO_50 = bytes([1, 0, 0, 0, 3, 1, 1, 0, 0, 0, 50])


def test_encode_known_header():
    header = MessageHeader(1, MsgType.CHAT, Scope.CLIENT, 50)
    buf = Buffer()
    header.encode(buf)

    assert buf.get_bytes() == CHAT_TO_50
    assert len(buf) == 11


def test_decode_known_header():
    header = MessageHeader()
    buf = Buffer(CHAT_TO_50)
    header.decode(buf)

    assert header == MessageHeader(1, MsgType.CHAT, Scope.CLIENT, 50)
    assert header.field_count == HEADER_FIELD_COUNT
    assert isinstance(header.msg_type, MsgType)
    assert buf.read_pos == 11


@pytest.mark.parametrize("header", [
    MessageHeader(1, MsgType.CHAT, Scope.CLIENT, 0),
    MessageHeader(1, MsgType.KILL, Scope.GROUP, 2**32 - 1),
    MessageHeader(1, MsgType.ERROR, Scope.BROADCAST, 12345),
    MessageHeader(2, 200, 9, 7, field_count=5),
])
def test_round_trip(header):
    buf = Buffer()
    header.encode(buf)
    assert MessageHeader().decode(Buffer(buf.get_bytes())) == header


def test_encode_appends_at_write_position():
    buf = Buffer()
    buf.put_uint8(0xAA)
    MessageHeader(1, MsgType.CHAT, Scope.CLIENT, 50).encode(buf)
    assert buf.get_bytes() == b"\xaa" + CHAT_TO_50


def test_unknown_enum_values_are_kept_as_ints():
    raw = bytes([1, 0, 0, 0, 3, 99, 42, 0, 0, 0, 1])
    header = MessageHeader.from_buffer(Buffer(raw))
    assert header.msg_type == 99
    assert header.scope == 42
    assert header.to_bytes() == raw


@pytest.mark.parametrize("size", range(0, 11))
def test_short_buffer_underflows_without_partial_update(size):
    header = MessageHeader(1, MsgType.KILL, Scope.GROUP, 77)
    before = MessageHeader(1, MsgType.KILL, Scope.GROUP, 77)
    buf = Buffer(CHAT_TO_50[:size])

    with pytest.raises(DecodingUnderflowError):
        header.decode(buf)

    assert header == before
    assert buf.read_pos == 0


def test_field_count_mismatch_is_logged_and_kept(caplog):
    raw = bytes([1, 0, 0, 0, 4, 1, 1, 0, 0, 0, 50])
    with caplog.at_level(logging.WARNING, logger="wire.header"):
        header = MessageHeader.from_buffer(Buffer(raw))

    assert header.field_count == 4
    assert not header.is_current_layout
    assert "version mismatch" in caplog.text
    assert header.to_bytes() == raw


def test_payload_bytes_are_left_unread():
    buf = Buffer(CHAT_TO_50 + b"hello")
    MessageHeader.from_buffer(buf)
    assert buf.get_remaining() == b"hello"
