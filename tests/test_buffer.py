import pytest

from wire.buffer import Buffer
from wire.errors import DecodingError, DecodingUnderflowError, EncodingRangeError


def test_put_sequence_matches_wire_layout():
    buf = Buffer()
    buf.put_uint8(1)
    buf.put_uint32(2)
    buf.put_string("hello")

    assert buf.get_bytes() == bytes([1, 0, 0, 0, 2, 0, 0, 0, 5, 104, 101, 108, 108, 111])
    assert len(buf) == 14


def test_get_sequence_from_existing_bytes():
    buf = Buffer(bytes([1, 0, 0, 0, 2, 0, 0, 0, 5, 104, 101, 108, 108, 111]))

    assert buf.read_pos == 0
    assert buf.get_uint8() == 1
    assert buf.get_uint32() == 2
    assert buf.get_string() == "hello"
    assert buf.remaining == 0


@pytest.mark.parametrize("value", [0, 1, 127, 128, 255])
def test_uint8_round_trip(value):
    buf = Buffer()
    buf.put_uint8(value)
    assert Buffer(buf.get_bytes()).get_uint8() == value


@pytest.mark.parametrize("value", [-1, 256, 1000])
def test_uint8_out_of_range(value):
    buf = Buffer()
    with pytest.raises(EncodingRangeError):
        buf.put_uint8(value)
    assert buf.get_bytes() == b""


def test_uint32_is_big_endian():
    buf = Buffer()
    buf.put_uint32(2)
    buf.put_uint32(0x01020304)
    assert buf.get_bytes() == bytes([0, 0, 0, 2, 1, 2, 3, 4])


@pytest.mark.parametrize("value", [0, 1, 0xFFFF, 0x10000, 2**31, 2**32 - 1])
def test_uint32_round_trip(value):
    buf = Buffer()
    buf.put_uint32(value)
    assert Buffer(buf.get_bytes()).get_uint32() == value


@pytest.mark.parametrize("value", [-1, 2**32])
def test_uint32_out_of_range(value):
    with pytest.raises(EncodingRangeError):
        Buffer().put_uint32(value)


def test_encoding_range_error_is_a_value_error():
    with pytest.raises(ValueError):
        Buffer().put_uint8(300)


@pytest.mark.parametrize("value", [True, False])
def test_bools_are_not_integers_on_the_wire(value):
    buf = Buffer()
    with pytest.raises(EncodingRangeError):
        buf.put_uint8(value)
    with pytest.raises(EncodingRangeError):
        buf.put_uint32(value)
    assert buf.get_bytes() == b""


@pytest.mark.parametrize("text", ["", "hello", "héllo wörld", "你好", "emoji \U0001F600"])
def test_string_round_trip(text):
    buf = Buffer()
    buf.put_string(text)
    raw = buf.get_bytes()

    assert raw[:4] == len(text.encode("utf-8")).to_bytes(4, "big")
    assert Buffer(raw).get_string() == text


def test_string_length_counts_utf8_bytes():
    buf = Buffer()
    buf.put_string("é")
    assert buf.get_bytes() == bytes([0, 0, 0, 2, 0xC3, 0xA9])


def test_underflow_on_every_reader():
    with pytest.raises(DecodingUnderflowError):
        Buffer().get_uint8()
    with pytest.raises(DecodingUnderflowError):
        Buffer(b"\x00\x00\x01").get_uint32()
    with pytest.raises(DecodingUnderflowError):
        Buffer(b"\x00\x00").get_string()


def test_underflow_does_not_advance_cursor():
    buf = Buffer(b"\x07\x00\x00")
    assert buf.get_uint8() == 7
    with pytest.raises(DecodingUnderflowError) as excinfo:
        buf.get_uint32()
    assert excinfo.value.needed == 4
    assert excinfo.value.remaining == 2
    assert buf.read_pos == 1


def test_truncated_string_body_leaves_cursor_at_length_prefix():
    buf = Buffer(bytes([0, 0, 0, 5, 104, 101]))
    with pytest.raises(DecodingUnderflowError):
        buf.get_string()
    assert buf.read_pos == 0


def test_invalid_utf8_is_a_decoding_error():
    with pytest.raises(DecodingError):
        Buffer(bytes([0, 0, 0, 1, 0xFF])).get_string()


def test_get_bytes_ignores_cursors():
    buf = Buffer()
    buf.put_uint8(9)
    buf.put_uint8(8)
    buf.get_uint8()
    assert buf.get_bytes() == b"\x09\x08"
    assert isinstance(buf.get_bytes(), bytes)


def test_get_remaining_consumes_rest():
    buf = Buffer(b"\x01abc")
    buf.get_uint8()
    assert buf.get_remaining() == b"abc"
    assert buf.remaining == 0
    assert buf.get_remaining() == b""


def test_bytearray_is_used_as_backing_store():
    backing = bytearray(b"\x01")
    buf = Buffer(backing)
    buf.put_uint8(2)
    assert backing == bytearray(b"\x01\x02")
    assert buf.get_uint8() == 1
    assert buf.get_uint8() == 2


def test_list_of_ints_is_accepted():
    assert Buffer([0, 0, 0, 50]).get_uint32() == 50


def test_existing_bytes_put_appends_after_them():
    buf = Buffer(b"\x01\x02")
    assert (buf.read_pos, buf.write_pos) == (0, 2)

    buf.put_uint8(3)
    assert buf.get_bytes() == b"\x01\x02\x03"
    assert buf.get_remaining() == b"\x01\x02\x03"
