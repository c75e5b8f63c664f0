from __future__ import annotations

import struct
from typing import Iterable, Optional, Union

from wire.consts import UINT8_MAX, UINT32_MAX
from wire.errors import DecodingError, DecodingUnderflowError, EncodingRangeError

_U32 = struct.Struct(">I")

BytesLike = Union[bytes, bytearray, memoryview, Iterable[int]]


class Buffer:
    """
    Growable byte sequence with independent read and write cursors.

    Encoding is purely positional: there is no tag per field, so reader and
    writer must agree on the exact sequence of puts and gets.

        buf = Buffer()
        buf.put_uint8(1)
        buf.put_string("hello")
        Buffer(buf.get_bytes()).get_uint8()  # -> 1

    A bytearray passed to the constructor becomes the backing store as is;
    any other sequence is copied once.
    """

    def __init__(self, data: Optional[BytesLike] = None) -> None:
        if data is None:
            self._data = bytearray()
        elif isinstance(data, bytearray):
            self._data = data
        else:
            self._data = bytearray(data)
        self._read_pos = 0
        self._write_pos = len(self._data) if data is not None else 0

    def __len__(self) -> int:
        return self._write_pos

    def __repr__(self) -> str:
        return f"Buffer(len={self._write_pos}, read_pos={self._read_pos})"

    @property
    def read_pos(self) -> int:
        return self._read_pos

    @property
    def write_pos(self) -> int:
        return self._write_pos

    @property
    def remaining(self) -> int:
        """Number of unread bytes."""
        return self._write_pos - self._read_pos

    # ========================================
    #           WRITERS
    # ========================================

    def _write(self, chunk: bytes) -> None:
        end = self._write_pos + len(chunk)
        self._data[self._write_pos:end] = chunk
        self._write_pos = end

    def put_uint8(self, value: int) -> None:
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= UINT8_MAX:
            raise EncodingRangeError(f"uint8 out of range: {value!r}")
        self._write(bytes((value,)))

    def put_uint32(self, value: int) -> None:
        """Append value as 4 bytes, big-endian."""
        if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value <= UINT32_MAX:
            raise EncodingRangeError(f"uint32 out of range: {value!r}")
        self._write(_U32.pack(value))

    def put_string(self, value: str) -> None:
        """Append a u32 UTF-8 byte length followed by the UTF-8 bytes."""
        raw = value.encode("utf-8")
        if len(raw) > UINT32_MAX:
            raise EncodingRangeError(f"string too long: {len(raw)} bytes")
        self._write(_U32.pack(len(raw)))
        self._write(raw)

    def put_bytes(self, value: BytesLike) -> None:
        self._write(bytes(value))

    # ========================================
    #           READERS
    # ========================================

    def _take(self, size: int) -> bytes:
        if size > self.remaining:
            raise DecodingUnderflowError(size, self.remaining)
        start = self._read_pos
        self._read_pos += size
        return bytes(self._data[start:self._read_pos])

    def get_uint8(self) -> int:
        return self._take(1)[0]

    def get_uint32(self) -> int:
        return _U32.unpack(self._take(4))[0]

    def get_string(self) -> str:
        # Length and body are consumed together or not at all
        start = self._read_pos
        length = self.get_uint32()
        try:
            raw = self._take(length)
        except DecodingUnderflowError:
            self._read_pos = start
            raise
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodingError(f"invalid UTF-8 in string field: {e}") from e

    def get_remaining(self) -> bytes:
        """Return every unread byte and move the read cursor to the end."""
        return self._take(self.remaining)

    def get_bytes(self) -> bytes:
        """Return everything written so far, regardless of cursor positions."""
        return bytes(self._data[:self._write_pos])
