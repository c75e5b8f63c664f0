from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from shared.log import get_logger
from wire.buffer import Buffer
from wire.consts import HEADER_FIELD_COUNT, HEADER_SIZE, PROTOCOL_VERSION, MsgType, Scope
from wire.errors import DecodingUnderflowError

logger = get_logger(__name__)


@dataclass
class MessageHeader:
    """
    Fixed-layout frame header, 11 bytes on the wire:

        version:u8 field_count:u32 msg_type:u8 scope:u8 to:u32

    field_count counts the fields after version/field_count (3 for the
    current layout). It is not a byte length and is kept as read.
    """
    version: int = PROTOCOL_VERSION
    msg_type: Union[MsgType, int] = MsgType.CHAT
    scope: Union[Scope, int] = Scope.CLIENT
    to: int = 0
    field_count: int = HEADER_FIELD_COUNT

    def encode(self, buffer: Buffer) -> None:
        """Append the header at the buffer's write position (11 bytes)."""
        buffer.put_uint8(self.version)
        buffer.put_uint32(self.field_count)
        buffer.put_uint8(int(self.msg_type))
        buffer.put_uint8(int(self.scope))
        buffer.put_uint32(self.to)

    def decode(self, buffer: Buffer) -> "MessageHeader":
        """
        Read the header from the buffer's read position into self.

        All or nothing: when fewer than 11 bytes remain, neither self nor
        the buffer's read cursor is touched.
        """
        if buffer.remaining < HEADER_SIZE:
            raise DecodingUnderflowError(HEADER_SIZE, buffer.remaining)

        version = buffer.get_uint8()
        field_count = buffer.get_uint32()
        msg_type = buffer.get_uint8()
        scope = buffer.get_uint8()
        to = buffer.get_uint32()

        if version != PROTOCOL_VERSION or field_count != HEADER_FIELD_COUNT:
            logger.warning(
                "Header version mismatch: version=%d field_count=%d (expected %d/%d)",
                version, field_count, PROTOCOL_VERSION, HEADER_FIELD_COUNT,
            )

        self.version = version
        self.field_count = field_count
        self.msg_type = MsgType.from_value(msg_type)
        self.scope = Scope.from_value(scope)
        self.to = to
        return self

    @classmethod
    def from_buffer(cls, buffer: Buffer) -> "MessageHeader":
        return cls().decode(buffer)

    def to_bytes(self) -> bytes:
        buf = Buffer()
        self.encode(buf)
        return buf.get_bytes()

    @property
    def is_current_layout(self) -> bool:
        return self.version == PROTOCOL_VERSION and self.field_count == HEADER_FIELD_COUNT
