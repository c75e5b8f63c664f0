from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from wire.buffer import Buffer, BytesLike
from wire.consts import MsgType, Scope
from wire.header import MessageHeader

Payload = Union[bytes, bytearray, memoryview, str]


def payload_bytes(payload: Payload) -> bytes:
    """Text payloads go out as raw UTF-8, anything else as given."""
    if isinstance(payload, str):
        return payload.encode("utf-8")
    return bytes(payload)


@dataclass
class Frame:
    """One unit on the connection: a header followed by an opaque payload."""
    header: MessageHeader
    payload: bytes = field(default=b"")

    @property
    def msg_type(self) -> Union[MsgType, int]:
        return self.header.msg_type

    @property
    def scope(self) -> Union[Scope, int]:
        return self.header.scope

    def to_bytes(self) -> bytes:
        buf = Buffer()
        self.header.encode(buf)
        buf.put_bytes(self.payload)
        return buf.get_bytes()

    @classmethod
    def from_bytes(cls, data: BytesLike) -> "Frame":
        """Decode the header from the front of data; the rest is payload."""
        buf = Buffer(data)
        header = MessageHeader.from_buffer(buf)
        return cls(header=header, payload=buf.get_remaining())

    @classmethod
    def build(cls, msg_type: Union[MsgType, int], scope: Union[Scope, int], to: int,
              payload: Payload = b"") -> "Frame":
        return cls(MessageHeader(msg_type=msg_type, scope=scope, to=to), payload_bytes(payload))
