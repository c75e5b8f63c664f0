from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from wire.buffer import Buffer, BytesLike
from wire.consts import MsgType
from wire.frame import Frame


@dataclass
class ChatMessage:
    """
    Body of a CHAT frame:

        from:String type:u8 text:String extra:String

    `type` is the chat content kind (1 = plain text), not the frame's
    MsgType.
    """
    from_: str
    text: str
    type: int = 1
    extra: str = ""

    def encode(self) -> bytes:
        buf = Buffer()
        buf.put_string(self.from_)
        buf.put_uint8(self.type)
        buf.put_string(self.text)
        buf.put_string(self.extra)
        return buf.get_bytes()

    @classmethod
    def decode(cls, data: BytesLike) -> "ChatMessage":
        buf = Buffer(data)
        from_ = buf.get_string()
        kind = buf.get_uint8()
        text = buf.get_string()
        extra = buf.get_string()
        return cls(from_=from_, text=text, type=kind, extra=extra)


@dataclass
class KillMessage:
    """Body of a KILL frame: the peer id that must go offline."""
    peer_id: str

    def encode(self) -> bytes:
        buf = Buffer()
        buf.put_string(self.peer_id)
        return buf.get_bytes()

    @classmethod
    def decode(cls, data: BytesLike) -> "KillMessage":
        return cls(peer_id=Buffer(data).get_string())


@dataclass
class LoginMessage:
    """
    Body of the LOGIN frame sent first on every session:

        identity:String nonce:String credential:String
    """
    identity: str
    nonce: str
    credential: str

    def encode(self) -> bytes:
        buf = Buffer()
        buf.put_string(self.identity)
        buf.put_string(self.nonce)
        buf.put_string(self.credential)
        return buf.get_bytes()

    @classmethod
    def decode(cls, data: BytesLike) -> "LoginMessage":
        buf = Buffer(data)
        return cls(identity=buf.get_string(), nonce=buf.get_string(), credential=buf.get_string())


@dataclass
class ErrorMessage:
    """Body of an ERROR frame reported by the hub (e.g. bad login)."""
    code: int
    detail: str

    def encode(self) -> bytes:
        buf = Buffer()
        buf.put_uint32(self.code)
        buf.put_string(self.detail)
        return buf.get_bytes()

    @classmethod
    def decode(cls, data: BytesLike) -> "ErrorMessage":
        buf = Buffer(data)
        return cls(code=buf.get_uint32(), detail=buf.get_string())


Body = Union[ChatMessage, KillMessage, LoginMessage, ErrorMessage]

BODY_TYPES = {
    MsgType.CHAT: ChatMessage,
    MsgType.KILL: KillMessage,
    MsgType.LOGIN: LoginMessage,
    MsgType.ERROR: ErrorMessage,
}


def body_for(frame: Frame) -> Optional[Body]:
    """Decode the typed body of a frame, or None for types without one."""
    body_type = BODY_TYPES.get(frame.msg_type)
    if body_type is None:
        return None
    return body_type.decode(frame.payload)
