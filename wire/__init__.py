"""
Binary wire format of the chat hub.

Public API:
- Buffer: cursor-based byte buffer with u8/u32/string put and get
- MessageHeader: fixed 11-byte frame header
- Frame: header + opaque payload
- MsgType, Scope: protocol enums shared with the hub
- ChatMessage, KillMessage, LoginMessage, ErrorMessage: typed bodies
- identifier encoders mapping recipient ids onto the u32 `to` field
"""

from .buffer import Buffer
from .consts import HEADER_FIELD_COUNT, HEADER_SIZE, PROTOCOL_VERSION, MsgType, Scope
from .errors import (
    DecodingError,
    DecodingUnderflowError,
    EncodingRangeError,
    IdentifierConversionError,
    WireError,
)
from .frame import Frame
from .header import MessageHeader
from .identifiers import (
    CodePointIdentifierEncoder,
    DirectoryIdentifierEncoder,
    NumericIdentifierEncoder,
    get_encoder,
)
from .messages import ChatMessage, ErrorMessage, KillMessage, LoginMessage, body_for

__all__ = [
    "Buffer",
    "MessageHeader",
    "Frame",
    "MsgType",
    "Scope",
    "PROTOCOL_VERSION",
    "HEADER_FIELD_COUNT",
    "HEADER_SIZE",
    "WireError",
    "EncodingRangeError",
    "DecodingError",
    "DecodingUnderflowError",
    "IdentifierConversionError",
    "NumericIdentifierEncoder",
    "CodePointIdentifierEncoder",
    "DirectoryIdentifierEncoder",
    "get_encoder",
    "ChatMessage",
    "KillMessage",
    "LoginMessage",
    "ErrorMessage",
    "body_for",
]
