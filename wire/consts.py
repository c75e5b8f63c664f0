from __future__ import annotations

from enum import IntEnum
from typing import Union

# Current header layout: version 1 carries msg_type, scope and to after
# the version/field_count pair.
PROTOCOL_VERSION = 1
HEADER_FIELD_COUNT = 3
HEADER_SIZE = 11

UINT8_MAX = 0xFF
UINT32_MAX = 0xFFFFFFFF


class MsgType(IntEnum):
    """Message types shared by client and hub. Values are fixed by the hub."""

    CHAT = 1
    LOGIN = 2
    KILL = 3                # hub tells a peer it was logged in elsewhere
    LOC = 4
    OFFLINE = 5
    OFFLINE_NOTICE = 6
    GROUP_IN_OUT = 7
    QUERY_CLIENT = 8
    QUERY_CLIENT_RESP = 9
    QUERY_SERVERS = 10
    QUERY_SERVERS_RESP = 11
    ERROR = 12

    @classmethod
    def from_value(cls, value: int) -> Union["MsgType", int]:
        """Return the enum member for value, or the raw int when unknown."""
        try:
            return cls(value)
        except ValueError:
            return value

    @classmethod
    def from_string(cls, value: str) -> "MsgType":
        try:
            return cls[value.upper()]
        except KeyError:
            raise ValueError(f"Unknown message type: {value}")


class Scope(IntEnum):
    """Delivery target class of a frame."""

    CLIENT = 1
    GROUP = 2
    BROADCAST = 3

    @classmethod
    def from_value(cls, value: int) -> Union["Scope", int]:
        try:
            return cls(value)
        except ValueError:
            return value
