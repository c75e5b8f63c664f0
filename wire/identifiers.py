from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol, Union

from wire.consts import UINT32_MAX
from wire.errors import IdentifierConversionError

Identifier = Union[str, int]


class IdentifierEncoder(Protocol):
    """Maps a recipient identifier onto the header's u32 `to` field."""
    name: str

    def encode(self, identifier: Identifier) -> int: ...


def _check_range(value: int, identifier: Identifier) -> int:
    if not 0 <= value <= UINT32_MAX:
        raise IdentifierConversionError(f"identifier {identifier!r} does not fit in u32")
    return value


class NumericIdentifierEncoder:
    """Identifiers are client ids written in decimal: "2" -> 2."""
    name = "numeric"

    def encode(self, identifier: Identifier) -> int:
        if isinstance(identifier, bool):
            raise IdentifierConversionError(f"not an identifier: {identifier!r}")
        if isinstance(identifier, int):
            return _check_range(identifier, identifier)
        text = str(identifier).strip()
        if not text.isdigit() or not text.isascii():
            raise IdentifierConversionError(f"identifier {identifier!r} is not a decimal client id")
        return _check_range(int(text), identifier)


class CodePointIdentifierEncoder:
    """
    Legacy rule used by older browser clients: a one-character identifier
    is sent as its code point ("2" -> 50). Longer identifiers are refused.
    """
    name = "codepoint"

    def encode(self, identifier: Identifier) -> int:
        text = str(identifier)
        if len(text) != 1:
            raise IdentifierConversionError(
                f"identifier {identifier!r} must be a single character for code point encoding"
            )
        return _check_range(ord(text), identifier)


class DirectoryIdentifierEncoder:
    """Looks identifiers up in an explicit name -> id table."""
    name = "directory"

    def __init__(self, table: Optional[Mapping[str, int]] = None) -> None:
        self._table: Dict[str, int] = {}
        for key, value in (table or {}).items():
            self.assign(key, value)

    def assign(self, identifier: str, value: int) -> None:
        self._table[str(identifier)] = _check_range(value, identifier)

    def encode(self, identifier: Identifier) -> int:
        try:
            return self._table[str(identifier)]
        except KeyError:
            raise IdentifierConversionError(f"unknown identifier: {identifier!r}")


_ENCODERS = {
    NumericIdentifierEncoder.name: NumericIdentifierEncoder,
    CodePointIdentifierEncoder.name: CodePointIdentifierEncoder,
}


def get_encoder(name: str) -> IdentifierEncoder:
    try:
        return _ENCODERS[name]()
    except KeyError:
        raise ValueError(f"Unknown identifier encoding: {name}")
