from __future__ import annotations


class WireError(Exception):
    """Base class for wire encoding and decoding failures."""
    pass


class EncodingRangeError(WireError, ValueError):
    """Raised when a value does not fit the width of the field it is written to."""
    pass


class DecodingError(WireError):
    """Raised when inbound bytes cannot be decoded."""
    pass


class DecodingUnderflowError(DecodingError):
    """Raised when a read needs more bytes than the buffer has left."""

    def __init__(self, needed: int, remaining: int) -> None:
        super().__init__(f"need {needed} bytes, only {remaining} remaining")
        self.needed = needed
        self.remaining = remaining


class IdentifierConversionError(WireError, ValueError):
    """Raised when a recipient identifier cannot be represented as a u32."""
    pass
