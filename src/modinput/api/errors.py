# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Error taxonomy for the modinput public API.

Every failure raised by rendering, writing or definition parsing derives from
`ModinputError`. Errors are reported synchronously to the immediate caller and
never retried by the library; the process loop that owns the writer decides
what to do with them.
"""


class ModinputError(Exception):
    """Base class for all modinput public errors."""

    ...


class MissingRequiredField(ModinputError):
    """An event lacks a field the wire format requires (today: `data`)."""

    def __init__(self, field: str, message: str | None = None) -> None:
        self.field = field
        super().__init__(message or f"event is missing required field {field!r}")


class InvalidCharacter(ModinputError):
    """A field value holds a character XML 1.0 cannot carry (control codes, lone surrogates)."""

    def __init__(self, field: str, char: str) -> None:
        self.field = field
        self.char = char
        super().__init__(f"field {field!r} contains character U+{ord(char):04X}, which is not allowed in XML")


class BufferOverflow(ModinputError):
    """
    A write would exceed the remaining capacity of an output sink.

    The sink is left byte-for-byte unchanged when this is raised.
    """

    def __init__(self, channel: str, requested: int, remaining: int) -> None:
        self.channel = channel
        self.requested = requested
        self.remaining = remaining
        super().__init__(f"{channel}: write of {requested} bytes exceeds remaining capacity ({remaining} bytes)")


class InvalidDocument(ModinputError):
    """The XML is well-formed but does not have the expected structure."""

    ...


class ParseError(ModinputError):
    """
    The XML could not be parsed.

    `position` is the `(line, column)` pair reported by the parser, when known.
    The underlying parser exception is chained as `__cause__`.
    """

    def __init__(self, message: str, position: tuple[int, int] | None = None) -> None:
        self.position = position
        super().__init__(message)
