from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

try:
    __version__ = _pkg_version("modinput")
except PackageNotFoundError:  # pragma: no cover
    # running from a source checkout without an install
    __version__ = "0.0.0"

from .api.errors import (
    BufferOverflow,
    InvalidCharacter,
    InvalidDocument,
    MissingRequiredField,
    ModinputError,
    ParseError,
)
from .core.config import WriterConfig
from .core.time import format_time
from .io.writer import EventWriter, Severity
from .protocol.argument import Argument, DataType
from .protocol.definitions import InputDefinition, ValidationDefinition
from .protocol.event import Event

__all__ = [
    "Argument",
    "BufferOverflow",
    "DataType",
    "Event",
    "EventWriter",
    "InputDefinition",
    "InvalidCharacter",
    "InvalidDocument",
    "MissingRequiredField",
    "ModinputError",
    "ParseError",
    "Severity",
    "ValidationDefinition",
    "WriterConfig",
    "__version__",
    "format_time",
]
