# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput public API: the error taxonomy shared by every component.
"""

from .errors import (
    BufferOverflow,
    InvalidCharacter,
    InvalidDocument,
    MissingRequiredField,
    ModinputError,
    ParseError,
)

__all__ = [
    "BufferOverflow",
    "InvalidCharacter",
    "InvalidDocument",
    "MissingRequiredField",
    "ModinputError",
    "ParseError",
]
