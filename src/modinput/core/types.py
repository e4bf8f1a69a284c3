# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput.core.types
===================

Shared type aliases and small constants used across the codebase.
Keep this module **tiny** and dependency-free.
"""

import os
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Final, Union

# ---- Paths -------------------------------------------------------------------

StrPath = Union[str, os.PathLike[str], Path]

# ---- Time --------------------------------------------------------------------

Millis = int
TimestampMs = int  # wall-clock epoch timestamp (ms)
MonotonicMs = int  # process-local monotonic time (ms)

# Anything `format_time` accepts: datetimes, epoch numbers, decimal strings.
TimeLike = Union[datetime, int, float, Decimal, str]

# ---- Definitions -------------------------------------------------------------

StanzaName = str
ParamValue = Union[str, list[str]]
Parameters = dict[str, ParamValue]
Metadata = dict[str, str]

# ---- Constants ---------------------------------------------------------------

# Digits of an epoch timestamp that are whole seconds; the next three are millis.
EPOCH_SECONDS_DIGITS: Final[int] = 10
EPOCH_MILLIS_DIGITS: Final[int] = 3

# Width of the rendered "<seconds>.<millis>" string kept for large magnitudes.
TIME_TEXT_WIDTH: Final[int] = 14


__all__ = [
    "StrPath",
    "Millis",
    "TimestampMs",
    "MonotonicMs",
    "TimeLike",
    "StanzaName",
    "ParamValue",
    "Parameters",
    "Metadata",
    "EPOCH_SECONDS_DIGITS",
    "EPOCH_MILLIS_DIGITS",
    "TIME_TEXT_WIDTH",
]
