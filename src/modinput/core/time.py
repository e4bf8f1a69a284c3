# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput.core.time
==================

Clock abstractions and wire-format time normalization:
- Clock Protocol for dependency-injection and testing.
- SystemClock: production default implementation.
- ManualClock: deterministic time control for tests.
- format_time(): canonical "<seconds>.<millis>" text for `<time>` elements.
"""

import asyncio
import time
from datetime import UTC, datetime, timedelta
from decimal import Decimal
from typing import Protocol

from .types import (
    EPOCH_MILLIS_DIGITS,
    EPOCH_SECONDS_DIGITS,
    TIME_TEXT_WIDTH,
    Millis,
    MonotonicMs,
    TimeLike,
    TimestampMs,
)

__all__ = [
    "Clock",
    "ManualClock",
    "SystemClock",
    "datetime_to_ms",
    "format_epoch_ms",
    "format_time",
]

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MS = timedelta(milliseconds=1)


class Clock(Protocol):
    """Minimal clock protocol used across the project."""

    def now_dt(self) -> datetime: ...
    def now_ms(self) -> TimestampMs: ...
    def mono_ms(self) -> MonotonicMs: ...
    async def sleep_ms(self, ms: Millis) -> None: ...


class SystemClock:
    """Default production/test clock backed by system time."""

    def now_dt(self) -> datetime:
        """UTC datetime for wall-clock timestamps."""
        return datetime.now(UTC)

    def now_ms(self) -> TimestampMs:
        """Epoch milliseconds from system clock."""
        return time.time_ns() // 1_000_000

    def mono_ms(self) -> MonotonicMs:
        """Process-local monotonic milliseconds (not related to wall clock)."""
        return time.monotonic_ns() // 1_000_000

    async def sleep_ms(self, ms: Millis) -> None:
        await asyncio.sleep(max(0.0, ms / 1000.0))


class ManualClock(SystemClock):
    """
    Controllable clock for tests.

    - Wall time (`now_ms`) starts at `start_ms` and advances only when you call `sleep_ms`.
    - Monotonic time (`mono_ms`) mirrors wall time for simplicity.
    """

    def __init__(self, start_ms: Millis = 0) -> None:
        self._wall: Millis = start_ms
        self._mono: Millis = start_ms

    def now_dt(self) -> datetime:
        return datetime.fromtimestamp(self._wall / 1000.0, tz=UTC)

    def now_ms(self) -> TimestampMs:
        return self._wall

    def mono_ms(self) -> MonotonicMs:
        return self._mono

    async def sleep_ms(self, ms: Millis) -> None:
        inc = max(0, int(ms))
        self._wall += inc
        self._mono += inc


# --------------------------------------------------------------------------- #
# Time normalization
# --------------------------------------------------------------------------- #


def datetime_to_ms(dt: datetime) -> TimestampMs:
    """Epoch milliseconds for `dt`. Naive datetimes are taken as UTC."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return (dt - _EPOCH) // _ONE_MS


def format_epoch_ms(ms: TimestampMs) -> str:
    """Render an exact epoch-milliseconds instant as "<seconds>.<millis>"."""
    seconds, millis = divmod(int(ms), 1000)
    return f"{seconds}.{millis:03d}"


def _format_integral(value: int) -> str:
    # Magnitude is ambiguous (seconds, millis, or longer): the first 10 digits
    # are seconds, the next 3 are millis, anything after is dropped.
    digits = str(value)
    if len(digits) <= EPOCH_SECONDS_DIGITS:
        return f"{digits}.000"
    seconds = digits[:EPOCH_SECONDS_DIGITS]
    millis = digits[EPOCH_SECONDS_DIGITS : EPOCH_SECONDS_DIGITS + EPOCH_MILLIS_DIGITS]
    return f"{seconds}.{millis.ljust(EPOCH_MILLIS_DIGITS, '0')}"


def _format_fractional(value: float) -> str:
    text = f"{value:.3f}"
    if text.index(".") >= EPOCH_SECONDS_DIGITS:
        # Past 10 integer digits a double no longer carries three reliable
        # decimals; keep the first 14 characters and re-round.
        text = f"{float(text[:TIME_TEXT_WIDTH]):.3f}"
    return text


def format_time(value: TimeLike) -> str:
    """
    Normalize a time value to the wire form "<seconds>.<millis>".

    Accepted inputs:
        - datetime: converted to epoch milliseconds, rendered exactly.
        - int, or a digit-only string: ambiguous magnitude. The first 10 digits
          are whole seconds, the next (up to) 3 digits are milliseconds.
          "4" -> "4.000", "1372187084000" -> "1372187084.000".
        - float/Decimal/string with a fractional part: already seconds; the
          fraction is rounded to 3 digits. 4.001234235 -> "4.001".
          For 11+ integer digits the fraction degrades toward ".000"
          (13721874084.424242 -> "13721874084.420").

    A float, Decimal or string whose fraction is all zeros is treated like an
    int: "1372187084000.0" and 1372187084000.0 both give "1372187084.000".

    Raises:
        TypeError: unsupported value type (including bool).
        ValueError: a string that is not a number.
    """
    if isinstance(value, datetime):
        return format_epoch_ms(datetime_to_ms(value))
    if isinstance(value, bool):
        raise TypeError("bool is not a time value")
    if isinstance(value, int):
        return _format_integral(value)
    if isinstance(value, float):
        if value.is_integer():
            return _format_integral(int(value))
        return _format_fractional(value)
    if isinstance(value, Decimal):
        return format_time(str(value))
    if isinstance(value, str):
        text = value.strip()
        whole, _, fraction = text.partition(".")
        if whole.lstrip("+-").isdigit() and not fraction.strip("0"):
            return _format_integral(int(whole))
        return _format_fractional(float(text))
    raise TypeError(f"unsupported time value: {type(value).__name__}")
