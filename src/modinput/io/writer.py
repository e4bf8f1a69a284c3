# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
EventWriter: the two output channels of a modular input.

- records channel: an open-ended `<stream>` of `<event>` elements, or a
  one-shot document (scheme) written verbatim;
- diagnostics channel: `"<SEVERITY> <message>\\n"` lines read by the host's
  log ingestion.

Each channel is a `ByteSink` owned by the writer, with a fixed capacity. A
write either lands entirely and advances the sink position, or raises and
leaves the sink untouched. The writer does no locking: callers serialize
calls into one instance.
"""

import logging
from enum import Enum
from typing import IO, Any

from ..api.errors import BufferOverflow, ModinputError
from ..core.config import WriterConfig
from ..core.logging import get_logger
from ..core.time import Clock, SystemClock
from ..protocol.event import Event

__all__ = ["ByteSink", "EventWriter", "Severity", "STREAM_OPEN", "STREAM_CLOSE"]

STREAM_OPEN = "<stream>"
STREAM_CLOSE = "</stream>"

log = get_logger("writer")


class Severity(str, Enum):
    """Diagnostic severities, most severe first. Values are the literal line prefixes."""

    FATAL = "FATAL"
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    DEBUG = "DEBUG"

    @classmethod
    def _missing_(cls, value: object) -> Severity | None:
        if isinstance(value, str):
            upper = value.upper()
            for member in cls:
                if member.value == upper:
                    return member
        return None

    @classmethod
    def from_level(cls, levelno: int) -> Severity:
        """Map a stdlib logging level onto the nearest severity."""
        if levelno >= logging.CRITICAL:
            return cls.FATAL
        if levelno >= logging.ERROR:
            return cls.ERROR
        if levelno >= logging.WARNING:
            return cls.WARN
        if levelno >= logging.INFO:
            return cls.INFO
        return cls.DEBUG


class ByteSink:
    """Append-only byte buffer with a hard capacity and all-or-nothing appends."""

    def __init__(self, name: str, capacity: int) -> None:
        self.name = name
        self.capacity = capacity
        self._buf = bytearray()
        self._flushed = 0

    @property
    def position(self) -> int:
        """Offset where the next write begins."""
        return len(self._buf)

    @property
    def remaining(self) -> int:
        return self.capacity - len(self._buf)

    def __len__(self) -> int:
        return len(self._buf)

    def append(self, data: bytes) -> int:
        """Append `data` and return the new position."""
        if len(data) > self.remaining:
            raise BufferOverflow(self.name, len(data), self.remaining)
        self._buf += data
        return len(self._buf)

    def getvalue(self) -> bytes:
        """Everything written so far."""
        return bytes(self._buf)

    def pending(self) -> bytes:
        """Bytes not yet marked as flushed."""
        return bytes(self._buf[self._flushed :])

    def mark_flushed(self, count: int) -> None:
        """Record that `count` more pending bytes reached their destination."""
        if count < 0 or self._flushed + count > len(self._buf):
            raise ValueError(f"{self.name}: cannot mark {count} bytes flushed, {len(self._buf) - self._flushed} pending")
        self._flushed += count


class EventWriter:
    """
    Writes events and diagnostics for the host.

    The records channel begins inside an implicit `<stream>` element: the first
    `write_event` emits the opening tag, and the writer never closes it. A
    finite consumer appends `STREAM_CLOSE` before parsing a snapshot.
    """

    def __init__(self, config: WriterConfig | None = None, *, clock: Clock | None = None) -> None:
        self.config = config or WriterConfig()
        self._clock = clock or SystemClock()
        self._out = ByteSink("records", self.config.out_capacity_bytes)
        self._err = ByteSink("diagnostics", self.config.err_capacity_bytes)
        self._header_written = False

    # ---- Accessors ---------------------------------------------------------

    @property
    def out(self) -> ByteSink:
        return self._out

    @property
    def err(self) -> ByteSink:
        return self._err

    @property
    def header_written(self) -> bool:
        return self._header_written

    def _encode(self, text: str) -> bytes:
        return text.encode(self.config.encoding)

    # ---- Records channel ---------------------------------------------------

    def write_event(self, event: Event) -> int:
        """
        Append one `<event>` to the stream and return the new records position.

        Raises:
            MissingRequiredField: the event has no data.
            InvalidCharacter: a field holds a character XML cannot carry.
            UnicodeEncodeError: the text cannot be encoded in the configured
                encoding.
            BufferOverflow: the fragment does not fit; nothing is written.

        On every error but BufferOverflow, a WARN line is written to the
        diagnostics channel and the records channel is untouched.
        """
        try:
            body = event.to_xml(self._clock)
            payload = self._encode(body if self._header_written else STREAM_OPEN + body)
        except (ModinputError, TypeError, ValueError) as e:
            self._report_rejected(event, e)
            raise

        try:
            position = self._out.append(payload)
        except BufferOverflow as e:
            log.warning("event does not fit records channel", event="writer.overflow", channel="records", error=str(e))
            raise
        self._header_written = True
        log.debug(
            "event written",
            event="writer.event.write",
            stanza=event.stanza,
            position=position,
        )
        return position

    def _report_rejected(self, event: Event, error: Exception) -> None:
        log.warning(
            "event rejected",
            event="writer.event.rejected",
            stanza=event.stanza,
            error_type=type(error).__name__,
            error=str(error),
        )
        try:
            self.log(Severity.WARN, f"Event rejected: {error}")
        except BufferOverflow as overflow:
            # The rendering error is the one the caller must see.
            log.error("diagnostics channel full", event="writer.overflow", channel="diagnostics", error=str(overflow))

    def write_xml_document(self, document: str) -> int:
        """Append a pre-formed document (e.g. a scheme) verbatim, outside the stream envelope."""
        position = self._out.append(self._encode(document))
        log.debug("document written", event="writer.document.write", position=position)
        return position

    # ---- Diagnostics channel -----------------------------------------------

    def log(self, severity: Severity | str, message: str) -> int:
        """
        Append `"<SEVERITY> <message>\\n"` to the diagnostics channel.

        `severity` may be a Severity or its name ("warn", "ERROR", ...).
        Returns the new diagnostics position.
        """
        sev = Severity(severity)
        return self._err.append(self._encode(f"{sev.value} {message}\n"))

    # ---- Hand-off ----------------------------------------------------------

    def flush_to(self, out_stream: IO[bytes] | Any, err_stream: IO[bytes] | Any | None = None) -> None:
        """
        Copy bytes written since the last flush into binary streams.

        The sinks keep their contents and positions. A chunk counts as flushed
        only once `stream.write` returns; if it raises, the error propagates
        and the next call hands over the same bytes again.
        """
        for sink, stream in ((self._out, out_stream), (self._err, err_stream)):
            if stream is None:
                continue
            chunk = sink.pending()
            if chunk:
                stream.write(chunk)
                sink.mark_flushed(len(chunk))
            flush = getattr(stream, "flush", None)
            if flush is not None:
                flush()
