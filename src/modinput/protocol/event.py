# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Event: one data record sent to the host on the records channel.

Wire form (inside the open `<stream>` envelope):

    <event stanza="kind://name" unbroken="1">
      <time>1372274622.493</time>
      <data>...</data>
      <index>main</index>
      <source>...</source>
      <sourcetype>...</sourcetype>
      <host>...</host>
      <done />
    </event>

Only `data` is required. Optional children are emitted only when set; `time`
defaults to "now" taken from the injected clock.
"""

from datetime import datetime
from decimal import Decimal
from xml.etree import ElementTree as ET

from pydantic import BaseModel, ConfigDict

from ..api.errors import MissingRequiredField
from ..core.time import Clock, SystemClock, format_epoch_ms, format_time
from .layout import Emit, FieldRule, build_element, to_text

__all__ = ["EVENT_LAYOUT", "Event"]


EVENT_LAYOUT: tuple[FieldRule, ...] = (
    FieldRule("stanza", "stanza", Emit.ATTRIBUTE),
    FieldRule("unbroken", "unbroken", Emit.FLAG_ATTRIBUTE),
    FieldRule("time", "time", Emit.ELEMENT_ALWAYS),
    FieldRule("data", "data", Emit.ELEMENT_ALWAYS),
    FieldRule("index", "index", Emit.ELEMENT),
    FieldRule("source", "source", Emit.ELEMENT),
    FieldRule("sourcetype", "sourcetype", Emit.ELEMENT),
    FieldRule("host", "host", Emit.ELEMENT),
    FieldRule("done", "done", Emit.EMPTY_ELEMENT),
)

_DEFAULT_CLOCK = SystemClock()


class Event(BaseModel):
    """
    A single record emitted by a modular input.

    Fields:
        data: record payload. Required at render time (may be left unset at
              construction so callers can build events incrementally).
        time: event time; datetime, epoch number or decimal string, see
              `format_time`. Absent means "now".
        stanza: name of the input instance this record belongs to.
        source, sourcetype, index, host: optional per-event overrides.
        done: marks the last record of a multi-part entry.
        unbroken: marks a record of a multi-part entry that is not complete.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    data: str | None = None
    time: datetime | int | float | Decimal | str | None = None
    stanza: str | None = None
    source: str | None = None
    sourcetype: str | None = None
    index: str | None = None
    host: str | None = None
    done: bool = False
    unbroken: bool = False

    def ensure_complete(self) -> None:
        """Raise MissingRequiredField if the event cannot be serialized."""
        if not self.data:
            raise MissingRequiredField("data", "events must have at least the data field set to be written to XML")

    def time_text(self, clock: Clock | None = None) -> str:
        if self.time is None:
            return format_epoch_ms((clock or _DEFAULT_CLOCK).now_ms())
        return format_time(self.time)

    def to_element(self, clock: Clock | None = None) -> ET.Element:
        """Render to an `<event>` element. Validates before building anything."""
        self.ensure_complete()
        values = self.model_dump()
        values["time"] = self.time_text(clock)
        return build_element("event", EVENT_LAYOUT, values)

    def to_xml(self, clock: Clock | None = None) -> str:
        return to_text(self.to_element(clock))
