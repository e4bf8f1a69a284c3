"""
EventWriter: records stream envelope, diagnostics lines, atomic writes.
"""

from __future__ import annotations

import io
from xml.etree import ElementTree as ET

import pytest

from modinput.api.errors import BufferOverflow, InvalidCharacter, MissingRequiredField
from modinput.core.config import WriterConfig
from modinput.io.writer import STREAM_OPEN, ByteSink, EventWriter, Severity
from modinput.io.xmlutil import xml_equal
from modinput.protocol.event import Event
from tests.helpers import parse_stream, read_data

pytestmark = [pytest.mark.unit, pytest.mark.writer]


def _full_event() -> Event:
    return Event(
        data="This is a test of the emergency broadcast system.",
        stanza="fubar",
        time=1372275124.466,
        host="localhost",
        index="main",
        source="hilda",
        sourcetype="misc",
        done=True,
        unbroken=True,
    )


def test_two_writes_produce_two_sibling_events(writer):
    ev = _full_event()

    first = writer.write_event(ev)
    assert first == writer.out.position
    one = parse_stream(writer.out.getvalue())
    assert len(one) == 1

    second = writer.write_event(ev)
    assert second > first
    two = parse_stream(writer.out.getvalue())

    assert xml_equal(two, read_data("stream_with_two_events.xml"))
    assert xml_equal(two[0], two[1])


def test_stream_header_is_written_once(writer):
    writer.write_event(Event(data="a", time=4))
    writer.write_event(Event(data="b", time=5))
    raw = writer.out.getvalue().decode()
    assert raw.startswith(STREAM_OPEN)
    assert raw.count(STREAM_OPEN) == 1
    assert "</stream>" not in raw


@pytest.mark.parametrize(
    "fields",
    [
        {"data": "only data"},
        {"data": "d", "stanza": "s://1", "host": "h"},
        {"data": "d", "index": "main", "source": "src", "sourcetype": "st"},
        {"data": "d", "done": True},
        {"data": "d", "unbroken": True, "done": True, "index": "i"},
    ],
)
def test_written_event_children_match_non_empty_fields(writer, fields):
    writer.write_event(Event(time=4, **fields))
    (el,) = parse_stream(writer.out.getvalue())
    children = {"time"} | {k for k, v in fields.items() if v and k not in ("stanza", "unbroken")}
    assert {c.tag for c in el} == children
    assert el.findtext("data") == fields["data"]
    assert el.get("stanza") == fields.get("stanza")
    assert (el.get("unbroken") == "1") is bool(fields.get("unbroken"))


def test_invalid_event_is_rejected_with_warning(writer):
    writer.write_event(Event(data="ok", time=4))
    before = writer.out.getvalue()

    with pytest.raises(MissingRequiredField):
        writer.write_event(Event())

    assert writer.out.getvalue() == before
    assert writer.err.getvalue().startswith(Severity.WARN.value.encode() + b" ")
    assert writer.err.getvalue().endswith(b"\n")


def test_invalid_first_event_leaves_records_empty(writer):
    with pytest.raises(MissingRequiredField):
        writer.write_event(Event(stanza="fubar"))
    assert writer.out.position == 0
    assert writer.header_written is False


@pytest.mark.parametrize(
    "fields",
    [
        {"data": "ansi \x1b[31mred\x1b[0m"},
        {"data": "nul \x00 byte"},
        {"data": "ok", "host": "bell\x07"},
        {"data": "ok", "stanza": "kind://\x0c"},
    ],
)
def test_non_xml_characters_are_rejected_and_stream_stays_parseable(writer, fields):
    writer.write_event(Event(data="before", time=4))
    before = writer.out.getvalue()

    with pytest.raises(InvalidCharacter):
        writer.write_event(Event(time=4, **fields))

    assert writer.out.getvalue() == before
    assert writer.err.getvalue().startswith(b"WARN Event rejected: ")

    writer.write_event(Event(data="after", time=5))
    assert [el.findtext("data") for el in parse_stream(writer.out.getvalue())] == ["before", "after"]


def test_tab_newline_and_astral_characters_are_kept(writer):
    writer.write_event(Event(data="a\tb\nc \U0001f600", time=4))
    (el,) = parse_stream(writer.out.getvalue())
    assert el.findtext("data") == "a\tb\nc \U0001f600"


def test_unencodable_event_is_rejected_with_warning(manual_clock):
    w = EventWriter(WriterConfig(encoding="ascii"), clock=manual_clock)
    with pytest.raises(UnicodeEncodeError):
        w.write_event(Event(data="h\u00e9llo", time=4))
    assert w.out.position == 0
    assert w.header_written is False
    assert w.err.getvalue().startswith(b"WARN Event rejected: ")


def test_rejection_still_raises_when_diagnostics_are_full():
    w = EventWriter(WriterConfig(err_capacity_bytes=4))
    with pytest.raises(MissingRequiredField):
        w.write_event(Event())
    assert w.err.position == 0


def test_logging_works(writer):
    pos = writer.log(Severity.ERROR, "Something happened!")
    assert writer.err.getvalue() == b"ERROR Something happened!\n"
    assert pos == writer.err.position


def test_log_lines_accumulate_in_order(writer):
    writer.log(Severity.INFO, "one")
    writer.log("warn", "two")
    writer.log("FATAL", "three")
    assert writer.err.getvalue().decode().splitlines() == ["INFO one", "WARN two", "FATAL three"]


def test_log_rejects_unknown_severity(writer):
    with pytest.raises(ValueError):
        writer.log("LOUD", "nope")
    assert writer.err.position == 0


def test_severity_order_and_prefixes():
    assert [s.value for s in Severity] == ["FATAL", "ERROR", "WARN", "INFO", "DEBUG"]


def test_xml_document_is_written_verbatim(writer):
    doc = read_data("event_minimal.xml")
    pos = writer.write_xml_document(doc)
    assert writer.out.getvalue().decode() == doc
    assert pos == len(doc.encode())
    assert writer.header_written is False


def test_records_overflow_leaves_sink_unchanged(small_writer):
    small_writer.write_event(Event(data="x", time=4))
    before = small_writer.out.getvalue()

    with pytest.raises(BufferOverflow) as ei:
        small_writer.write_event(Event(data="y" * 100, time=4))

    assert ei.value.channel == "records"
    assert ei.value.remaining == 64 - len(before)
    assert small_writer.out.getvalue() == before


def test_first_event_overflow_does_not_mark_header(small_writer):
    with pytest.raises(BufferOverflow):
        small_writer.write_event(Event(data="z" * 200, time=4))
    assert small_writer.header_written is False
    small_writer.write_event(Event(data="z", time=4))
    assert small_writer.out.getvalue().startswith(STREAM_OPEN.encode())


def test_diagnostics_overflow_leaves_sink_unchanged(small_writer):
    small_writer.log(Severity.INFO, "short")
    before = small_writer.err.getvalue()
    with pytest.raises(BufferOverflow) as ei:
        small_writer.log(Severity.INFO, "x" * 64)
    assert ei.value.channel == "diagnostics"
    assert small_writer.err.getvalue() == before


def test_exact_fit_is_accepted():
    sink = ByteSink("records", 5)
    assert sink.append(b"abc") == 3
    assert sink.append(b"de") == 5
    assert sink.remaining == 0
    with pytest.raises(BufferOverflow):
        sink.append(b"f")
    assert len(sink) == 5


def test_flush_to_copies_only_new_bytes(writer):
    out, err = io.BytesIO(), io.BytesIO()

    writer.write_event(Event(data="a", time=4))
    writer.log(Severity.INFO, "first")
    writer.flush_to(out, err)

    writer.write_event(Event(data="b", time=5))
    writer.flush_to(out, err)

    assert out.getvalue() == writer.out.getvalue()
    assert err.getvalue() == b"INFO first\n"
    # sinks keep their content
    assert len(parse_stream(writer.out.getvalue())) == 2


class _FlakyStream(io.BytesIO):
    """Binary stream whose writes fail until `broken` is cleared."""

    def __init__(self) -> None:
        super().__init__()
        self.broken = True

    def write(self, data):
        if self.broken:
            raise BrokenPipeError("host went away")
        return super().write(data)


def test_failed_flush_keeps_bytes_pending(writer):
    out = _FlakyStream()
    writer.write_event(Event(data="a", time=4))

    with pytest.raises(BrokenPipeError):
        writer.flush_to(out)
    assert writer.out.pending() == writer.out.getvalue()

    out.broken = False
    writer.flush_to(out)
    assert out.getvalue() == writer.out.getvalue()
    assert writer.out.pending() == b""


def test_mark_flushed_cannot_pass_the_write_position():
    sink = ByteSink("records", 16)
    sink.append(b"abc")
    sink.mark_flushed(2)
    assert sink.pending() == b"c"
    with pytest.raises(ValueError):
        sink.mark_flushed(2)
    assert sink.pending() == b"c"


def test_custom_encoding_is_used(manual_clock):
    w = EventWriter(WriterConfig(encoding="utf-16-le"), clock=manual_clock)
    w.write_event(Event(data="héllo", time=4))
    root = parse_stream(w.out.getvalue(), encoding="utf-16-le")
    assert root[0].findtext("data") == "héllo"


def test_default_time_uses_writer_clock(writer):
    writer.write_event(Event(data="now"))
    (el,) = parse_stream(writer.out.getvalue())
    assert el.findtext("time") == "1372187084.123"


def test_scheme_document_from_arguments(writer):
    from modinput.protocol.argument import Argument

    args = "".join(Argument(name=n).to_xml() for n in ("a", "b"))
    writer.write_xml_document(f"<scheme><endpoint><args>{args}</args></endpoint></scheme>")
    root = ET.fromstring(writer.out.getvalue())
    assert [a.get("name") for a in root.iter("arg")] == ["a", "b"]
