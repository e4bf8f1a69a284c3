# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput.core.logging
=====================

Library-side structured logging for modinput. Not to be confused with the
diagnostics channel of `EventWriter`, which is part of the wire protocol:
this module logs *about* the library (writes, rejections, parse failures) for
whoever embeds it.

- Context propagation via contextvars (stanza, input kind, ...).
- JSON formatter for production; human formatter for local debugging.
- LoggerAdapter that accepts arbitrary keyword fields.
- Silent on import; `enable_stdout_logging()` / `configure_from_env()` opt in.
"""

import contextvars
import json
import logging
import os
import sys
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any, ClassVar, Final

__all__ = [
    "HumanFormatter",
    "JsonFormatter",
    "bind_context",
    "configure_from_env",
    "disable_stdout_logging",
    "enable_stdout_logging",
    "get_logger",
    "log_context",
    "resolve_level",
    "set_level",
]

LOGGER_NAME: Final[str] = "modinput"

# ---------- Context ----------

_log_context: contextvars.ContextVar[dict[str, Any] | None] = contextvars.ContextVar("modinput_log_ctx", default=None)


def _ctx_copy() -> dict[str, Any]:
    ctx = _log_context.get()
    return dict(ctx) if ctx else {}


def bind_context(**fields: Any) -> None:
    """
    Merge fields into the current structured log context.
    Use from long-lived code (e.g., once per input run).
    """
    ctx = _ctx_copy()
    ctx.update({k: v for k, v in fields.items() if v is not None})
    _log_context.set(ctx)


@contextmanager
def log_context(**fields: Any):
    """Temporarily add fields to the structured log context."""
    token = _log_context.set({**_ctx_copy(), **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _log_context.reset(token)


# ---------- Formatters ----------

_STD_ATTRS: Final[frozenset[str]] = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "asctime",
        "taskName",
    }
)


def _iso_utc_ms(ts: float) -> str:
    dt = datetime.fromtimestamp(ts, tz=UTC)
    return dt.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _exc_tuple(record: logging.LogRecord):
    ei = record.exc_info
    if not ei:
        return None
    if isinstance(ei, BaseException):
        return (type(ei), ei, ei.__traceback__)
    if ei is True:
        return sys.exc_info()
    return ei


class JsonFormatter(logging.Formatter):
    """
    One JSON object per line: ts, level, logger, message, then context and
    extra fields, then `error` when an exception is attached.
    """

    def __init__(self, *, include_stack: bool = False) -> None:
        super().__init__()
        self.include_stack = include_stack

    def format(self, record: logging.LogRecord) -> str:
        out: dict[str, Any] = {
            "ts": _iso_utc_ms(record.created),
            "level": record.levelname,
            "logger": record.name,
        }

        msg = record.getMessage()
        if msg:
            out["message"] = msg

        ctx = _log_context.get()
        if ctx:
            out.update(ctx)

        for k, v in record.__dict__.items():
            if k in _STD_ATTRS or k in out:
                continue
            out[k] = v

        exc = _exc_tuple(record)
        if exc:
            out["error"] = {
                "type": exc[0].__name__ if exc[0] else "Exception",
                "message": str(exc[1]) if exc[1] else None,
            }
            if self.include_stack:
                out["error"]["stack"] = self.formatException(exc)
        elif record.exc_text:
            out["error"] = {"stack": record.exc_text}

        return json.dumps(out, ensure_ascii=False, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """Compact human-friendly formatter for local debugging."""

    default_time_format = "%Y-%m-%d %H:%M:%S"
    default_msec_format = "%s.%03d"

    context_keys: ClassVar[tuple[str, ...]] = ("stanza", "input_kind", "channel")

    def format(self, record: logging.LogRecord) -> str:
        s = f"{self.formatTime(record)} {record.levelname:<5} {record.name}: {record.getMessage()}"
        ctx = _log_context.get()
        if ctx:
            compact = {k: ctx[k] for k in self.context_keys if ctx.get(k) is not None}
            if compact:
                s += "  [" + ", ".join(f"{k}={v}" for k, v in compact.items()) + "]"
        exc = _exc_tuple(record)
        if exc:
            s += "\n" + self.formatException(exc)
        return s


# ---------- Filters / adapter ----------


class ContextFilter(logging.Filter):
    """Copy the current log context onto each record for downstream handlers."""

    def filter(self, record: logging.LogRecord) -> bool:
        ctx = _log_context.get()
        if ctx:
            for k, v in ctx.items():
                record.__dict__.setdefault(k, v)
        return True


class _KwExtraAdapter(logging.LoggerAdapter):
    """
    Moves unknown kwargs into `extra={...}` so call sites can write

        log.info("event written", event="writer.event.write", stanza=..., size=...)

    without a TypeError from the logging module. Keys that collide with
    LogRecord attributes are prefixed with `field_`.
    """

    _passthrough: ClassVar[frozenset[str]] = frozenset({"exc_info", "stack_info", "stacklevel", "extra"})

    def process(self, msg, kwargs):
        extra = kwargs.get("extra")
        if not isinstance(extra, dict):
            extra = {}
        for k in [k for k in kwargs if k not in self._passthrough]:
            v = kwargs.pop(k)
            key = f"field_{k}" if k in _STD_ATTRS else k
            extra.setdefault(key, v)
        kwargs["extra"] = extra
        return msg, kwargs


# ---------- Public configuration API ----------

_configured = False
_stdout_handler_key = "_modinput_stdout_handler"


def _bootstrap_minimal() -> None:
    global _configured
    if _configured:
        return
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(logging.DEBUG)
    if not any(isinstance(h, logging.NullHandler) for h in lg.handlers):
        lg.addHandler(logging.NullHandler())
    if not any(isinstance(f, ContextFilter) for f in lg.filters):
        lg.addFilter(ContextFilter())
    _configured = True


def get_logger(name: str | None = None) -> logging.LoggerAdapter:
    """Return a `modinput.<name>` logger adapter that accepts keyword fields."""
    _bootstrap_minimal()
    base = logging.getLogger(LOGGER_NAME)
    target = base.getChild(name) if name else base
    return _KwExtraAdapter(target, {})


def resolve_level(level: int | str) -> int:
    """Map a level name ("info", "WARNING", ...) or number to a logging level."""
    if isinstance(level, int):
        return level
    val = getattr(logging, str(level).upper(), None)
    if isinstance(val, int):
        return val
    raise ValueError(f"Invalid level name: {level!r}")


def set_level(level: int | str) -> None:
    """Change the library logger level at runtime (affects all children)."""
    logging.getLogger(LOGGER_NAME).setLevel(resolve_level(level))


def enable_stdout_logging(
    *,
    level: int | str = logging.DEBUG,
    json_output: bool = True,
    include_stack: bool = False,
    pretty: bool = False,
) -> None:
    """
    Attach a stdout handler for tests/local runs.

    json_output=True -> JsonFormatter; pretty=True -> HumanFormatter.

    A modular input's stdout is the records channel: inside a running input,
    prefer `modinput.observability.log_config.setup_logging(writer=...)`.
    """
    lvl = resolve_level(level)
    _bootstrap_minimal()
    lg = logging.getLogger(LOGGER_NAME)

    disable_stdout_logging()

    fmt: logging.Formatter
    if pretty:
        fmt = HumanFormatter()
    elif json_output:
        fmt = JsonFormatter(include_stack=include_stack)
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    h_out = logging.StreamHandler(sys.stdout)
    h_out.set_name(_stdout_handler_key)
    h_out.setLevel(lvl)
    h_out.setFormatter(fmt)
    lg.addHandler(h_out)


def disable_stdout_logging() -> None:
    """Detach a previously installed stdout handler, if present."""
    lg = logging.getLogger(LOGGER_NAME)
    for h in list(lg.handlers):
        if h.get_name() == _stdout_handler_key:
            lg.removeHandler(h)


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").lower() in ("1", "true", "yes", "on")


def configure_from_env() -> None:
    """
    Env:
      - MODINPUT_LOG_STDOUT=1|true
      - MODINPUT_LOG_LEVEL=DEBUG|INFO|...
      - MODINPUT_LOG_PRETTY=1
      - MODINPUT_LOG_STACK=1
    """
    level = os.getenv("MODINPUT_LOG_LEVEL", "INFO")
    pretty = _env_flag("MODINPUT_LOG_PRETTY")

    _bootstrap_minimal()
    set_level(level)

    if _env_flag("MODINPUT_LOG_STDOUT"):
        enable_stdout_logging(
            level=level,
            json_output=not pretty,
            include_stack=_env_flag("MODINPUT_LOG_STACK"),
            pretty=pretty,
        )
    else:
        disable_stdout_logging()


_bootstrap_minimal()
