# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
modinput.observability.log_config
=================================

Logging setup for code running *inside* a modular input.

Inside an input, stdout is the records channel and stderr is read by the host
as severity-prefixed lines. `DiagnosticsHandler` routes stdlib logging records
into an `EventWriter` diagnostics channel so they arrive in that format.

Importing this module does not touch global logging state.
"""

import logging

from ..api.errors import BufferOverflow
from ..core import logging as corelog
from ..io.writer import EventWriter, Severity

__all__ = [
    "DiagnosticsHandler",
    "bind_context",
    "get_logger",
    "install_diagnostics_handler",
    "log_context",
    "setup_logging",
]

_HANDLER_NAME = "_modinput_diagnostics_handler"


class DiagnosticsHandler(logging.Handler):
    """
    Forward log records to `writer.log()`.

    Levels map CRITICAL->FATAL, ERROR->ERROR, WARNING->WARN, INFO->INFO,
    anything lower->DEBUG. A full diagnostics channel is reported through
    `handleError` like any other handler failure.
    """

    def __init__(self, writer: EventWriter, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.writer = writer
        self.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.writer.log(Severity.from_level(record.levelno), self.format(record))
        except BufferOverflow:
            self.handleError(record)


def install_diagnostics_handler(
    writer: EventWriter,
    *,
    logger: logging.Logger | None = None,
    level: int | str = logging.INFO,
) -> DiagnosticsHandler:
    """
    Attach a DiagnosticsHandler to `logger` (default: the modinput logger tree).

    Safe to call multiple times; a previously installed handler is replaced.
    """
    target = logger or logging.getLogger(corelog.LOGGER_NAME)
    for h in list(target.handlers):
        if h.get_name() == _HANDLER_NAME:
            target.removeHandler(h)

    handler = DiagnosticsHandler(writer, level=corelog.resolve_level(level))
    handler.set_name(_HANDLER_NAME)
    target.addHandler(handler)
    return handler


# --- Facade to core logging ---------------------------------------------------

bind_context = corelog.bind_context
log_context = corelog.log_context
get_logger = corelog.get_logger


def setup_logging(
    *,
    writer: EventWriter | None = None,
    level: int | str = logging.INFO,
    pretty: bool = False,
    include_stack: bool = False,
    logger: logging.Logger | None = None,
) -> None:
    """
    Configure logging for an input process or a local run.

    Args:
        writer: when given, logs go to its diagnostics channel (the normal
            case inside a running input). Otherwise stdout handlers are
            installed via `core.logging.enable_stdout_logging`.
        level: base log level.
        pretty: human-readable stdout logs instead of JSON (no writer only).
        include_stack: include exception stacks in JSON logs (no writer only).
        logger: logger to attach the diagnostics handler to.
    """
    corelog.set_level(level)
    if writer is not None:
        corelog.disable_stdout_logging()
        install_diagnostics_handler(writer, logger=logger, level=level)
        return
    corelog.enable_stdout_logging(
        level=level,
        json_output=not pretty,
        include_stack=include_stack,
        pretty=pretty,
    )
