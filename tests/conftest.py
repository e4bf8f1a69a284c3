# conftest.py
from __future__ import annotations

import os
import uuid

import pytest

from modinput.core.config import WriterConfig
from modinput.core.logging import (
    bind_context,
    configure_from_env,
    enable_stdout_logging,
    get_logger,
    log_context,
)
from modinput.core.time import ManualClock
from modinput.io.writer import EventWriter

# 2013-06-25T19:04:44.123Z
START_MS = 1_372_187_084_123


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast, isolated tests")
    config.addinivalue_line("markers", "time: time normalization")
    config.addinivalue_line("markers", "writer: EventWriter channels")
    config.addinivalue_line("markers", "definitions: host definition parsing")
    config.addinivalue_line("markers", "scheme: argument rendering")
    config.addinivalue_line("markers", "logging: library and diagnostics logging")


def pytest_addoption(parser):
    parser.addoption(
        "--log-json",
        action="store_true",
        default=False,
        help="Emit modinput logs in JSON format during tests",
    )


@pytest.fixture(scope="session", autouse=True)
def _configure_modinput_logging(request):
    configure_from_env()
    prefer_json = request.config.getoption("--log-json")
    if os.getenv("MODINPUT_LOG_STDOUT", "").lower() not in ("1", "true", "yes", "on"):
        enable_stdout_logging(
            level="DEBUG",
            json_output=prefer_json,
            pretty=not prefer_json,
        )
    bind_context(role="pytest")


@pytest.fixture(scope="session")
def session_run_id():
    return uuid.uuid4().hex[:8]


@pytest.fixture(autouse=True)
def _test_log_context(request, session_run_id):
    log = get_logger("test")
    with log_context(pytest_nodeid=request.node.nodeid, test=request.node.name, test_run=session_run_id):
        log.debug("pytest.test.start", event="pytest.test.start")
        yield


@pytest.fixture
def manual_clock():
    return ManualClock(start_ms=START_MS)


@pytest.fixture
def writer(manual_clock):
    """Fresh EventWriter with default capacities and a frozen clock."""
    return EventWriter(WriterConfig(), clock=manual_clock)


@pytest.fixture
def small_writer(manual_clock):
    """EventWriter with tiny channels for overflow tests."""
    return EventWriter(WriterConfig(out_capacity_bytes=64, err_capacity_bytes=32), clock=manual_clock)
