# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Public exports for the output channels and XML helpers.
"""

from .writer import STREAM_CLOSE, STREAM_OPEN, ByteSink, EventWriter, Severity
from .xmlutil import XmlSource, parse_document, parse_parameters, read_file, xml_equal

__all__ = [
    # writer
    "ByteSink",
    "EventWriter",
    "Severity",
    "STREAM_CLOSE",
    "STREAM_OPEN",
    # xml helpers
    "XmlSource",
    "parse_document",
    "parse_parameters",
    "read_file",
    "xml_equal",
]
