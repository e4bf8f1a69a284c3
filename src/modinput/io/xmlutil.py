# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Small XML helpers shared by the definition parsers and tests:
document loading with error mapping, the `<param>`/`<param_list>` walker,
structural element equality, and file reading relative to a module.
"""

import os
from pathlib import Path
from typing import IO, Any, Union
from xml.etree import ElementTree as ET

from ..api.errors import InvalidDocument, ParseError
from ..core.types import Parameters, StrPath

__all__ = [
    "XmlSource",
    "parse_document",
    "parse_parameters",
    "read_file",
    "xml_equal",
]

# XML text, raw bytes, a filesystem path, or an open file object.
XmlSource = Union[str, bytes, bytearray, os.PathLike, IO[Any]]


def parse_document(source: XmlSource) -> ET.Element:
    """
    Parse `source` and return its root element.

    `str` is always XML text; pass a `Path` to read from disk.

    Raises:
        ParseError: the document is not well-formed.
    """
    try:
        if isinstance(source, (str, bytes, bytearray)):
            return ET.fromstring(source)
        if isinstance(source, os.PathLike):
            return ET.parse(source).getroot()
        return ET.fromstring(source.read())
    except ET.ParseError as e:
        raise ParseError(f"malformed XML: {e}", position=getattr(e, "position", None)) from e


def _param_name(node: ET.Element) -> str:
    name = node.get("name")
    if name is None:
        raise InvalidDocument(f"<{node.tag}> element is missing its name attribute")
    return name


def parse_parameters(node: ET.Element) -> Parameters:
    """
    Collect `<param>` and `<param_list>` children of `node`.

        <param name="p1">v1</param>                                -> {"p1": "v1"}
        <param_list name="p2"><value>a</value><value>b</value></param_list> -> {"p2": ["a", "b"]}

    Raises:
        InvalidDocument: an unexpected child element or a missing name.
    """
    params: Parameters = {}
    for child in node:
        if child.tag == "param":
            params[_param_name(child)] = child.text or ""
        elif child.tag == "param_list":
            params[_param_name(child)] = [v.text or "" for v in child.findall("value")]
        else:
            raise InvalidDocument(f"unexpected <{child.tag}> element inside <{node.tag}>")
    return params


def xml_equal(a: ET.Element | str, b: ET.Element | str) -> bool:
    """
    Structural equality of two XML trees: tags, attributes, stripped text and
    children (order-sensitive). Whitespace between elements is ignored.
    """
    if isinstance(a, str):
        a = ET.fromstring(a)
    if isinstance(b, str):
        b = ET.fromstring(b)
    if a.tag != b.tag or a.attrib != b.attrib:
        return False
    if (a.text or "").strip() != (b.text or "").strip():
        return False
    if len(a) != len(b):
        return False
    return all(xml_equal(x, y) for x, y in zip(a, b))


def read_file(base: StrPath, *parts: str, encoding: str = "utf-8") -> str:
    """Read a file relative to the directory containing `base` (e.g. `__file__`)."""
    return Path(base).resolve().parent.joinpath(*parts).read_text(encoding=encoding)
