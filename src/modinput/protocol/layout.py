# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Ordered field-to-XML emission tables.

Each wire type declares a tuple of `FieldRule`s: which model field feeds
which attribute or child element, and under what condition it is emitted.
Rendering walks the table in order, so the output layout is fixed by the
table rather than by model field order.
"""

import re
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Final
from xml.etree import ElementTree as ET

from ..api.errors import InvalidCharacter

__all__ = ["Emit", "FieldRule", "build_element", "to_text"]

# Complement of the XML 1.0 `Char` production.
_NON_XML_CHAR: Final[re.Pattern[str]] = re.compile(r"[^\t\n\r\x20-\ud7ff\ue000-\ufffd\U00010000-\U0010ffff]")


class Emit(str, Enum):
    """How a field lands on the element."""

    ATTRIBUTE = "attribute"  # attribute, only when truthy
    ATTRIBUTE_ALWAYS = "attribute_always"  # attribute, empty string when unset
    FLAG_ATTRIBUTE = "flag_attribute"  # attr="1" when true
    ELEMENT = "element"  # child with text, only when truthy
    ELEMENT_ALWAYS = "element_always"  # child with text
    EMPTY_ELEMENT = "empty_element"  # empty child (marker/placeholder), only when truthy


@dataclass(frozen=True)
class FieldRule:
    field: str
    tag: str
    emit: Emit
    text: Callable[[Any], str] = str

    def render(self, value: Any) -> str:
        """Text for `value`; raises InvalidCharacter if XML cannot carry it."""
        text = self.text(value)
        bad = _NON_XML_CHAR.search(text)
        if bad is not None:
            raise InvalidCharacter(self.field, bad.group())
        return text


def to_text(xml: ET.Element) -> str:
    """Serialize an element without an XML declaration."""
    return ET.tostring(xml, encoding="unicode")


def build_element(root_tag: str, rules: Iterable[FieldRule], values: Mapping[str, Any]) -> ET.Element:
    """Build `<root_tag>` from `values` following `rules` in order."""
    root = ET.Element(root_tag)
    for rule in rules:
        value = values.get(rule.field)
        if rule.emit is Emit.ATTRIBUTE_ALWAYS:
            root.set(rule.tag, rule.render(value) if value is not None else "")
        elif rule.emit is Emit.ELEMENT_ALWAYS:
            ET.SubElement(root, rule.tag).text = rule.render(value)
        elif not value:
            continue
        elif rule.emit is Emit.ATTRIBUTE:
            root.set(rule.tag, rule.render(value))
        elif rule.emit is Emit.FLAG_ATTRIBUTE:
            root.set(rule.tag, "1")
        elif rule.emit is Emit.ELEMENT:
            ET.SubElement(root, rule.tag).text = rule.render(value)
        elif rule.emit is Emit.EMPTY_ELEMENT:
            ET.SubElement(root, rule.tag)
    return root
