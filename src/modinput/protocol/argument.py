# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Argument: one configurable parameter of a modular input kind, rendered as
the `<arg>` fragment of the scheme document returned to the host.

The fragment carries no XML declaration since it is always embedded in the
enclosing scheme document, which is assembled elsewhere.
"""

from enum import Enum
from xml.etree import ElementTree as ET

from pydantic import BaseModel, ConfigDict

from .layout import Emit, FieldRule, build_element, to_text

__all__ = ["ARGUMENT_LAYOUT", "Argument", "DataType"]


class DataType(str, Enum):
    """Value type the host enforces for an argument."""

    STRING = "STRING"
    NUMBER = "NUMBER"
    BOOLEAN = "BOOLEAN"


def _lower(value: object) -> str:
    if isinstance(value, Enum):
        value = value.value
    return str(value).lower()


ARGUMENT_LAYOUT: tuple[FieldRule, ...] = (
    FieldRule("name", "name", Emit.ATTRIBUTE_ALWAYS),
    # Placeholders: the text is filled in by the scheme's own templating.
    FieldRule("description", "description", Emit.EMPTY_ELEMENT),
    FieldRule("validation", "validation", Emit.EMPTY_ELEMENT),
    FieldRule("data_type", "data_type", Emit.ELEMENT, _lower),
    FieldRule("required_on_edit", "required_on_edit", Emit.ELEMENT, _lower),
    FieldRule("required_on_create", "required_on_create", Emit.ELEMENT, _lower),
)


class Argument(BaseModel):
    """
    Descriptor of a single input parameter.

    `name` should be non-empty; enforcing that is left to whoever assembles
    the scheme. Falsy fields are never rendered.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str = ""
    description: str | None = None
    validation: str | None = None
    data_type: DataType | None = DataType.STRING
    required_on_edit: bool = False
    required_on_create: bool = False

    def to_element(self) -> ET.Element:
        return build_element("arg", ARGUMENT_LAYOUT, self.model_dump())

    def to_xml(self) -> str:
        return to_text(self.to_element())
