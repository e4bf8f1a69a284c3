"""
Argument rendering for scheme documents.
"""

from __future__ import annotations

from xml.etree import ElementTree as ET

import pytest
from pydantic import ValidationError

from modinput.protocol.argument import Argument, DataType

pytestmark = [pytest.mark.unit, pytest.mark.scheme]


def test_defaults_render_name_and_string_type():
    assert Argument(name="arg1").to_xml() == '<arg name="arg1"><data_type>string</data_type></arg>'


def test_everything_set():
    arg = Argument(
        name="arg2",
        description="This is an argument with lots of parameters",
        validation="is_pos_int('some_name')",
        data_type=DataType.NUMBER,
        required_on_edit=True,
        required_on_create=True,
    )
    assert arg.to_xml() == (
        '<arg name="arg2">'
        "<description /><validation />"
        "<data_type>number</data_type>"
        "<required_on_edit>true</required_on_edit>"
        "<required_on_create>true</required_on_create>"
        "</arg>"
    )


def test_child_tags_use_scheme_names_not_camel_case():
    # The host's scheme format spells these data_type / required_on_edit /
    # required_on_create. The JavaScript SDK emitted its property names
    # (dataType, requiredOnEdit, requiredOnCreate) instead.
    el = Argument(name="a", required_on_edit=True, required_on_create=True).to_element()
    assert [child.tag for child in el] == ["data_type", "required_on_edit", "required_on_create"]
    for camel in ("dataType", "requiredOnEdit", "requiredOnCreate"):
        assert el.find(camel) is None


def test_falsy_fields_are_not_rendered():
    el = Argument(name="a", description="", validation=None, data_type=None).to_element()
    assert el.attrib == {"name": "a"}
    assert len(el) == 0


def test_data_type_is_lower_cased():
    el = Argument(name="flag", data_type=DataType.BOOLEAN).to_element()
    assert el.findtext("data_type") == "boolean"


def test_data_type_accepts_enum_name():
    assert Argument(name="n", data_type="NUMBER").data_type is DataType.NUMBER


def test_empty_name_is_not_enforced():
    assert ET.fromstring(Argument().to_xml()).get("name") == ""


def test_rendering_is_idempotent():
    arg = Argument(name="x", description="d", required_on_create=True)
    assert arg.to_xml() == arg.to_xml()


def test_no_xml_declaration():
    assert not Argument(name="x").to_xml().startswith("<?xml")


def test_arguments_are_immutable():
    arg = Argument(name="x")
    with pytest.raises(ValidationError):
        arg.name = "y"
