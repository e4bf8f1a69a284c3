# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

"""
Definitions sent by the host to a modular input.

- ValidationDefinition: the proposed configuration of one input instance,
  sent before the host persists it (`<items>` document).
- InputDefinition: the configuration of every instance to run, sent when a
  streaming run starts (`<input>` document).

Both parse eagerly and stop at the first problem: a parse either returns one
definition or raises one error, never both.
"""

import asyncio
import inspect
import os
from abc import abstractmethod
from pathlib import Path
from typing import Any, ClassVar
from xml.etree import ElementTree as ET

from pydantic import BaseModel, ConfigDict, Field

from ..api.errors import InvalidDocument, ModinputError
from ..core.logging import get_logger
from ..core.types import Metadata, Parameters, StanzaName
from ..io.xmlutil import XmlSource, parse_document, parse_parameters

__all__ = ["InputDefinition", "ValidationDefinition"]

log = get_logger("definitions")


async def _read_async(source: Any) -> Any:
    """Resolve an async reader or a path into something `parse_document` takes."""
    if isinstance(source, os.PathLike):
        return await asyncio.to_thread(Path(source).read_bytes)
    read = getattr(source, "read", None)
    if read is None:
        return source
    data = read()
    if inspect.isawaitable(data):
        data = await data
    return data


class _Definition(BaseModel):
    model_config = ConfigDict(extra="forbid")

    root_tag: ClassVar[str]

    metadata: Metadata = Field(default_factory=dict)

    @classmethod
    @abstractmethod
    def from_element(cls, root: ET.Element):
        """Build the definition from its parsed root element."""

    @classmethod
    def parse(cls, source: XmlSource):
        """
        Parse a definition document.

        Raises:
            ParseError: malformed XML.
            InvalidDocument: wrong root element or structure.
        """
        try:
            return cls.from_element(parse_document(source))
        except ModinputError as e:
            log.warning(
                "definition rejected",
                event="definition.parse.failed",
                definition=cls.__name__,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

    @classmethod
    async def parse_async(cls, source: Any):
        """Like `parse`, but also accepts an object with an async `read()`."""
        return cls.parse(await _read_async(source))


class ValidationDefinition(_Definition):
    """
    Parsed `<items>` validation request.

        <items>
          <server_host>myHost</server_host>
          <server_uri>https://127.0.0.1:8089</server_uri>
          <session_key>123102983109283019283</session_key>
          <checkpoint_dir>/opt/splunk/var/lib/splunk/modinputs</checkpoint_dir>
          <item name="myScheme">
            <param name="param1">value1</param>
            <param_list name="param2">
              <value>value2</value>
              <value>value3</value>
            </param_list>
          </item>
        </items>

    Top-level children other than `<item>` go to `metadata`; the item's name
    is stored as `metadata["name"]`. Only the first `<item>` is read.
    """

    root_tag: ClassVar[str] = "items"

    parameters: Parameters = Field(default_factory=dict)

    @classmethod
    def from_element(cls, root: ET.Element) -> ValidationDefinition:
        if root.tag != cls.root_tag:
            raise InvalidDocument(f"invalid validation definition: expected <items> root, got <{root.tag}>")

        metadata: Metadata = {}
        item: ET.Element | None = None
        for child in root:
            if child.tag == "item":
                if item is None:
                    item = child
                continue
            metadata[child.tag] = child.text or ""

        if item is None:
            raise InvalidDocument("invalid validation definition: no <item> element")

        metadata["name"] = item.get("name", "")
        return cls(metadata=metadata, parameters=parse_parameters(item))


class InputDefinition(_Definition):
    """
    Parsed `<input>` definition.

        <input>
          <server_host>tiny</server_host>
          <server_uri>https://127.0.0.1:8089</server_uri>
          <checkpoint_dir>/some/dir</checkpoint_dir>
          <session_key>123102983109283019283</session_key>
          <configuration>
            <stanza name="foobar://aaa">
              <param name="param1">value1</param>
            </stanza>
            <stanza name="foobar://bbb">...</stanza>
          </configuration>
        </input>

    `inputs` maps each stanza name to its parameters, in document order.
    """

    root_tag: ClassVar[str] = "input"

    inputs: dict[StanzaName, Parameters] = Field(default_factory=dict)

    @classmethod
    def from_element(cls, root: ET.Element) -> InputDefinition:
        if root.tag != cls.root_tag:
            raise InvalidDocument(f"invalid input definition: expected <input> root, got <{root.tag}>")

        metadata: Metadata = {}
        inputs: dict[StanzaName, Parameters] = {}
        for child in root:
            if child.tag != "configuration":
                metadata[child.tag] = child.text or ""
                continue
            for stanza in child:
                if stanza.tag != "stanza":
                    raise InvalidDocument(f"unexpected <{stanza.tag}> element inside <configuration>")
                name = stanza.get("name")
                if name is None:
                    raise InvalidDocument("<stanza> element is missing its name attribute")
                inputs[name] = parse_parameters(stanza)

        return cls(metadata=metadata, inputs=inputs)
