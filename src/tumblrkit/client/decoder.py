"""Decoder collaborator: turns a response body into Python values.

JSON bodies decode with :func:`json.loads`. XML bodies become nested dicts:
attributes are keys prefixed with ``@``, repeated child tags collect into
lists, and text-only elements collapse to their string. The result is always
JSON-serialisable, which is what the response cache stores. XML is parsed
with lxml; entities are left unresolved.

The API wraps JSON output in ``var tumblr_api_read = {...};`` so the wrapper
is stripped before parsing.
"""

from __future__ import annotations

import json
import re
from typing import Any, Protocol

from lxml import etree

from tumblrkit.exceptions import DecodeError
from tumblrkit.models import OutputFormat

_JS_WRAPPER = re.compile(r"^\s*var\s+[A-Za-z_$][\w$]*\s*=\s*(.*?);?\s*$", re.DOTALL)


class Decoder(Protocol):
    def decode(self, data: bytes, output: OutputFormat) -> Any: ...


class ResponseDecoder:
    """Default decoder for ``xml`` and ``json`` output."""

    def decode(self, data: bytes, output: OutputFormat) -> Any:
        """Decode *data* according to *output*.

        Raises:
            DecodeError: If the body is malformed for the format.
        """
        if output == OutputFormat.JSON:
            return decode_json(data)
        return decode_xml(data)


def decode_json(data: bytes) -> Any:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Response is not valid UTF-8: {exc}") from exc

    match = _JS_WRAPPER.match(text)
    if match:
        text = match.group(1)
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Malformed JSON response: {exc}") from exc


def decode_xml(data: bytes) -> Any:
    parser = etree.XMLParser(strip_cdata=True, resolve_entities=False)
    try:
        root = etree.fromstring(data, parser)
    except (etree.XMLSyntaxError, ValueError) as exc:
        raise DecodeError(f"Malformed XML response: {exc}") from exc
    return {root.tag: _element_to_value(root)}


def _element_to_value(element: etree._Element) -> Any:
    value: dict[str, Any] = {f"": v for k, v in element.attrib.items()}
    for child in element:
        # comments and processing instructions
        if not isinstance(child.tag, str):
            continue
        child_value = _element_to_value(child)
        if child.tag in value:
            existing = value[child.tag]
            if not isinstance(existing, list):
                value[child.tag] = [existing]
            value[child.tag].append(child_value)
        else:
            value[child.tag] = child_value

    text = (element.text or "").strip()
    if not value:
        return text
    if text:
        value["#text"] = text
    return value
