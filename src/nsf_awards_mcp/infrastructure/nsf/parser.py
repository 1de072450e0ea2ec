"""
NSF Response Parser - format-agnostic body decoding.

The NSF Awards API does not reliably honour content negotiation: a request for
``awards.json`` can come back as XML. The parser therefore accepts whatever
arrived and produces the same nested-dict envelope either way:

    {"response": {"award": {...} | [{...}, ...]}}

XML is converted xml2js-style: attributes ignored, namespaces stripped, the
root tag kept as the top-level key, an element with a single child kept as a
bare value, and repeated siblings collected into a list.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import defusedxml.ElementTree as ET  # Security: prevent XML attacks
from defusedxml import DefusedXmlException

from nsf_awards_mcp.shared.exceptions import ParseError

logger = logging.getLogger(__name__)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _element_to_value(element: Any) -> Any:
    children = list(element)
    if not children:
        return element.text if element.text is not None else ""

    result: dict[str, Any] = {}
    for child in children:
        key = _local_name(child.tag)
        value = _element_to_value(child)
        if key in result:
            existing = result[key]
            if isinstance(existing, list):
                existing.append(value)
            else:
                result[key] = [existing, value]
        else:
            result[key] = value
    return result


def xml_to_dict(text: str) -> dict[str, Any]:
    """
    Convert an XML document to nested dicts.

    Raises:
        ParseError: If the text is not well-formed (or unsafe) XML
    """
    try:
        root = ET.fromstring(text)
    except (ET.ParseError, DefusedXmlException) as e:
        raise ParseError(str(e), source="xml") from e
    return {_local_name(root.tag): _element_to_value(root)}


class ResponseParser:
    """
    Decode an NSF response body.

    Usage:
        parser = ResponseParser()
        payload = parser.parse(response_body)   # dict, whatever the format
    """

    def parse(self, raw: Any) -> dict[str, Any] | list[Any]:
        """
        Parse a raw body into a structured payload.

        Args:
            raw: Already-decoded JSON (dict/list), or str/bytes body

        Returns:
            Structured payload

        Raises:
            ParseError: If neither JSON nor XML decoding succeeds
        """
        if isinstance(raw, (dict, list)):
            return raw

        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise ParseError("Body is not valid UTF-8", source="bytes") from e

        if not isinstance(raw, str):
            raise ParseError(f"Unexpected response format: {type(raw).__name__}")

        try:
            decoded = json.loads(raw)
            if isinstance(decoded, (dict, list)):
                return decoded
        except ValueError:
            pass

        try:
            return xml_to_dict(raw)
        except ParseError:
            preview = raw[:200]
            logger.error(f"Failed to parse NSF API response: {preview!r}")
            raise ParseError("Failed to parse API response (neither JSON nor XML)") from None
