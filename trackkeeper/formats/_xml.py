"""Namespace-agnostic ElementTree helpers shared by the GPX and TCX readers.

GPX and TCX files in the wild come with GPX 1.0, 1.1, TCX v1, v2 or no
namespace at all, so lookups compare local tag names only.
"""

from __future__ import annotations

from typing import Iterator, List, Optional
import xml.etree.ElementTree as ET

from ..errors import ParseError


def parse_document(content: str | bytes, filename: str) -> ET.Element:
    """Parse XML text, mapping syntax errors to ``ParseError``."""

    try:
        return ET.fromstring(content)
    except ET.ParseError as exc:
        raise ParseError(filename, f"malformed XML ({exc})") from exc


def local_name(tag: object) -> str:
    if not isinstance(tag, str):
        # Comments and processing instructions carry callables as tags.
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_named(elem: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield descendants (not ``elem`` itself) whose local name is ``name``."""

    for node in elem.iter():
        if node is not elem and local_name(node.tag) == name:
            yield node


def children_named(elem: ET.Element, name: str) -> List[ET.Element]:
    return [child for child in elem if local_name(child.tag) == name]


def first_child(elem: ET.Element, name: str) -> Optional[ET.Element]:
    for child in elem:
        if local_name(child.tag) == name:
            return child
    return None


def child_text(elem: ET.Element, name: str) -> Optional[str]:
    """Stripped text of the first direct child ``name``; None when blank."""

    child = first_child(elem, name)
    if child is None or child.text is None:
        return None
    text = child.text.strip()
    return text or None


def parse_float(value: Optional[str]) -> Optional[float]:
    """Float value of ``value`` or None when missing/non-numeric/non-finite."""

    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number
