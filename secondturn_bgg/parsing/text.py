"""
Text cleanup helpers for BGG XML payloads.

BGG double-encodes some localized names, so every extracted value goes
through ``clean_and_decode_text`` after the XML parser has already unescaped
it once.
"""

import re
import xml.etree.ElementTree as ET
from typing import Optional, Union

_CONTROL_CHARS = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
_BARE_AMPERSAND = re.compile(r'&(?!(amp|lt|gt|quot|apos|#\d+|#x[0-9a-fA-F]+);)')
_DECIMAL_ENTITY = re.compile(r'&#(\d+);')
_HEX_ENTITY = re.compile(r'&#x([0-9a-fA-F]+);')
_OPENING_TAG = re.compile(r'<[^>]+>')
_CLOSING_TAG = re.compile(r'</[^>]+>')

# Single pass; the XML parser has already removed one level of escaping
NAMED_ENTITIES = (
    ('&amp;', '&'),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&apos;', "'"),
    ('&#039;', "'"),
    ('&#39;', "'"),
    ('&nbsp;', ' '),
    ('&copy;', '©'),
    ('&reg;', '®'),
    ('&trade;', '™'),
)

XMLNode = Union[None, str, ET.Element]


def clean_xml(xml_text: str) -> str:
    """Strip control characters and escape bare ampersands so parsing doesn't abort."""
    if not xml_text:
        return ''
    cleaned = _CONTROL_CHARS.sub('', xml_text)
    cleaned = _BARE_AMPERSAND.sub('&amp;', cleaned)
    return cleaned.strip()


def _char_or_entity(match: re.Match, base: int) -> str:
    try:
        return chr(int(match.group(1), base))
    except (ValueError, OverflowError):
        return match.group(0)


def decode_html_entities(text: str) -> str:
    """Decode the named, decimal and hex entities BGG leaves in its text values."""
    if not text:
        return ''
    decoded = text
    for entity, char in NAMED_ENTITIES:
        decoded = decoded.replace(entity, char)
    decoded = _DECIMAL_ENTITY.sub(lambda m: _char_or_entity(m, 10), decoded)
    decoded = _HEX_ENTITY.sub(lambda m: _char_or_entity(m, 16), decoded)
    return decoded


def clean_and_decode_text(text: str) -> str:
    if not text:
        return ''
    return decode_html_entities(clean_xml(text))


def node_value(node: XMLNode) -> str:
    """
    Decode a BGG scalar field.

    BGG encodes the same field either as element text or as a ``value``
    attribute. Probe in order: plain string, element text, ``value`` attribute.

    Args:
        node: A string, an element, or None

    Returns:
        Decoded text, empty string when nothing is present
    """
    if node is None:
        return ''
    if isinstance(node, str):
        raw = node
    else:
        raw = (node.text or '').strip() or node.get('value', '')
    return clean_and_decode_text(raw)


def child_value(element: Optional[ET.Element], tag: str) -> str:
    if element is None:
        return ''
    return node_value(element.find(tag))


def validate_xml(xml_text: str) -> bool:
    """Cheap plausibility check: starts like markup and has an opening and a closing tag."""
    if not xml_text or not isinstance(xml_text, str):
        return False
    trimmed = xml_text.strip()
    if not trimmed.startswith('<'):
        return False
    return bool(_OPENING_TAG.search(trimmed)) and bool(_CLOSING_TAG.search(trimmed))


def to_int(value: str) -> Optional[int]:
    """Parse an integer field; BGG uses "" and "Not Ranked" for missing values."""
    if not value:
        return None
    try:
        return int(float(value))
    except ValueError:
        return None


def to_float(value: str) -> Optional[float]:
    if not value:
        return None
    try:
        return float(value)
    except ValueError:
        return None
