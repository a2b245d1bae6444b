"""
Parsing module for BGG XML payloads.

This package handles:
- XML cleanup and entity decoding
- Search and thing response mapping to domain models
- Imperial to metric conversion of version dimensions
"""

from .dimensions import format_dimensions, inches_to_cm, lbs_to_kg
from .text import clean_and_decode_text, clean_xml, decode_html_entities, validate_xml
from .xml_parser import extract_metadata, extract_search_items, parse_xml

__all__ = [
    "parse_xml",
    "extract_search_items",
    "extract_metadata",
    "validate_xml",
    "clean_xml",
    "clean_and_decode_text",
    "decode_html_entities",
    "format_dimensions",
    "inches_to_cm",
    "lbs_to_kg",
]
