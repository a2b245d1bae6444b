"""
Language matching module.

This module handles:
- Detecting languages from the characters in a title
- Pairing game versions with their localized alternate names
"""

from .engine import (
    NameCandidate,
    find_exact_language_matches,
    find_partial_language_matches,
    match_language_to_alternate_name,
    match_versions,
)
from .languages import LANGUAGE_PATTERNS, contains_language_characters, detect_languages, is_english_name

__all__ = [
    "NameCandidate",
    "match_language_to_alternate_name",
    "match_versions",
    "find_exact_language_matches",
    "find_partial_language_matches",
    "LANGUAGE_PATTERNS",
    "contains_language_characters",
    "detect_languages",
    "is_english_name",
]
