"""
Script and diacritic based language detection for game titles.

Detection is a heuristic: a title "looks German" when it contains characters
specific to German orthography. Languages sharing a script (the Cyrillic ones,
the Nordic ones) are indistinguishable here.
"""

import re
from typing import Dict, List, Pattern

GERMAN = "äöüßÄÖÜ"
FRENCH = "àâäéèêëïîôùûüÿçÀÂÄÉÈÊËÏÎÔÙÛÜŸÇ"
SPANISH = "áéíóúñüÁÉÍÓÚÑÜ"
ITALIAN = "àèéìòùÀÈÉÌÒÙ"
PORTUGUESE = "ãõçáéíóúÃÕÇÁÉÍÓÚ"
DUTCH = "ëïËÏ"
SWEDISH = "åäöÅÄÖ"
NORWEGIAN = "åæøÅÆØ"
DANISH = "åæøÅÆØ"
POLISH = "ąćęłńóśźżĄĆĘŁŃÓŚŹŻ"
CZECH = "áčďéěíňóřšťúůýžÁČĎÉĚÍŇÓŘŠŤÚŮÝŽ"
SLOVAK = "áäčďéíĺľňóôŕšťúýžÁÄČĎÉÍĹĽŇÓÔŔŠŤÚÝŽ"
HUNGARIAN = "áéíóöőúüűÁÉÍÓÖŐÚÜŰ"
ROMANIAN = "ăâîșțĂÂÎȘȚ"
LATVIAN = "āēīūķļņģšžčĀĒĪŪĶĻŅĢŠŽČ"
LITHUANIAN = "ąęįųūčšžĄĘĮŲŪČŠŽ"
ESTONIAN = "äöüõšžÄÖÜÕŠŽ"

CYRILLIC = r"\u0400-\u04ff"
CJK = r"\u4e00-\u9fff"
KANA = r"\u3040-\u309f\u30a0-\u30ff"
HANGUL = r"\uac00-\ud7af"


def _char_class(chars: str) -> Pattern:
    return re.compile(f"[{chars}]")


LANGUAGE_PATTERNS: Dict[str, Pattern] = {
    "German": _char_class(GERMAN),
    "French": _char_class(FRENCH),
    "Spanish": _char_class(SPANISH),
    "Italian": _char_class(ITALIAN),
    "Portuguese": _char_class(PORTUGUESE),
    "Dutch": re.compile(f"[{DUTCH}]|ij|IJ"),
    "Swedish": _char_class(SWEDISH),
    "Norwegian": _char_class(NORWEGIAN),
    "Danish": _char_class(DANISH),
    "Polish": _char_class(POLISH),
    "Czech": _char_class(CZECH),
    "Slovak": _char_class(SLOVAK),
    "Hungarian": _char_class(HUNGARIAN),
    "Romanian": _char_class(ROMANIAN),
    "Latvian": _char_class(LATVIAN),
    "Lithuanian": _char_class(LITHUANIAN),
    "Estonian": _char_class(ESTONIAN),
    "Russian": _char_class(CYRILLIC),
    "Bulgarian": _char_class(CYRILLIC),
    "Ukrainian": _char_class(CYRILLIC),
    "Chinese": _char_class(CJK),
    "Japanese": _char_class(KANA + CJK),
    "Korean": _char_class(HANGUL),
}

# Italian and Polish letters outside these sets (ì ò ł ś ź) still count as English
_NON_ENGLISH = _char_class(
    "".join(sorted(set(
        FRENCH + GERMAN + SPANISH + LATVIAN + LITHUANIAN + ESTONIAN + ROMANIAN
        + CZECH + SLOVAK + HUNGARIAN + NORWEGIAN + PORTUGUESE + DUTCH
    ))) + CJK + KANA + HANGUL + CYRILLIC
)

ENGLISH_MAX_LENGTH = 30


def is_english_name(text: str) -> bool:
    """True for short titles with no language-specific characters."""
    return not _NON_ENGLISH.search(text) and len(text) < ENGLISH_MAX_LENGTH


def contains_language_characters(language: str, text: str) -> bool:
    """
    Check whether ``text`` carries characters specific to ``language``.

    Unknown languages never match.
    """
    pattern = LANGUAGE_PATTERNS.get(language)
    return bool(pattern and pattern.search(text))


def detect_languages(text: str) -> List[str]:
    """All known languages whose characters appear in ``text``, in table order."""
    return [language for language, pattern in LANGUAGE_PATTERNS.items() if pattern.search(text)]
