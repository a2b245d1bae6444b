"""
Suggest a localized title for each version of a game.

False positives (a wrong-language title) are worse than no suggestion, so any
candidate under MATCH_CONFIDENCE_THRESHOLD is replaced by the primary name.
Everything here is pure: no I/O, inputs are never mutated.
"""

from typing import List, NamedTuple, Optional, Sequence

from ..config import MATCH_CONFIDENCE_THRESHOLD
from ..models import GameVersion, LanguageMatch, LanguageMatchedVersion
from .languages import contains_language_characters, is_english_name

EXACT_CONFIDENCE = 0.9
ENGLISH_CONFIDENCE = 0.8
PARTIAL_BASE_CONFIDENCE = 0.3
PARTIAL_LANGUAGE_BONUS = 0.2
PRIMARY_NAME_CONFIDENCE = 0.1
ALTERNATE_FALLBACK_CONFIDENCE = 0.05


class NameCandidate(NamedTuple):
    name: str
    confidence: float


def _sorted(candidates: List[NameCandidate]) -> List[NameCandidate]:
    return sorted(candidates, key=lambda c: c.confidence, reverse=True)


def find_exact_language_matches(version: GameVersion, alternate_names: Sequence[str]) -> List[NameCandidate]:
    """Alternate names written in the version's primary language, best first."""
    language = version.primary_language
    matches = []
    for name in alternate_names:
        if language == "English":
            if is_english_name(name):
                matches.append(NameCandidate(name, ENGLISH_CONFIDENCE))
        elif language and contains_language_characters(language, name):
            matches.append(NameCandidate(name, EXACT_CONFIDENCE))
    return _sorted(matches)


def find_partial_language_matches(version: GameVersion, alternate_names: Sequence[str]) -> List[NameCandidate]:
    """
    Weak candidates for multilingual versions.

    Every alternate name scores the base confidence, plus a bonus when it
    mentions one of the version's languages by name.
    """
    if not version.is_multilingual:
        return []

    languages = [language.lower() for language in version.languages]
    matches = []
    for name in alternate_names:
        confidence = PARTIAL_BASE_CONFIDENCE
        if any(language in name.lower() for language in languages):
            confidence += PARTIAL_LANGUAGE_BONUS
        matches.append(NameCandidate(name, confidence))
    return _sorted(matches)


def _primary(version: GameVersion, name: str, reasoning: str) -> LanguageMatchedVersion:
    return LanguageMatchedVersion(
        version=version,
        suggested_alternate_name=name,
        language_match=LanguageMatch.NONE,
        confidence=PRIMARY_NAME_CONFIDENCE,
        reasoning=reasoning,
    )


def match_language_to_alternate_name(version: GameVersion, alternate_names: Sequence[str],
                                     primary_game_name: Optional[str] = None,
                                     total_versions: int = 1) -> LanguageMatchedVersion:
    """
    Pick the title to suggest for one version.

    Args:
        version: The version being listed
        alternate_names: The game's alternate (translated) names
        primary_game_name: The game's primary name, normally English
        total_versions: How many versions the game has

    Returns:
        LanguageMatchedVersion; ``exact`` and ``partial`` suggestions always
        carry a confidence of at least MATCH_CONFIDENCE_THRESHOLD
    """
    if total_versions == 1 and primary_game_name:
        return _primary(version, primary_game_name, "Single version - using primary game name")

    if not version.primary_language or not alternate_names:
        if primary_game_name:
            return _primary(version, primary_game_name, "Fallback to primary game name (no language info)")
        return LanguageMatchedVersion(version=version)

    if version.primary_language == "English" and primary_game_name:
        return _primary(version, primary_game_name, "English version - using primary game name")

    exact = find_exact_language_matches(version, alternate_names)
    if exact:
        best = exact[0]
        if best.confidence >= MATCH_CONFIDENCE_THRESHOLD:
            return LanguageMatchedVersion(
                version=version,
                suggested_alternate_name=best.name,
                language_match=LanguageMatch.EXACT,
                confidence=best.confidence,
                reasoning=f"Exact {version.primary_language} language match found",
            )
        if primary_game_name:
            return _primary(
                version, primary_game_name,
                f"Low confidence match ({best.confidence * 100:.0f}%) - using primary game name",
            )

    partial = find_partial_language_matches(version, alternate_names)
    if partial:
        best = partial[0]
        if best.confidence >= MATCH_CONFIDENCE_THRESHOLD:
            return LanguageMatchedVersion(
                version=version,
                suggested_alternate_name=best.name,
                language_match=LanguageMatch.PARTIAL,
                confidence=best.confidence,
                reasoning=f"Partial language match in {version.primary_language} version",
            )
        if primary_game_name:
            return _primary(
                version, primary_game_name,
                f"Low confidence partial match ({best.confidence * 100:.0f}%) - using primary game name",
            )

    if primary_game_name:
        return _primary(version, primary_game_name, "Fallback to primary game name (no language match)")

    return LanguageMatchedVersion(
        version=version,
        suggested_alternate_name=alternate_names[0],
        language_match=LanguageMatch.NONE,
        confidence=ALTERNATE_FALLBACK_CONFIDENCE,
        reasoning="Fallback to first alternate name (no primary name available)",
    )


def match_versions(versions: Sequence[GameVersion], alternate_names: Sequence[str],
                   primary_game_name: Optional[str] = None) -> List[LanguageMatchedVersion]:
    """Run the matcher over every version, most confident first (stable)."""
    matched = [
        match_language_to_alternate_name(version, alternate_names, primary_game_name, len(versions))
        for version in versions
    ]
    return sorted(matched, key=lambda m: m.confidence, reverse=True)
