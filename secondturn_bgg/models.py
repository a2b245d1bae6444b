"""
Shared data models for the SecondTurn BGG package.

Models are immutable once built. Field names are snake_case; JSON output for
the web front end uses camelCase aliases (``model_dump(by_alias=True)``).
"""

from enum import Enum
from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .config import BOARDGAME, BOARDGAME_EXPANSION


class BGGModel(BaseModel):
    """Base for every domain model: frozen, camelCase JSON aliases."""
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class GameType(str, Enum):
    BOARDGAME = BOARDGAME
    EXPANSION = BOARDGAME_EXPANSION


class LanguageMatch(str, Enum):
    EXACT = "exact"
    PARTIAL = "partial"
    NONE = "none"


class SearchItem(BGGModel):
    """Raw hit from the search endpoint, before any metadata enrichment."""
    id: str
    name: str
    type: str = BOARDGAME
    year_published: Optional[int] = None
    thumbnail: str = ""
    image: str = ""


class InboundLink(BGGModel):
    """A cross-reference from another BGG item pointing at this one."""
    id: str
    type: str
    value: str = ""


class DimensionInfo(BGGModel):
    metric: str = ""
    imperial: str = ""
    has_dimensions: bool = False


class WeightInfo(BGGModel):
    metric: str = ""
    imperial: str = ""
    raw_value: Optional[float] = None


class GameVersion(BGGModel):
    """A distinct physical printing of a game."""
    id: str
    name: str
    year_published: Optional[int] = None
    publishers: Tuple[str, ...] = ()
    languages: Tuple[str, ...] = ()
    product_code: str = ""
    thumbnail: str = ""
    image: str = ""
    width: str = ""
    length: str = ""
    depth: str = ""
    weight: str = ""
    primary_language: Optional[str] = None
    is_multilingual: bool = False
    language_count: int = 0
    dimensions: Optional[DimensionInfo] = None
    weight_info: Optional[WeightInfo] = None

    @model_validator(mode="before")
    @classmethod
    def _derive_language_fields(cls, data):
        # language summary fields always follow the languages list
        if isinstance(data, dict):
            languages = data.get("languages") or []
            data = dict(data)
            for key in ("primary_language", "primaryLanguage", "is_multilingual",
                        "isMultilingual", "language_count", "languageCount"):
                data.pop(key, None)
            data["primary_language"] = languages[0] if languages else None
            data["is_multilingual"] = len(languages) > 1
            data["language_count"] = len(languages)
        return data


class GameMetadata(BGGModel):
    """Everything the parser extracts from one ``thing`` item."""
    id: str
    name: str
    type: GameType = GameType.BOARDGAME
    year_published: Optional[int] = None
    rank: Optional[int] = None
    bayes_average: Optional[float] = None
    average: Optional[float] = None
    thumbnail: str = ""
    image: str = ""
    alternate_names: Tuple[str, ...] = ()
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    playing_time: Optional[int] = None
    min_age: Optional[int] = None
    description: str = ""
    weight: Optional[float] = None
    mechanics: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    designers: Tuple[str, ...] = ()
    versions: Tuple[GameVersion, ...] = ()
    has_inbound_expansion_link: bool = False
    inbound_expansion_links: Tuple[InboundLink, ...] = ()

    @property
    def is_expansion(self) -> bool:
        return self.type == GameType.EXPANSION or self.has_inbound_expansion_link

    def to_game_details(self) -> "GameDetails":
        return GameDetails(
            id=self.id,
            name=self.name,
            year_published=self.year_published,
            min_players=self.min_players,
            max_players=self.max_players,
            playing_time=self.playing_time,
            min_age=self.min_age,
            description=self.description,
            thumbnail=self.thumbnail,
            image=self.image,
            rating=self.average,
            bayes_average=self.bayes_average,
            weight=self.weight,
            rank=self.rank,
            mechanics=self.mechanics,
            categories=self.categories,
            designers=self.designers,
            alternate_names=self.alternate_names,
            versions=self.versions,
            type=self.type,
            is_expansion=self.is_expansion,
            has_inbound_expansion_link=self.has_inbound_expansion_link,
        )


class GameDetails(BGGModel):
    id: str
    name: str
    year_published: Optional[int] = None
    min_players: Optional[int] = None
    max_players: Optional[int] = None
    playing_time: Optional[int] = None
    min_age: Optional[int] = None
    description: str = ""
    thumbnail: str = ""
    image: str = ""
    rating: Optional[float] = None
    bayes_average: Optional[float] = None
    weight: Optional[float] = None
    rank: Optional[int] = None
    mechanics: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    designers: Tuple[str, ...] = ()
    alternate_names: Tuple[str, ...] = ()
    versions: Tuple[GameVersion, ...] = ()
    type: GameType = GameType.BOARDGAME
    is_expansion: bool = False
    has_inbound_expansion_link: bool = False


class SearchResult(BGGModel):
    """A ranked search hit as returned to the marketplace UI."""
    id: str
    name: str
    year_published: Optional[int] = None
    rank: Optional[int] = None
    bayes_average: Optional[float] = None
    average: Optional[float] = None
    type: GameType = GameType.BOARDGAME
    thumbnail: Optional[str] = None
    image: Optional[str] = None
    bgg_link: str = ""
    is_expansion: bool = False
    has_inbound_expansion_link: bool = False
    search_score: float = 0.0


class LanguageMatchedVersion(BGGModel):
    """A version paired with the best guess at its localized title."""
    version: GameVersion
    suggested_alternate_name: Optional[str] = None
    language_match: LanguageMatch = LanguageMatch.NONE
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    reasoning: str = "No language match found"


class SearchFilters(BGGModel):
    game_type: Optional[Literal["base-game", "expansion"]] = None

    @property
    def bgg_type(self) -> str:
        """BGG ``type`` parameter matching this filter."""
        return BOARDGAME_EXPANSION if self.game_type == "expansion" else BOARDGAME


class CacheStats(BGGModel):
    size: int
    hit_rate: float
    total_queries: int
    cache_hits: int
