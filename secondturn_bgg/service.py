"""
Public facade over the BGG client, parser, caches and language matcher.

Search results are ranked for a marketplace listing flow: an exact title match
always wins, then base games over expansions, then BGG rank, rating and year.
"""

import logging
import time
from typing import Callable, Dict, List, Optional

from .cache import CacheManager
from .client import BGGAPIClient
from .config import (
    BGG_BASE_URL,
    EXACT_MATCH_THRESHOLD,
    LIGHT_SEARCH_LIMIT,
    MAX_BATCH_DETAILS,
    METADATA_BATCH_SIZE,
    MIN_QUERY_LENGTH,
    RATE_LIMIT_RETRY_AFTER,
)
from .error_handling import BGGError, BGGErrorCode, SearchError, handle_errors
from .matching import match_versions
from .models import (
    CacheStats,
    GameDetails,
    GameMetadata,
    GameType,
    LanguageMatchedVersion,
    SearchFilters,
    SearchItem,
    SearchResult,
)
from .parsing import extract_metadata, extract_search_items

logger = logging.getLogger(__name__)


def bgg_link(game_id: str) -> str:
    return f"{BGG_BASE_URL}/boardgame/{game_id}"


def calculate_result_score(result: SearchResult, query: str) -> float:
    """
    Relevance score for one search hit. Bonuses are additive, so an exact
    title match outranks anything rank or rating can contribute.

    Args:
        result: Combined search hit
        query: Trimmed user query

    Returns:
        Score, higher is better
    """
    name = result.name.lower()
    needle = query.lower()
    score = 0.0

    if name == needle:
        score += 1_000_000
    if name.startswith(needle):
        score += 500_000
    if needle in name:
        score += 100_000

    if not result.is_expansion:
        score += 10_000

    if result.rank:
        score += max(0, 1000 - result.rank)
    if result.bayes_average:
        score += result.bayes_average * 100
    if result.year_published:
        score += max(0, result.year_published - 1900) * 0.1

    return score


def rank_search_results(results: List[SearchResult], query: str) -> List[SearchResult]:
    scored = [
        result.model_copy(update={"search_score": calculate_result_score(result, query)})
        for result in results
    ]
    return sorted(scored, key=lambda r: r.search_score, reverse=True)


def combine_search_with_metadata(items: List[SearchItem], metadata: List[GameMetadata]) -> List[SearchResult]:
    """
    Merge search hits with fetched metadata by id.

    A hit is an expansion if BGG says so in either payload or if the metadata
    found an inbound expansion link.
    """
    by_id = {meta.id: meta for meta in metadata}
    results = []
    for item in items:
        meta = by_id.get(item.id)
        is_expansion = item.type == GameType.EXPANSION.value or bool(meta and meta.is_expansion)
        results.append(SearchResult(
            id=item.id,
            name=item.name,
            year_published=item.year_published,
            rank=meta.rank if meta else None,
            bayes_average=meta.bayes_average if meta else None,
            average=meta.average if meta else None,
            type=GameType.EXPANSION if is_expansion else GameType.BOARDGAME,
            thumbnail=meta.thumbnail if meta else None,
            image=meta.image if meta else None,
            bgg_link=bgg_link(item.id),
            is_expansion=is_expansion,
            has_inbound_expansion_link=bool(meta and meta.has_inbound_expansion_link),
        ))
    return results


def apply_type_filtering(results: List[SearchResult], filters: Optional[SearchFilters]) -> List[SearchResult]:
    if filters is None or filters.game_type is None:
        return results
    if filters.game_type == "base-game":
        filtered = [result for result in results if not result.is_expansion]
    else:
        filtered = [result for result in results if result.is_expansion]
    logger.debug(f"Type filtering ({filters.game_type}): {len(results)} -> {len(filtered)}")
    return filtered


def create_search_error(error: Exception) -> SearchError:
    """Classify any search failure for the caller."""
    code = error.code if isinstance(error, BGGError) else BGGErrorCode.NETWORK_ERROR
    retry_after = RATE_LIMIT_RETRY_AFTER if code == BGGErrorCode.RATE_LIMIT_EXCEEDED else None
    return SearchError(code, retry_after=retry_after)


class BGGService:
    """
    Search, details and version matching for BoardGameGeek games.

    Each instance owns its API client and caches; create one per process.
    """

    def __init__(self, api_client: Optional[BGGAPIClient] = None,
                 cache_manager: Optional[CacheManager] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the service.

        Args:
            api_client: BGG client (a default one is created if omitted)
            cache_manager: Cache manager (a default one is created if omitted)
            clock: Monotonic clock used to time searches for the adaptive TTL
        """
        self.api_client = api_client or BGGAPIClient()
        self.cache_manager = cache_manager or CacheManager(auto_cleanup=True)
        self._clock = clock

    def search_games(self, query: str, filters: Optional[SearchFilters] = None) -> List[SearchResult]:
        """
        Search BGG and rank the results.

        Args:
            query: Free-text title query
            filters: Optional base-game / expansion filter

        Returns:
            Ranked results; empty for queries under two characters

        Raises:
            SearchError: the search failed and nothing is cached for the query
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        clean_query = query.strip()
        started = self._clock()

        cached = self.cache_manager.get_cached_search(clean_query, filters)
        if cached is not None:
            logger.info(f"Cache hit for query '{clean_query}'")
            return cached

        try:
            items = self._perform_search(clean_query, filters)
            metadata = self._fetch_metadata_for_results(items)
            combined = combine_search_with_metadata(items, metadata)
            ranked = rank_search_results(apply_type_filtering(combined, filters), clean_query)
        except Exception as e:
            elapsed = self._clock() - started
            logger.error(f"Search failed for '{clean_query}' after {elapsed:.2f}s: {e}")
            stale = self.cache_manager.get_stale_search(clean_query, filters)
            if stale:
                logger.warning(f"Returning expired cached results for '{clean_query}'")
                return stale
            raise create_search_error(e) from e

        elapsed = self._clock() - started
        self.cache_manager.set_cached_search(clean_query, ranked, elapsed, filters)
        logger.info(f"Search for '{clean_query}' completed in {elapsed:.2f}s with {len(ranked)} results")
        return ranked

    search = search_games

    def _perform_search(self, query: str, filters: Optional[SearchFilters]) -> List[SearchItem]:
        """Exact search first for longer queries, fuzzy otherwise or when exact finds nothing."""
        game_type = filters.bgg_type if filters else GameType.BOARDGAME.value

        if len(query) >= EXACT_MATCH_THRESHOLD:
            items = self._search_api(query, game_type, exact=True)
            if items:
                logger.debug(f"Exact search found {len(items)} results for '{query}'")
                return items
            logger.debug(f"Falling back to fuzzy search for '{query}'")

        return self._search_api(query, game_type, exact=False)

    def _search_api(self, query: str, game_type: str, exact: bool) -> List[SearchItem]:
        xml_text = self.api_client.search_games(query, game_type, exact)
        return [item for item in extract_search_items(xml_text) if item.type == game_type]

    def _fetch_metadata_for_results(self, items: List[SearchItem]) -> List[GameMetadata]:
        """
        Metadata for the top hits, from cache where possible.

        Failures here only cost type correction, so they are logged and the
        search continues without metadata.
        """
        if not items:
            return []

        game_ids = [item.id for item in items[:METADATA_BATCH_SIZE]]
        cached, missing = self.cache_manager.get_cached_metadata(game_ids)
        if not missing:
            return cached

        try:
            fetched = extract_metadata(self.api_client.get_batch_metadata(missing))
        except BGGError as e:
            logger.warning(f"Metadata fetch failed, continuing with search results only: {e}")
            return cached

        if fetched:
            self.cache_manager.cache_metadata_batch(fetched)
        logger.debug(f"Metadata: {len(cached)} cached, {len(fetched)} fetched")
        return cached + fetched

    def search_light(self, query: str, game_type: Optional[str] = None, exact: bool = False) -> List[SearchResult]:
        """
        Single search call with no metadata enrichment.

        Args:
            query: Free-text title query
            game_type: BGG type (boardgame or boardgameexpansion)
            exact: Ask BGG for exact title matches only

        Returns:
            Up to LIGHT_SEARCH_LIMIT results in BGG's order

        Raises:
            SearchError: the search failed and nothing is cached for the query
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        clean_query = query.strip()
        cache_filters = {"light": True, "type": game_type, "exact": exact}

        cached = self.cache_manager.get_cached_search(clean_query, cache_filters)
        if cached is not None:
            return cached

        try:
            xml_text = self.api_client.search_games(clean_query, game_type or GameType.BOARDGAME.value, exact)
            items = extract_search_items(xml_text)[:LIGHT_SEARCH_LIMIT]
        except Exception as e:
            logger.error(f"Light search failed for '{clean_query}': {e}")
            stale = self.cache_manager.get_stale_search(clean_query, cache_filters)
            if stale:
                logger.warning(f"Returning expired cached results for '{clean_query}'")
                return stale
            raise create_search_error(e) from e

        if game_type:
            items = [item for item in items if item.type == game_type]

        results = combine_search_with_metadata(items, [])
        self.cache_manager.set_cached_search(clean_query, results, 0, cache_filters)
        return results

    @handle_errors(default_return=None)
    def get_game_details(self, game_id: str) -> Optional[GameDetails]:
        """
        Full details for one game; cached for 24 hours.

        Returns None when the game is unknown. Fetch failures are logged and
        also return None.
        """
        if not game_id:
            return None

        cached = self.cache_manager.get_cached_game_data(game_id)
        if cached is not None:
            logger.debug(f"Cache hit for game details: {game_id}")
            return cached.to_game_details()

        logger.info(f"Fetching game details for {game_id}")
        metadata = extract_metadata(self.api_client.get_game_details(game_id))
        if not metadata:
            logger.warning(f"No game data parsed for {game_id}")
            return None

        game = metadata[0]
        self.cache_manager.cache_game_data(game)
        return game.to_game_details()

    def get_batch_game_details(self, game_ids: List[str]) -> Dict[str, Optional[GameDetails]]:
        """
        Details for up to MAX_BATCH_DETAILS games with one batched fetch for cache misses.

        Args:
            game_ids: BGG ids; extra ids beyond the limit are ignored

        Returns:
            Mapping id -> details (None when missing or the fetch failed), in request order
        """
        limited = list(dict.fromkeys(game_ids))[:MAX_BATCH_DETAILS]
        found: Dict[str, GameMetadata] = {}
        missing = []

        for game_id in limited:
            cached = self.cache_manager.get_cached_game_data(game_id)
            if cached is not None:
                found[game_id] = cached
            else:
                missing.append(game_id)

        if missing:
            try:
                fetched = extract_metadata(self.api_client.get_batch_metadata(missing))
            except BGGError as e:
                logger.error(f"Batch details fetch failed for {len(missing)} games: {e}")
                fetched = []
            self.cache_manager.cache_metadata_batch(fetched)
            found.update({meta.id: meta for meta in fetched if meta.id in missing})

        logger.info(f"Batch details: {len(limited) - len(missing)} cached, {len(missing)} fetched")
        return {
            game_id: found[game_id].to_game_details() if game_id in found else None
            for game_id in limited
        }

    def get_language_matched_versions(self, game_id: str) -> List[LanguageMatchedVersion]:
        """
        Suggested localized titles for each version of an already fetched game.

        Only cached details are used; call get_game_details first.
        """
        game = self.cache_manager.get_cached_game_data(game_id)
        if game is None:
            logger.info(f"No cached details for {game_id}; language matching skipped")
            return []
        if not game.versions:
            return []

        return match_versions(game.versions, game.alternate_names, game.name)

    def get_cache_stats(self) -> CacheStats:
        return self.cache_manager.get_cache_stats()

    def clear_cache(self) -> None:
        self.cache_manager.clear_all_caches()

    def clear_cache_for_query(self, query: str, filters: Optional[SearchFilters] = None) -> None:
        self.cache_manager.clear_search_cache_for_query(query.strip(), filters)

    def update_config(self, **changes) -> None:
        self.api_client.update_config(**changes)

    def get_config(self) -> dict:
        return self.api_client.get_config()

    def close(self) -> None:
        self.cache_manager.stop_cleanup()
        self.api_client.close()
