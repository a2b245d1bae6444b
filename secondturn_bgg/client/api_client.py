"""
HTTP client for the BGG XML API2.

Single point of contact with boardgamegeek.com: paces requests, enforces an
hourly budget and turns transport/HTTP failures into the error taxonomy.
Retries are left to the caller.
"""

import logging
import re
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import asdict, replace
from typing import Callable, Dict, List, Optional

import requests

from ..config import (
    BGG_ACCEPT,
    BOARDGAME,
    SEARCH_ENDPOINT,
    THING_ENDPOINT,
    BGGAPIConfig,
)
from ..error_handling import (
    InvalidResponse,
    NetworkError,
    RateLimitExceeded,
    SearchTimeout,
    error_for_status,
)
from ..parsing.text import validate_xml

logger = logging.getLogger(__name__)

EMPTY_ITEMS_XML = '<?xml version="1.0" encoding="UTF-8"?><items></items>'
_ITEMS_BODY = re.compile(r'<items\b[^>]*>(.*)</items>', re.DOTALL)
HOUR = 60 * 60


class RateLimiter:
    """
    Minimum delay between calls plus an hourly request budget.

    The delay gate is checked once per call, so calls issued at the same
    moment from several threads may pass together. The hourly counter is
    exact.
    """

    def __init__(self, min_delay: float, max_per_hour: int,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        self.min_delay = min_delay
        self.max_per_hour = max_per_hour
        self._clock = clock
        self._sleep = sleep
        self._lock = threading.Lock()
        self._last_call: Optional[float] = None
        self._request_count = 0
        self._window_start = clock()

    def wait(self) -> None:
        """
        Block until the next call may go out.

        Raises:
            RateLimitExceeded: the hourly budget is spent
        """
        with self._lock:
            now = self._clock()
            if now - self._window_start > HOUR:
                self._request_count = 0
                self._window_start = now

            if self._request_count >= self.max_per_hour:
                raise RateLimitExceeded()

            delay = 0.0
            if self._last_call is not None:
                delay = self.min_delay - (now - self._last_call)

        if delay > 0:
            logger.debug(f"Rate limiting: sleeping {delay:.2f}s")
            self._sleep(delay)

        with self._lock:
            self._last_call = self._clock()

    def record_request(self) -> None:
        with self._lock:
            self._request_count += 1

    @property
    def request_count(self) -> int:
        with self._lock:
            return self._request_count

    def reset(self) -> None:
        with self._lock:
            self._request_count = 0
            self._window_start = self._clock()


class BGGAPIClient:
    """
    Rate-limited GET client for the BGG XML API.
    """

    def __init__(self, config: Optional[BGGAPIConfig] = None,
                 session: Optional[requests.Session] = None,
                 clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep):
        """
        Initialize the API client.

        Args:
            config: Client settings (defaults from config module)
            session: requests session to use; a new one is created if omitted
            clock: Monotonic clock used for pacing
            sleep: Sleep function used for pacing
        """
        self.config = config or BGGAPIConfig()
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': self.config.user_agent,
            'Accept': BGG_ACCEPT,
        })
        self.rate_limiter = RateLimiter(
            self.config.rate_limit_delay,
            self.config.max_requests_per_hour,
            clock=clock,
            sleep=sleep,
        )

    def get(self, endpoint: str, params: Optional[Dict[str, str]] = None) -> str:
        """
        Make a GET request to the BGG API.

        Args:
            endpoint: API path, e.g. /xmlapi2/thing
            params: Query parameters; empty values are dropped

        Returns:
            Response body decoded as UTF-8

        Raises:
            BGGError: classified failure (see error_handling)
        """
        self.rate_limiter.wait()

        url = f"{self.config.base_url.rstrip('/')}{endpoint}"
        query = {key: value for key, value in (params or {}).items() if value not in (None, '')}
        logger.info(f"BGG request: {endpoint} {query}")

        try:
            response = self.session.get(url, params=query, timeout=self.config.timeout)
        except requests.exceptions.Timeout as e:
            logger.warning(f"BGG request timed out after {self.config.timeout}s: {url}")
            raise SearchTimeout(url=url) from e
        except requests.exceptions.RequestException as e:
            logger.error(f"BGG request failed: {e}")
            raise NetworkError(url=url) from e

        if not response.ok:
            logger.error(f"BGG API error {response.status_code} for {url}")
            raise error_for_status(response.status_code, url)

        # decode explicitly; requests may guess a Latin-1 charset for XML
        xml_text = response.content.decode('utf-8', errors='replace')

        if not validate_xml(xml_text):
            logger.error(f"Invalid XML response from {url} ({len(xml_text)} chars)")
            raise InvalidResponse(status=response.status_code, url=url)

        self.rate_limiter.record_request()
        return xml_text

    def search_games(self, query: str, game_type: str = BOARDGAME, exact: bool = False) -> str:
        params = {
            'query': query.strip(),
            'type': game_type or BOARDGAME,
        }
        if exact:
            params['exact'] = '1'
        return self.get(SEARCH_ENDPOINT, params)

    def get_game_details(self, game_id: str) -> str:
        """Fetch one game with ratings and versions embedded in a single round trip."""
        return self.get(THING_ENDPOINT, {'id': str(game_id), 'stats': '1', 'versions': '1'})

    def get_batch_metadata(self, game_ids: List[str]) -> str:
        """
        Fetch metadata for many games.

        Ids are split into batches of ``max_batch_size``; batches are requested
        concurrently and their items spliced into one ``<items>`` document.

        Args:
            game_ids: BGG ids

        Returns:
            Combined XML document
        """
        if not game_ids:
            return EMPTY_ITEMS_XML

        size = self.config.max_batch_size
        batches = [game_ids[i:i + size] for i in range(0, len(game_ids), size)]
        logger.info(f"Fetching metadata for {len(game_ids)} games in {len(batches)} batch(es)")

        def fetch(batch: List[str]) -> str:
            return self.get(THING_ENDPOINT, {'id': ','.join(batch), 'stats': '1', 'versions': '1'})

        with ThreadPoolExecutor(max_workers=len(batches)) as executor:
            responses = list(executor.map(fetch, batches))

        return combine_xml_responses(responses)

    def update_config(self, **changes) -> None:
        self.config = replace(self.config, **changes)
        self.session.headers['User-Agent'] = self.config.user_agent
        self.rate_limiter.min_delay = self.config.rate_limit_delay
        self.rate_limiter.max_per_hour = self.config.max_requests_per_hour

    def get_config(self) -> dict:
        return asdict(self.config)

    def get_request_count(self) -> int:
        return self.rate_limiter.request_count

    def reset_request_count(self) -> None:
        self.rate_limiter.reset()

    def close(self) -> None:
        self.session.close()


def combine_xml_responses(responses: List[str]) -> str:
    """
    Splice the ``<items>`` bodies of several responses into one document.

    Works on text, so nested version ``<item>`` elements survive untouched.
    """
    if len(responses) == 1:
        return responses[0]

    bodies = []
    for response in responses:
        match = _ITEMS_BODY.search(response)
        if match and match.group(1).strip():
            bodies.append(match.group(1).strip())

    if not bodies:
        return EMPTY_ITEMS_XML

    joined = '\n'.join(bodies)
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<items termsofuse="https://boardgamegeek.com/xmlapi/termsofuse">\n'
        f'{joined}\n'
        '</items>'
    )
