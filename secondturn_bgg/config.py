"""
Configuration settings for the BGG integration layer.

All durations are in seconds.
"""

import os
from dataclasses import dataclass
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent.parent
LOGS_DIR = Path(os.environ.get("SECONDTURN_BGG_LOGS_DIR", PROJECT_ROOT / "logs"))

# BGG XML API
BGG_BASE_URL = os.environ.get("BGG_BASE_URL", "https://boardgamegeek.com")
BGG_USER_AGENT = "SecondTurnGames/2.0 (info@secondturn.games)"
BGG_ACCEPT = "application/xml; charset=utf-8"

SEARCH_ENDPOINT = "/xmlapi2/search"
THING_ENDPOINT = "/xmlapi2/thing"

BOARDGAME = "boardgame"
BOARDGAME_EXPANSION = "boardgameexpansion"
BOARDGAME_INTEGRATION = "boardgameintegration"
BOARDGAME_VERSION = "boardgameversion"

# Rate limiting (conservative, BGG throttles aggressively)
RATE_LIMIT_DELAY = float(os.environ.get("BGG_RATE_LIMIT_DELAY", "1.0"))
MAX_REQUESTS_PER_HOUR = int(os.environ.get("BGG_MAX_REQUESTS_PER_HOUR", "800"))
REQUEST_TIMEOUT = float(os.environ.get("BGG_REQUEST_TIMEOUT", "15"))
MAX_BATCH_SIZE = 15  # larger id lists tend to time out upstream

# Cache
SEARCH_TTL = 30 * 60
GAME_DETAILS_TTL = 24 * 60 * 60
METADATA_TTL = 7 * 24 * 60 * 60
MAX_CACHE_SIZE = int(os.environ.get("BGG_MAX_CACHE_SIZE", "1000"))
CLEANUP_INTERVAL = 60 * 60

# Search
MIN_QUERY_LENGTH = 2
EXACT_MATCH_THRESHOLD = 4  # exact search first for queries this long
METADATA_BATCH_SIZE = 15  # top hits enriched with metadata
LIGHT_SEARCH_LIMIT = 20
MAX_BATCH_DETAILS = 20
RATE_LIMIT_RETRY_AFTER = 5

# Language matching
MATCH_CONFIDENCE_THRESHOLD = 0.85

# User-facing error messages
BGG_ERROR_MESSAGES = {
    "RATE_LIMIT_EXCEEDED": "BGG API is busy. Please wait a moment and try again.",
    "INVALID_GAME_ID": "Invalid game ID provided.",
    "GAME_NOT_FOUND": "Game not found in BGG database.",
    "API_UNAVAILABLE": "BGG API is currently unavailable. Please try again later.",
    "NETWORK_ERROR": "Network connection issue. Please check your internet connection.",
    "INVALID_RESPONSE": "Received invalid data from BGG API.",
    "PARSE_ERROR": "Error processing BGG data. Please try again.",
    "SEARCH_TIMEOUT": "Search is taking longer than expected. Please try a more specific search term.",
}


@dataclass
class BGGAPIConfig:
    """Settings for a single BGG API client."""
    base_url: str = BGG_BASE_URL
    user_agent: str = BGG_USER_AGENT
    rate_limit_delay: float = RATE_LIMIT_DELAY
    max_batch_size: int = MAX_BATCH_SIZE
    timeout: float = REQUEST_TIMEOUT
    max_requests_per_hour: int = MAX_REQUESTS_PER_HOUR
