"""
SecondTurn BGG Package - BoardGameGeek integration for a second-hand game marketplace.

This package provides:
1. Rate-limited, cached search and game details from the BGG XML API
2. Base game vs expansion classification from inbound links
3. Localized title suggestions for each physical version of a game
"""

__version__ = "0.1.0"
__author__ = "SecondTurn Games"

# Main package imports for convenience
from .service import BGGService
from .client import BGGAPIClient
from .cache import CacheManager
from .error_handling import BGGError, BGGErrorCode, SearchError
from .models import GameDetails, LanguageMatchedVersion, SearchFilters, SearchResult
from .logging_config import setup_logging

__all__ = [
    "BGGService",
    "BGGAPIClient",
    "CacheManager",
    "BGGError",
    "BGGErrorCode",
    "SearchError",
    "GameDetails",
    "LanguageMatchedVersion",
    "SearchFilters",
    "SearchResult",
    "setup_logging",
]
