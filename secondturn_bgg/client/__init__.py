"""
Client module for the BGG XML API.

This module handles:
- Rate-limited, timed-out GET requests
- HTTP status to error taxonomy mapping
- Concurrent batched metadata requests
"""

from .api_client import BGGAPIClient, RateLimiter, combine_xml_responses

__all__ = [
    "BGGAPIClient",
    "RateLimiter",
    "combine_xml_responses",
]
