"""
Error taxonomy and common error handling utilities for the BGG integration layer.
"""

import logging
from enum import Enum
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type

from .config import BGG_ERROR_MESSAGES

logger = logging.getLogger(__name__)


class BGGErrorCode(str, Enum):
    """Closed set of failure kinds surfaced to callers."""
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    INVALID_GAME_ID = "INVALID_GAME_ID"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    API_UNAVAILABLE = "API_UNAVAILABLE"
    NETWORK_ERROR = "NETWORK_ERROR"
    SEARCH_TIMEOUT = "SEARCH_TIMEOUT"
    INVALID_RESPONSE = "INVALID_RESPONSE"
    PARSE_ERROR = "PARSE_ERROR"


class BGGError(Exception):
    """Base class for every classified BGG failure."""

    code = BGGErrorCode.NETWORK_ERROR

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None,
                 url: Optional[str] = None):
        self.message = message or BGG_ERROR_MESSAGES[self.code.value]
        self.status = status
        self.url = url
        super().__init__(self.message)


class RateLimitExceeded(BGGError):
    code = BGGErrorCode.RATE_LIMIT_EXCEEDED


class InvalidGameId(BGGError):
    code = BGGErrorCode.INVALID_GAME_ID


class GameNotFound(BGGError):
    code = BGGErrorCode.GAME_NOT_FOUND


class ApiUnavailable(BGGError):
    code = BGGErrorCode.API_UNAVAILABLE


class NetworkError(BGGError):
    code = BGGErrorCode.NETWORK_ERROR


class SearchTimeout(BGGError):
    code = BGGErrorCode.SEARCH_TIMEOUT


class InvalidResponse(BGGError):
    code = BGGErrorCode.INVALID_RESPONSE


class ParseError(BGGError):
    code = BGGErrorCode.PARSE_ERROR


class SearchError(BGGError):
    """
    Classified error raised by the service when a search fails and no cached
    fallback exists.
    """

    def __init__(self, code: BGGErrorCode, message: Optional[str] = None,
                 retry_after: Optional[float] = None):
        self.code = code
        self.retry_after = retry_after
        super().__init__(message)


_STATUS_ERRORS = {
    429: RateLimitExceeded,
    400: InvalidGameId,
    404: GameNotFound,
    503: ApiUnavailable,
}


def error_for_status(status: int, url: Optional[str] = None) -> BGGError:
    """
    Map an HTTP status code to the error taxonomy.

    Args:
        status: HTTP status code of a failed response
        url: Requested URL, kept on the error for diagnostics

    Returns:
        Classified error instance (not raised)
    """
    error_cls = _STATUS_ERRORS.get(status, ApiUnavailable)
    return error_cls(status=status, url=url)


def handle_errors(default_return: Any = None, log_error: bool = True,
                  exceptions: Tuple[Type[BaseException], ...] = (Exception,)):
    """
    Decorator to handle expected exceptions and provide consistent error logging.

    Args:
        default_return: Value to return on error
        log_error: Whether to log the error
        exceptions: Exception types to catch; anything else propagates
    """
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except exceptions as e:
                if log_error:
                    code = getattr(e, "code", None)
                    kind = f" [{code.value}]" if isinstance(code, BGGErrorCode) else ""
                    logger.error(f"Error in {func.__name__}{kind}: {e}")
                return default_return
        return wrapper
    return decorator
