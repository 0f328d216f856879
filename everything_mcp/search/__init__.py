from everything_mcp.search.client import EverythingClient, parse_search_response
from everything_mcp.search.errors import (
    EverythingAPIError,
    EverythingAuthError,
    EverythingConnectionError,
    EverythingError,
)
from everything_mcp.search.models import SearchResult, Searcher

__all__ = [
    "EverythingClient",
    "parse_search_response",
    "SearchResult",
    "Searcher",
    "EverythingError",
    "EverythingConnectionError",
    "EverythingAPIError",
    "EverythingAuthError",
]
