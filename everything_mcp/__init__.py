"""
Everything MCP: file search for AI agents over the Model Context Protocol
"""

from everything_mcp.search import (
    EverythingAPIError,
    EverythingAuthError,
    EverythingClient,
    EverythingConnectionError,
    EverythingError,
    SearchResult,
)
from everything_mcp.version import __version__

__all__ = [
    "__version__",
    "EverythingClient",
    "SearchResult",
    "EverythingError",
    "EverythingConnectionError",
    "EverythingAPIError",
    "EverythingAuthError",
]
