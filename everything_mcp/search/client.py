"""
Everything HTTP API client.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional

import requests

from everything_mcp.core.config import EverythingConfig
from everything_mcp.search.errors import (
    EverythingAPIError,
    EverythingAuthError,
    EverythingConnectionError,
)
from everything_mcp.search.models import (
    SearchResult,
    build_full_path,
    coerce_size,
    filetime_to_iso,
)

logger = logging.getLogger("EverythingMCP.search.client")


class EverythingClient:
    """
    Synchronous client for the Everything HTTP server's JSON search API.

    Usage:
        client = EverythingClient(EverythingConfig(base_url="http://192.168.1.20", port=8080))
        results = client.search("ext:pdf invoice", max_results=20)
    """

    def __init__(
        self,
        config: Optional[EverythingConfig] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or EverythingConfig()
        self._owns_session = session is None
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")

    def close(self) -> None:
        if self._owns_session:
            self._session.close()

    def __enter__(self) -> "EverythingClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _search_params(self, query: str, max_results: int) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "search": query,
            "json": 1,
            "path_column": 1,
            "size_column": 1,
            "date_modified_column": 1,
        }
        if max_results > 0:
            params["count"] = max_results
        return params

    def search(self, query: str, max_results: int = 100, context: Any = None) -> List[SearchResult]:
        if context is not None and getattr(context, "cancelled", False):
            raise EverythingConnectionError("Search cancelled before it was sent")

        url = self.config.search_url()
        auth = (self.config.username, self.config.password) if self.config.has_auth else None
        logger.debug("Everything search url=%s query=%r count=%d auth=%s", url, query, max_results, auth is not None)

        try:
            response = self._session.request(
                method="GET",
                url=url,
                params=self._search_params(query, max_results),
                auth=auth,
                timeout=self.config.timeout,
            )
        except requests.RequestException as exc:
            raise EverythingConnectionError(f"Request to Everything server at {url} failed: {exc}") from exc

        if response.status_code == 401:
            if not self.config.has_auth:
                raise EverythingAuthError(
                    "HTTP 401: the Everything server requires authentication but no credentials "
                    "were provided. Set EVERYTHING_USERNAME and EVERYTHING_PASSWORD.",
                    status_code=401,
                    url=url,
                )
            raise EverythingAuthError(
                f"HTTP 401: authentication failed. Check the username and password "
                f"(current username: {self.config.username}).",
                status_code=401,
                url=url,
            )
        if response.status_code != 200:
            raise EverythingAPIError(
                f"HTTP {response.status_code}: {response.text}",
                status_code=response.status_code,
                url=url,
            )

        return parse_search_response(response.text)


def parse_search_response(body: str) -> List[SearchResult]:
    """
    Parse an Everything search response.

    JSON output is the normal case; plain text (one path per line) is
    accepted for servers that ignore the json flag.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        return _parse_text_results(body)

    if not isinstance(payload, dict):
        return _parse_text_results(body)

    results: List[SearchResult] = []
    for item in payload.get("results") or []:
        if not isinstance(item, dict):
            continue
        full_path = build_full_path(item.get("path"), item.get("name"))
        results.append(
            SearchResult(
                path=full_path,
                type=str(item.get("type") or ""),
                size=coerce_size(item.get("size")),
                date=filetime_to_iso(item.get("date_modified")),
                full_path=full_path,
            )
        )
    return results


def _parse_text_results(body: str) -> List[SearchResult]:
    results = []
    for line in body.strip().splitlines():
        line = line.strip()
        if line:
            results.append(SearchResult(path=line, full_path=line))
    return results
