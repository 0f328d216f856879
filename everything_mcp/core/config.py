"""
Everything MCP Configuration
----------------------------
Centralized configuration for the stdio server and the Everything HTTP
client. Loads from environment variables; defaults suit a local
Everything instance with its HTTP server on port 80.
"""

import os
import logging
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

from everything_mcp.version import __version__

logger = logging.getLogger("EverythingMCP.Config")

DEFAULT_BASE_URL = "http://localhost"
DEFAULT_PORT = 80
DEFAULT_TIMEOUT_SEC = 10.0
DEFAULT_MAX_RESULTS = 100
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Invalid %s value '%s'; expected integer. Using %d.", name, raw, default)
        return default


def _parse_positive_float_env(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
        if value <= 0:
            raise ValueError
        return value
    except ValueError:
        logger.warning("Invalid %s value '%s'; expected positive number. Using %s.", name, raw, default)
        return default


class EverythingConfig(BaseModel):
    """Everything HTTP server connection settings."""
    base_url: str = DEFAULT_BASE_URL
    port: int = DEFAULT_PORT
    username: str = ""
    password: str = ""
    timeout: float = DEFAULT_TIMEOUT_SEC

    @property
    def has_auth(self) -> bool:
        # Basic auth is only sent when both halves are configured.
        return bool(self.username) and bool(self.password)

    def search_url(self) -> str:
        """
        Resolve the search endpoint.

        A base URL without a scheme gets http://. The configured port is
        appended only when the base URL does not already carry one.
        """
        base = self.base_url.strip().rstrip("/")
        if not base.startswith(("http://", "https://")):
            base = f"http://{base}"
        try:
            has_port = urlsplit(base).port is not None
        except ValueError:
            raise ValueError(f"Invalid Everything base URL: {self.base_url!r}")
        if self.port and not has_port:
            base = f"{base}:{self.port}"
        return f"{base}/"


class ServerConfig(BaseModel):
    """MCP server identity and runtime settings."""
    name: str = "everything-mcp"
    version: str = __version__
    debug: bool = False
    log_level: str = "WARNING"
    log_file: Optional[str] = None
    default_max_results: int = DEFAULT_MAX_RESULTS
    slow_call_warn_ms: float = 5000.0


class AppConfig(BaseModel):
    """Root configuration."""
    everything: EverythingConfig = Field(default_factory=EverythingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls) -> "AppConfig":
        """
        Load configuration from environment variables.

        - EVERYTHING_BASE_URL / EVERYTHING_PORT: Everything HTTP server
        - EVERYTHING_USERNAME / EVERYTHING_PASSWORD: HTTP basic auth
        - EVERYTHING_TIMEOUT: request timeout in seconds
        - EVERYTHING_DEBUG: verbose logging
        - EVERYTHING_MCP_LOG_LEVEL / EVERYTHING_MCP_LOG_FILE: logging output
        - EVERYTHING_MCP_SLOW_CALL_MS: warn threshold for slow requests
        """
        debug = _env_flag("EVERYTHING_DEBUG")
        log_level = os.environ.get("EVERYTHING_MCP_LOG_LEVEL", "").strip().upper()
        if log_level not in LOG_LEVELS:
            if log_level:
                logger.warning("Unsupported EVERYTHING_MCP_LOG_LEVEL '%s'; expected one of %s", log_level, LOG_LEVELS)
            log_level = "DEBUG" if debug else "WARNING"

        return cls(
            everything=EverythingConfig(
                base_url=os.environ.get("EVERYTHING_BASE_URL", "").strip() or DEFAULT_BASE_URL,
                port=_parse_int_env("EVERYTHING_PORT", DEFAULT_PORT),
                username=os.environ.get("EVERYTHING_USERNAME", ""),
                password=os.environ.get("EVERYTHING_PASSWORD", ""),
                timeout=_parse_positive_float_env("EVERYTHING_TIMEOUT", DEFAULT_TIMEOUT_SEC),
            ),
            server=ServerConfig(
                debug=debug,
                log_level=log_level,
                log_file=os.environ.get("EVERYTHING_MCP_LOG_FILE") or None,
                slow_call_warn_ms=_parse_positive_float_env("EVERYTHING_MCP_SLOW_CALL_MS", 5000.0),
            ),
        )
