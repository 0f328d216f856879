"""
Everything MCP Protocol Errors
------------------------------
Exception taxonomy for the stdio transport. Every error except
TransportError is local to one message cycle and is answered on the wire
(when the message carries an id). TransportError is fatal and ends the loop.
"""

from typing import Optional

from .protocol import (
    PARSE_ERROR,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    INVALID_PARAMS,
    INTERNAL_ERROR,
)


class McpError(Exception):
    """Base class for errors that map onto a JSON-RPC error code."""

    code = INTERNAL_ERROR

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code


class ParseError(McpError):
    code = PARSE_ERROR


class ProtocolError(McpError):
    """Well-formed JSON that is not a valid request (e.g. missing method)."""

    code = INVALID_REQUEST


class MethodNotFoundError(McpError):
    code = METHOD_NOT_FOUND

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}")
        self.method = method


class InvalidParamsError(McpError):
    code = INVALID_PARAMS


class HandlerError(McpError):
    """The invoked handler failed."""

    code = INTERNAL_ERROR


class TransportError(Exception):
    """I/O failure on the underlying stream. Never sent on the wire."""
