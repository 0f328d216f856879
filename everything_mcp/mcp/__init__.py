from .context import Context
from .dispatcher import Dispatcher, HandlerRegistry
from .errors import (
    HandlerError,
    InvalidParamsError,
    McpError,
    MethodNotFoundError,
    ParseError,
    ProtocolError,
    TransportError,
)
from .server import McpServer, RunState

__all__ = [
    "Context",
    "Dispatcher",
    "HandlerRegistry",
    "McpServer",
    "RunState",
    "McpError",
    "ParseError",
    "ProtocolError",
    "MethodNotFoundError",
    "InvalidParamsError",
    "HandlerError",
    "TransportError",
]
