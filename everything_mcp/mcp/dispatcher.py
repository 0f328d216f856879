import logging
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping

from .context import Context
from .errors import MethodNotFoundError

logger = logging.getLogger("EverythingMCP.mcp.dispatcher")

# (context, params) -> result; raise to fail.
MethodHandler = Callable[[Context, Any], Any]


class Dispatcher:
    """
    Maps method names to handlers. The table is frozen at construction and
    never changes for the lifetime of the stream.
    """

    def __init__(self, handlers: Mapping[str, MethodHandler]):
        self._handlers: Mapping[str, MethodHandler] = MappingProxyType(dict(handlers))

    @property
    def methods(self) -> Mapping[str, MethodHandler]:
        return self._handlers

    def dispatch(self, context: Context, method: str, params: Any) -> Any:
        handler = self._handlers.get(method)
        if handler is None:
            raise MethodNotFoundError(method)
        if params is None:
            params = {}
        logger.debug("Dispatching %s", method)
        return handler(context, params)


class HandlerRegistry:
    """Collects handlers before the loop starts. One handler per method name."""

    def __init__(self):
        self._handlers: Dict[str, MethodHandler] = {}

    def register(self, method: str, handler: MethodHandler) -> None:
        if not isinstance(method, str) or not method:
            raise ValueError("method name must be a non-empty string")
        if method in self._handlers:
            raise ValueError(f"handler already registered for method '{method}'")
        self._handlers[method] = handler

    def build(self) -> Dispatcher:
        return Dispatcher(self._handlers)
