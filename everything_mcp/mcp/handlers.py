import copy
import logging
from typing import Any, Dict, List, Optional

from everything_mcp.core.config import ServerConfig
from everything_mcp.search.models import Searcher

from .context import Context
from .definitions import TOOLS_SCHEMAS
from .dispatcher import Dispatcher, HandlerRegistry
from .errors import InvalidParamsError
from .protocol import JSON_SCHEMA_2020_12, negotiate_protocol_version
from .tools import SearchTools

logger = logging.getLogger("EverythingMCP.mcp.handlers")


def build_initialize_instructions(startup_warnings: Optional[List[str]] = None) -> str:
    """Build a set of instructions for the client during initialization."""
    base_instructions = (
        "Everything MCP server. Searches the local file index of voidtools Everything: "
        "by name, extension, path, size, date, content type or regex, and lists drives "
        "and directories."
    )
    if not startup_warnings:
        return base_instructions
    bullet_list = "\n".join(f"- {warning}" for warning in startup_warnings)
    return f"{base_instructions}\n\nStartup checks:\n{bullet_list}"


def list_tool_definitions() -> List[Dict[str, Any]]:
    tools = []
    for schema_def in TOOLS_SCHEMAS:
        tool_def = copy.deepcopy(schema_def)
        if "$schema" not in tool_def["inputSchema"]:
            tool_def["inputSchema"]["$schema"] = JSON_SCHEMA_2020_12
        tools.append(tool_def)
    return tools


class EverythingMcpHandlers:
    """
    MCP method handlers for one stdio session.

    Holds what the host told us at initialize time; the search backend is
    injected so tests can run without an Everything server.
    """

    def __init__(
        self,
        searcher: Searcher,
        server_config: Optional[ServerConfig] = None,
        startup_warnings: Optional[List[str]] = None,
    ):
        self.server_config = server_config or ServerConfig()
        self.tools = SearchTools(searcher, default_max_results=self.server_config.default_max_results)
        self.startup_warnings = list(startup_warnings or [])
        self.protocol_version: Optional[str] = None
        self.client_info: Dict[str, Any] = {}
        self.client_capabilities: Dict[str, Any] = {}

    def initialize(self, context: Context, params: Any) -> Dict[str, Any]:
        """Handle protocol negotiation and server initialization."""
        if not isinstance(params, dict):
            raise InvalidParamsError("initialize params must be an object")

        requested_version = params.get("protocolVersion")
        if requested_version is not None and not isinstance(requested_version, str):
            raise InvalidParamsError("protocolVersion must be a string")
        self.protocol_version = negotiate_protocol_version(requested_version)

        client_info = params.get("clientInfo")
        self.client_info = client_info if isinstance(client_info, dict) else {}
        capabilities = params.get("capabilities")
        self.client_capabilities = capabilities if isinstance(capabilities, dict) else {}

        logger.info(
            "Initialize from %s %s (requested protocol %r, negotiated %s)",
            self.client_info.get("name", "unknown client"),
            self.client_info.get("version", ""),
            requested_version,
            self.protocol_version,
        )
        return {
            "protocolVersion": self.protocol_version,
            "capabilities": {
                "tools": {
                    "listChanged": True,
                },
            },
            "serverInfo": {"name": self.server_config.name, "version": self.server_config.version},
            "instructions": build_initialize_instructions(self.startup_warnings),
        }

    def ping(self, context: Context, params: Any) -> Dict[str, Any]:
        return {}

    def list_tools(self, context: Context, params: Any) -> Dict[str, Any]:
        return {"tools": list_tool_definitions()}

    def call_tool(self, context: Context, params: Any) -> Dict[str, Any]:
        if not isinstance(params, dict):
            raise InvalidParamsError("tools/call params must be an object")
        name = params.get("name")
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("tools/call requires a tool name")
        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        if not isinstance(arguments, dict):
            raise InvalidParamsError("tools/call arguments must be an object")

        logger.debug("Calling tool %s with %s", name, arguments)
        return self.tools.call(name, arguments, context=context)

    def register(self, registry: HandlerRegistry) -> None:
        registry.register("initialize", self.initialize)
        registry.register("ping", self.ping)
        registry.register("tools/list", self.list_tools)
        registry.register("tools/call", self.call_tool)


def build_dispatcher(
    searcher: Searcher,
    server_config: Optional[ServerConfig] = None,
    startup_warnings: Optional[List[str]] = None,
) -> Dispatcher:
    registry = HandlerRegistry()
    EverythingMcpHandlers(searcher, server_config, startup_warnings).register(registry)
    return registry.build()
