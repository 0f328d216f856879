"""
Everything MCP CLI.

Usage:
    everything-mcp [serve]
    everything-mcp check [config.json] [--server NAME] [--timeout SEC]
    python -m everything_mcp --help

Commands:
    serve    Run the MCP server on stdin/stdout (default).
    check    Spawn a server from an MCP host config file and run a smoke
             test against it: initialize, tools/list and two searches.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from everything_mcp.core.config import AppConfig, ServerConfig
from everything_mcp.mcp.client import DEFAULT_RESPONSE_TIMEOUT_SEC, StdioClient, run_smoke_check
from everything_mcp.mcp.errors import TransportError
from everything_mcp.mcp.handlers import build_dispatcher
from everything_mcp.mcp.server import McpServer
from everything_mcp.search.client import EverythingClient
from everything_mcp.version import __version__

logger = logging.getLogger("EverythingMCP")

_DEFAULT_HOST_CONFIG = Path("mcp-config.json")
_DEFAULT_SERVER_NAME = "everything"


def configure_logging(server_config: ServerConfig) -> None:
    # stdout carries the protocol; logs go to stderr or the configured file.
    kwargs = {}
    if server_config.log_file:
        kwargs["filename"] = server_config.log_file
        kwargs["filemode"] = "a"
    else:
        kwargs["stream"] = sys.stderr
    logging.basicConfig(
        level=getattr(logging, server_config.log_level, logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        **kwargs,
    )


def _mask(secret: str) -> str:
    return f"<{len(secret)} chars>" if secret else "<unset>"


def cmd_serve(args: argparse.Namespace) -> int:
    config = AppConfig.from_env()
    configure_logging(config.server)

    everything = config.everything
    try:
        search_url = everything.search_url()
    except ValueError as exc:
        logger.error("%s", exc)
        print(f"everything-mcp: {exc}", file=sys.stderr)
        return 1
    logger.debug(
        "Everything endpoint=%s username=%s password=%s timeout=%.1fs",
        search_url,
        everything.username or "<unset>",
        _mask(everything.password),
        everything.timeout,
    )

    with EverythingClient(everything) as client:
        dispatcher = build_dispatcher(client, config.server)
        server = McpServer(dispatcher, slow_call_warn_ms=config.server.slow_call_warn_ms)
        try:
            server.run()
        except TransportError as exc:
            logger.error("Transport failure: %s", exc)
            return 1
        except Exception:
            logger.exception("MCP server stopped on an unexpected error")
            return 1
    return 0


def _iter_server_blocks(cfg: dict) -> list[dict]:
    server_blocks = []
    for key in ("mcpServers", "servers"):
        block = cfg.get(key)
        if isinstance(block, dict):
            server_blocks.append(block)
    return server_blocks


def load_server_entry(config_path: Path, server_name: str) -> dict:
    """Return the `command`/`args`/`env` block for `server_name`. Raises ValueError."""
    try:
        cfg = json.loads(config_path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ValueError(f"Cannot read {config_path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ValueError(f"Cannot parse {config_path}: {exc}") from exc
    if not isinstance(cfg, dict):
        raise ValueError(f"{config_path} does not contain a JSON object")

    for block in _iter_server_blocks(cfg):
        entry = block.get(server_name)
        if isinstance(entry, dict):
            if not isinstance(entry.get("command"), str) or not entry["command"]:
                raise ValueError(f"Server '{server_name}' in {config_path} has no command")
            return entry
    raise ValueError(f"No '{server_name}' server found in {config_path}")


def cmd_check(args: argparse.Namespace) -> int:
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    try:
        entry = load_server_entry(args.config, args.server)
    except ValueError as exc:
        print(f"[FAIL] {exc}", file=sys.stderr)
        return 1

    server_args = [str(a) for a in entry.get("args") or []]
    env = {str(k): str(v) for k, v in (entry.get("env") or {}).items()}

    print("=== Everything MCP check ===")
    print(f"Config file: {args.config}")
    print(f"Server command: {entry['command']}")
    print(f"Arguments: {server_args}")
    print(f"Environment: {sorted(env)}")
    print()

    try:
        client = StdioClient.spawn(entry["command"], server_args, env=env, timeout=args.timeout)
    except TransportError as exc:
        print(f"[FAIL] {exc}", file=sys.stderr)
        return 1
    with client:
        report = run_smoke_check(client)
    print(report.render())
    return 0 if report.ok else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="everything-mcp",
        description="MCP stdio server for the voidtools Everything file search engine.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Examples:\n"
               "  everything-mcp\n"
               "  EVERYTHING_PORT=8080 everything-mcp serve\n"
               "  everything-mcp check mcp-config.json --server everything\n",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command")

    subparsers.add_parser(
        "serve",
        help="Run the MCP server on stdio.",
        description=(
            "Serves MCP over stdin/stdout. Configure with EVERYTHING_BASE_URL,\n"
            "EVERYTHING_PORT, EVERYTHING_USERNAME, EVERYTHING_PASSWORD and\n"
            "EVERYTHING_DEBUG."
        ),
    )

    check = subparsers.add_parser(
        "check",
        help="Smoke-test a server defined in an MCP host config.",
    )
    check.add_argument(
        "config",
        nargs="?",
        type=Path,
        default=_DEFAULT_HOST_CONFIG,
        help=f"MCP host config JSON with an mcpServers block (default: {_DEFAULT_HOST_CONFIG}).",
    )
    check.add_argument(
        "--server",
        default=_DEFAULT_SERVER_NAME,
        metavar="NAME",
        help=f"Server entry to launch (default: {_DEFAULT_SERVER_NAME}).",
    )
    check.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_RESPONSE_TIMEOUT_SEC,
        metavar="SEC",
        help="Seconds to wait for each response.",
    )
    check.add_argument("--verbose", action="store_true", default=False, help="Log protocol traffic.")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command in (None, "serve"):
        return cmd_serve(args)
    if args.command == "check":
        return cmd_check(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
