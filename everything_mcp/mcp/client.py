"""
Everything MCP Stdio Client
---------------------------
Drives an MCP server over a child process's stdio, one request at a time.
Used by the `check` command to smoke-test a host configuration.
"""

import json
import logging
import os
import subprocess
import threading
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Dict, List, Optional, Sequence

from .errors import McpError, ParseError, ProtocolError, TransportError
from .protocol import (
    CLIENT_READY_NOTIFICATION,
    DEFAULT_PROTOCOL_VERSION,
    notification_envelope,
    request_envelope,
    tokens_equal,
)
from .reader import LineReader

logger = logging.getLogger("EverythingMCP.mcp.client")

DEFAULT_RESPONSE_TIMEOUT_SEC = 10.0
_EXIT_GRACE_SEC = 2.0


class StdioClient:
    def __init__(
        self,
        stdin: BinaryIO,
        stdout: BinaryIO,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT_SEC,
        process: Optional[subprocess.Popen] = None,
    ):
        self._stdin = stdin
        self._reader = LineReader(stdout)
        self.timeout = timeout
        self.process = process
        self._next_id = 1

    @classmethod
    def spawn(
        cls,
        command: str,
        args: Sequence[str] = (),
        env: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_RESPONSE_TIMEOUT_SEC,
    ) -> "StdioClient":
        """Start `command args...` with `env` layered over our environment."""
        child_env = os.environ.copy()
        child_env.update(env or {})
        try:
            process = subprocess.Popen(
                [command, *args],
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                env=child_env,
            )
        except OSError as exc:
            raise TransportError(f"Failed to start MCP server '{command}': {exc}") from exc

        threading.Thread(
            target=_forward_stderr,
            args=(process.stderr,),
            name="everything-mcp-server-stderr",
            daemon=True,
        ).start()
        return cls(process.stdin, process.stdout, timeout=timeout, process=process)

    def send_request(self, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """Send a request and return the response envelope with the matching id."""
        msg_id = self._next_id
        self._next_id += 1
        self._send(request_envelope(msg_id, method, params))

        response = self._read_response()
        if not tokens_equal(response.get("id"), msg_id):
            raise ProtocolError(f"Response id mismatch: expected {msg_id!r}, got {response.get('id')!r}")
        return response

    def send_notification(self, method: str, params: Optional[Dict[str, Any]] = None) -> None:
        self._send(notification_envelope(method, params))

    def close(self) -> None:
        """Close the server's stdin, give it a moment to exit, then kill it."""
        _close_quietly(self._stdin)
        if self.process is None:
            return
        try:
            self.process.wait(timeout=_EXIT_GRACE_SEC)
        except subprocess.TimeoutExpired:
            logger.debug("MCP server did not exit after stdin closed; killing it")
            self.process.kill()
            self.process.wait()
        # Reader threads may still hold these; close them only once the child is gone.
        _close_quietly(self.process.stdout)
        _close_quietly(self.process.stderr)

    def __enter__(self) -> "StdioClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _send(self, message: Dict[str, Any]) -> None:
        data = json.dumps(message, separators=(",", ":"))
        logger.debug("Sending: %s", data)
        try:
            self._stdin.write(data.encode("utf-8") + b"\n")
            self._stdin.flush()
        except (OSError, ValueError) as exc:
            raise TransportError(f"Failed to send message: {exc}") from exc

    def _read_response(self) -> Dict[str, Any]:
        pending = self._reader.read_async()
        try:
            line = pending.result(timeout=self.timeout)
        except FutureTimeoutError:
            raise TransportError(f"Timed out after {self.timeout}s waiting for a response")
        if line is None:
            raise TransportError("Server closed its output before responding")

        logger.debug("Received: %s", line.decode("utf-8", errors="replace"))
        try:
            response = json.loads(line)
        except ValueError as exc:
            raise ParseError(f"Failed to parse response: {exc}") from exc
        if not isinstance(response, dict):
            raise ProtocolError("Response is not a JSON object")
        return response


def _close_quietly(stream: Optional[BinaryIO]) -> None:
    if stream is None:
        return
    try:
        stream.close()
    except OSError as exc:
        logger.debug("Error closing client stream: %s", exc)


def _forward_stderr(stream: BinaryIO) -> None:
    try:
        for raw in iter(stream.readline, b""):
            logger.info("[server stderr] %s", raw.decode("utf-8", errors="replace").rstrip())
    except (OSError, ValueError):
        return


@dataclass
class SmokeStep:
    name: str
    ok: bool
    detail: str = ""


@dataclass
class SmokeReport:
    steps: List[SmokeStep] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return bool(self.steps) and all(step.ok for step in self.steps)

    def render(self) -> str:
        lines = []
        for i, step in enumerate(self.steps, start=1):
            mark = "OK" if step.ok else "FAIL"
            lines.append(f"{i}. [{mark}] {step.name}")
            for detail_line in step.detail.splitlines():
                lines.append(f"   {detail_line}")
        return "\n".join(lines)


def _tool_text(result: Dict[str, Any]) -> str:
    parts = []
    for item in result.get("content") or []:
        if isinstance(item, dict) and isinstance(item.get("text"), str):
            parts.append(item["text"])
    return "\n".join(parts)


def run_smoke_check(client: StdioClient) -> SmokeReport:
    """
    Exercise a server end to end: initialize, initialized notification,
    tools/list and two tool calls. Stops at the first failing step.
    """
    report = SmokeReport()

    def _request(name: str, method: str, params: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        try:
            response = client.send_request(method, params)
        except (TransportError, McpError) as exc:
            report.steps.append(SmokeStep(name, False, str(exc)))
            return None
        if "error" in response:
            report.steps.append(SmokeStep(name, False, f"error: {response['error']}"))
            return None
        result = response.get("result")
        return result if isinstance(result, dict) else {}

    init = _request("initialize", "initialize", {
        "protocolVersion": DEFAULT_PROTOCOL_VERSION,
        "capabilities": {},
        "clientInfo": {"name": "everything-mcp-check", "version": "1.0.0"},
    })
    if init is None:
        return report
    server_info = init.get("serverInfo") or {}
    report.steps.append(SmokeStep(
        "initialize",
        True,
        f"server: {server_info.get('name')} {server_info.get('version')}\n"
        f"protocol version: {init.get('protocolVersion')}",
    ))

    try:
        client.send_notification(CLIENT_READY_NOTIFICATION, {})
    except TransportError as exc:
        report.steps.append(SmokeStep("initialized notification", False, str(exc)))
        return report
    report.steps.append(SmokeStep("initialized notification", True))

    listed = _request("tools/list", "tools/list", {})
    if listed is None:
        return report
    tools = [t for t in listed.get("tools") or [] if isinstance(t, dict)]
    report.steps.append(SmokeStep(
        "tools/list",
        True,
        f"{len(tools)} tools\n" + "\n".join(f"- {t.get('name')}: {t.get('description', '')}" for t in tools),
    ))

    calls = (
        ("search_files", {"query": "oray", "max_results": 10}),
        ("search_by_extension", {"extension": "txt", "max_results": 5}),
    )
    for tool_name, arguments in calls:
        step_name = f"tools/call {tool_name}"
        result = _request(step_name, "tools/call", {"name": tool_name, "arguments": arguments})
        if result is None:
            return report
        detail = _tool_text(result)
        if result.get("isError"):
            detail = f"tool reported an error:\n{detail}"
        report.steps.append(SmokeStep(step_name, True, detail))

    return report
