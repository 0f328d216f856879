"""
Everything MCP Protocol Constants & Envelopes
"""

from numbers import Number
from typing import Any, Dict, Optional

JSONRPC_VERSION = "2.0"

SUPPORTED_PROTOCOL_VERSIONS = ("2025-06-18", "2025-03-26", "2024-11-05")
DEFAULT_PROTOCOL_VERSION = "2024-11-05"
JSON_SCHEMA_2020_12 = "https://json-schema.org/draft/2020-12/schema"

# Standard JSON-RPC Error Codes
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
PARSE_ERROR = -32700

CLIENT_READY_NOTIFICATION = "notifications/initialized"


def negotiate_protocol_version(version: Optional[str]) -> str:
    """
    Pick the protocol version to answer an initialize request with.

    Hosts that send nothing (or the pre-release "1.0") get the baseline
    version; an unknown version is answered with the newest one we speak.
    """
    if not version or version == "1.0":
        return DEFAULT_PROTOCOL_VERSION
    if version in SUPPORTED_PROTOCOL_VERSIONS:
        return version
    return SUPPORTED_PROTOCOL_VERSIONS[0]


def _is_number(value: Any) -> bool:
    return isinstance(value, Number) and not isinstance(value, bool)


def tokens_equal(a: Any, b: Any) -> bool:
    """
    Compare two correlation tokens.

    JSON numbers compare by value so an id sent as 3 matches one echoed
    as 3.0. Everything else must match in type and structure, so "3" never
    equals 3 and True never equals 1.
    """
    if _is_number(a) and _is_number(b):
        return a == b
    if _is_number(a) or _is_number(b):
        return False
    if type(a) is not type(b):
        return False
    return a == b


def result_envelope(msg_id: Any, result: Any) -> Dict[str, Any]:
    return {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "result": result}


def error_envelope(msg_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": {
            "code": code,
            "message": message,
        },
    }


def request_envelope(msg_id: Any, method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": msg_id, "method": method}
    if params is not None:
        message["params"] = params
    return message


def notification_envelope(method: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    message: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        message["params"] = params
    return message
