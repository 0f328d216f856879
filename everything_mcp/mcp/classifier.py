"""
Everything MCP Message Classification
-------------------------------------
Turns one raw line into a Request, a Notification or a Malformed message.

Classification is purely structural: a message is a notification when its
"id" key is absent or null, whatever its method name. Unknown methods are
the dispatcher's concern, not ours.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

from .protocol import PARSE_ERROR, INVALID_REQUEST


@dataclass(frozen=True)
class Request:
    id: Any
    method: str
    params: Any = field(default_factory=dict)


@dataclass(frozen=True)
class Notification:
    method: str
    params: Any = field(default_factory=dict)


@dataclass(frozen=True)
class Malformed:
    reason: str
    code: int
    id: Any = None

    @property
    def replyable(self) -> bool:
        """Only a recovered, non-null id gives us something to answer."""
        return self.id is not None


Message = Union[Request, Notification, Malformed]


def classify(line: Union[str, bytes]) -> Message:
    try:
        msg = json.loads(line, parse_constant=_reject_constant)
    except ValueError:
        # JSONDecodeError, UnicodeDecodeError and NaN/Infinity all land here
        return Malformed("parse error", PARSE_ERROR)

    if not isinstance(msg, dict):
        return Malformed("invalid request", INVALID_REQUEST)

    msg_id = msg.get("id")
    method = msg.get("method")
    if not isinstance(method, str) or not method:
        return Malformed("missing method", INVALID_REQUEST, id=msg_id)

    params = _decode_params(msg)
    if msg_id is None:
        return Notification(method=method, params=params)
    return Request(id=msg_id, method=method, params=params)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _decode_params(msg: Dict[str, Any]) -> Any:
    params: Optional[Any] = msg.get("params")
    if params is None:
        return {}
    return params
