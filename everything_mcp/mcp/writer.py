import json
import logging
from typing import Any, BinaryIO, Dict

from .errors import McpError, TransportError
from .protocol import INTERNAL_ERROR, error_envelope, result_envelope

logger = logging.getLogger("EverythingMCP.mcp.writer")

_UNSERIALIZABLE_MESSAGE = "Internal error: response is not serializable"


class ResponseWriter:
    """
    Writes response envelopes to a binary stream, one JSON object per line.

    Each envelope goes out in a single write followed by a flush, so a
    partial envelope is never flushed. There is exactly one writer per
    stream; no locking is done here.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        self._closed = True

    def write_result(self, msg_id: Any, result: Any) -> None:
        self._write(_encode(result_envelope(msg_id, result), msg_id))

    def write_error(self, msg_id: Any, error: BaseException) -> None:
        if isinstance(error, McpError):
            code, message = error.code, error.message
        else:
            code, message = INTERNAL_ERROR, str(error) or type(error).__name__
        self.write_error_code(msg_id, code, message)

    def write_error_code(self, msg_id: Any, code: int, message: str) -> None:
        self._write(_encode(error_envelope(msg_id, code, message), msg_id))

    def _write(self, payload: bytes) -> None:
        if self._closed:
            logger.debug("Dropping response after transport close")
            return
        try:
            self._stream.write(payload)
            self._stream.flush()
        except (BrokenPipeError, OSError, ValueError) as exc:
            self._closed = True
            raise TransportError(f"stdio write failed: {exc}") from exc


def _serialize(envelope: Dict[str, Any]) -> bytes:
    return (json.dumps(envelope, separators=(",", ":"), allow_nan=False) + "\n").encode("utf-8")


def _encode(envelope: Dict[str, Any], msg_id: Any) -> bytes:
    """Serialize an envelope, degrading to a fixed internal-error envelope."""
    try:
        return _serialize(envelope)
    except (TypeError, ValueError) as exc:
        logger.error("Response for id=%r is not serializable: %s", msg_id, exc)
    try:
        return _serialize(error_envelope(msg_id, INTERNAL_ERROR, _UNSERIALIZABLE_MESSAGE))
    except (TypeError, ValueError):
        # the id itself cannot be written back
        return _serialize(error_envelope(None, INTERNAL_ERROR, _UNSERIALIZABLE_MESSAGE))
