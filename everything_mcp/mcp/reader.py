import logging
import threading
from concurrent.futures import Future
from typing import BinaryIO, Optional

from .errors import TransportError

logger = logging.getLogger("EverythingMCP.mcp.reader")


class LineReader:
    """
    Reads newline-delimited messages from a binary stream.

    read_line() blocks; read_async() runs one read on its own daemon thread
    so a supervisor can stop waiting for it. An abandoned read keeps running
    until the stream yields or closes with the process.
    """

    def __init__(self, stream: BinaryIO):
        self._stream = stream
        self._read_lock = threading.Lock()

    def read_line(self) -> Optional[bytes]:
        """Return the next non-blank line without its delimiter, or None at end of stream."""
        with self._read_lock:
            while True:
                try:
                    line = self._stream.readline()
                except (OSError, ValueError) as exc:
                    raise TransportError(f"stdio read failed: {exc}") from exc
                if not line:
                    return None
                if isinstance(line, str):
                    line = line.encode("utf-8")
                line = line.rstrip(b"\r\n")
                if not line.strip():
                    continue
                return line

    def read_async(self) -> "Future[Optional[bytes]]":
        future: "Future[Optional[bytes]]" = Future()
        future.set_running_or_notify_cancel()

        def _run() -> None:
            try:
                line = self.read_line()
            except BaseException as exc:
                future.set_exception(exc)
                return
            future.set_result(line)

        threading.Thread(
            target=_run,
            name="everything-mcp-reader",
            daemon=True,
        ).start()
        return future
