import sys
import queue
import signal
import logging
import threading
from concurrent.futures import Future
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Dict, Optional

from .classifier import Malformed, Notification, Request, classify
from .context import Context
from .dispatcher import Dispatcher
from .errors import HandlerError, McpError, TransportError
from .metrics import DispatchMetrics
from .protocol import CLIENT_READY_NOTIFICATION
from .reader import LineReader
from .writer import ResponseWriter

logger = logging.getLogger("EverythingMCP.mcp.server")


class RunState(str, Enum):
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


@dataclass(frozen=True)
class _LineRead:
    line: bytes


@dataclass(frozen=True)
class _ReadFailed:
    error: BaseException


@dataclass(frozen=True)
class _ShutdownRequested:
    signum: Optional[int] = None


class _EndOfStream:
    pass


class _Cancelled:
    pass


_END_OF_STREAM = _EndOfStream()
_CANCELLED = _Cancelled()


class McpServer:
    """
    Runs the JSON-RPC loop over stdio.

    Each iteration races a pending line read against shutdown signals and
    context cancellation on one event queue; whichever arrives first decides
    the iteration. Lines are processed one at a time, so responses leave in
    the order their requests arrived and there is only ever one writer.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        stdin: Optional[BinaryIO] = None,
        stdout: Optional[BinaryIO] = None,
        slow_call_warn_ms: float = 5000.0,
    ):
        self.dispatcher = dispatcher
        self.reader = LineReader(stdin if stdin is not None else sys.stdin.buffer)
        self.writer = ResponseWriter(stdout if stdout is not None else sys.stdout.buffer)
        self.slow_call_warn_ms = slow_call_warn_ms

        # SimpleQueue.put is reentrant, so signal handlers may feed it.
        self._events: "queue.SimpleQueue[Any]" = queue.SimpleQueue()
        self._shutdown_requested = False
        self._started = False
        self.state = RunState.RUNNING
        self.stop_reason: Optional[str] = None

    def shutdown(self, signum: Optional[int] = None) -> None:
        """Ask the loop to stop. Safe from any thread and from signal handlers."""
        self._shutdown_requested = True
        self._events.put(_ShutdownRequested(signum))

    def run(self, context: Optional[Context] = None, handle_signals: bool = True) -> None:
        """
        Serve until end of stream, shutdown or cancellation.

        Raises TransportError when the stream itself fails.
        """
        if self._started:
            raise RuntimeError("McpServer.run() may only be called once per stream")
        self._started = True

        if context is None:
            context = Context()
        context.on_cancel(lambda: self._events.put(_CANCELLED))

        previous_handlers = self._install_signal_handlers() if handle_signals else {}
        logger.info("MCP stdio server started")
        try:
            self._serve(context)
        except TransportError:
            self._begin_shutdown("transport error")
            raise
        except BaseException:
            self._begin_shutdown("internal error")
            raise
        finally:
            self._restore_signal_handlers(previous_handlers)
            self.writer.close()
            self.state = RunState.STOPPED
            logger.info("MCP stdio server stopped (%s)", self.stop_reason)

    def _serve(self, context: Context) -> None:
        while True:
            if context.cancelled:
                self._begin_shutdown("cancelled")
                return
            if self._shutdown_requested:
                self._begin_shutdown("shutdown requested")
                return

            pending = self.reader.read_async()
            pending.add_done_callback(self._deliver_read)

            event = self._events.get()
            if isinstance(event, _Cancelled):
                self._begin_shutdown("cancelled")
                return
            if isinstance(event, _ShutdownRequested):
                reason = "shutdown requested"
                if event.signum is not None:
                    reason = f"signal {event.signum}"
                self._begin_shutdown(reason)
                return
            if isinstance(event, _EndOfStream):
                self._begin_shutdown("end of stream")
                return
            if isinstance(event, _ReadFailed):
                self._begin_shutdown("transport error")
                error = event.error
                if isinstance(error, TransportError):
                    raise error
                raise TransportError(f"stdio read failed: {error}") from error

            try:
                self._handle_line(context, event.line)
            except TransportError:
                raise
            except Exception:
                logger.exception("Unexpected error while handling message; continuing")

    def _deliver_read(self, future: "Future[Optional[bytes]]") -> None:
        error = future.exception()
        if error is not None:
            self._events.put(_ReadFailed(error))
            return
        line = future.result()
        if line is None:
            self._events.put(_END_OF_STREAM)
        else:
            self._events.put(_LineRead(line))

    def _begin_shutdown(self, reason: str) -> None:
        if self.state is RunState.RUNNING:
            self.state = RunState.SHUTTING_DOWN
            self.stop_reason = reason
            logger.info("Shutting down MCP stdio server: %s", reason)

    def _handle_line(self, context: Context, line: bytes) -> None:
        message = classify(line)

        if isinstance(message, Notification):
            self._handle_notification(message)
            return

        if isinstance(message, Malformed):
            if message.replyable:
                logger.warning("Rejecting malformed request id=%r: %s", message.id, message.reason)
                self.writer.write_error_code(message.id, message.code, f"Invalid Request: {message.reason}")
            else:
                logger.warning("Dropping malformed message without id: %s", message.reason)
            return

        self._handle_request(context, message)

    def _handle_notification(self, message: Notification) -> None:
        if message.method == CLIENT_READY_NOTIFICATION:
            logger.info("Client initialized connection")
        else:
            logger.debug("Ignoring notification: %s", message.method)

    def _handle_request(self, context: Context, request: Request) -> None:
        metrics = DispatchMetrics(request.id, request.method)
        try:
            result = self.dispatcher.dispatch(context, request.method, request.params)
        except McpError as exc:
            metrics.record_error(exc.code)
            self.writer.write_error(request.id, exc)
        except Exception as exc:
            logger.exception("Handler for %s failed", request.method)
            error = HandlerError(str(exc) or type(exc).__name__)
            metrics.record_error(error.code)
            self.writer.write_error(request.id, error)
        else:
            metrics.record_success()
            self.writer.write_result(request.id, result)
        finally:
            metrics.log_telemetry(self.slow_call_warn_ms)

    def _handle_signal(self, signum: int, frame: Any) -> None:
        self.shutdown(signum)

    def _install_signal_handlers(self) -> Dict[int, Any]:
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on the main thread; signal handlers not installed")
            return {}
        previous: Dict[int, Any] = {}
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                previous[sig] = signal.signal(sig, self._handle_signal)
            except (ValueError, OSError) as exc:
                logger.debug("Unable to install handler for signal %s: %s", sig, exc)
        return previous

    def _restore_signal_handlers(self, previous: Dict[int, Any]) -> None:
        for sig, handler in previous.items():
            try:
                signal.signal(sig, handler)
            except (ValueError, OSError, TypeError) as exc:
                logger.debug("Unable to restore handler for signal %s: %s", sig, exc)
