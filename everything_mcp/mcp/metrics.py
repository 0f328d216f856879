import time
import logging
from typing import Any

logger = logging.getLogger("EverythingMCP.mcp.metrics")


class DispatchMetrics:
    """
    Tracks timing and outcome for a single dispatched request.
    """
    def __init__(self, msg_id: Any, method: str):
        self.msg_id = msg_id
        self.method = method
        self.outcome = "no_response"
        self.started_monotonic = time.monotonic()

    def record_success(self) -> None:
        self.outcome = "success"

    def record_error(self, code: int) -> None:
        self.outcome = f"error({code})"

    def elapsed_ms(self) -> float:
        return max(0.0, (time.monotonic() - self.started_monotonic) * 1000.0)

    def log_telemetry(self, warn_threshold_ms: float) -> None:
        """Log normalized telemetry for the request."""
        elapsed_ms = self.elapsed_ms()
        log_method = logger.warning if elapsed_ms >= warn_threshold_ms else logger.info
        log_method(
            "Request telemetry: method=%s id=%r outcome=%s elapsed_ms=%.1f",
            self.method,
            self.msg_id,
            self.outcome,
            elapsed_ms,
        )
