"""
Recurring flush task for the telemetry buffer.
"""
import logging
import threading
from typing import Optional

from .buffer import TelemetryBuffer

logger = logging.getLogger(__name__)


class FlushScheduler:
    """Runs ``buffer.flush()`` on a fixed interval in a background thread."""

    def __init__(self, buffer: TelemetryBuffer, interval: float = 10.0):
        """Initialize the scheduler.

        Args:
            buffer: The telemetry buffer to flush
            interval: Seconds between flushes
        """
        if interval <= 0:
            raise ValueError("Flush interval must be positive")
        self.buffer = buffer
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background flush loop (no-op if already running)."""
        with self._lock:
            if self.running or self._stopped:
                return
            self._thread = threading.Thread(
                target=self._run,
                name="AnalyticsFlush",
                daemon=True
            )
            self._thread.start()
        logger.info(f"Analytics flush scheduled every {self.interval:g}s")

    def _run(self) -> None:
        while not self._stop_event.wait(self.interval):
            try:
                self.buffer.flush()
            except Exception:
                # Keep the loop alive; the next cycle retries
                logger.exception("Unexpected error in scheduled analytics flush")

    def stop(self, final_flush: bool = True) -> int:
        """Stop the loop and drain the buffer once, synchronously.

        Args:
            final_flush: Whether to flush remaining events after stopping

        Returns:
            Number of events written by the final flush
        """
        with self._lock:
            if self._stopped:
                return 0
            self._stopped = True
            self._stop_event.set()
            thread, self._thread = self._thread, None

        if thread is not None:
            thread.join(timeout=self.interval + 5)

        if not final_flush:
            return 0

        flushed = self.buffer.flush()
        if flushed:
            logger.info(f"Flushed {flushed} analytics events on shutdown")
        pending = len(self.buffer.pending())
        if pending:
            logger.error(f"{pending} analytics events could not be persisted on shutdown")
        return flushed
