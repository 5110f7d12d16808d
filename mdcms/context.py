"""
Server context holding the long-lived state of one running server.
"""
import logging
import threading
from dataclasses import dataclass, field

from mdcms.admin.sessions import SessionStore
from mdcms.analytics.buffer import TelemetryBuffer
from mdcms.analytics.scheduler import FlushScheduler
from mdcms.content.resolver import RevisionResolver

logger = logging.getLogger(__name__)

EXTENSION_KEY = "mdcms"


@dataclass
class ServerContext:
    """Resolver, analytics buffer and admin sessions owned by one server."""

    resolver: RevisionResolver
    telemetry: TelemetryBuffer
    scheduler: FlushScheduler
    sessions: SessionStore
    _shutdown_lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    _shut_down: bool = field(default=False, repr=False)

    def start(self) -> None:
        """Start background work (the periodic analytics flush)."""
        self.scheduler.start()

    def shutdown(self) -> int:
        """Stop background work and flush buffered analytics once.

        Returns:
            Number of events written by the final flush
        """
        with self._shutdown_lock:
            if self._shut_down:
                return 0
            self._shut_down = True

        logger.info("Shutting down gracefully...")
        return self.scheduler.stop(final_flush=True)


def get_context(app) -> ServerContext:
    """Get the ServerContext attached to a Flask app."""
    return app.extensions[EXTENSION_KEY]
