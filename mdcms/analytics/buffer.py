"""
Telemetry Buffer

Collects visit events in memory and periodically persists them to a single
JSON log file with an atomic temp-file-then-replace write.
"""

import json
import logging
import os
import shutil
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from .models import AnalyticsLog, AnalyticsStats, VisitEvent
from .stats import compute_stats
from .user_agents import UserAgentClassifier

logger = logging.getLogger(__name__)


class TelemetryBuffer:
    """In-memory write queue in front of the durable analytics log."""

    def __init__(
        self,
        analytics_file: Path,
        classifier: Optional[UserAgentClassifier] = None,
        recent_visits_limit: int = 50,
        popular_pages_limit: int = 10,
        traffic_sources_limit: int = 10,
    ):
        """Initialize the buffer.

        Args:
            analytics_file: Path of the durable JSON log
            classifier: Human/bot classifier used by compute_stats
            recent_visits_limit: Number of recent visits reported in stats
            popular_pages_limit: Number of popular pages reported in stats
            traffic_sources_limit: Number of traffic sources reported in stats
        """
        self.analytics_file = Path(analytics_file)
        self.temp_file = self.analytics_file.with_name(self.analytics_file.name + ".tmp")
        self.corrupt_file = self.analytics_file.with_name(self.analytics_file.name + ".corrupt")
        self.classifier = classifier or UserAgentClassifier([])
        self.recent_visits_limit = recent_visits_limit
        self.popular_pages_limit = popular_pages_limit
        self.traffic_sources_limit = traffic_sources_limit

        self._queue: List[VisitEvent] = []
        # Held only for list swaps and appends, never across file I/O
        self._queue_lock = threading.Lock()
        # Serializes flushes from the scheduler and from shutdown
        self._flush_lock = threading.Lock()

        self._ensure_file_exists()

    def _ensure_file_exists(self) -> None:
        """Create an empty log if none exists yet."""
        if self.analytics_file.exists():
            return
        try:
            self.analytics_file.parent.mkdir(parents=True, exist_ok=True)
            self._write_log([])
        except OSError as e:
            logger.error(f"Could not initialize analytics log {self.analytics_file}: {e}")

    def record(
        self,
        page: str,
        version: Optional[str] = None,
        ip_hash: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
    ) -> Optional[VisitEvent]:
        """Queue a visit stamped with the current server time.

        Args:
            page: Page path that was served
            version: Version label of the served revision
            ip_hash: Hashed visitor address
            user_agent: User-Agent header
            referer: Referer header

        Returns:
            The queued VisitEvent, or None if the event could not be built
        """
        try:
            event = VisitEvent(
                page=page,
                version=version,
                ip_hash=ip_hash,
                user_agent=user_agent,
                referer=referer,
                timestamp=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            )
        except ValidationError as e:
            logger.warning(f"Dropping invalid visit for {page!r}: {e}")
            return None

        with self._queue_lock:
            self._queue.append(event)
        return event

    def pending(self) -> List[VisitEvent]:
        """Snapshot of the events not yet flushed, in arrival order."""
        with self._queue_lock:
            return list(self._queue)

    def flush(self) -> int:
        """Persist every queued event.

        Returns:
            Number of events written; 0 when the queue was empty or the write
            failed (failed events stay queued for the next flush)
        """
        with self._flush_lock:
            with self._queue_lock:
                if not self._queue:
                    return 0
                batch, self._queue = self._queue, []

            try:
                visits = self._read_log(for_flush=True)
                visits.extend(event.to_record() for event in batch)
                self._write_log(visits)
            except (OSError, TypeError, ValueError) as e:
                with self._queue_lock:
                    self._queue = batch + self._queue
                logger.error(f"Error flushing {len(batch)} analytics events, will retry: {e}", exc_info=True)
                return 0

            logger.debug(f"Flushed {len(batch)} analytics events to {self.analytics_file}")
            return len(batch)

    def compute_stats(self, now: Optional[datetime] = None) -> AnalyticsStats:
        """Aggregate statistics over the persisted log (queued events excluded)."""
        return compute_stats(
            self._read_log(),
            self.classifier,
            now=now,
            recent_limit=self.recent_visits_limit,
            popular_limit=self.popular_pages_limit,
            sources_limit=self.traffic_sources_limit,
        )

    def _read_log(self, for_flush: bool = False) -> List[Dict[str, Any]]:
        """Load persisted visit records.

        A missing or corrupt log reads as empty. Any other read error also reads
        as empty for statistics, but is raised when flushing so the durable log
        is never rewritten from an empty base.
        """
        try:
            with open(self.analytics_file, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            return []
        except OSError as e:
            if for_flush:
                raise
            logger.warning(f"Could not read analytics log {self.analytics_file}: {e}")
            return []
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Analytics log {self.analytics_file} is corrupt, treating as empty: {e}")
            if for_flush:
                self._backup_corrupt_log()
            return []

        try:
            return AnalyticsLog.model_validate(data).visits
        except ValidationError as e:
            logger.warning(f"Analytics log {self.analytics_file} has an unexpected shape, treating as empty: {e}")
            if for_flush:
                self._backup_corrupt_log()
            return []

    def _backup_corrupt_log(self) -> None:
        """Keep a copy of an unparseable log before it is replaced."""
        try:
            shutil.copy2(self.analytics_file, self.corrupt_file)
            logger.warning(f"Saved corrupt analytics log to {self.corrupt_file}")
        except OSError as e:
            logger.warning(f"Could not back up corrupt analytics log: {e}")

    def _write_log(self, visits: List[Dict[str, Any]]) -> None:
        """Write the full log to a temp file and atomically replace the log."""
        with open(self.temp_file, 'w', encoding='utf-8') as f:
            json.dump({"visits": visits}, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(self.temp_file, self.analytics_file)
