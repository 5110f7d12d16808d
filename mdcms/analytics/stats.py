"""
Aggregate statistics over the persisted visit log.

Everything here is a pure projection of the log records; nothing is written.
"""

import logging
from collections import Counter
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urlparse

from pydantic import ValidationError

from .models import AnalyticsStats, VisitEvent
from .user_agents import UserAgentClassifier

logger = logging.getLogger(__name__)

DIRECT_SOURCE = "direct"
UNKNOWN_SOURCE = "unknown"
DEFAULT_VERSION = "v1"
TOTAL_KEY = "_total"


def parse_timestamp(value: str) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp into an aware datetime (naive means local time)."""
    try:
        # Accept 'Z' by replacing with +00:00
        parsed = datetime.fromisoformat(str(value).replace('Z', '+00:00'))
    except (TypeError, ValueError):
        return None
    return parsed.astimezone() if parsed.tzinfo is None else parsed


def load_events(records: Iterable[Dict[str, Any]]) -> List[VisitEvent]:
    """Validate raw log records, skipping the malformed ones."""
    events = []
    skipped = 0
    for record in records:
        try:
            events.append(VisitEvent.model_validate(record))
        except ValidationError:
            skipped += 1
    if skipped:
        logger.warning(f"Skipped {skipped} malformed analytics records")
    return events


def page_key(page: str) -> str:
    """Page path without its leading slash; the site root maps to 'index'."""
    key = page[1:] if page.startswith("/") else page
    return key or "index"


def get_popular_pages(events: List[VisitEvent], limit: int = 10) -> List[Dict[str, Any]]:
    """Most visited page/version pairs, ties kept in order of first appearance."""
    page_count: Counter = Counter()
    for event in events:
        key = f"{event.page} ({event.version})" if event.version else event.page
        page_count[key] += 1

    ranked = sorted(page_count.items(), key=lambda item: item[1], reverse=True)
    return [{"page": page, "count": count} for page, count in ranked[:limit]]


def get_page_view_counts(events: List[VisitEvent]) -> Dict[str, Dict[str, int]]:
    """View counts per page split by version, with a '_total' per page."""
    view_counts: Dict[str, Dict[str, int]] = {}
    for event in events:
        versions = view_counts.setdefault(page_key(event.page), {})
        version = event.version or DEFAULT_VERSION
        versions[version] = versions.get(version, 0) + 1

    for versions in view_counts.values():
        versions[TOTAL_KEY] = sum(versions.values())

    return view_counts


def referer_source(referer: Optional[str]) -> str:
    """Hostname of the referring URL, or a synthetic bucket."""
    if not referer or not referer.strip():
        return DIRECT_SOURCE
    try:
        hostname = urlparse(referer.strip()).hostname
    except ValueError:
        hostname = None
    return hostname or UNKNOWN_SOURCE


def get_traffic_sources(events: List[VisitEvent], limit: int = 10) -> List[Dict[str, Any]]:
    """Referring hosts ranked by visit count."""
    source_count: Counter = Counter(referer_source(event.referer) for event in events)
    ranked = sorted(source_count.items(), key=lambda item: item[1], reverse=True)
    return [{"source": source, "count": count} for source, count in ranked[:limit]]


def get_human_vs_bot(events: List[VisitEvent], classifier: UserAgentClassifier) -> Dict[str, int]:
    counts = {"human": 0, "bot": 0}
    for event in events:
        counts[classifier.classify(event.user_agent)] += 1
    return counts


def compute_stats(
    records: Iterable[Dict[str, Any]],
    classifier: UserAgentClassifier,
    now: Optional[datetime] = None,
    recent_limit: int = 50,
    popular_limit: int = 10,
    sources_limit: int = 10,
) -> AnalyticsStats:
    """Derive aggregate statistics from raw log records.

    ``total`` counts every persisted record, including ones too malformed to
    contribute to the other figures.

    Args:
        records: Persisted visit records in log order
        classifier: Human/bot classifier
        now: Reference time for the day/week/month windows (default: now)
        recent_limit: Number of recent visits to return
        popular_limit: Number of popular pages to return
        sources_limit: Number of traffic sources to return

    Returns:
        AnalyticsStats
    """
    records = list(records)
    events = load_events(records)

    now = (now or datetime.now()).astimezone()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    week = today - timedelta(days=7)
    month = today - timedelta(days=30)

    stats = AnalyticsStats()
    stats.total = len(records)

    for event in events:
        visited_at = parse_timestamp(event.timestamp)
        if visited_at is None:
            continue
        if visited_at >= today:
            stats.today += 1
        if visited_at >= week:
            stats.week += 1
        if visited_at >= month:
            stats.month += 1

    stats.unique_visitors = len({event.ip_hash for event in events if event.ip_hash})
    stats.popular_pages = get_popular_pages(events, popular_limit)
    stats.page_view_counts = get_page_view_counts(events)
    stats.human_vs_bot = get_human_vs_bot(events, classifier)
    stats.traffic_sources = get_traffic_sources(events, sources_limit)

    recent = events[-recent_limit:] if recent_limit > 0 else []
    stats.recent_visits = [event.to_record() for event in reversed(recent)]

    return stats
