"""
Tests for analytics aggregation helpers and user agent classification.
"""

import pytest
from datetime import datetime, timedelta, timezone

from config_manager import DEFAULT_BOT_PATTERNS
from mdcms.analytics.models import VisitEvent
from mdcms.analytics.stats import (
    compute_stats,
    get_page_view_counts,
    get_popular_pages,
    load_events,
    page_key,
    parse_timestamp,
    referer_source,
)
from mdcms.analytics.user_agents import UserAgentClassifier

CHROME_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0 Safari/537.36"
GOOGLEBOT_UA = "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)"


def visit(page, version=None, **kwargs):
    return VisitEvent(page=page, version=version, timestamp=kwargs.pop("timestamp", "2025-01-01T00:00:00Z"), **kwargs)


class TestUserAgentClassifier:
    """Test human/bot classification."""

    @pytest.fixture
    def classifier(self):
        return UserAgentClassifier(DEFAULT_BOT_PATTERNS)

    def test_browser_is_human(self, classifier):
        assert classifier.classify(CHROME_UA) == "human"

    def test_crawlers_are_bots(self, classifier):
        """Test common crawlers and HTTP tools."""
        for ua in [GOOGLEBOT_UA, "curl/8.4.0", "python-requests/2.31", "Wget/1.21", "Baiduspider"]:
            assert classifier.is_bot(ua), ua

    def test_missing_user_agent_is_bot(self, classifier):
        assert classifier.is_bot(None)
        assert classifier.is_bot("  ")

    def test_patterns_are_configurable(self):
        """Test that the pattern list is not hard-wired."""
        classifier = UserAgentClassifier([r"internal-checker/\d+"])
        assert classifier.is_bot("Internal-Checker/3")
        assert not classifier.is_bot(GOOGLEBOT_UA)

    def test_invalid_pattern_ignored(self):
        """Test that a broken regex is skipped instead of raising."""
        classifier = UserAgentClassifier(["(unclosed", "bot"])
        assert classifier.patterns == ["(?:bot)"]
        assert classifier.is_bot(GOOGLEBOT_UA)


class TestAggregationHelpers:
    """Test the individual aggregations."""

    def test_page_key(self):
        assert page_key("/about") == "about"
        assert page_key("/") == "index"
        assert page_key("notes") == "notes"

    def test_page_view_counts_split_by_version(self):
        """Test per-version counts with a '_total' sum."""
        events = [
            visit("/about", "v1"),
            visit("/about", "v2"),
            visit("/about", "v2"),
            visit("/", "v1"),
            visit("/faq"),
        ]
        counts = get_page_view_counts(events)
        assert counts["about"] == {"v1": 1, "v2": 2, "_total": 3}
        assert counts["index"] == {"v1": 1, "_total": 1}
        assert counts["faq"] == {"v1": 1, "_total": 1}

    def test_popular_pages_ranking_and_ties(self):
        """Test descending order with ties kept in discovery order."""
        events = [
            visit("/b", "v1"),
            visit("/a", "v1"),
            visit("/c"),
            visit("/a", "v1"),
            visit("/c"),
        ]
        assert get_popular_pages(events) == [
            {"page": "/a (v1)", "count": 2},
            {"page": "/c", "count": 2},
            {"page": "/b (v1)", "count": 1},
        ]

    def test_popular_pages_limit(self):
        events = [visit(f"/p{i}") for i in range(15)]
        assert len(get_popular_pages(events, limit=10)) == 10

    def test_referer_source(self):
        """Test hostname extraction and synthetic buckets."""
        assert referer_source("https://Example.com/path?q=1") == "example.com"
        assert referer_source(None) == "direct"
        assert referer_source("") == "direct"
        assert referer_source("not a url") == "unknown"

    def test_parse_timestamp_variants(self):
        """Test 'Z' suffix, offsets, and garbage."""
        assert parse_timestamp("2025-01-01T00:00:00Z") == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp("2025-01-01T08:00:00+08:00") == datetime(2025, 1, 1, tzinfo=timezone.utc)
        assert parse_timestamp("yesterday") is None
        assert parse_timestamp("2025-01-01T00:00:00").tzinfo is not None

    def test_load_events_skips_invalid(self):
        events = load_events([{"page": "/a", "timestamp": "t"}, {"page": "/b"}, 42])
        assert [event.page for event in events] == ["/a"]


class TestComputeStatsWindows:
    """Test calendar-day windows."""

    def test_window_boundaries(self):
        """Test counting against local midnight, midnight-7d and midnight-30d."""
        now = datetime(2025, 6, 15, 12, 0).astimezone()
        midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
        records = [
            {"page": "/a", "timestamp": (midnight + timedelta(minutes=1)).isoformat()},
            {"page": "/a", "timestamp": (midnight - timedelta(minutes=1)).isoformat()},
            {"page": "/a", "timestamp": (midnight - timedelta(days=7, minutes=1)).isoformat()},
            {"page": "/a", "timestamp": (midnight - timedelta(days=30, minutes=1)).isoformat()},
        ]

        stats = compute_stats(records, UserAgentClassifier([]), now=now)
        assert stats.total == 4
        assert stats.today == 1
        assert stats.week == 2
        assert stats.month == 3

    def test_unique_visitors_and_bots(self):
        """Test distinct visitor hashes and human/bot split."""
        records = [
            {"page": "/a", "ipHash": "h1", "userAgent": CHROME_UA, "timestamp": "2025-01-01T00:00:00Z"},
            {"page": "/a", "ipHash": "h1", "userAgent": CHROME_UA, "timestamp": "2025-01-01T00:00:00Z"},
            {"page": "/a", "ipHash": "h2", "userAgent": GOOGLEBOT_UA, "timestamp": "2025-01-01T00:00:00Z"},
        ]
        stats = compute_stats(records, UserAgentClassifier(DEFAULT_BOT_PATTERNS))
        assert stats.unique_visitors == 2
        assert stats.human_vs_bot == {"human": 2, "bot": 1}

    def test_to_dict_keys(self):
        stats = compute_stats([], UserAgentClassifier([]))
        assert set(stats.to_dict()) == {
            "total", "today", "week", "month", "unique_visitors", "popular_pages",
            "page_view_counts", "human_vs_bot", "traffic_sources", "recent_visits",
        }

    def test_total_counts_every_persisted_record(self):
        """Test that unreadable records still count toward the log total."""
        records = [
            {"page": "/a", "timestamp": "2025-01-01T00:00:00Z"},
            "garbage",
            {"timestamp": "2025-01-01T00:00:00Z"},
        ]
        stats = compute_stats(records, UserAgentClassifier([]))
        assert stats.total == 3
        assert stats.page_view_counts == {"a": {"v1": 1, "_total": 1}}
