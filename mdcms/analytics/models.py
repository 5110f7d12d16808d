"""
Data Models for Visit Analytics

Visit events are stored in the analytics log with the camelCase keys the
log has always used (``ipHash``, ``userAgent``); the Python side uses
snake_case field names.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VisitEvent(BaseModel):
    """A single served page view."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    page: str = Field(description="Page path, e.g. '/about' or '/'")
    version: Optional[str] = Field(default=None, description="Version label, e.g. 'v2'")
    ip_hash: Optional[str] = Field(default=None, alias="ipHash", description="SHA-256 of the visitor address")
    user_agent: Optional[str] = Field(default=None, alias="userAgent", description="User-Agent header")
    referer: Optional[str] = Field(default=None, description="Referer header")
    timestamp: str = Field(description="Server capture time, ISO-8601")

    def to_record(self) -> Dict[str, Any]:
        """Convert to the persisted log record (absent values omitted)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class AnalyticsLog(BaseModel):
    """Top-level shape of the persisted analytics file."""

    visits: List[Any] = Field(default_factory=list)


@dataclass
class AnalyticsStats:
    """Aggregate statistics derived from the persisted log."""

    total: int = 0
    today: int = 0
    week: int = 0
    month: int = 0
    unique_visitors: int = 0
    popular_pages: List[Dict[str, Any]] = field(default_factory=list)
    page_view_counts: Dict[str, Dict[str, int]] = field(default_factory=dict)
    human_vs_bot: Dict[str, int] = field(default_factory=lambda: {"human": 0, "bot": 0})
    traffic_sources: List[Dict[str, Any]] = field(default_factory=list)
    recent_visits: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total": self.total,
            "today": self.today,
            "week": self.week,
            "month": self.month,
            "unique_visitors": self.unique_visitors,
            "popular_pages": self.popular_pages,
            "page_view_counts": self.page_view_counts,
            "human_vs_bot": self.human_vs_bot,
            "traffic_sources": self.traffic_sources,
            "recent_visits": self.recent_visits
        }
