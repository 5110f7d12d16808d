"""
Data Models for Content

Defines the data structures returned by the revision resolver.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass(frozen=True)
class RevisionRef:
    """One stored revision of a document."""

    revision: int
    filename: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"version": self.revision, "file": self.filename}


@dataclass
class ParsedContent:
    """A resolved revision, parsed into body and front matter."""

    body: str
    metadata: Dict[str, Any] = field(default_factory=dict)
    revision: int = 1
    revisions: List[RevisionRef] = field(default_factory=list)
    is_latest: bool = True

    def get_title(self, fallback: str) -> str:
        title = self.metadata.get("title")
        return str(title) if title else fallback

    def show_versions(self) -> bool:
        """Whether the revision navigation should be rendered."""
        return self.metadata.get("public-versions") is not False and len(self.revisions) > 1
