"""
Front matter parsing for markdown documents.

A document may start with a YAML block delimited by ``---`` lines. Parsing
never raises: malformed input is reported through ``success=False`` with
empty metadata.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import yaml

_FRONT_MATTER_RE = re.compile(r"\A---[ \t]*\r?\n(.*?)^---[ \t]*(?:\r?\n|\Z)", re.DOTALL | re.MULTILINE)


@dataclass
class FrontMatterResult:
    """Result of splitting a raw document into metadata and body."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    body: str = ""
    success: bool = True
    error: Optional[str] = None


def parse_front_matter(text: str) -> FrontMatterResult:
    """Split ``text`` into YAML front matter and markdown body.

    Args:
        text: Raw document content

    Returns:
        FrontMatterResult; ``success`` is False when a front matter block is
        present but cannot be used.
    """
    # Strip a UTF-8 BOM so the opening delimiter is recognised
    if text.startswith("\ufeff"):
        text = text[1:]

    first_line = text.split("\n", 1)[0].rstrip("\r").rstrip()
    if first_line != "---":
        return FrontMatterResult(metadata={}, body=text)

    match = _FRONT_MATTER_RE.match(text)
    if not match:
        return FrontMatterResult(
            success=False,
            error="Unclosed front matter block (missing closing '---')",
        )

    try:
        data = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        return FrontMatterResult(success=False, error=f"Invalid YAML front matter: {e}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return FrontMatterResult(
            success=False,
            error=f"Front matter must be a mapping, got {type(data).__name__}",
        )

    return FrontMatterResult(metadata=data, body=text[match.end():])
