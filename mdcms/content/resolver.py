"""
Revision resolver for versioned markdown documents.

A document ``about`` is stored as ``about.md`` (revision 1) and optionally
``about.v2.md``, ``about.v3.md`` ... in the content directory. The directory
is scanned on every call; nothing is cached.
"""

import logging
import os
import re
from pathlib import Path
from typing import Dict, List, Optional

from .front_matter import parse_front_matter
from .models import ParsedContent, RevisionRef

logger = logging.getLogger(__name__)

MARKDOWN_SUFFIX = ".md"
_DOCUMENT_RE = re.compile(r"^(.+?)(?:\.v([1-9]\d*))?\.md$")


class RevisionResolver:
    """Maps a base name and optional revision onto a stored file."""

    def __init__(self, content_dir: Path):
        """Initialize the resolver.

        Args:
            content_dir: Directory holding the markdown documents
        """
        self.content_dir = Path(content_dir)

    def _list_files(self) -> Optional[List[str]]:
        """List regular file names in the content directory, or None if unreadable."""
        try:
            with os.scandir(self.content_dir) as entries:
                return sorted(entry.name for entry in entries if entry.is_file())
        except OSError as e:
            logger.debug(f"Content directory {self.content_dir} is not readable: {e}")
            return None

    def list_revisions(self, base_name: str) -> List[RevisionRef]:
        """List the revisions of one document, ascending by revision number.

        Args:
            base_name: Unversioned document name

        Returns:
            List of RevisionRef; empty when the document does not exist
        """
        files = self._list_files()
        if not files or not base_name:
            return []

        revisions: Dict[int, RevisionRef] = {}
        unnumbered = f"{base_name}{MARKDOWN_SUFFIX}"
        if unnumbered in files:
            revisions[1] = RevisionRef(1, unnumbered)

        pattern = re.compile(rf"^{re.escape(base_name)}\.v([1-9]\d*)\.md$")
        for name in files:
            match = pattern.match(name)
            if not match:
                continue
            number = int(match.group(1))
            if number in revisions:
                logger.debug(f"Ignoring {name}: revision {number} already provided by {revisions[number].filename}")
                continue
            revisions[number] = RevisionRef(number, name)

        return [revisions[number] for number in sorted(revisions)]

    def get_revision(self, base_name: str, revision: Optional[int] = None) -> Optional[ParsedContent]:
        """Load and parse one revision of a document.

        Args:
            base_name: Unversioned document name
            revision: Revision number, or None for the latest revision

        Returns:
            ParsedContent, or None when the document or requested revision is
            absent, unreadable, or has malformed front matter
        """
        revisions = self.list_revisions(base_name)
        if not revisions:
            return None

        if revision is None:
            target = revisions[-1]
        else:
            target = next((ref for ref in revisions if ref.revision == int(revision)), None)
            if target is None:
                return None

        file_path = self.content_dir / target.filename
        try:
            raw = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read {file_path}: {e}")
            return None

        parsed = parse_front_matter(raw)
        if not parsed.success:
            logger.warning(f"Malformed front matter in {file_path}: {parsed.error}")
            return None

        return ParsedContent(
            body=parsed.body,
            metadata=parsed.metadata,
            revision=target.revision,
            revisions=revisions,
            is_latest=target.revision == revisions[-1].revision,
        )

    def list_all_documents(self) -> Dict[str, List[RevisionRef]]:
        """Group every markdown file in the content directory by base name.

        Returns:
            Mapping of base name to its revisions (ascending), base names sorted
        """
        files = self._list_files()
        if not files:
            return {}

        documents: Dict[str, Dict[int, RevisionRef]] = {}
        for name in files:
            match = _DOCUMENT_RE.match(name)
            if not match:
                continue
            base_name = match.group(1)
            number = int(match.group(2)) if match.group(2) else 1
            revisions = documents.setdefault(base_name, {})
            existing = revisions.get(number)
            # The unnumbered file wins over an explicit .v1 file
            if existing is None or (number == 1 and name == f"{base_name}{MARKDOWN_SUFFIX}"):
                revisions[number] = RevisionRef(number, name)

        return {
            base_name: [revisions[number] for number in sorted(revisions)]
            for base_name, revisions in sorted(documents.items())
        }
