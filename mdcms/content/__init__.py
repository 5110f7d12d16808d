"""
Content Module

Resolves versioned markdown documents and serves them as pages.
"""

from .factory import create_content_module
from .models import ParsedContent, RevisionRef
from .resolver import RevisionResolver

__all__ = ["create_content_module", "RevisionResolver", "ParsedContent", "RevisionRef"]
