"""
Admin services for authentication and dashboard data.
"""
import hmac
import logging
from typing import Any, Dict, List

import bcrypt

from config_manager import AdminConfig
from mdcms.content.models import RevisionRef

logger = logging.getLogger(__name__)


class AdminAuthenticator:
    """Checks the admin password against the configured hash or secret."""

    def __init__(self, admin_config: AdminConfig):
        self.admin_config = admin_config

    @property
    def enabled(self) -> bool:
        return self.admin_config.login_enabled()

    def check_password(self, password: str) -> bool:
        """Check if the provided password matches the configured one."""
        if not password or not self.enabled:
            return False

        if self.admin_config.password_hash:
            try:
                return bcrypt.checkpw(password.encode('utf-8'), self.admin_config.password_hash.encode('utf-8'))
            except ValueError:
                logger.error("Configured admin password_hash is not a valid bcrypt hash")
                return False

        return hmac.compare_digest(password.encode('utf-8'), self.admin_config.password.encode('utf-8'))


def build_page_rows(
    documents: Dict[str, List[RevisionRef]],
    view_counts: Dict[str, Dict[str, int]]
) -> List[Dict[str, Any]]:
    """Flatten documents into dashboard table rows.

    The first row of a document carries its name and total views; later rows
    are its remaining revisions with per-revision views.

    Args:
        documents: Base name to ascending revisions
        view_counts: Per-page view counts from the analytics stats

    Returns:
        List of row dictionaries
    """
    rows = []
    for page, revisions in documents.items():
        latest = max(ref.revision for ref in revisions)
        page_views = view_counts.get(page, {})
        single = len(revisions) == 1

        for index, ref in enumerate(revisions):
            is_latest = ref.revision == latest
            if (index == 0 and single) or is_latest:
                url_path = page
            else:
                url_path = f"{page}/v{ref.revision}"

            rows.append({
                "page": page,
                "revision": ref.revision,
                "is_first": index == 0,
                "is_latest": is_latest,
                "views": page_views.get("_total", 0) if index == 0 else page_views.get(f"v{ref.revision}", 0),
                "url_path": url_path,
            })
    return rows
