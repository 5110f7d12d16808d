"""
Content Routes

Flask routes serving documents, their revisions, themes and page assets.
"""

import hashlib
import logging
import re
from pathlib import Path
from typing import Optional

from flask import Blueprint, abort, render_template_string, request, send_from_directory
from werkzeug.security import safe_join

from mdcms.analytics.buffer import TelemetryBuffer
from .models import ParsedContent
from .renderer import PageRenderer
from .resolver import RevisionResolver

logger = logging.getLogger(__name__)

_VERSION_SEGMENT_RE = re.compile(r"v([1-9]\d*)")
BLOCKED_ASSET_SUFFIXES = (".md", ".json")


def hash_visitor_address(address: Optional[str]) -> str:
    """SHA-256 of the visitor address; raw addresses are never stored."""
    return hashlib.sha256((address or "unknown").encode('utf-8')).hexdigest()


def create_content_blueprint(
    resolver: RevisionResolver,
    renderer: PageRenderer,
    telemetry: TelemetryBuffer,
    page_template: str,
    themes_dir: Path
) -> Blueprint:
    """Create content blueprint with routes.

    Args:
        resolver: Revision resolver over the content directory
        renderer: Page renderer
        telemetry: Buffer receiving one visit per served page
        page_template: HTML template for document pages
        themes_dir: Directory holding theme stylesheets

    Returns:
        Flask blueprint with content routes
    """
    bp = Blueprint('content', __name__)

    def track_visit(page_path: str, content: ParsedContent) -> None:
        telemetry.record(
            page=page_path,
            version=f"v{content.revision}",
            ip_hash=hash_visitor_address(request.remote_addr),
            user_agent=request.headers.get("User-Agent"),
            referer=request.headers.get("Referer"),
        )

    def render(content: ParsedContent, page_name: str) -> str:
        context = renderer.render_page(content, page_name)
        return render_template_string(page_template, **context)

    def serve_page(page_name: str, page_path: str, revision: Optional[int] = None):
        content = resolver.get_revision(page_name, revision)
        if content is None:
            logger.debug(f"No document for {page_name!r} revision {revision}")
            abort(404)
        track_visit(page_path, content)
        return render(content, page_name)

    @bp.get("/")
    def index():
        """Serve the index document."""
        return serve_page("index", "/")

    @bp.get("/<page>")
    def page(page):
        """Serve the latest revision of a document."""
        return serve_page(page, f"/{page}")

    @bp.get("/<page>/<path:subpath>")
    def page_resource(page, subpath):
        """Serve a specific revision (``/page/v2``) or a page asset."""
        version_match = _VERSION_SEGMENT_RE.fullmatch(subpath)
        if version_match:
            return serve_page(page, f"/{page}", int(version_match.group(1)))
        return serve_asset(page, subpath)

    def serve_asset(page: str, filename: str):
        if filename.lower().endswith(BLOCKED_ASSET_SUFFIXES):
            abort(404)
        page_dir = safe_join(str(resolver.content_dir), page)
        if page_dir is None or not Path(page_dir).is_dir():
            abort(404)
        # send_from_directory rejects paths escaping page_dir
        return send_from_directory(Path(page_dir).resolve(), filename)

    @bp.get("/themes/<path:filename>")
    def theme(filename):
        """Serve theme stylesheets."""
        return send_from_directory(themes_dir, filename)

    return bp
