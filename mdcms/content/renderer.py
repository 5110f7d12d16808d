"""
Page rendering services for resolved documents.
"""
import posixpath
import re
from typing import Any, Dict
from urllib.parse import quote

import markdown

from .models import ParsedContent

_OBSIDIAN_IMAGE_RE = re.compile(r"!\[\['([^']+)'\]\]")


def preprocess_obsidian_images(text: str) -> str:
    """Convert Obsidian image embeds ``![['dir/img.png']]`` to markdown images."""
    def _replace(match: re.Match) -> str:
        image_path = match.group(1)
        filename = posixpath.basename(image_path)
        alt_text = posixpath.splitext(filename)[0]
        encoded_path = "/".join(quote(segment, safe="") for segment in image_path.split("/"))
        return f"![{alt_text}](/{encoded_path})"

    return _OBSIDIAN_IMAGE_RE.sub(_replace, text)


class PageRenderer:
    """Service for rendering documents into template context."""

    def __init__(self, default_theme: str = "default"):
        self.default_theme = default_theme

    def render_markdown(self, md_text: str) -> str:
        """Convert Markdown → HTML (GitHub-flavoured-ish)."""
        return markdown.markdown(
            md_text,
            extensions=[
                "fenced_code",
                "tables",
                "toc",
                "attr_list",
            ],
        )

    def render_page(self, content: ParsedContent, page_name: str) -> Dict[str, Any]:
        """Build the template context for one document revision.

        Args:
            content: The resolved revision
            page_name: Base name used in URLs and as fallback title

        Returns:
            Dictionary consumed by the page template
        """
        html_content = self.render_markdown(preprocess_obsidian_images(content.body))

        versions = []
        if content.show_versions():
            for ref in content.revisions:
                versions.append({
                    "revision": ref.revision,
                    "url": f"/{page_name}/v{ref.revision}",
                    "active": ref.revision == content.revision,
                    "latest": content.is_latest and ref.revision == content.revision,
                })

        description = content.metadata.get("description")
        return {
            "title": content.get_title(page_name),
            "theme": content.metadata.get("theme") or self.default_theme,
            "description": str(description) if description else None,
            "html_content": html_content,
            "versions": versions,
        }
