"""
Factory for creating content module.
"""
from pathlib import Path
from mdcms.analytics.buffer import TelemetryBuffer
from .renderer import PageRenderer
from .resolver import RevisionResolver
from .routes import create_content_blueprint


def get_page_template(ui_dir: Path) -> str:
    """Load the document page template HTML from the UI directory."""
    return (ui_dir / "page.html").read_text(encoding='utf-8')


def create_content_module(
    content_dir: Path,
    themes_dir: Path,
    ui_dir: Path,
    telemetry: TelemetryBuffer,
    default_theme: str = "default"
) -> dict:
    """Create content module with resolver, renderer and routes.

    Args:
        content_dir: Directory containing the markdown documents
        themes_dir: Directory containing theme stylesheets
        ui_dir: Directory containing HTML templates
        telemetry: Buffer receiving page visits
        default_theme: Theme used when a document does not name one

    Returns:
        Dictionary containing the resolver, renderer and blueprint
    """
    resolver = RevisionResolver(content_dir)
    renderer = PageRenderer(default_theme=default_theme)

    blueprint = create_content_blueprint(
        resolver=resolver,
        renderer=renderer,
        telemetry=telemetry,
        page_template=get_page_template(ui_dir),
        themes_dir=Path(themes_dir).resolve()
    )

    return {
        "service": resolver,
        "renderer": renderer,
        "blueprint": blueprint
    }
