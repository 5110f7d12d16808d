"""
Factory for creating admin module.
"""
from pathlib import Path
from config_manager import AdminConfig
from mdcms.analytics.buffer import TelemetryBuffer
from mdcms.content.resolver import RevisionResolver
from .routes import create_admin_blueprint
from .services import AdminAuthenticator
from .sessions import SessionStore


def load_template(ui_dir: Path, name: str) -> str:
    """Load template HTML from the UI directory (no inline fallback)."""
    return (ui_dir / name).read_text(encoding='utf-8')


def create_admin_module(
    admin_config: AdminConfig,
    telemetry: TelemetryBuffer,
    resolver: RevisionResolver,
    ui_dir: Path,
    secure_cookies: bool = True
) -> dict:
    """Create admin module with session store and routes.

    Args:
        admin_config: Admin password and session settings
        telemetry: Analytics buffer for the dashboard
        resolver: Revision resolver for the page list
        ui_dir: Directory containing HTML templates
        secure_cookies: Whether the session cookie is HTTPS-only

    Returns:
        Dictionary containing the session store and blueprint
    """
    sessions = SessionStore(ttl_seconds=admin_config.session_ttl_seconds)
    authenticator = AdminAuthenticator(admin_config)

    blueprint = create_admin_blueprint(
        sessions=sessions,
        authenticator=authenticator,
        telemetry=telemetry,
        resolver=resolver,
        login_template=load_template(ui_dir, "admin-login.html"),
        dashboard_template=load_template(ui_dir, "admin-dashboard.html"),
        secure_cookies=secure_cookies
    )

    return {
        "service": sessions,
        "authenticator": authenticator,
        "blueprint": blueprint
    }
