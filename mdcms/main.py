"""
Flask application assembly for MDCMS.
"""
import logging
from pathlib import Path
from typing import Optional

from flask import Flask, render_template_string
from werkzeug.middleware.proxy_fix import ProxyFix

from config_manager import ConfigManager
from mdcms.admin.factory import create_admin_module, load_template
from mdcms.analytics.factory import create_analytics_module
from mdcms.content.factory import create_content_module
from mdcms.context import EXTENSION_KEY, ServerContext

logger = logging.getLogger(__name__)

UI_DIR = Path(__file__).parent.parent / "ui"


def create_app(config_manager: Optional[ConfigManager] = None, ui_dir: Path = UI_DIR) -> Flask:
    """Build the Flask app and its ServerContext.

    Background work is not started here; call ``get_context(app).start()``
    once the server is about to run.

    Args:
        config_manager: Loaded configuration (default: ``config.json`` in cwd)
        ui_dir: Directory containing HTML templates

    Returns:
        Configured Flask application
    """
    config_manager = config_manager or ConfigManager()
    app_config = config_manager.get_app_config()
    admin_config = config_manager.get_admin_config()
    paths_config = config_manager.get_paths_config()
    analytics_config = config_manager.get_analytics_config()

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_for   = 1,     # trust 1 hop for X-Forwarded-For (visitor hashing)
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1)     # trust 1 hop for X-Forwarded-Host

    # -------------------------------------------------------------------------
    # Modules
    # -------------------------------------------------------------------------

    paths_config.content_dir.mkdir(parents=True, exist_ok=True)

    analytics_module = create_analytics_module(paths_config, analytics_config)

    content_module = create_content_module(
        content_dir=paths_config.content_dir,
        themes_dir=paths_config.themes_dir,
        ui_dir=ui_dir,
        telemetry=analytics_module["service"],
        default_theme=app_config.default_theme
    )

    admin_module = create_admin_module(
        admin_config=admin_config,
        telemetry=analytics_module["service"],
        resolver=content_module["service"],
        ui_dir=ui_dir,
        secure_cookies=app_config.secure_cookies
    )

    if not admin_module["authenticator"].enabled:
        logger.warning("No admin password configured; admin login is disabled")

    app.register_blueprint(admin_module["blueprint"])
    app.register_blueprint(content_module["blueprint"])

    app.extensions[EXTENSION_KEY] = ServerContext(
        resolver=content_module["service"],
        telemetry=analytics_module["service"],
        scheduler=analytics_module["scheduler"],
        sessions=admin_module["service"]
    )

    # -------------------------------------------------------------------------
    # Error pages
    # -------------------------------------------------------------------------

    not_found_template = load_template(ui_dir, "404.html")

    @app.errorhandler(404)
    def not_found(error):
        """Render the 404 page."""
        return render_template_string(not_found_template), 404

    @app.get("/actuator/health")
    def health():
        """Health check endpoint for monitoring tools."""
        context = app.extensions[EXTENSION_KEY]
        return {
            "status": "UP",
            "service": "mdcms",
            "pending_visits": len(context.telemetry.pending()),
            "flush_scheduler": "running" if context.scheduler.running else "stopped"
        }

    return app
