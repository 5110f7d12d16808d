#!/usr/bin/env python3
"""
Runner script for the MDCMS Flask application.
Loads configuration, starts the analytics flush, and flushes again on exit.
"""

import argparse
import signal
import sys
from pathlib import Path

# Add the current directory to Python path
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

from config_manager import ConfigManager
from mdcms.context import get_context
from mdcms.logging_config import get_logger, setup_logging, stop_logging
from mdcms.main import create_app

logger = get_logger("mdcms.run")


def install_signal_handlers(context) -> None:
    """Flush analytics and exit on SIGINT/SIGTERM."""
    def handle_signal(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}")
        context.shutdown()
        stop_logging()
        sys.exit(0)

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)


def main() -> int:
    parser = argparse.ArgumentParser(description="Serve versioned markdown content with visit analytics")
    parser.add_argument("--config", type=str, default="config.json", help="Path to config.json")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    config_manager = ConfigManager(args.config)
    app_config = config_manager.get_app_config()
    ssl_config = config_manager.get_ssl_config()
    paths_config = config_manager.get_paths_config()

    # Override configuration with command line arguments
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(app_config.debug)

    ssl_context = None
    if ssl_config.enabled():
        cert, key = Path(ssl_config.cert), Path(ssl_config.key)
        if not cert.is_file() or not key.is_file():
            logger.error(f"SSL certificate error: {cert} or {key} not found")
            logger.error("For development, you can generate self-signed certificates with: "
                         "mkdir ssl && openssl req -x509 -newkey rsa:4096 -keyout ssl/key.pem "
                         "-out ssl/cert.pem -days 365 -nodes")
            stop_logging()
            return 1
        ssl_context = (str(cert), str(key))

    app = create_app(config_manager)
    context = get_context(app)
    install_signal_handlers(context)
    context.start()

    scheme = "https" if ssl_context else "http"
    logger.info(f"Serving content from {paths_config.content_dir}")
    logger.info(f"Analytics log: {paths_config.analytics_file}")
    logger.info(f"MDCMS server running on {scheme}://{app_config.host}:{app_config.port}")

    try:
        app.run(
            host=app_config.host,
            port=app_config.port,
            debug=app_config.debug,
            ssl_context=ssl_context,
            # The reloader would run a second process with its own buffer
            use_reloader=False
        )
    finally:
        context.shutdown()
        stop_logging()
    return 0


if __name__ == "__main__":
    sys.exit(main())
