"""
Factory for creating the analytics module.
"""
from config_manager import AnalyticsConfig, PathsConfig
from .buffer import TelemetryBuffer
from .scheduler import FlushScheduler
from .user_agents import UserAgentClassifier


def create_analytics_module(
    paths_config: PathsConfig,
    analytics_config: AnalyticsConfig
) -> dict:
    """Create analytics module with buffer and flush scheduler.

    The scheduler is created stopped; the server context starts it.

    Args:
        paths_config: Path settings (analytics log location)
        analytics_config: Analytics settings

    Returns:
        Dictionary containing the buffer and scheduler
    """
    classifier = UserAgentClassifier(analytics_config.bot_patterns)

    buffer = TelemetryBuffer(
        analytics_file=paths_config.analytics_file,
        classifier=classifier,
        recent_visits_limit=analytics_config.recent_visits_limit,
        popular_pages_limit=analytics_config.popular_pages_limit,
        traffic_sources_limit=analytics_config.traffic_sources_limit
    )

    scheduler = FlushScheduler(buffer, interval=analytics_config.flush_interval_seconds)

    return {
        "service": buffer,
        "scheduler": scheduler
    }
