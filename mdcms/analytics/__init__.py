"""
Visit Analytics

Buffered visit recording, periodic durable flush, and aggregate statistics.
"""

from .buffer import TelemetryBuffer
from .models import AnalyticsStats, VisitEvent
from .scheduler import FlushScheduler
from .user_agents import UserAgentClassifier

__all__ = ["TelemetryBuffer", "FlushScheduler", "UserAgentClassifier", "AnalyticsStats", "VisitEvent"]
