"""
MDCMS

Serves versioned markdown documents and keeps buffered visit analytics.
"""

__version__ = "1.0.0"
