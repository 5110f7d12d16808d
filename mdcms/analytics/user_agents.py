"""
User agent classification for visit analytics.
"""

import logging
import re
from typing import Iterable, Optional

logger = logging.getLogger(__name__)

HUMAN = "human"
BOT = "bot"


class UserAgentClassifier:
    """Classifies visits as human or bot by matching user agent patterns."""

    def __init__(self, patterns: Iterable[str]):
        """Initialize the classifier.

        Args:
            patterns: Regular expressions matched case-insensitively anywhere
                in the user agent
        """
        valid = []
        for pattern in patterns:
            try:
                re.compile(pattern)
            except re.error as e:
                logger.warning(f"Ignoring invalid bot pattern {pattern!r}: {e}")
                continue
            valid.append(f"(?:{pattern})")
        self.patterns = valid
        self._regex = re.compile("|".join(valid), re.IGNORECASE) if valid else None

    def is_bot(self, user_agent: Optional[str]) -> bool:
        if not user_agent or not user_agent.strip():
            return True
        if self._regex is None:
            return False
        return self._regex.search(user_agent) is not None

    def classify(self, user_agent: Optional[str]) -> str:
        return BOT if self.is_bot(user_agent) else HUMAN
