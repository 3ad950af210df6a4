"""
Conversation Length Guard - Steers long sessions toward a new topic.
"""

from typing import Optional, Sequence

from core.logging import get_logger
from .conversation import Message

logger = get_logger("services.length_guard")

DEFAULT_GUARD_MESSAGE = "We've covered a bunch! Anything else you'd like to explore together?"


class LengthGuard:
    """
    Overrides rule matching once a conversation runs long.

    The guard fires when the history holds more than ``threshold``
    messages, unless the utterance contains the gratitude marker
    (case-insensitive substring).
    """

    def __init__(
        self,
        threshold: int = 6,
        message: str = DEFAULT_GUARD_MESSAGE,
        gratitude_marker: str = "thank"
    ):
        self.threshold = threshold
        self.message = message
        self.gratitude_marker = gratitude_marker.lower()

    def is_grateful(self, utterance: str) -> bool:
        return self.gratitude_marker in utterance.lower()

    def check(self, utterance: str, history: Sequence[Message]) -> Optional[str]:
        """
        Return the guard message if the guard fires, else None.

        Args:
            utterance: Raw user text
            history: Conversation so far
        """
        if len(history) > self.threshold and not self.is_grateful(utterance):
            logger.debug(f"Length guard fired at {len(history)} messages")
            return self.message
        return None
