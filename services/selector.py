"""
Response Selector - Fresh-first reply selection
===============================================

Maps an utterance and the conversation so far to a reply from the
first matching rule, preferring replies the companion has not said yet.
"""

import random
from typing import Optional, Sequence

from rules.engine import Rule, RuleBank
from core.logging import get_logger
from .conversation import Message, companion_texts

logger = get_logger("services.selector")

DEFAULT_ACKNOWLEDGMENT = "I'm here and listening. Tell me more about that."


class ResponseSelector:
    """
    Chooses a reply from the rule bank.

    The first reply of the matched rule that has not appeared as a
    companion message wins. Once every reply has been used, one is drawn
    uniformly at random from the injected generator.

    Example:
        selector = ResponseSelector(default_rule_bank(), rng=random.Random(7))
        selector.select("hello", history=[])
        # "Hi! What's the vibe today?"
    """

    def __init__(
        self,
        rule_bank: RuleBank,
        rng: Optional[random.Random] = None,
        acknowledgment: str = DEFAULT_ACKNOWLEDGMENT
    ):
        """
        Initialize the selector.

        Args:
            rule_bank: Ordered rules to match against
            rng: Random source for the exhaustion tie-break
            acknowledgment: Reply used when a matched rule has no replies
        """
        self.rule_bank = rule_bank
        self.rng = rng or random.Random()
        self.acknowledgment = acknowledgment

    def select(self, utterance: str, history: Sequence[Message]) -> str:
        """
        Select a reply for an utterance.

        Args:
            utterance: Raw user text
            history: Conversation so far (read only)

        Returns:
            Reply text
        """
        return self.choose(self.rule_bank.match(utterance.lower()), history)

    def choose(self, rule: Rule, history: Sequence[Message]) -> str:
        """
        Choose a reply from an already matched rule.

        Args:
            rule: Matched rule
            history: Conversation so far (read only)
        """
        replies = rule.replies

        if not replies:
            logger.warning(f"Rule '{rule.name}' matched with an empty reply set")
            return self.acknowledgment

        used = companion_texts(history)
        for reply in replies:
            if reply not in used:
                logger.debug(f"Rule '{rule.name}' matched, fresh reply selected")
                return reply

        logger.debug(f"Rule '{rule.name}' matched, all {len(replies)} replies used")
        return self.rng.choice(replies)
