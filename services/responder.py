"""
Companion Responder - Reply generation and typing delay
=======================================================

This module combines the conversation length guard and the response
selector into the two operations presentation code calls:
``generate_response`` and ``compute_typing_delay``.
"""

import random
from dataclasses import dataclass
from typing import Optional, Sequence

from core.config import Config, ResponderConfig, TypingConfig
from core.logging import get_logger
from rules.engine import RuleBank
from rules.bank import default_rule_bank, load_rule_bank
from .conversation import Message
from .length_guard import LengthGuard
from .selector import ResponseSelector

logger = get_logger("services.responder")


@dataclass(frozen=True)
class ResponderResult:
    """
    Result of responder processing.

    Attributes:
        response (str): Reply text
        source (str): 'guard' or 'rules'
        rule (str): Name of the matched rule ('' when the guard fired)
        typing_delay_ms (int): Delay before the reply should appear
    """
    response: str
    source: str
    rule: str = ""
    typing_delay_ms: int = 0


class CompanionResponder:
    """
    Reply generator for the chat companion.

    Generation reads the history and never modifies it; the only
    non-determinism is the selector's exhaustion tie-break.

    Example:
        responder = CompanionResponder.from_config(config)
        reply = responder.generate_response("hello", conversation.messages)
        delay = responder.compute_typing_delay("hello")
    """

    def __init__(
        self,
        rule_bank: Optional[RuleBank] = None,
        responder_config: Optional[ResponderConfig] = None,
        typing_config: Optional[TypingConfig] = None,
        rng: Optional[random.Random] = None
    ):
        """
        Initialize the responder.

        Args:
            rule_bank: Rules to match (built-in bank by default)
            responder_config: Guard and fallback settings
            typing_config: Typing delay settings
            rng: Random source for the selector
        """
        self.responder_config = responder_config or ResponderConfig()
        self.typing_config = typing_config or TypingConfig()
        self.rule_bank = rule_bank if rule_bank is not None else default_rule_bank()

        if rng is None:
            rng = random.Random(self.responder_config.seed)

        self.guard = LengthGuard(
            threshold=self.responder_config.length_guard_threshold,
            message=self.responder_config.length_guard_message,
            gratitude_marker=self.responder_config.gratitude_marker,
        )
        self.selector = ResponseSelector(
            self.rule_bank,
            rng=rng,
            acknowledgment=self.responder_config.fallback_reply,
        )

    @classmethod
    def from_config(cls, config: Config, rng: Optional[random.Random] = None) -> "CompanionResponder":
        """
        Build a responder from application configuration.

        Raises:
            RuleError: If the configured rules file is invalid
        """
        rule_bank = load_rule_bank(config.responder.rules_file)
        logger.info(f"Responder ready with {len(rule_bank)} rules")
        return cls(
            rule_bank=rule_bank,
            responder_config=config.responder,
            typing_config=config.typing,
            rng=rng,
        )

    def generate_response(self, utterance: str, history: Sequence[Message]) -> str:
        """
        Generate the companion's reply.

        Args:
            utterance: Raw user text
            history: Conversation so far, including the user's message

        Returns:
            Reply text (never empty)
        """
        return self.respond(utterance, history).response

    def respond(self, utterance: str, history: Sequence[Message]) -> ResponderResult:
        """
        Generate a reply with details about how it was chosen.

        Args:
            utterance: Raw user text
            history: Conversation so far, including the user's message

        Returns:
            ResponderResult with the reply and its typing delay
        """
        delay = self.compute_typing_delay(utterance)

        guarded = self.guard.check(utterance, history)
        if guarded is not None:
            return ResponderResult(response=guarded, source="guard", typing_delay_ms=delay)

        rule = self.rule_bank.match(utterance.lower())
        reply = self.selector.choose(rule, history)
        return ResponderResult(response=reply, source="rules", rule=rule.name, typing_delay_ms=delay)

    def compute_typing_delay(self, utterance: str) -> int:
        """
        Delay in milliseconds before a reply to ``utterance`` appears.

        Proportional to the utterance length, clamped to the configured
        bounds.
        """
        typing = self.typing_config
        return min(typing.max_delay_ms, max(typing.min_delay_ms, len(utterance) * typing.ms_per_char))


_default_responder: Optional[CompanionResponder] = None


def _get_default_responder() -> CompanionResponder:
    global _default_responder
    if _default_responder is None:
        _default_responder = CompanionResponder()
    return _default_responder


def generate_response(utterance: str, history: Sequence[Message]) -> str:
    """Generate a reply with the built-in rule bank and default settings."""
    return _get_default_responder().generate_response(utterance, history)


def compute_typing_delay(utterance: str) -> int:
    """Typing delay in milliseconds with default settings."""
    return _get_default_responder().compute_typing_delay(utterance)
