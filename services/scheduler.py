"""
Turn Scheduler - One exchange in flight at a time
=================================================

This module sequences a single exchange: the user's message is appended
immediately, the companion's reply is computed right away, and the reply
is appended only after a typing delay. While a reply is pending, new
submissions are dropped.

The timer primitive is pluggable so the same state machine runs under an
asyncio event loop (terminal and web UI), a blocking console loop, or a
manual timer in tests.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional

from core.logging import get_logger
from .conversation import Conversation, Message, Sender
from .responder import CompanionResponder

logger = get_logger("services.scheduler")


Timer = Callable[[int, Callable[[], None]], None]


def asyncio_timer(delay_ms: int, callback: Callable[[], None]) -> None:
    """Schedule ``callback`` on the running event loop after ``delay_ms``."""
    asyncio.get_running_loop().call_later(delay_ms / 1000, callback)


def blocking_timer(delay_ms: int, callback: Callable[[], None]) -> None:
    """Sleep for ``delay_ms`` then run ``callback`` in the calling thread."""
    time.sleep(delay_ms / 1000)
    callback()


class TurnState(Enum):
    """State of the current exchange."""
    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"


@dataclass(frozen=True)
class PendingReply:
    """
    An accepted submission waiting for delivery.

    The reply text is fixed when the submission is accepted.
    """
    user_message: Message
    reply: str
    delay_ms: int


class TurnScheduler:
    """
    Drives the Idle -> AwaitingReply -> Idle cycle for one conversation.

    There is no cancellation: once a reply is scheduled it is always
    delivered.

    Example:
        scheduler = TurnScheduler(conversation, responder, timer=asyncio_timer)
        scheduler.on_reply_delivered(lambda message: print(message.text))

        pending = scheduler.submit("hello")
        if pending is None:
            ...  # empty input, or a reply is still on its way
    """

    def __init__(
        self,
        conversation: Conversation,
        responder: CompanionResponder,
        timer: Optional[Timer] = None
    ):
        """
        Initialize the scheduler.

        Args:
            conversation: History this scheduler appends to
            responder: Reply generator
            timer: Deferred-call primitive (asyncio by default)
        """
        self.conversation = conversation
        self.responder = responder
        self._timer = timer or asyncio_timer
        self._state = TurnState.IDLE
        self._pending: Optional[PendingReply] = None
        self._callbacks: List[Callable[[Message], None]] = []

    @property
    def state(self) -> TurnState:
        return self._state

    @property
    def is_awaiting_reply(self) -> bool:
        return self._state == TurnState.AWAITING_REPLY

    @property
    def pending(self) -> Optional[PendingReply]:
        return self._pending

    def on_reply_delivered(self, callback: Callable[[Message], None]) -> None:
        """
        Register a callback for delivered companion messages.

        Args:
            callback: Function called with the appended message
        """
        self._callbacks.append(callback)

    def submit(self, text: str) -> Optional[PendingReply]:
        """
        Submit user text.

        Empty or whitespace-only text, and any text submitted while a
        reply is pending, is ignored.

        Args:
            text: Raw user input

        Returns:
            PendingReply if the submission was accepted, None otherwise

        Raises:
            Exception: Whatever the timer raised; the scheduler is back
                to IDLE so the next submission is accepted
        """
        trimmed = (text or "").strip()
        if not trimmed:
            logger.debug("Ignoring empty submission")
            return None

        if self._state == TurnState.AWAITING_REPLY:
            logger.debug("Ignoring submission while a reply is pending")
            return None

        user_message = self.conversation.append(Sender.USER, trimmed)
        self._state = TurnState.AWAITING_REPLY

        reply = self.responder.generate_response(trimmed, self.conversation.messages)
        delay_ms = self.responder.compute_typing_delay(trimmed)

        pending = PendingReply(user_message=user_message, reply=reply, delay_ms=delay_ms)
        self._pending = pending

        try:
            self._timer(delay_ms, lambda: self._deliver(pending))
        except Exception as e:
            # The user message stays in history; only the turn is released
            logger.error(f"Failed to schedule reply: {e}")
            self._pending = None
            self._state = TurnState.IDLE
            raise

        logger.info(f"Accepted submission, reply due in {delay_ms}ms")
        return pending

    def _deliver(self, pending: PendingReply) -> Message:
        message = self.conversation.append(Sender.COMPANION, pending.reply)
        self._pending = None
        self._state = TurnState.IDLE

        logger.debug(f"Delivered reply {message.id}")

        for callback in self._callbacks:
            try:
                callback(message)
            except Exception as e:
                logger.error(f"Reply callback error: {e}", exc_info=True)

        return message
