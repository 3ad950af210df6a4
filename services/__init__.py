"""
Services Module - Reply generation and turn sequencing
======================================================

This module provides the chat companion's services:
- Conversation: Messages and append-only history
- Response Selector: Fresh-first reply choice from the rule bank
- Length Guard: Topic nudge for long sessions
- Companion Responder: generate_response / compute_typing_delay
- Turn Scheduler: One reply in flight, delivered after a typing delay
"""

from .conversation import Conversation, Message, Sender
from .selector import ResponseSelector
from .length_guard import LengthGuard
from .responder import (
    CompanionResponder,
    ResponderResult,
    generate_response,
    compute_typing_delay,
)
from .scheduler import (
    TurnScheduler,
    TurnState,
    PendingReply,
    asyncio_timer,
    blocking_timer,
)

__all__ = [
    "Conversation",
    "Message",
    "Sender",
    "ResponseSelector",
    "LengthGuard",
    "CompanionResponder",
    "ResponderResult",
    "generate_response",
    "compute_typing_delay",
    "TurnScheduler",
    "TurnState",
    "PendingReply",
    "asyncio_timer",
    "blocking_timer",
]
