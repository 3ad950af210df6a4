"""
Conversation Model - Messages and append-only history
=====================================================

This module provides the message type exchanged between the user and
the companion, and the per-session history that owns those messages.
"""

import time
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Tuple

from core.exceptions import ConversationError


class Sender(str, Enum):
    """Who wrote a message."""
    USER = "user"
    COMPANION = "companion"


@dataclass(frozen=True)
class Message:
    """
    A single chat message.

    Messages are immutable once created.

    Attributes:
        id (str): Opaque unique identifier
        sender (Sender): Author of the message
        text (str): Message body, never empty
        timestamp (int): Creation time in epoch milliseconds
    """
    id: str
    sender: Sender
    text: str
    timestamp: int

    @property
    def is_companion(self) -> bool:
        return self.sender == Sender.COMPANION

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary."""
        return {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """
        Create message from dictionary.

        Raises:
            ConversationError: If a field is missing or invalid
        """
        try:
            return cls(
                id=str(data["id"]),
                sender=Sender(data["sender"]),
                text=str(data["text"]),
                timestamp=int(data["timestamp"]),
            )
        except (KeyError, ValueError) as e:
            raise ConversationError(f"Invalid message data: {e}", {"data": data})


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_id() -> str:
    return uuid.uuid4().hex


class Conversation:
    """
    Append-only history of one chat session.

    Callers read the history through ``messages``, which returns a tuple
    snapshot; the only way to change it is ``append``.
    Each conversation has a random ``id`` used to tag its log records.

    Example:
        conversation = Conversation(intro=["Hey there!"])
        conversation.append(Sender.USER, "hello")
        len(conversation)   # 2
    """

    def __init__(
        self,
        intro: Optional[Sequence[str]] = None,
        clock: Optional[Callable[[], int]] = None,
        id_factory: Optional[Callable[[], str]] = None
    ):
        """
        Initialize a conversation.

        Args:
            intro: Companion lines that open the conversation
            clock: Returns the current time in milliseconds
            id_factory: Returns a fresh message identifier
        """
        self.id = _new_id()
        self._messages: List[Message] = []
        self._clock = clock or _now_ms
        self._id_factory = id_factory or _new_id

        for index, text in enumerate(intro or []):
            self.append(Sender.COMPANION, text, message_id=f"intro-{index}")

    @property
    def messages(self) -> Tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self):
        return iter(self.messages)

    @property
    def last_message(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def append(self, sender: Sender, text: str, message_id: Optional[str] = None) -> Message:
        """
        Append a new message.

        Timestamps never go backwards: if the clock reports an earlier
        time than the last message, the last timestamp is reused.

        Args:
            sender: Author of the message
            text: Message body
            message_id: Explicit identifier (generated when omitted)

        Returns:
            The appended message

        Raises:
            ConversationError: If the text is empty or whitespace only
        """
        if not text or not text.strip():
            raise ConversationError("Cannot append an empty message", {"sender": Sender(sender).value})

        timestamp = self._clock()
        if self._messages and timestamp < self._messages[-1].timestamp:
            timestamp = self._messages[-1].timestamp

        message = Message(
            id=message_id or self._id_factory(),
            sender=Sender(sender),
            text=text,
            timestamp=timestamp,
        )
        self._messages.append(message)
        return message

    def to_list(self) -> List[Dict[str, Any]]:
        return [message.to_dict() for message in self._messages]


def companion_texts(history: Sequence[Message]) -> Set[str]:
    """Return the distinct texts of all companion messages in a history."""
    return {message.text for message in history if message.sender == Sender.COMPANION}
