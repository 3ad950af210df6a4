"""
Test Conversation Module
=======================

Unit tests for messages and the append-only history.
"""

import pytest
from dataclasses import FrozenInstanceError
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.conversation import Conversation, Message, Sender, companion_texts
from core.exceptions import ConversationError


class TestMessage:
    """Tests for Message class."""

    def test_immutable(self):
        message = Message(id="1", sender=Sender.USER, text="hello", timestamp=0)
        with pytest.raises(FrozenInstanceError):
            message.text = "changed"

    def test_to_dict(self):
        message = Message(id="1", sender=Sender.COMPANION, text="Hi!", timestamp=42)
        assert message.to_dict() == {"id": "1", "sender": "companion", "text": "Hi!", "timestamp": 42}

    def test_from_dict(self):
        message = Message.from_dict({"id": "7", "sender": "user", "text": "yo", "timestamp": "15"})
        assert message.sender == Sender.USER
        assert message.timestamp == 15

    def test_from_dict_bad_sender(self):
        with pytest.raises(ConversationError):
            Message.from_dict({"id": "7", "sender": "robot", "text": "yo", "timestamp": 1})


class TestConversation:
    """Tests for Conversation class."""

    def test_intro_messages(self):
        conversation = Conversation(intro=["Hey!", "What's up?"])

        assert len(conversation) == 2
        assert [m.id for m in conversation] == ["intro-0", "intro-1"]
        assert all(m.sender == Sender.COMPANION for m in conversation)

    def test_append(self):
        ids = iter(["a", "b"])
        conversation = Conversation(clock=lambda: 1000, id_factory=lambda: next(ids))

        first = conversation.append(Sender.USER, "hello")
        second = conversation.append(Sender.COMPANION, "Hi!")

        assert conversation.messages == (first, second)
        assert (first.id, second.id) == ("a", "b")
        assert conversation.last_message is second

    def test_timestamps_never_decrease(self):
        times = iter([5000, 3000, 6000])
        conversation = Conversation(clock=lambda: next(times))

        stamps = [conversation.append(Sender.USER, text).timestamp for text in ("a", "b", "c")]

        assert stamps == [5000, 5000, 6000]

    def test_unique_ids(self):
        conversation = Conversation()
        first = conversation.append(Sender.USER, "one")
        second = conversation.append(Sender.USER, "two")
        assert first.id != second.id

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_rejects_empty_text(self, text):
        conversation = Conversation()
        with pytest.raises(ConversationError):
            conversation.append(Sender.USER, text)
        assert len(conversation) == 0

    def test_snapshot_is_read_only(self):
        """Test callers cannot modify history through the snapshot."""
        conversation = Conversation(intro=["Hey!"])
        snapshot = conversation.messages

        conversation.append(Sender.USER, "hello")

        assert isinstance(snapshot, tuple)
        assert len(snapshot) == 1
        assert len(conversation) == 2


def test_companion_texts_collapses_duplicates():
    conversation = Conversation()
    conversation.append(Sender.COMPANION, "Hi!")
    conversation.append(Sender.USER, "Hi!")
    conversation.append(Sender.COMPANION, "Hi!")
    conversation.append(Sender.COMPANION, "Tell me more.")

    assert companion_texts(conversation.messages) == {"Hi!", "Tell me more."}
