"""
Textual Application - Chat TUI
==============================

This module implements the terminal chat interface: a scrolling message
list, a typing indicator while the companion composes its reply, and an
input box wired to the turn scheduler.
"""

from datetime import datetime
from typing import Optional

from textual.app import App, ComposeResult
from textual.containers import VerticalScroll
from textual.widgets import Header, Footer, Static, Input
from textual.binding import Binding
from rich.markup import escape

from core.config import Config, load_config
from core.logging import get_logger, set_log_context
from services.conversation import Conversation, Message, Sender
from services.responder import CompanionResponder
from services.scheduler import TurnScheduler, Timer, asyncio_timer

logger = get_logger("tui.app")


class MessageBubble(Static):
    """A single chat message."""

    def __init__(
        self,
        message: Message,
        companion_name: str = "Companion",
        show_timestamp: bool = True,
        **kwargs
    ):
        classes = "bubble user" if message.sender == Sender.USER else "bubble companion"
        super().__init__(self._format(message, companion_name, show_timestamp), classes=classes, **kwargs)

    @staticmethod
    def _format(message: Message, companion_name: str, show_timestamp: bool) -> str:
        author = "You" if message.sender == Sender.USER else companion_name
        text = f"[b]{escape(author)}[/b]  {escape(message.text)}"
        if show_timestamp:
            sent_at = datetime.fromtimestamp(message.timestamp / 1000).strftime("%H:%M")
            text += f"\n[dim]{sent_at}[/dim]"
        return text


class CompanionApp(App):
    """
    Cozy Companion Terminal UI Application.

    Submissions go through the turn scheduler, which drops input while a
    reply is pending; delivered replies arrive through its callback.
    """

    CSS = """
    Screen {
        background: $surface;
    }

    #title {
        text-align: center;
        color: $warning;
        text-style: bold;
        margin: 1 0;
    }

    #chat-log {
        height: 1fr;
        padding: 0 1;
    }

    .bubble {
        width: auto;
        max-width: 80%;
        padding: 0 1;
        margin: 0 0 1 0;
    }

    .companion {
        border: round $warning;
    }

    .user {
        border: round $primary;
        background: $panel;
        margin-left: 20%;
    }

    #typing {
        color: $warning;
        padding: 0 2;
        display: none;
    }

    #typing.visible {
        display: block;
    }

    #chat-input {
        margin: 0 1 1 1;
    }
    """

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit"),
        Binding("ctrl+c", "quit", "Quit"),
    ]

    def __init__(
        self,
        config: Optional[Config] = None,
        responder: Optional[CompanionResponder] = None,
        timer: Optional[Timer] = None
    ):
        super().__init__()

        self.config = config or load_config()
        self.responder = responder or CompanionResponder.from_config(self.config)
        self.conversation = Conversation(intro=self.config.responder.intro_messages)
        set_log_context(conversation=self.conversation.id)
        self.scheduler = TurnScheduler(self.conversation, self.responder, timer=timer or asyncio_timer)
        self.scheduler.on_reply_delivered(self._on_reply_delivered)

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Static(f"☕ {self.config.ui.companion_name} - Let's Chat For A While", id="title")
        yield VerticalScroll(id="chat-log")
        yield Static("Companion is typing…", id="typing")
        yield Input(placeholder="Type something honest or goofy…", id="chat-input")
        yield Footer()

    def on_mount(self) -> None:
        self.title = self.config.app_name
        if self.config.ui.tui_theme == "light":
            self.theme = "textual-light"

        for message in self.conversation:
            self._add_bubble(message)

        self.query_one("#chat-input", Input).focus()
        logger.info("Terminal UI started")

    def on_input_submitted(self, event: Input.Submitted) -> None:
        """Hand the input to the scheduler; keep the text if it was dropped."""
        pending = self.scheduler.submit(event.value)
        if pending is None:
            return

        event.input.value = ""
        self._add_bubble(pending.user_message)
        self.query_one("#typing").add_class("visible")

    def _on_reply_delivered(self, message: Message) -> None:
        self.query_one("#typing").remove_class("visible")
        self._add_bubble(message)

    def _add_bubble(self, message: Message) -> None:
        log = self.query_one("#chat-log", VerticalScroll)
        log.mount(MessageBubble(
            message,
            companion_name=self.config.ui.companion_name,
            show_timestamp=self.config.ui.show_timestamps,
        ))
        log.scroll_end(animate=False)

    def action_quit(self) -> None:
        self.exit()


def run_tui(config: Optional[Config] = None) -> None:
    app = CompanionApp(config=config)
    app.run()


if __name__ == "__main__":
    run_tui()
