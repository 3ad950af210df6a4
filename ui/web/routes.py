"""
Web Routes - API endpoints and page routes
=========================================

This module defines the web routes for the chat companion.
"""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from core.logging import get_logger

logger = get_logger("web.routes")

router = APIRouter()


class ChatMessage(BaseModel):
    """Chat submission model."""
    text: str = ""


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def chat_page(request: Request):
    """Render the chat page."""
    templates = request.app.state.templates
    config = request.app.state.config

    return templates.TemplateResponse(
        request,
        "chat.html",
        {"config": config}
    )


# === API Routes ===

@router.get("/api/messages")
async def list_messages(request: Request):
    """Return the conversation and the current turn state."""
    scheduler = request.app.state.scheduler

    return {
        "messages": request.app.state.conversation.to_list(),
        "state": scheduler.state.value,
    }


@router.post("/api/messages")
async def submit_message(request: Request, chat: ChatMessage):
    """
    Submit user text.

    Rejected submissions (empty text, or a reply still pending) are
    reported with ``accepted: false`` rather than an error status.
    """
    scheduler = request.app.state.scheduler

    reason: Optional[str] = None
    if not chat.text.strip():
        reason = "empty"
    elif scheduler.is_awaiting_reply:
        reason = "busy"

    pending = scheduler.submit(chat.text) if reason is None else None

    if pending is None:
        logger.debug(f"Submission rejected: {reason}")
        return {
            "accepted": False,
            "reason": reason,
            "message": None,
            "typing_delay_ms": None,
        }

    return {
        "accepted": True,
        "reason": None,
        "message": pending.user_message.to_dict(),
        "typing_delay_ms": pending.delay_ms,
    }


@router.post("/api/preview")
async def preview_reply(request: Request, chat: ChatMessage):
    """Show the reply the companion would give now, without sending anything."""
    responder = request.app.state.responder
    conversation = request.app.state.conversation

    result = responder.respond(chat.text, conversation.messages)

    return {
        "response": result.response,
        "source": result.source,
        "matched_rule": result.rule or None,
        "typing_delay_ms": result.typing_delay_ms,
    }


@router.get("/api/rules")
async def list_rules(request: Request):
    """Return the rule bank in priority order."""
    rule_bank = request.app.state.responder.rule_bank

    return {
        "rules": [
            {
                "name": rule.name,
                "match_type": rule.match_type.value,
                "patterns": list(rule.patterns),
                "replies": list(rule.replies),
            }
            for rule in rule_bank
        ]
    }


@router.get("/api/status")
async def status(request: Request):
    """Return turn state and delay settings."""
    config = request.app.state.config
    scheduler = request.app.state.scheduler

    return {
        "app_name": config.app_name,
        "version": config.version,
        "state": scheduler.state.value,
        "message_count": len(request.app.state.conversation),
        "typing": {
            "ms_per_char": config.typing.ms_per_char,
            "min_delay_ms": config.typing.min_delay_ms,
            "max_delay_ms": config.typing.max_delay_ms,
        },
        "length_guard_threshold": config.responder.length_guard_threshold,
    }
