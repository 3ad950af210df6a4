"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application that hosts
one in-process conversation with the companion.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, load_config
from core.logging import setup_logging, get_logger, set_log_context
from services.conversation import Conversation
from services.responder import CompanionResponder
from services.scheduler import TurnScheduler, Timer, asyncio_timer

logger = get_logger("web.app")


def create_app(
    config: Optional[Config] = None,
    responder: Optional[CompanionResponder] = None,
    timer: Optional[Timer] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        responder: Reply generator (built from config when omitted)
        timer: Deferred-call primitive for reply delivery
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else "INFO",
        json_format=config.log_json,
        console_output=True
    )

    if responder is None:
        responder = CompanionResponder.from_config(config)

    conversation = Conversation(intro=config.responder.intro_messages)
    set_log_context(conversation=conversation.id)
    scheduler = TurnScheduler(conversation, responder, timer=timer or asyncio_timer)

    app = FastAPI(
        title=config.app_name,
        description="Web interface for the cozy chat companion",
        version=config.version,
        debug=debug or config.debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    templates_dir = Path(__file__).parent / "templates"
    templates = Jinja2Templates(directory=str(templates_dir))

    app.state.config = config
    app.state.responder = responder
    app.state.conversation = conversation
    app.state.scheduler = scheduler
    app.state.templates = templates

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc) if debug else "An error occurred"}
        )

    logger.info("Web application created")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )
