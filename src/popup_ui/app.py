"""Application factory for one popup session.

``create_app(session)`` builds the FastAPI application with:
  - Logging for the ``popup_ui`` package on stderr
  - Always-on permissive CORS headers (loopback only, same-origin page)
  - Exception handlers (validation → 400, anything else → 500)
  - The session API under ``/api`` and the static bundle catch-all

A fresh app is built per session; nothing here outlives one interaction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.datastructures import MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from popup_ui.errors import generic_error_handler, request_validation_error_handler
from popup_ui.routes import register_routes

if TYPE_CHECKING:
    from popup_ui.session import FormSession

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def configure_logging(level_name: str) -> None:
    """Attach a stderr handler to the package logger once and set its level.

    stdout is left alone: the embedding agent process may be speaking a
    protocol on it.
    """
    logger = logging.getLogger("popup_ui")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level_name, logging.INFO))


class AllowAnyOriginMiddleware:
    """Add CORS headers to every response, not only to cross-origin requests.

    Pure ASGI so the long-lived event stream is passed through untouched.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_cors(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                for name, value in CORS_HEADERS.items():
                    headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_cors)


def create_app(session: FormSession) -> FastAPI:
    """Build the FastAPI application serving ``session``."""
    configure_logging(session.settings.log_level)

    app = FastAPI(
        title="Popup UI",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Routes reach the session through dependencies.get_session
    app.state.session = session

    app.add_middleware(AllowAnyOriginMiddleware)

    # --- Exception handlers ---
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(Exception, generic_error_handler)

    register_routes(app)

    return app
