"""Exceptions and global exception handlers.

Two families live here:

  - ``PopupError`` and its subclasses are raised out of
    ``serve_form_and_await_response`` when the interaction could never have
    reached the human (no listener, server crashed before resolution).
    User actions (submit, skip, request_explanation) are data, never
    exceptions.
  - The async handlers are installed on the per-session FastAPI app.  They
    turn request validation failures into the 400 bodies the UI expects and
    keep tracebacks server-side.
"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class PopupError(Exception):
    """Base class for failures of the popup machinery itself."""


class InfrastructureError(PopupError):
    """The listener failed before the session could resolve."""


class BindError(InfrastructureError):
    """No loopback port could be acquired for the listener."""


# --- Client-facing messages for rejected submissions ---
INVALID_JSON = "Invalid JSON"
INVALID_FORM_RESPONSE = "Invalid form response"


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError,
) -> JSONResponse:
    """Map a rejected request body to 400 with a short ``error`` message.

    Malformed JSON and well-formed JSON of the wrong shape get different
    messages; neither resolves the session, so the UI may retry.
    """
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = INVALID_JSON
    else:
        message = INVALID_FORM_RESPONSE

    logger.warning("Rejected request at %s: %s errors=%s", request.url.path, message, errors)
    return JSONResponse(status_code=400, content={"error": message})


async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all for unhandled exceptions: log the traceback and return 500."""
    logger.exception("Unhandled exception at %s", request.url)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"},
    )
