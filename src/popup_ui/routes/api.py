"""Session API endpoints: disconnect channel, form config, submission.

``GET /api/connection`` is how the server learns that the window was
closed.  The UI opens it on load and never sends a goodbye message; the
browser severs the connection when the window goes away, and the stream's
teardown fires the resolution gate with a synthesized skip.

``POST /api/submit`` is the only way the human's answer reaches the
caller.  Rejected bodies are answered by the app's validation handler
(400) and leave the session open for a retry.
"""

import asyncio
import json
import logging
from typing import AsyncIterator

from fastapi import APIRouter, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError

from popup_ui.dependencies import get_session
from popup_ui.models import FormResponse
from popup_ui.session import FormSession, StreamHandle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])

# Headers that keep proxies and the browser from buffering the stream
STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: str, data: dict | None = None) -> str:
    """Encode one server-sent event."""
    return f"event: {event}\ndata: {json.dumps(data or {})}\n\n"


async def _connection_events(
    request: Request, session: FormSession, stream: StreamHandle,
) -> AsyncIterator[str]:
    """Yield ``connected`` then heartbeats until the session or client ends.

    The ``finally`` block runs both when the loop sees the client gone and
    when Starlette cancels the generator on disconnect.
    """
    settings = session.settings
    loop = asyncio.get_running_loop()
    next_heartbeat = loop.time() + settings.heartbeat_interval
    try:
        yield format_event("connected")
        while not stream.stop.is_set():
            if await request.is_disconnected():
                break
            if loop.time() >= next_heartbeat:
                yield format_event("heartbeat")
                next_heartbeat = loop.time() + settings.heartbeat_interval
            try:
                await asyncio.wait_for(
                    stream.stop.wait(), timeout=settings.disconnect_poll_interval,
                )
            except asyncio.TimeoutError:
                pass
    finally:
        session.detach_stream(stream)
        if not stream.superseded and session.gate.resolve(FormResponse.skip()):
            logger.info("Connection stream closed before any answer, resolved with skip")


# ------------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------------

@router.get("/connection")
async def connection(
    request: Request,
    session: FormSession = Depends(get_session),
) -> StreamingResponse:
    """Long-lived event stream whose closure means the window was closed."""
    stream = session.attach_stream()
    logger.debug("Connection stream opened")
    return StreamingResponse(
        _connection_events(request, session, stream),
        media_type="text/event-stream",
        headers=STREAM_HEADERS,
    )


@router.get("/config")
async def get_config(session: FormSession = Depends(get_session)) -> JSONResponse:
    """Return the form configuration exactly as the caller supplied it."""
    return JSONResponse(session.config.to_json_dict())


@router.post("/submit")
async def submit(
    request: Request,
    session: FormSession = Depends(get_session),
) -> JSONResponse:
    """Accept the human's one answer.

    The body is parsed as JSON whatever its ``Content-Type``; a renderer's
    bare ``fetch`` sends ``text/plain``.  Parse and shape failures go to the
    app's validation handler (400) and leave the session open.

    The gate is claimed right away but the value is delivered after the
    grace delay, so this acknowledgement reaches the browser before the
    listener shuts down.  Submissions arriving after the session resolved
    get 409 and change nothing.
    """
    try:
        body = FormResponse.model_validate_json(await request.body())
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_url=False)) from exc

    if not session.gate.resolve(body, delay=session.settings.submit_grace_delay):
        logger.info("Ignoring %s submission: session already resolved", body.action)
        return JSONResponse(status_code=409, content={"error": "Session already resolved"})

    logger.info("Received %s submission", body.action)
    return JSONResponse({"success": True})
