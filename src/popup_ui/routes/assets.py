"""Static UI routes: the bundle, SPA fallback, and CORS preflight.

Registered after the API router so ``/api/*`` paths win.  Any GET that is
not an API endpoint is resolved against the asset root; unknown paths get
``index.html`` so client-side routes survive a reload.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse, Response

from popup_ui.assets import INDEX_FILE, serve_static_file
from popup_ui.dependencies import get_session
from popup_ui.session import FormSession

router = APIRouter(tags=["assets"])


@router.options("/{path:path}", include_in_schema=False)
async def preflight(path: str) -> Response:
    """Answer CORS preflight; the middleware adds the headers."""
    return Response(status_code=204)


@router.get("/{path:path}", include_in_schema=False)
async def static_asset(
    path: str,
    session: FormSession = Depends(get_session),
) -> Response:
    """Serve a bundle file, falling back to ``index.html``, then 404."""
    root = session.settings.static_dir
    response = serve_static_file(root, path or INDEX_FILE)
    if response is None:
        response = serve_static_file(root, INDEX_FILE)
    if response is None:
        return PlainTextResponse("Not Found", status_code=404)
    return response
