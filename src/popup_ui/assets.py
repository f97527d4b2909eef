"""Static asset resolution for the pre-built UI bundle.

``resolve_asset`` is the only boundary between request paths and the
filesystem: whatever the browser asks for is joined onto the asset root,
normalised, and dropped if it lands outside the root.  Directories are never
listed.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi.responses import FileResponse, Response

logger = logging.getLogger(__name__)

INDEX_FILE = "index.html"

# Fixed extension → content type table; anything else is served as bytes
MIME_TYPES: dict[str, str] = {
    ".html": "text/html; charset=utf-8",
    ".js": "application/javascript; charset=utf-8",
    ".css": "text/css; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".svg": "image/svg+xml",
    ".png": "image/png",
    ".ico": "image/x-icon",
}
DEFAULT_MIME_TYPE = "application/octet-stream"

# The bundle is fetched once per session and must never be cached
NO_CACHE_HEADERS: dict[str, str] = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}


def content_type_for(path: Path) -> str:
    """Return the content type for ``path`` from the fixed table."""
    return MIME_TYPES.get(path.suffix.lower(), DEFAULT_MIME_TYPE)


def resolve_asset(root: Path, requested_path: str) -> Path | None:
    """Map a request path onto a file under ``root``.

    Returns None when the normalised path escapes the root, does not exist,
    or is a directory.  Never raises for hostile input.
    """
    base = root.resolve()
    relative = requested_path.lstrip("/\\")
    try:
        candidate = (base / relative).resolve()
    except (OSError, ValueError):
        return None

    if candidate != base and base not in candidate.parents:
        logger.warning("Rejected asset path outside root: %r", requested_path)
        return None
    if not candidate.is_file():
        return None
    return candidate


def serve_static_file(root: Path, requested_path: str) -> Response | None:
    """Build the response for one asset, or None if it cannot be served."""
    path = resolve_asset(root, requested_path)
    if path is None:
        return None
    return FileResponse(
        path,
        media_type=content_type_for(path),
        headers=NO_CACHE_HEADERS,
    )
