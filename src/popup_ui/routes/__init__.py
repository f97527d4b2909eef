"""Route registration: API endpoints first, static catch-all last."""

from fastapi import FastAPI

from popup_ui.routes.api import router as api_router
from popup_ui.routes.assets import router as assets_router


def register_routes(app: FastAPI) -> None:
    """Include all sub-routers; order matters for the catch-all."""
    app.include_router(api_router)
    app.include_router(assets_router)
