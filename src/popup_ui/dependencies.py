"""FastAPI dependency injection: provides the session behind the app.

Each FastAPI app serves exactly one ``FormSession``; ``create_app`` stashes
it on ``app.state`` and the routes pull it out here.
"""

from fastapi import Request

from popup_ui.session import FormSession


def get_session(request: Request) -> FormSession:
    """Return the session served by this app from ``app.state``."""
    return request.app.state.session
