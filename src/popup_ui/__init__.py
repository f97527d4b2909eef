"""popup_ui: ask a human one question through a short-lived browser popup.

Public API:
    serve_form_and_await_response  show a form, wait for exactly one answer
    FormSession                    the session behind it (``close()`` for shutdown)
    BrowserLauncher                app-mode window with default-browser fallback
    ask_user                       single-choice selection tool
    ask_user_multiple              multiple-choice selection tool
    SelectionResult                flattened result of the selection tools
    PopupSettings                  configuration, see ``load_settings()``

Models:
    FormConfig, FormField, OptionWithDescription   what the UI renders
    FormResponse, FormResponseData                 what the human answered

Errors:
    PopupError, InfrastructureError, BindError
"""

from popup_ui.browser import BrowserLauncher
from popup_ui.config import PopupSettings, load_settings
from popup_ui.errors import BindError, InfrastructureError, PopupError
from popup_ui.models import (
    FormConfig,
    FormField,
    FormResponse,
    FormResponseData,
    OptionWithDescription,
)
from popup_ui.session import FormSession, serve_form_and_await_response
from popup_ui.tools import SelectionResult, ask_user, ask_user_multiple

__all__ = [
    # Entry points
    "serve_form_and_await_response",
    "FormSession",
    "BrowserLauncher",
    "ask_user",
    "ask_user_multiple",
    "SelectionResult",
    # Configuration
    "PopupSettings",
    "load_settings",
    # Models
    "FormConfig",
    "FormField",
    "FormResponse",
    "FormResponseData",
    "OptionWithDescription",
    # Errors
    "PopupError",
    "InfrastructureError",
    "BindError",
]
