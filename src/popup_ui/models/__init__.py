"""Public model re-exports for popup_ui.

Consumers should import from ``popup_ui.models`` rather than reaching into
sub-modules directly.
"""

# --- Form configuration ---
from popup_ui.models.form import (
    FormConfig,
    FormField,
    OptionItem,
    OptionWithDescription,
)

# --- Form response ---
from popup_ui.models.response import (
    FormAction,
    FormResponse,
    FormResponseData,
)

__all__ = [
    # Form configuration
    "FormConfig",
    "FormField",
    "OptionItem",
    "OptionWithDescription",
    # Form response
    "FormAction",
    "FormResponse",
    "FormResponseData",
]
