"""Selection tools: the "ask one" / "ask several" operations for agents.

These wrap ``serve_form_and_await_response`` with the form shapes an agent
needs and flatten the response into a ``SelectionResult``:

  - ``ask_user``: radio buttons, exactly one answer in ``selection``
  - ``ask_user_multiple``: checkboxes, answers in ``selections``

Registering them with an agent protocol is left to the embedding process.
"""

from __future__ import annotations

import logging
from typing import List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from popup_ui.config import PopupSettings
from popup_ui.models import FormConfig, FormField, FormResponse, OptionItem
from popup_ui.session import serve_form_and_await_response

logger = logging.getLogger(__name__)

MIN_OPTIONS = 2
DEFAULT_OTHER_LABEL = "Other"


class SelectionResult(BaseModel):
    """What a selection tool returns to the agent."""

    model_config = ConfigDict(populate_by_name=True)

    action: Literal["submit", "skip", "request_explanation"]
    selection: Optional[str] = None
    selections: Optional[List[str]] = None
    comments: Optional[str] = None
    explain_option: Optional[str] = Field(default=None, alias="explainOption")
    explain_message: Optional[str] = Field(default=None, alias="explainMessage")

    def to_dict(self) -> dict:
        """Structured content with camelCase keys and unset fields omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def summary(self) -> str:
        """One-line text version of the result."""
        if self.action == "request_explanation":
            return self.explain_message or ""
        if self.action == "skip":
            return "User skipped the selection"
        if self.selections is not None:
            return f"User selected: {', '.join(self.selections)}"
        return f"User selected: {self.selection}"


def explain_message(option_label: str) -> str:
    return (
        f'Could you please explain the option "{option_label}" '
        "in more detail before I make a decision?"
    )


def build_form_config(
    field_type: Literal["radio", "checkbox"],
    options: Sequence[OptionItem],
    *,
    title: str | None = None,
    description: str | None = None,
    allow_other: bool = False,
    other_label: str | None = None,
) -> FormConfig:
    """Build the form for a selection tool; needs at least two options."""
    if len(options) < MIN_OPTIONS:
        raise ValueError(f"At least {MIN_OPTIONS} options are required")

    # Unset title/description stay out of the config the UI receives
    extra = {}
    if title is not None:
        extra["title"] = title
    if description is not None:
        extra["description"] = description

    return FormConfig(
        **extra,
        field=FormField(
            type=field_type,
            name="selection",
            options=list(options),
            allow_other=allow_other,
            other_label=other_label or DEFAULT_OTHER_LABEL,
        ),
        submit_label="Submit",
        skip_label="Skip",
    )


def to_selection_result(response: FormResponse, *, multiple: bool) -> SelectionResult:
    """Flatten a form response into the tool's result shape."""
    if response.action == "skip":
        return SelectionResult(action="skip")

    if response.action == "request_explanation":
        label = response.data.explain_option or ""
        return SelectionResult(
            action="request_explanation",
            explain_option=label,
            explain_message=explain_message(label),
        )

    result = SelectionResult(action="submit")
    if multiple:
        result.selections = list(response.data.selections or [])
    else:
        result.selection = response.data.selection or ""

    # Blank comments are dropped entirely
    comments = (response.data.comments or "").strip()
    if comments:
        result.comments = comments
    return result


async def ask_user(
    options: Sequence[OptionItem],
    *,
    title: str | None = None,
    description: str | None = None,
    allow_other: bool = False,
    other_label: str | None = None,
    settings: PopupSettings | None = None,
) -> SelectionResult:
    """Ask the human to choose exactly one option."""
    config = build_form_config(
        "radio", options,
        title=title, description=description,
        allow_other=allow_other, other_label=other_label,
    )
    response = await serve_form_and_await_response(config, settings=settings)
    logger.info("ask_user finished with action=%s", response.action)
    return to_selection_result(response, multiple=False)


async def ask_user_multiple(
    options: Sequence[OptionItem],
    *,
    title: str | None = None,
    description: str | None = None,
    allow_other: bool = False,
    other_label: str | None = None,
    settings: PopupSettings | None = None,
) -> SelectionResult:
    """Ask the human to choose one or more options."""
    config = build_form_config(
        "checkbox", options,
        title=title, description=description,
        allow_other=allow_other, other_label=other_label,
    )
    response = await serve_form_and_await_response(config, settings=settings)
    logger.info("ask_user_multiple finished with action=%s", response.action)
    return to_selection_result(response, multiple=True)
