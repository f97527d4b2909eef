"""Form response models: the one value an interaction produces.

``FormResponse`` is both the body the UI posts to ``/api/submit`` and the
result handed back to the caller of ``serve_form_and_await_response``.
When no human action happened (window closed, browser never opened) the
server synthesises ``FormResponse.skip()`` itself.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

FormAction = Literal["submit", "skip", "request_explanation"]


class FormResponseData(BaseModel):
    """Payload accompanying an action.

    Unknown keys are kept so newer UI bundles can send extra context
    without the server rejecting them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    # Selected value for radio (single selection)
    selection: Optional[str] = None
    # Selected values for checkbox (multiple selection)
    selections: Optional[List[str]] = None
    comments: Optional[str] = None
    # Option label the human wants explained
    explain_option: Optional[str] = Field(default=None, alias="explainOption")


class FormResponse(BaseModel):
    """Terminal outcome of one interaction."""

    action: FormAction
    data: FormResponseData = Field(default_factory=FormResponseData)

    @field_validator("data", mode="before")
    @classmethod
    def _null_data_is_empty(cls, value: Any) -> Any:
        # The UI may send "data": null for a bare skip
        return {} if value is None else value

    @classmethod
    def skip(cls) -> "FormResponse":
        """Build the synthesized skip: ``{action: "skip", data: {}}``."""
        return cls(action="skip")

    def to_dict(self) -> dict[str, Any]:
        """JSON shape with camelCase keys and unset fields omitted."""
        return {
            "action": self.action,
            "data": self.data.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
