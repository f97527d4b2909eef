"""Form configuration models: what the UI is asked to render.

A ``FormConfig`` describes one question with a single choice field:

  - radio: pick exactly one option (``selection`` in the response)
  - checkbox: pick one or more options (``selections`` in the response)

Options are either bare label strings or objects carrying a description
and a "recommended" flag.  Label uniqueness is left to the caller.

JSON field names are camelCase because the config is handed to the browser
verbatim; Python attributes use snake_case and either name is accepted on
input.
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _FrozenModel(BaseModel):
    """Immutable base with alias/field-name population."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)


class OptionWithDescription(_FrozenModel):
    """A selectable option with extra context for the human."""

    label: str = Field(min_length=1)
    description: Optional[str] = None
    recommended: Optional[bool] = None


# Bare string labels must be non-empty as well
OptionItem = Union[Annotated[str, Field(min_length=1)], OptionWithDescription]


class FormField(_FrozenModel):
    """The single choice field of a form."""

    type: Literal["radio", "checkbox"]
    name: str
    options: List[OptionItem]
    allow_other: Optional[bool] = Field(default=None, alias="allowOther")
    other_label: Optional[str] = Field(default=None, alias="otherLabel")


class FormConfig(_FrozenModel):
    """Everything the UI needs to render one interaction."""

    title: Optional[str] = None
    description: Optional[str] = None
    field: FormField
    submit_label: Optional[str] = Field(default=None, alias="submitLabel")
    skip_label: Optional[str] = Field(default=None, alias="skipLabel")

    def to_json_dict(self) -> dict[str, Any]:
        """Serialise with camelCase keys, keeping only the fields the caller set."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)
