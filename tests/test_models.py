"""Form config and form response models."""

import pytest
from pydantic import ValidationError

from popup_ui.models import FormConfig, FormResponse, OptionWithDescription


class TestFormConfig:

    def test_aliases_and_field_names_both_accepted(self):
        by_alias = FormConfig.model_validate({
            "field": {"type": "radio", "name": "s", "options": ["A", "B"], "allowOther": True},
            "submitLabel": "Go",
        })
        by_name = FormConfig(
            field={"type": "radio", "name": "s", "options": ["A", "B"], "allow_other": True},
            submit_label="Go",
        )
        assert by_alias == by_name
        assert by_alias.field.allow_other is True

    def test_option_objects_are_parsed(self):
        config = FormConfig.model_validate({
            "field": {
                "type": "checkbox",
                "name": "s",
                "options": ["A", {"label": "B", "recommended": True}],
            },
        })
        assert config.field.options[0] == "A"
        assert isinstance(config.field.options[1], OptionWithDescription)
        assert config.field.options[1].recommended is True

    @pytest.mark.parametrize("field", [
        {"type": "select", "name": "s", "options": ["A", "B"]},
        {"type": "radio", "name": "s", "options": ["", "B"]},
        {"type": "radio", "name": "s", "options": [{"label": ""}, "B"]},
        {"type": "radio", "name": "s", "options": [{"description": "no label"}]},
        {"type": "radio", "options": ["A", "B"]},
    ])
    def test_invalid_fields_are_rejected(self, field):
        with pytest.raises(ValidationError):
            FormConfig.model_validate({"field": field})

    def test_config_is_immutable(self):
        config = FormConfig.model_validate(
            {"field": {"type": "radio", "name": "s", "options": ["A", "B"]}}
        )
        with pytest.raises(ValidationError):
            config.title = "changed"


class TestFormResponse:

    def test_skip_shape(self):
        assert FormResponse.skip().to_dict() == {"action": "skip", "data": {}}

    def test_null_data_becomes_empty(self):
        response = FormResponse.model_validate({"action": "skip", "data": None})
        assert response.to_dict() == {"action": "skip", "data": {}}

    def test_missing_data_becomes_empty(self):
        response = FormResponse.model_validate({"action": "submit"})
        assert response.data.selection is None

    @pytest.mark.parametrize("body", [
        {"action": "cancel"},
        {},
        {"action": "submit", "data": ["A"]},
        {"action": "submit", "data": "A"},
        {"action": "submit", "data": {"selections": "A"}},
        {"action": "submit", "data": {"selection": 1}},
        {"action": "submit", "data": {"selections": [1, 2]}},
    ])
    def test_invalid_bodies_are_rejected(self, body):
        with pytest.raises(ValidationError):
            FormResponse.model_validate(body)

    def test_extra_data_keys_are_kept(self):
        response = FormResponse.model_validate({
            "action": "submit",
            "data": {"selection": "A", "otherText": "typed in"},
        })
        assert response.to_dict()["data"] == {"selection": "A", "otherText": "typed in"}

    def test_explain_option_uses_camel_case_on_output(self):
        response = FormResponse.model_validate({
            "action": "request_explanation",
            "data": {"explainOption": "B"},
        })
        assert response.data.explain_option == "B"
        assert response.to_dict()["data"] == {"explainOption": "B"}
