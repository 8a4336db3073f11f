"""
Tests for the declarative model override layer.
"""

import json
from pathlib import Path

import pytest

from service_model_generate.pipeline.errors import ConfigurationError, OverrideError
from service_model_generate.pipeline.model.coral_builder import CoralServiceModelBuilder
from service_model_generate.pipeline.model.model_nodes import InputLocation, RawTypeOverride
from service_model_generate.pipeline.model.override import ModelOverride, apply_model_override, find_unknown_targets

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def widget_model():
    with open(TEST_DATA / "widget_service.json") as f:
        return CoralServiceModelBuilder().build(json.load(f))


@pytest.fixture
def widget_override():
    with open(TEST_DATA / "widget_override.json") as f:
        return ModelOverride.from_dict(json.load(f))


class TestModelOverride:
    """Test cases for ModelOverride and apply_model_override"""

    def test_from_dict(self, widget_override):
        assert widget_override.field_raw_type_overrides["Timestamp"] == RawTypeOverride(
            type_name="datetime.datetime",
            default_value="datetime.datetime(2013, 2, 18, 17, 0, 0)",
        )
        assert widget_override.coding_key_overrides == {"Widget.name": "displayName"}
        assert widget_override.enumerations.using_upper_camel_case == frozenset({"WidgetColor"})
        assert widget_override.additional_errors == frozenset({"ThrottlingException"})
        assert widget_override.required_overrides == {"Widget.color": False}
        assert widget_override.name_overrides == {"Widget.tags": "labels"}

    def test_operation_input_overrides_from_dict(self):
        override = ModelOverride.from_dict(
            {
                "operationInputOverrides": {
                    "ListWidgets": {"queryFields": ["maxResults"], "defaultInputLocation": "query", "pathTemplateField": "name"},
                },
            }
        )
        description = override.operation_input_overrides["ListWidgets"]
        assert description.query_fields == ("maxResults",)
        assert description.default_input_location is InputLocation.QUERY
        assert description.path_template_field == "name"

    def test_invalid_override_raises(self):
        with pytest.raises(ConfigurationError):
            ModelOverride.from_dict({"fieldRawTypeOverride": {"Timestamp": {"defaultValue": "x"}}})
        with pytest.raises(ConfigurationError):
            ModelOverride.from_dict({"operationInputOverrides": {"ListWidgets": {"defaultInputLocation": "cookie"}}})

    def test_absent_or_empty_override_is_identity(self, widget_model):
        assert apply_model_override(widget_model, None) is widget_model
        assert apply_model_override(widget_model, ModelOverride()) is widget_model
        assert apply_model_override(widget_model, ModelOverride.from_dict({}), strict=True) is widget_model

    def test_apply(self, widget_model, widget_override):
        model = apply_model_override(widget_model, widget_override)

        assert model.error_types == frozenset({"WidgetNotFoundException", "ThrottlingException"})
        assert "ThrottlingException" not in model.error_code_mappings
        assert model.error_code_mappings == widget_model.error_code_mappings
        assert model.type_mappings["Timestamp"].type_name == "datetime.datetime"
        assert not model.structure_descriptions["Widget"].members["color"].required
        assert model.coding_key_overrides == {"Widget.name": "displayName"}
        assert model.name_overrides == {"Widget.tags": "labels"}
        assert model.upper_camel_enum_types == frozenset({"WidgetColor"})

    def test_apply_does_not_modify_input(self, widget_model, widget_override):
        apply_model_override(widget_model, widget_override)
        assert widget_model.error_types == frozenset({"WidgetNotFoundException"})
        assert widget_model.structure_descriptions["Widget"].members["color"].required
        assert widget_model.type_mappings == {}

    def test_primitive_kind_override_applies_to_every_field_of_that_kind(self, widget_model):
        override = ModelOverride(field_raw_type_overrides={"Integer": RawTypeOverride(type_name="numbers.Integral")})
        model = apply_model_override(widget_model, override)
        assert model.type_mappings["MaxResults"].type_name == "numbers.Integral"
        assert "WidgetId" not in model.type_mappings

    def test_operation_input_override(self, widget_model):
        override = ModelOverride.from_dict({"operationInputOverrides": {"ListWidgets": {"defaultInputLocation": "query"}}})
        model = apply_model_override(widget_model, override)
        description = model.operation_descriptions["ListWidgets"].input_description
        assert description.default_input_location is InputLocation.QUERY
        assert description.query_fields == ()

    def test_operation_input_override_with_unknown_member(self, widget_model):
        override = ModelOverride.from_dict({"operationInputOverrides": {"ListWidgets": {"queryFields": ["maxResults", "pageSize"]}}})
        assert find_unknown_targets(widget_model, override) == ["operationInputOverrides:ListWidgets.pageSize"]

        model = apply_model_override(widget_model, override)
        assert model.operation_descriptions["ListWidgets"] == widget_model.operation_descriptions["ListWidgets"]
        with pytest.raises(OverrideError, match="ListWidgets.pageSize"):
            apply_model_override(widget_model, override, strict=True)

    def test_operation_input_override_payload_cannot_be_located(self, widget_model):
        override = ModelOverride.from_dict(
            {"operationInputOverrides": {"ListWidgets": {"queryFields": ["maxResults"], "payloadAsMember": "maxResults"}}}
        )
        assert find_unknown_targets(widget_model, override) == ["operationInputOverrides:ListWidgets.payloadAsMember=maxResults"]
        with pytest.raises(OverrideError):
            apply_model_override(widget_model, override, strict=True)

    def test_unknown_targets_are_ignored(self, widget_model):
        override = ModelOverride.from_dict({"codingKeyOverrides": {"Gadget.name": "x"}, "nameOverrides": {"Widget.missing": "y"}})
        model = apply_model_override(widget_model, override)
        assert model.coding_key_overrides == {}
        assert model.name_overrides == {}

    def test_strict_mode_lists_every_unknown_target(self, widget_model):
        override = ModelOverride.from_dict(
            {
                "codingKeyOverrides": {"Gadget.name": "x", "Widget.name": "displayName"},
                "enumerations": {"usingUpperCamelCase": ["WidgetId"]},
                "operationInputOverrides": {"Frobnicate": {}},
                "fieldRawTypeOverride": {"Nothing": {"typeName": "int"}},
            }
        )
        assert find_unknown_targets(widget_model, override) == [
            "fieldRawTypeOverride:Nothing",
            "codingKeyOverrides:Gadget.name",
            "enumerations:WidgetId",
            "operationInputOverrides:Frobnicate",
        ]
        with pytest.raises(OverrideError) as excinfo:
            apply_model_override(widget_model, override, strict=True)
        assert len(excinfo.value.unknown_targets) == 4

    def test_strict_mode_accepts_known_targets(self, widget_model, widget_override):
        model = apply_model_override(widget_model, widget_override, strict=True)
        assert "ThrottlingException" in model.error_types
