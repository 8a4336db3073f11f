"""
Tests for the naming and type-resolution rules of the code generator.
"""

import json
from pathlib import Path

import pytest

from service_model_generate import __version__
from service_model_generate.pipeline.config import ApplicationDescription
from service_model_generate.pipeline.errors import ModelConsistencyError
from service_model_generate.pipeline.generator import ServiceModelCodeGenerator
from service_model_generate.pipeline.model.coral_builder import CoralServiceModelBuilder
from service_model_generate.pipeline.model.model_nodes import (
    LengthRange,
    Member,
    ServiceModel,
    StringField,
    StructureDescription,
    frozen_mapping,
)
from service_model_generate.pipeline.model.override import ModelOverride, apply_model_override

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def widget_model():
    with open(TEST_DATA / "widget_service.json") as f:
        return CoralServiceModelBuilder().build(json.load(f))


def make_generator(model, base_name="Widget", command=None):
    return ServiceModelCodeGenerator(model, ApplicationDescription(base_name=base_name), generation_command=command)


class TestNaming:
    """Test generated names"""

    def test_package_names(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.model_target_name == "WidgetModel"
        assert generator.client_target_name == "WidgetClient"
        assert generator.model_directory == Path(".") / "WidgetModel"

    def test_operation_names(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.operation_function_name("GetWidget") == "get_widget"
        assert generator.operation_case_name("GetWidget") == "GET_WIDGET"
        assert generator.operation_class_prefix("GetWidget") == "GetWidget"
        assert generator.operation_function_name("Import") == "import_"

    def test_type_names(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.type_name("WidgetId") == "WidgetId"
        assert generator.validator_name("WidgetId") == "validate_widget_id"
        assert generator.default_factory_name("GetWidgetResponse") == "default_get_widget_response"
        with pytest.raises(ModelConsistencyError):
            generator.type_name("Gadget")

    def test_type_names_avoid_reserved_and_duplicate_names(self):
        model = ServiceModel(
            structure_descriptions=frozen_mapping({"ValidationError": StructureDescription(), "foo.bar": StructureDescription()}),
            field_descriptions=frozen_mapping({"FooBar": StringField(), "class": StringField()}),
        )
        generator = make_generator(model)
        assert generator.type_name("ValidationError") == "ValidationError_"
        assert generator.type_name("FooBar") == "FooBar"
        assert generator.type_name("foo.bar") == "FooBar2"
        assert generator.type_name("class") == "Class"

    def test_attribute_names(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.attribute_names("Widget") == {
            "color": "color",
            "widgetId": "widget_id",
            "createdAt": "created_at",
            "name": "name",
            "tags": "tags",
        }

    def test_reserved_and_colliding_attribute_names(self):
        members = {
            "from": Member(value="S", position=0),
            "values": Member(value="S", position=1),
            "fooBar": Member(value="S", position=2),
            "foo_bar": Member(value="S", position=3),
        }
        model = ServiceModel(
            structure_descriptions=frozen_mapping({"Thing": StructureDescription(members=frozen_mapping(members))}),
            field_descriptions=frozen_mapping({"S": StringField()}),
        )
        assert make_generator(model).attribute_names("Thing") == {
            "from": "from_",
            "values": "values_",
            "fooBar": "foo_bar",
            "foo_bar": "foo_bar_2",
        }

    def test_overridden_names_and_coding_keys(self, widget_model):
        with open(TEST_DATA / "widget_override.json") as f:
            model = apply_model_override(widget_model, ModelOverride.from_dict(json.load(f)))
        generator = make_generator(model)
        widget = model.structure_descriptions["Widget"]
        assert generator.attribute_names("Widget")["tags"] == "labels"
        assert generator.coding_key("Widget", "name", widget.members["name"]) == "displayName"
        assert generator.coding_key("Widget", "tags", widget.members["tags"]) == "tags"
        assert generator.coding_key("GetWidgetRequest", "widgetId", model.structure_descriptions["GetWidgetRequest"].members["widgetId"]) == "widgetId"

    def test_enum_cases(self, widget_model):
        assert make_generator(widget_model).enum_cases("WidgetColor") == [("RED", "red"), ("GREEN", "green"), ("BLUE", "blue")]

        override = ModelOverride.from_dict({"enumerations": {"usingUpperCamelCase": ["WidgetColor"]}})
        generator = make_generator(apply_model_override(widget_model, override))
        assert generator.enum_cases("WidgetColor") == [("Red", "red"), ("Green", "green"), ("Blue", "blue")]

    def test_enum_cases_are_identifiers(self):
        constraint = StringField(value_constraints=(("1x", "1x"), ("a-b", "a-b"), ("A_B", "A_B"), ("None", "None")))
        model = ServiceModel(field_descriptions=frozen_mapping({"Odd": constraint}))
        assert make_generator(model).enum_cases("Odd") == [("_1X", "1x"), ("A_B", "a-b"), ("A_B_2", "A_B"), ("NONE", "None")]

    def test_generation_comment(self, widget_model):
        assert make_generator(widget_model).generation_comment == f"# Generated by service_model_generate v{__version__} : service_model_generate"
        generator = make_generator(widget_model, command="service_model_generate generate -n Widget")
        assert generator.generation_comment.endswith(": service_model_generate generate -n Widget")


class TestTypeResolution:
    """Test type expressions"""

    def test_ordered_members_put_required_first(self, widget_model):
        generator = make_generator(widget_model)
        names = [name for name, _ in generator.ordered_members(widget_model.structure_descriptions["Widget"])]
        assert names == ["color", "widgetId", "createdAt", "name", "tags"]

    def test_python_types(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.python_type("WidgetId") == "str"
        assert generator.python_type("MaxResults") == "int"
        assert generator.python_type("WidgetList") == 'list["Widget"]'
        assert generator.python_type("TagMap") == 'dict["String", "String"]'
        assert generator.is_enum("WidgetColor")
        assert not generator.is_enum("WidgetId")

    def test_mapped_python_type(self, widget_model):
        override = ModelOverride.from_dict({"fieldRawTypeOverride": {"Timestamp": {"typeName": "datetime.datetime"}}})
        generator = make_generator(apply_model_override(widget_model, override))
        assert generator.python_type("Timestamp") == "datetime.datetime"

    def test_encode_and_decode_expressions(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.encode_expression("Widget", "self.widget") == "self.widget.to_dict()"
        assert generator.encode_expression("WidgetColor", "self.color") == "self.color.value"
        assert generator.encode_expression("WidgetList", "self.widgets") == "[item0.to_dict() for item0 in self.widgets]"
        assert generator.encode_expression("TagMap", "self.tags") == "self.tags"

        assert generator.decode_expression("WidgetList", "values['widgets']") == "[Widget.from_dict(item0) for item0 in values['widgets']]"
        assert generator.decode_expression("WidgetColor", "value") == "_types.WidgetColor(value)"
        assert generator.decode_expression("Widget", "value", structures="_structures.") == "_structures.Widget.from_dict(value)"
        assert generator.decode_expression("WidgetId", "value") == "value"

    def test_default_values(self, widget_model):
        generator = make_generator(widget_model)
        assert generator.default_value_expression("WidgetId") == '"value"'
        assert generator.default_value_expression("MaxResults") == "1"
        assert generator.default_value_expression("Timestamp") == '"2013-02-18T17:00:00Z"'
        assert generator.default_value_expression("WidgetColor") == "_types.WidgetColor.RED"
        assert generator.default_value_expression("WidgetList") == "[]"
        assert generator.default_value_expression("TagMap") == "{}"
        assert generator.default_value_expression("Widget") == "default_widget()"

    def test_default_values_respect_length_bounds(self):
        model = ServiceModel(
            field_descriptions=frozen_mapping(
                {
                    "Long": StringField(length=LengthRange(8, None)),
                }
            )
        )
        assert make_generator(model).default_value_expression("Long") == '"valuexxx"'

    def test_mapped_default_value(self, widget_model):
        override = ModelOverride.from_dict(
            {"fieldRawTypeOverride": {"Timestamp": {"typeName": "datetime.datetime", "defaultValue": "datetime.datetime(2020, 1, 1)"}}}
        )
        generator = make_generator(apply_model_override(widget_model, override))
        assert generator.default_value_expression("Timestamp") == "datetime.datetime(2020, 1, 1)"
