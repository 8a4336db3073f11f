"""
Tests for building the unified service model from Coral documents.
"""

import copy
import json
from pathlib import Path

import pytest

from service_model_generate.pipeline.errors import ModelConsistencyError, ModelDecodeError
from service_model_generate.pipeline.model.coral_builder import CoralServiceModelBuilder
from service_model_generate.pipeline.model.model_nodes import InputLocation, PayloadType, ServiceDescription

TEST_DATA = Path(__file__).parent / "test_data"


@pytest.fixture
def widget_document():
    with open(TEST_DATA / "widget_service.json") as f:
        return json.load(f)


def minimal_document(protocol="json"):
    return {
        "metadata": {"protocol": protocol, "endpointPrefix": "sample", "apiVersion": "2021-01-01", "targetPrefix": "Sample_20210101"},
        "operations": {},
        "shapes": {},
    }


class TestCoralServiceModelBuilder:
    """Test cases for CoralServiceModelBuilder"""

    def test_widget_model(self, widget_document):
        model = CoralServiceModelBuilder().build(widget_document)

        assert set(model.operation_descriptions) == {"DeleteWidget", "GetWidget", "ListWidgets"}
        assert model.service_descriptions == {"widget": ServiceDescription(operations=("DeleteWidget", "GetWidget", "ListWidgets"))}
        assert "Widget" in model.structure_descriptions
        assert "WidgetId" in model.field_descriptions
        assert model.content_type == "application/x-amz-rest-json"
        assert model.metadata.payload_type is PayloadType.JSON
        assert model.default_input_location is InputLocation.BODY

    def test_operation_locations(self, widget_document):
        model = CoralServiceModelBuilder().build(widget_document)

        get_widget = model.operation_descriptions["GetWidget"]
        assert get_widget.http_verb == "GET"
        assert get_widget.http_url == "/widgets/{widgetId}"
        assert get_widget.input_description.path_fields == ("widgetId",)
        assert get_widget.output_description.header_fields == ("requestId",)
        assert get_widget.documentation == "Returns the description of a widget."

        list_widgets = model.operation_descriptions["ListWidgets"]
        assert list_widgets.input_description.query_fields == ("maxResults", "nextToken")

    def test_deprecated_members_are_skipped(self, widget_document):
        model = CoralServiceModelBuilder().build(widget_document)
        members = model.structure_descriptions["Widget"].members
        assert "legacyId" not in members
        assert sorted(member.position for member in members.values()) == list(range(len(members)))

    def test_errors(self, widget_document):
        model = CoralServiceModelBuilder().build(widget_document)
        assert model.error_types == frozenset({"WidgetNotFoundException"})
        assert model.operation_descriptions["DeleteWidget"].errors == (("WidgetNotFoundException", 404),)
        assert model.error_code_mappings == {"WidgetNotFoundException": "WidgetNotFound"}

    def test_error_status_defaults_to_400(self, widget_document):
        del widget_document["shapes"]["WidgetNotFoundException"]["error"]
        model = CoralServiceModelBuilder().build(widget_document)
        assert model.operation_descriptions["GetWidget"].errors == (("WidgetNotFoundException", 400),)
        assert model.error_code_mappings == {}

    def test_query_protocol(self):
        document = minimal_document("query")
        model = CoralServiceModelBuilder().build(document)
        assert model.default_input_location is InputLocation.QUERY
        assert model.metadata.payload_type is PayloadType.XML
        assert model.content_type == "application/x-amz-query"

    def test_protocol_name_is_accepted(self):
        document = minimal_document()
        document["metadata"]["protocolName"] = document["metadata"].pop("protocol")
        assert CoralServiceModelBuilder().build(document).metadata.protocol == "json"

    def test_result_wrapper(self):
        document = minimal_document("query")
        document["operations"]["DescribeThing"] = {
            "http": {"method": "POST", "requestUri": "/"},
            "output": {"shape": "DescribeThingOutput", "resultWrapper": "DescribeThingResult"},
        }
        document["shapes"] = {
            "DescribeThingOutput": {"type": "structure", "members": {"name": {"shape": "String"}}},
            "String": {"type": "string"},
        }
        model = CoralServiceModelBuilder().build(document)

        operation = model.operation_descriptions["DescribeThing"]
        assert operation.output == "DescribeThingOutputForDescribeThing"
        assert operation.output_description.result_wrapper == "DescribeThingResult"
        wrapper = model.structure_descriptions["DescribeThingOutputForDescribeThing"]
        assert list(wrapper.members) == ["DescribeThingResult"]
        assert wrapper.members["DescribeThingResult"].value == "DescribeThingOutput"
        assert wrapper.members["DescribeThingResult"].required

    def test_result_wrapper_collision_raises(self):
        document = minimal_document("query")
        document["operations"]["DescribeThing"] = {
            "http": {"method": "POST", "requestUri": "/"},
            "output": {"shape": "DescribeThingOutput", "resultWrapper": "DescribeThingResult"},
        }
        document["shapes"] = {
            "DescribeThingOutput": {"type": "structure", "members": {}},
            "DescribeThingOutputForDescribeThing": {"type": "structure", "members": {}},
        }
        with pytest.raises(ModelConsistencyError, match="collides"):
            CoralServiceModelBuilder().build(document)

    def test_output_member_at_request_location_raises(self, widget_document):
        widget_document["shapes"]["GetWidgetResponse"]["members"]["widget"]["location"] = "querystring"
        with pytest.raises(ModelConsistencyError, match="GetWidget"):
            CoralServiceModelBuilder().build(widget_document)

    def test_output_member_at_uri_location_raises(self, widget_document):
        widget_document["shapes"]["GetWidgetResponse"]["members"]["widget"]["location"] = "uri"
        with pytest.raises(ModelConsistencyError, match="uri or querystring"):
            CoralServiceModelBuilder().build(widget_document)

    def test_get_widget_with_uri_member(self):
        document = minimal_document()
        document["metadata"]["protocolName"] = document["metadata"].pop("protocol")
        document["operations"]["GetWidget"] = {
            "http": {"method": "GET", "requestUri": "/widget"},
            "input": {"shape": "GetWidgetInput"},
            "output": {"shape": "GetWidgetOutput"},
        }
        document["shapes"] = {
            "GetWidgetInput": {"type": "structure", "members": {"Id": {"shape": "String", "location": "uri"}}},
            "GetWidgetOutput": {"type": "structure", "members": {"Name": {"shape": "String"}}},
            "String": {"type": "string"},
        }
        operation = CoralServiceModelBuilder().build(document).operation_descriptions["GetWidget"]
        assert operation.input_description.path_fields == ("Id",)
        assert operation.input_description.query_fields == ()
        assert operation.input_description.default_input_location is InputLocation.BODY
        assert operation.output_description.header_fields == ()

    def test_undeclared_error_reference_raises(self, widget_document):
        widget_document["operations"]["GetWidget"]["errors"].append({"shape": "GadgetNotFoundException"})
        with pytest.raises(ModelConsistencyError, match="GadgetNotFoundException"):
            CoralServiceModelBuilder().build(widget_document)

    def test_error_reference_must_be_structure(self, widget_document):
        widget_document["operations"]["GetWidget"]["errors"].append({"shape": "WidgetId"})
        with pytest.raises(ModelConsistencyError, match="undeclared error structure 'WidgetId'"):
            CoralServiceModelBuilder().build(widget_document)

    def test_undeclared_reference_raises(self, widget_document):
        widget_document["shapes"]["Widget"]["members"]["name"]["shape"] = "Missing"
        with pytest.raises(ModelConsistencyError, match="Missing"):
            CoralServiceModelBuilder().build(widget_document)

    def test_operation_input_must_be_structure(self, widget_document):
        widget_document["operations"]["GetWidget"]["input"]["shape"] = "WidgetId"
        with pytest.raises(ModelConsistencyError, match="not a structure"):
            CoralServiceModelBuilder().build(widget_document)

    @pytest.mark.parametrize("key", ["protocol", "endpointPrefix"])
    def test_missing_metadata_raises(self, key):
        document = minimal_document()
        del document["metadata"][key]
        with pytest.raises(ModelDecodeError):
            CoralServiceModelBuilder().build(document)

    def test_unknown_shape_type_raises(self, widget_document):
        widget_document["shapes"]["Weird"] = {"type": "union"}
        with pytest.raises(ModelDecodeError) as excinfo:
            CoralServiceModelBuilder().build(widget_document)
        assert excinfo.value.path == "#/shapes/Weird"

    def test_build_does_not_modify_document(self, widget_document):
        original = copy.deepcopy(widget_document)
        CoralServiceModelBuilder().build(widget_document)
        assert widget_document == original
