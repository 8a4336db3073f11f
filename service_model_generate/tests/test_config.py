"""
Tests for configuration objects and document loading.
"""

import json
from pathlib import Path

import pytest

from service_model_generate.pipeline.config import (
    ClientConfigurationType,
    CodeGenerationCustomizations,
    HttpClientConfiguration,
    KnownErrorsDefaultRetryBehavior,
)
from service_model_generate.pipeline.errors import ConfigurationError
from service_model_generate.pipeline.model.loader import load_document

TEST_DATA = Path(__file__).parent / "test_data"


class TestHttpClientConfiguration:
    """Test cases for HttpClientConfiguration"""

    def test_defaults(self):
        configuration = HttpClientConfiguration.from_dict({})
        assert configuration.retry_on_unknown_error
        assert configuration.known_errors_default_retry_behavior is KnownErrorsDefaultRetryBehavior.FAIL
        assert configuration.additional_clients == {}
        assert configuration.http_client_for_operation("GetWidget") == "http_client"

    def test_from_file(self):
        configuration = HttpClientConfiguration.from_dict(load_document(TEST_DATA / "widget_http_client.json"))
        assert configuration.retriable_unknown_errors == ["ThrottlingException"]
        assert configuration.additional_clients["dataHttpClient"].operations == ["ListWidgets"]
        assert configuration.additional_clients["dataHttpClient"].client_delegate_parameters == [
            'output_list_decoding_strategy="collapse_list_with_index"'
        ]

    def test_additional_client_routing(self):
        configuration = HttpClientConfiguration.from_dict(
            {
                "additionalClients": {
                    "dataHttpClient": {"operations": ["ListWidgets"]},
                    "adminHTTPClient": {"operations": ["DeleteWidget"]},
                },
            }
        )
        assert [handle for handle, _ in configuration.sorted_additional_clients()] == ["admin_http_client", "data_http_client"]
        assert configuration.http_client_for_operation("ListWidgets") == "data_http_client"
        assert configuration.http_client_for_operation("DeleteWidget") == "admin_http_client"
        assert configuration.http_client_for_operation("GetWidget") == "http_client"

    def test_invalid_retry_behavior_raises(self):
        with pytest.raises(ConfigurationError):
            HttpClientConfiguration.from_dict({"knownErrorsDefaultRetryBehavior": "sometimes"})


class TestCodeGenerationCustomizations:
    """Test cases for CodeGenerationCustomizations"""

    def test_defaults(self):
        customizations = CodeGenerationCustomizations()
        assert customizations.runtime_package == "smoke_aws_http"
        assert customizations.client_configuration_type is ClientConfigurationType.CONFIGURATION_OBJECT
        assert customizations.async_apis
        assert customizations.validate_output

    def test_from_dict(self):
        customizations = CodeGenerationCustomizations.from_dict(
            {
                "client_configuration_type": "generator",
                "async_apis": False,
                "file_header": "Copyright Widgets Inc.",
                "http_client_configuration": {"retryOnUnknownError": False},
                "unknown_option": 1,
            }
        )
        assert customizations.client_configuration_type is ClientConfigurationType.GENERATOR
        assert not customizations.async_apis
        assert customizations.file_header == "Copyright Widgets Inc."
        assert not customizations.http_client_configuration.retry_on_unknown_error
        assert not hasattr(customizations, "unknown_option")

    def test_invalid_configuration_type_raises(self):
        with pytest.raises(ConfigurationError):
            CodeGenerationCustomizations.from_dict({"client_configuration_type": "factory"})

    def test_to_dict_round_trip(self):
        customizations = CodeGenerationCustomizations(client_configuration_type=ClientConfigurationType.GENERATOR, model_target_name="Models")
        assert CodeGenerationCustomizations.from_dict(customizations.to_dict()).to_dict() == customizations.to_dict()

    def test_configuration_type_suffix(self):
        assert ClientConfigurationType.CONFIGURATION_OBJECT.suffix == "Configuration"
        assert ClientConfigurationType.GENERATOR.suffix == "Generator"


class TestLoadDocument:
    """Test cases for load_document"""

    def test_json(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text(json.dumps({"a": 1}))
        assert load_document(path) == {"a": 1}

    def test_yaml(self, tmp_path):
        path = tmp_path / "model.yml"
        path.write_text("a: 1\nb:\n  - x\n")
        assert load_document(path) == {"a": 1, "b": ["x"]}

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_document(tmp_path / "missing.json")

    def test_malformed_file_raises(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Cannot parse"):
            load_document(path)

    def test_non_object_raises(self, tmp_path):
        path = tmp_path / "model.json"
        path.write_text("[1, 2]")
        with pytest.raises(ConfigurationError, match="does not contain an object"):
            load_document(path)
