"""
Configuration for the code generator pipeline.

Configuration objects are plain dataclasses, loaded from JSON documents
with ``from_dict`` and passed explicitly to every stage that needs them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..utils import to_snake_case
from .errors import ConfigurationError


class ClientConfigurationType(Enum):
    """Kind of companion file generated next to a concrete client."""

    CONFIGURATION_OBJECT = "configurationObject"
    GENERATOR = "generator"

    @property
    def suffix(self) -> str:
        return "Configuration" if self is ClientConfigurationType.CONFIGURATION_OBJECT else "Generator"


class KnownErrorsDefaultRetryBehavior(Enum):
    RETRY = "retry"
    FAIL = "fail"


@dataclass
class AdditionalHttpClient:
    """An extra HTTP client used for a subset of operations."""

    operations: list[str] = field(default_factory=list)
    client_delegate_name_override: str | None = None
    client_delegate_parameters: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> AdditionalHttpClient:
        return AdditionalHttpClient(
            operations=list(d.get("operations", [])),
            client_delegate_name_override=d.get("clientDelegateNameOverride"),
            client_delegate_parameters=list(d.get("clientDelegateParameters", [])),
        )


@dataclass
class HttpClientConfiguration:
    """Retry behaviour and HTTP client layout of generated clients."""

    retry_on_unknown_error: bool = True
    known_errors_default_retry_behavior: KnownErrorsDefaultRetryBehavior = KnownErrorsDefaultRetryBehavior.FAIL
    unretriable_unknown_errors: list[str] = field(default_factory=list)
    retriable_unknown_errors: list[str] = field(default_factory=list)
    additional_clients: dict[str, AdditionalHttpClient] = field(default_factory=dict)
    client_delegate_name_override: str | None = None
    client_delegate_parameters: list[str] = field(default_factory=list)

    @staticmethod
    def from_dict(d: dict) -> HttpClientConfiguration:
        """Create a configuration from its JSON form (camelCase keys).

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        try:
            return HttpClientConfiguration(
                retry_on_unknown_error=bool(d.get("retryOnUnknownError", True)),
                known_errors_default_retry_behavior=KnownErrorsDefaultRetryBehavior(d.get("knownErrorsDefaultRetryBehavior", "fail")),
                unretriable_unknown_errors=list(d.get("unretriableUnknownErrors", [])),
                retriable_unknown_errors=list(d.get("retriableUnknownErrors", [])),
                additional_clients={name: AdditionalHttpClient.from_dict(value) for name, value in (d.get("additionalClients") or {}).items()},
                client_delegate_name_override=d.get("clientDelegateNameOverride"),
                client_delegate_parameters=list(d.get("clientDelegateParameters", [])),
            )
        except (AttributeError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid HTTP client configuration: {e}") from e

    def sorted_additional_clients(self) -> list[tuple[str, AdditionalHttpClient]]:
        """Additional clients ordered by name, paired with their snake_case handle."""
        return [(to_snake_case(name), self.additional_clients[name]) for name in sorted(self.additional_clients)]

    def http_client_for_operation(self, operation_name: str) -> str:
        """Return the handle of the HTTP client an operation is routed to."""
        for handle, client in self.sorted_additional_clients():
            if operation_name in client.operations:
                return handle
        return "http_client"


@dataclass
class ApplicationDescription:
    """Naming and placement of the generated library."""

    base_name: str = ""
    base_file_path: str = "."
    application_description: str = ""
    application_suffix: str = ""


@dataclass
class CodeGenerationCustomizations:
    """Options threaded through every generation stage."""

    # Header added to the top of every generated file (after the generation comment)
    file_header: str | None = None

    # Package providing the HTTP client runtime imported by generated clients
    runtime_package: str = "smoke_aws_http"

    client_configuration_type: ClientConfigurationType = ClientConfigurationType.CONFIGURATION_OBJECT

    # Generate ``async def <op>_async`` variants alongside the synchronous APIs
    async_apis: bool = True

    # Whether generated clients sign every request header
    sign_all_headers: bool = True

    http_client_configuration: HttpClientConfiguration = field(default_factory=HttpClientConfiguration)

    # Package names of the generated model and client (default <Base>Model / <Base>Client)
    model_target_name: str | None = None
    client_target_name: str | None = None

    # Add generation comment at top of file
    add_generation_comment: bool = True

    # Syntax-check every generated Python file before it is written
    validate_output: bool = True

    @staticmethod
    def from_dict(d: dict) -> CodeGenerationCustomizations:
        """Create customizations from a dictionary.

        Keys are the attribute names; ``client_configuration_type`` and
        ``http_client_configuration`` take their JSON forms.

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        config = CodeGenerationCustomizations()
        for k, v in d.items():
            if k == "client_configuration_type":
                try:
                    config.client_configuration_type = ClientConfigurationType(v)
                except ValueError as e:
                    raise ConfigurationError(f"Invalid client_configuration_type: {v!r}") from e
            elif k == "http_client_configuration":
                config.http_client_configuration = HttpClientConfiguration.from_dict(v)
            elif hasattr(config, k):
                setattr(config, k, v)
        return config

    def to_dict(self) -> dict:
        """Convert customizations to a dictionary."""
        return {
            "file_header": self.file_header,
            "runtime_package": self.runtime_package,
            "client_configuration_type": self.client_configuration_type.value,
            "async_apis": self.async_apis,
            "sign_all_headers": self.sign_all_headers,
            "model_target_name": self.model_target_name,
            "client_target_name": self.client_target_name,
            "add_generation_comment": self.add_generation_comment,
            "validate_output": self.validate_output,
        }
