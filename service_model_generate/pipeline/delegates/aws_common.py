"""
Emission helpers shared by the AWS and API Gateway client delegates.

These produce the parts of a concrete client that do not depend on the
wire style: the client file header (runtime imports, client error and
retriability functions), HTTP client construction, the initializer shared
by the client and its configuration and generator files, and shutdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from ...utils import string_literal, to_snake_case
from ..config import KnownErrorsDefaultRetryBehavior
from ..model.model_nodes import InputLocation, PayloadType
from .base import ClientFileType
from .errors_delegate import error_case_names

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import ServiceModel

DEFAULT_JSON_DELEGATE = "JSONAWSHttpClientDelegate"
DEFAULT_XML_DELEGATE = "XMLAWSHttpClientDelegate"
QUERY_CONTENT_TYPE = "application/octet-stream"


@dataclass(frozen=True)
class AWSClientAttributes:
    """Attributes of an AWS client.

    Attributes:
        api_version: The API version of this client
        service: The service name this client signs requests for
        target: The service target this client is targeting
        content_type: The request content type used by this client
        global_endpoint: The service's global endpoint, used as the default endpoint if present
    """

    api_version: str
    service: str
    target: str | None
    content_type: str
    global_endpoint: str | None = None

    @staticmethod
    def from_model(model: ServiceModel) -> AWSClientAttributes:
        return AWSClientAttributes(
            api_version=model.metadata.api_version or "",
            service=model.metadata.endpoint_prefix,
            target=model.metadata.target_prefix,
            content_type=model.content_type,
            global_endpoint=model.metadata.global_endpoint,
        )


@dataclass(frozen=True)
class InitializerParameter:
    name: str
    annotation: str
    default: str | None = None


def initializer_parameters(
    attributes: AWSClientAttributes,
    query_style: bool,
    targets_api_gateway: bool,
) -> list[InitializerParameter]:
    """The keyword-only parameters of a concrete client's initializer.

    A global endpoint becomes the default endpoint and makes the region
    optional. Query-style clients take an API version instead of a target.
    """
    parameters = [InitializerParameter("credentials_provider", "CredentialsProvider")]
    if attributes.global_endpoint is not None:
        parameters.append(InitializerParameter("aws_region", "typing.Optional[AWSRegion]", "None"))
        parameters.append(InitializerParameter("endpoint_host_name", "str", string_literal(attributes.global_endpoint)))
    else:
        parameters.append(InitializerParameter("aws_region", "AWSRegion"))
        parameters.append(InitializerParameter("endpoint_host_name", "str"))
    if targets_api_gateway:
        parameters.append(InitializerParameter("stage", "str"))
    parameters.append(InitializerParameter("endpoint_port", "int", "443"))
    parameters.append(InitializerParameter("service", "str", string_literal(attributes.service)))
    if query_style:
        parameters.append(InitializerParameter("content_type", "str", string_literal(QUERY_CONTENT_TYPE)))
        parameters.append(InitializerParameter("api_version", "str", string_literal(attributes.api_version)))
    else:
        parameters.append(InitializerParameter("content_type", "str", string_literal(attributes.content_type)))
        target = string_literal(attributes.target) if attributes.target is not None else "None"
        parameters.append(InitializerParameter("target", "typing.Optional[str]", target))
    parameters.append(InitializerParameter("connection_timeout_seconds", "int", "10"))
    parameters.append(InitializerParameter("retry_configuration", "typing.Optional[HTTPClientRetryConfiguration]", "None"))
    return parameters


REPORTING_PARAMETERS = [
    InitializerParameter("reporting", "typing.Optional[InvocationReporting]", "None"),
    InitializerParameter("reporting_configuration", "typing.Optional[OperationReportingConfiguration]", "None"),
]


def add_signature(builder: FileBuilder, function_name: str, parameters: list[InitializerParameter], return_type: str) -> None:
    """Add a method signature with keyword-only parameters, one per line."""
    builder.append_line(f"def {function_name}(")
    builder.inc_indent()
    builder.append_line("self,")
    builder.append_line("*,")
    for parameter in parameters:
        default = f" = {parameter.default}" if parameter.default is not None else ""
        builder.append_line(f"{parameter.name}: {parameter.annotation}{default},")
    builder.dec_indent()
    builder.append_line(f") -> {return_type}:", post_inc=True)


def add_keyword_arguments(builder: FileBuilder, names: list[str], source: str = "") -> None:
    for name in names:
        builder.append_line(f"{name}={source}{name},")


def client_delegate_names(generator: ServiceModelCodeGenerator) -> list[str]:
    """Every client delegate class the concrete client instantiates."""
    configuration = generator.customizations.http_client_configuration
    default = DEFAULT_XML_DELEGATE if generator.model.metadata.payload_type is PayloadType.XML else DEFAULT_JSON_DELEGATE
    names = {configuration.client_delegate_name_override or default}
    for _, client in configuration.sorted_additional_clients():
        names.add(client.client_delegate_name_override or default)
    return sorted(names)


def add_aws_client_file_header(generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType, client_name: str) -> None:
    """Add the imports of a concrete client file and, for the implementation, its module-level functions."""
    base_name = generator.base_name
    runtime_names = {
        "AWSRegion",
        "CredentialsProvider",
        "HTTPClientRetryConfiguration",
        "InvocationReporting",
        "OperationReportingConfiguration",
    }
    if file_type is ClientFileType.CLIENT_IMPLEMENTATION:
        runtime_names |= {"AWSClientHandlerDelegate", "HTTPClient", "HTTPClientInvocationContext", "NoHTTPRequestInput"}
        runtime_names |= set(client_delegate_names(generator))
        if generator.model.default_input_location is InputLocation.QUERY:
            runtime_names.add("QueryWrapperHTTPRequestInput")

    builder.append_line(f"from {generator.customizations.runtime_package} import (")
    builder.inc_indent()
    for name in sorted(runtime_names):
        builder.append_line(f"{name},")
    builder.dec_indent()
    builder.append_line(")")

    if file_type is not ClientFileType.CLIENT_IMPLEMENTATION:
        builder.append_empty_line()
        imported = f"{client_name}, create_http_clients" if file_type is ClientFileType.CLIENT_GENERATOR else client_name
        builder.append_line(f"from .{client_name} import {imported}")
        return

    model_target = generator.model_target_name
    builder.append_line(f"from {model_target}.{base_name}ModelErrors import {base_name}Error, {base_name}ErrorType, decode_error")
    builder.append_line(f"from {model_target}.{base_name}ModelOperations import {base_name}ModelOperations")
    builder.append_empty_line()
    builder.append_line(f"from . import {base_name}OperationsClientInput as _client_input")
    builder.append_line(f"from . import {base_name}OperationsClientOutput as _client_output")
    builder.append_line(f"from .{base_name}ClientProtocol import {base_name}ClientProtocol")
    builder.append_line(f"from .{base_name}InvocationsReporting import {base_name}InvocationsReporting")
    builder.append_line(f"from .{base_name}OperationsReporting import {base_name}OperationsReporting")

    _add_client_error(builder, base_name)
    _add_retriable_functions(generator, builder, base_name)
    _add_create_http_clients(generator, builder, client_name)


def _add_client_error(builder: FileBuilder, base_name: str) -> None:
    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"""
        class {base_name}ClientError(Exception):
            \"\"\"Raised by {base_name} clients for failures outside of the service's modelled errors.\"\"\"
        """)


def _add_retriable_functions(generator: ServiceModelCodeGenerator, builder: FileBuilder, base_name: str) -> None:
    configuration = generator.customizations.http_client_configuration
    retry_by_default = configuration.known_errors_default_retry_behavior is KnownErrorsDefaultRetryBehavior.RETRY

    retriable = []
    unretriable = []
    for identity, case_name in error_case_names(generator):
        if not retry_by_default and identity in configuration.retriable_unknown_errors:
            retriable.append(case_name)
        elif retry_by_default and identity in configuration.unretriable_unknown_errors:
            unretriable.append(case_name)

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"def is_retriable_{to_snake_case(base_name)}_error(error: {base_name}Error) -> bool:", post_inc=True)
    builder.append_line(f'"""Returns whether a failed invocation that raised a {base_name} error should be retried."""')
    for cases, result in ((retriable, "True"), (unretriable, "False")):
        if not cases:
            continue
        builder.append_line("if error.error_type in (")
        builder.inc_indent()
        for case_name in sorted(cases):
            builder.append_line(f"{base_name}ErrorType.{case_name},")
        builder.dec_indent()
        builder.append_line("):")
        builder.append_line(f"return {result}", pre_inc=True, post_dec=True)
    builder.append_line(f"return {retry_by_default}", post_dec=True)

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line("def is_retriable(error: BaseException) -> bool:", post_inc=True)
    builder.append_line('"""Returns whether a failed invocation should be retried."""')
    builder.append_line(f"if isinstance(error, {base_name}Error):")
    builder.append_line(f"return is_retriable_{to_snake_case(base_name)}_error(error)", pre_inc=True, post_dec=True)
    builder.append_line(f"return {configuration.retry_on_unknown_error}", post_dec=True)


def _add_client_delegate(builder: FileBuilder, variable: str, delegate_name: str, parameters: list[str]) -> None:
    if not parameters:
        builder.append_line(f"{variable} = {delegate_name}(error_decoder=decode_error)")
        return
    builder.append_line(f"{variable} = {delegate_name}(")
    builder.inc_indent()
    builder.append_line("error_decoder=decode_error,")
    for parameter in parameters:
        builder.append_line(f"{parameter},")
    builder.dec_indent()
    builder.append_line(")")


def _add_create_http_clients(generator: ServiceModelCodeGenerator, builder: FileBuilder, client_name: str) -> None:
    configuration = generator.customizations.http_client_configuration
    default = DEFAULT_XML_DELEGATE if generator.model.metadata.payload_type is PayloadType.XML else DEFAULT_JSON_DELEGATE

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line("""
        def create_http_clients(
            *,
            endpoint_host_name: str,
            endpoint_port: int,
            content_type: str,
            connection_timeout_seconds: int,
        ) -> dict[str, HTTPClient]:
        """)
    builder.inc_indent()
    builder.append_line(f'"""Creates the HTTP clients used by {client_name}, keyed by attribute name."""')
    _add_client_delegate(
        builder,
        "client_delegate",
        configuration.client_delegate_name_override or default,
        configuration.client_delegate_parameters,
    )
    clients = [("http_client", "client_delegate")]
    for handle, client in configuration.sorted_additional_clients():
        variable = f"client_delegate_for_{handle}"
        _add_client_delegate(builder, variable, client.client_delegate_name_override or default, client.client_delegate_parameters)
        clients.append((handle, variable))

    builder.append_empty_line()
    builder.append_line("return {")
    builder.inc_indent()
    for handle, variable in clients:
        builder.append_line(f"""
            "{handle}": HTTPClient(
                endpoint_host_name=endpoint_host_name,
                endpoint_port=endpoint_port,
                content_type=content_type,
                client_delegate={variable},
                connection_timeout_seconds=connection_timeout_seconds,
            ),
            """)
    builder.dec_indent()
    builder.append_line("}", post_dec=True)


def get_http_client_for_operation(generator: ServiceModelCodeGenerator, operation_name: str) -> str:
    """Attribute name of the HTTP client an operation is sent through."""
    return generator.customizations.http_client_configuration.http_client_for_operation(operation_name)


def http_client_handles(generator: ServiceModelCodeGenerator) -> list[str]:
    configuration = generator.customizations.http_client_configuration
    return ["http_client", *[handle for handle, _ in configuration.sorted_additional_clients()]]


def add_aws_client_common_functions(
    generator: ServiceModelCodeGenerator,
    builder: FileBuilder,
    client_name: str,
    attributes: AWSClientAttributes,
    query_style: bool,
    targets_api_gateway: bool,
    file_type: ClientFileType,
) -> None:
    """Add the initializer, factory and shutdown functions of a concrete client file."""
    parameters = initializer_parameters(attributes, query_style, targets_api_gateway)
    builder.append_empty_line()
    if file_type is ClientFileType.CLIENT_IMPLEMENTATION:
        _add_client_initializer(generator, builder, client_name, parameters, attributes, query_style, targets_api_gateway)
        add_aws_client_deinitializer(generator, builder, client_name)
        return

    add_signature(builder, "__init__", parameters, "None")
    for parameter in parameters:
        builder.append_line(f"self.{parameter.name} = {parameter.name}")
    names = [parameter.name for parameter in parameters]

    if file_type is ClientFileType.CLIENT_GENERATOR:
        builder.append_line("self.http_clients = create_http_clients(")
        builder.inc_indent()
        add_keyword_arguments(builder, ["endpoint_host_name", "endpoint_port", "content_type", "connection_timeout_seconds"])
        builder.dec_indent()
        builder.append_line(")")
        builder.dec_indent()

        builder.append_empty_line()
        builder.append_line("def close(self) -> None:", post_inc=True)
        builder.append_line('"""Gracefully shuts down the HTTP clients shared by the generated clients."""')
        builder.append_line("for http_client in self.http_clients.values():")
        builder.append_line("http_client.close()", pre_inc=True, post_dec=True)
        builder.dec_indent()

        builder.append_empty_line()
        add_signature(builder, "with_reporting", REPORTING_PARAMETERS, client_name)
        builder.append_line(f'"""Returns a {client_name} that reports to ``reporting`` and shares this generator\'s HTTP clients."""')
        builder.append_line(f"return {client_name}(")
        builder.inc_indent()
        add_keyword_arguments(builder, names, "self.")
        add_keyword_arguments(builder, ["reporting", "reporting_configuration"])
        builder.append_line("http_clients=self.http_clients,")
        builder.dec_indent()
        builder.append_line(")", post_dec=True)
        return

    builder.dec_indent()
    builder.append_empty_line()
    add_signature(builder, "create_client", REPORTING_PARAMETERS, client_name)
    builder.append_line(f'"""Returns a new {client_name}; the caller is responsible for closing it."""')
    builder.append_line(f"return {client_name}(")
    builder.inc_indent()
    add_keyword_arguments(builder, names, "self.")
    add_keyword_arguments(builder, ["reporting", "reporting_configuration"])
    builder.dec_indent()
    builder.append_line(")", post_dec=True)


def _add_client_initializer(
    generator: ServiceModelCodeGenerator,
    builder: FileBuilder,
    client_name: str,
    parameters: list[InitializerParameter],
    attributes: AWSClientAttributes,
    query_style: bool,
    targets_api_gateway: bool,
) -> None:
    base_name = generator.base_name
    all_parameters = [
        *parameters,
        *REPORTING_PARAMETERS,
        InitializerParameter("http_clients", "typing.Optional[typing.Mapping[str, HTTPClient]]", "None"),
    ]
    add_signature(builder, "__init__", all_parameters, "None")
    builder.append_line("if not endpoint_host_name:")
    builder.append_line(f'raise {base_name}ClientError("An endpoint host name is required")', pre_inc=True, post_dec=True)
    builder.append_line("""
        self._owns_http_clients = http_clients is None
        if http_clients is None:
            http_clients = create_http_clients(
                endpoint_host_name=endpoint_host_name,
                endpoint_port=endpoint_port,
                content_type=content_type,
                connection_timeout_seconds=connection_timeout_seconds,
            )
        """)
    for handle in http_client_handles(generator):
        builder.append_line(f'self.{handle} = http_clients["{handle}"]')

    if attributes.global_endpoint is not None:
        builder.append_line("self.aws_region = aws_region if aws_region is not None else AWSRegion.US_EAST_1")
    else:
        builder.append_line("self.aws_region = aws_region")
    builder.append_line("self.service = service")
    if query_style:
        builder.append_line("self.target = None")
        builder.append_line("self.api_version = api_version")
    else:
        builder.append_line("self.target = target")
    if targets_api_gateway:
        builder.append_line("self.stage = stage")
    builder.append_line(f"""
        self.credentials_provider = credentials_provider
        self.retry_configuration = retry_configuration or HTTPClientRetryConfiguration.default()
        self.retry_on_error_provider = is_retriable
        self.operations_reporting = {base_name}OperationsReporting("{client_name}", reporting_configuration)
        self.invocations_reporting = {base_name}InvocationsReporting(reporting, self.operations_reporting)
        """)
    builder.dec_indent()


def add_aws_client_deinitializer(generator: ServiceModelCodeGenerator, builder: FileBuilder, client_name: str) -> None:
    """Add ``close`` and the context manager protocol."""
    builder.append_empty_line()
    builder.append_line("def close(self) -> None:", post_inc=True)
    builder.append_line('''
        """
        Gracefully shuts down this client. This function is idempotent and
        will handle being called multiple times.
        """
        ''')
    builder.append_line("if self._owns_http_clients:", post_inc=True)
    for handle in http_client_handles(generator):
        builder.append_line(f"self.{handle}.close()")
    builder.dec_indent()
    builder.dec_indent()
    builder.append_line(f"""

        def __enter__(self) -> {client_name}:
            return self

        def __exit__(self, *exc_info: object) -> None:
            self.close()
        """)
