"""
Delegates for concrete clients: AWS service clients (body or query wire
style) and API Gateway clients.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ..errors import ModelConsistencyError
from ..model.model_nodes import InputLocation
from .aws_common import (
    AWSClientAttributes,
    add_aws_client_common_functions,
    add_aws_client_file_header,
    get_http_client_for_operation,
)
from .base import ClientFileType, ClientType, InvokeType, ModelClientDelegate

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription

logger = logging.getLogger(__name__)

API_GATEWAY_SERVICE = "execute-api"
API_GATEWAY_API_VERSION = "2017-07-25"


class AWSClientDelegate(ModelClientDelegate):
    """Generates ``AWS<Base>Client`` and its configuration or generator file."""

    client_prefix = "AWS"
    targets_api_gateway = False

    def __init__(self, base_name: str, attributes: AWSClientAttributes | None = None):
        """
        Initialize the delegate.

        Args:
            base_name: The service base name
            attributes: Client attributes; derived from the model's metadata when not given
        """
        super().__init__(base_name)
        self.attributes = attributes

    @property
    def client_type(self) -> ClientType:
        return ClientType(f"{self.client_prefix}{self.base_name}Client", (f"{self.base_name}ClientProtocol",))

    def client_attributes(self, generator: ServiceModelCodeGenerator) -> AWSClientAttributes:
        return self.attributes or AWSClientAttributes.from_model(generator.model)

    def is_query_style(self, generator: ServiceModelCodeGenerator) -> bool:
        return generator.model.default_input_location is InputLocation.QUERY

    def add_type_description(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        if file_type is ClientFileType.CONFIGURATION_OBJECT:
            builder.append_line(f"Configuration used to create {self.client_type.name} instances.")
        elif file_type is ClientFileType.CLIENT_GENERATOR:
            builder.append_line(f"Creates {self.client_type.name} instances that share HTTP clients.")
        else:
            builder.append_line(f"AWS Client for the {self.base_name} service.")

    def add_custom_file_header(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        builder.append_empty_line()
        add_aws_client_file_header(generator, builder, file_type, self.client_type.name)

    def add_common_functions(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        sorted_operations: list[tuple[str, OperationDescription]],
        file_type: ClientFileType,
    ) -> None:
        add_aws_client_common_functions(
            generator,
            builder,
            self.client_type.name,
            self.client_attributes(generator),
            query_style=self.is_query_style(generator),
            targets_api_gateway=self.targets_api_gateway,
            file_type=file_type,
        )

    def endpoint_path(self, generator: ServiceModelCodeGenerator, operation_name: str, operation: OperationDescription) -> str:
        """Expression of the endpoint path argument."""
        if operation.http_url is None:
            raise ModelConsistencyError(f"Unable to create an AWS client operation for '{operation_name}' without an HTTP path")
        return f'"{operation.http_url}"'

    def add_operation_body(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        operation_name: str,
        operation: OperationDescription,
        invoke_type: InvokeType,
        file_type: ClientFileType,
    ) -> None:
        if operation.http_verb is None:
            raise ModelConsistencyError(f"Unable to create a client operation for '{operation_name}' without an HTTP verb")
        endpoint_path = self.endpoint_path(generator, operation_name, operation)
        query_style = self.is_query_style(generator)
        case_name = f"{self.base_name}ModelOperations.{generator.operation_case_name(operation_name)}"

        if operation.input:
            builder.append_line("input.validate()")
        self._add_handler_delegate(generator, builder, case_name, query_style)
        builder.append_line(f"""
            invocation_context = HTTPClientInvocationContext(
                reporting=self.invocations_reporting.{generator.operation_function_name(operation_name)},
                handler_delegate=handler_delegate,
            )
            """)

        if operation.input:
            request_input = f"_client_input.{generator.operation_class_prefix(operation_name)}OperationHTTPRequestInput(input)"
        else:
            request_input = "NoHTTPRequestInput()"
        if query_style:
            builder.append_line(f"""
                request_input = QueryWrapperHTTPRequestInput(
                    wrapped_input={request_input},
                    action={case_name}.value,
                    version=self.api_version,
                )
                """)
        else:
            builder.append_line(f"request_input = {request_input}")

        http_client = get_http_client_for_operation(generator, operation_name)
        function = "execute_retriable_with_output" if operation.output else "execute_retriable_without_output"
        if invoke_type is InvokeType.ASYNC:
            function = f"{function}_async"
        call = f"self.{http_client}.{function}("
        if invoke_type is InvokeType.ASYNC:
            call = f"await {call}"

        builder.append_empty_line()
        builder.append_line(f"return {call}" if operation.output else call, post_inc=True)
        builder.append_line(f"endpoint_path={endpoint_path},")
        builder.append_line(f'http_method="{operation.http_verb.upper()}",')
        builder.append_line("input=request_input,")
        if operation.output:
            builder.append_line(f"output_type=_client_output.{generator.operation_class_prefix(operation_name)}OperationHTTPOutput,")
        builder.append_line("invocation_context=invocation_context,")
        builder.append_line("retry_configuration=self.retry_configuration,")
        builder.append_line("retry_on_error=self.retry_on_error_provider,")
        builder.append_line(")", pre_dec=True)

    def _add_handler_delegate(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, case_name: str, query_style: bool) -> None:
        builder.append_line("handler_delegate = AWSClientHandlerDelegate(", post_inc=True)
        builder.append_line("credentials_provider=self.credentials_provider,")
        builder.append_line("aws_region=self.aws_region,")
        builder.append_line("service=self.service,")
        if not query_style:
            builder.append_line(f"operation={case_name}.value,")
        builder.append_line("target=self.target,")
        if generator.customizations.sign_all_headers:
            builder.append_line("sign_all_headers=True,")
        builder.append_line(")", pre_dec=True)


class APIGatewayClientDelegate(AWSClientDelegate):
    """Generates ``APIGateway<Base>Client``; requests are sent to ``/<stage>`` plus the operation path."""

    client_prefix = "APIGateway"
    targets_api_gateway = True

    def client_attributes(self, generator: ServiceModelCodeGenerator) -> AWSClientAttributes:
        if self.attributes is not None:
            return self.attributes
        return AWSClientAttributes(
            api_version=API_GATEWAY_API_VERSION,
            service=API_GATEWAY_SERVICE,
            target=None,
            content_type=generator.model.content_type,
        )

    def is_query_style(self, generator: ServiceModelCodeGenerator) -> bool:
        return False

    def add_type_description(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        if file_type is ClientFileType.CLIENT_IMPLEMENTATION:
            builder.append_line(f"API Gateway Client for the {self.base_name} service.")
        else:
            super().add_type_description(generator, builder, file_type)

    def endpoint_path(self, generator: ServiceModelCodeGenerator, operation_name: str, operation: OperationDescription) -> str:
        return f'f"/{{self.stage}}" + {self.base_name}ModelOperations.{generator.operation_case_name(operation_name)}.operation_path'
