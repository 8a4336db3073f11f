"""
Delegate for mock clients.

The mock client returns a default instance of each operation's output and
the throwing mock raises a configured error; either can be overridden per
operation with a callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ClientFileType, ClientType, InvokeType, ModelClientDelegate

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription


class MockClientDelegate(ModelClientDelegate):
    """Generates ``Mock<Base>Client`` or ``Throwing<Base>Client``."""

    def __init__(self, base_name: str, is_throwing_mock: bool = False):
        """
        Initialize the delegate.

        Args:
            base_name: The service base name
            is_throwing_mock: Generate the throwing mock instead of the default-returning one
        """
        super().__init__(base_name)
        self.is_throwing_mock = is_throwing_mock

    @property
    def client_type(self) -> ClientType:
        prefix = "Throwing" if self.is_throwing_mock else "Mock"
        return ClientType(f"{prefix}{self.base_name}Client", (f"{self.base_name}ClientProtocol",))

    def add_type_description(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        if self.is_throwing_mock:
            builder.append_line(f"Mock client for the {self.base_name} service that by default raises the error it was created with.")
        else:
            builder.append_line(f"Mock client for the {self.base_name} service that by default returns default instances of output types.")
        builder.append_line("Each operation can be overridden by passing a callable to the initializer.")

    def add_custom_file_header(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        if not self.is_throwing_mock:
            builder.append_line(f"from {generator.model_target_name} import {self.base_name}ModelDefaultInstances as _defaults")
        builder.append_empty_line()
        builder.append_line(f"from .{self.base_name}ClientProtocol import {self.base_name}ClientProtocol")

    def _override_name(self, generator: ServiceModelCodeGenerator, operation_name: str, invoke_type: InvokeType) -> str:
        function_name = generator.operation_function_name(operation_name)
        if invoke_type is InvokeType.ASYNC:
            return f"{function_name}_async_override"
        return f"{function_name}_override"

    def _override_type(self, generator: ServiceModelCodeGenerator, operation: OperationDescription, invoke_type: InvokeType) -> str:
        arguments = f"_structures.{generator.type_name(operation.input)}" if operation.input else ""
        result = f"_structures.{generator.type_name(operation.output)}" if operation.output else "None"
        if invoke_type is InvokeType.ASYNC:
            result = f"typing.Awaitable[{result}]"
        return f"typing.Optional[typing.Callable[[{arguments}], {result}]]"

    def add_common_functions(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        sorted_operations: list[tuple[str, OperationDescription]],
        file_type: ClientFileType,
    ) -> None:
        overrides = [
            (self._override_name(generator, operation_name, invoke_type), self._override_type(generator, operation, invoke_type))
            for operation_name, operation in sorted_operations
            for invoke_type in generator.invoke_types
        ]

        builder.append_empty_line()
        builder.append_line("def __init__(", post_inc=True)
        builder.append_line("self,")
        if self.is_throwing_mock:
            builder.append_line("error: Exception,")
        if overrides:
            builder.append_line("*,")
        for name, annotation in overrides:
            builder.append_line(f"{name}: {annotation} = None,")
        builder.append_line(") -> None:", pre_dec=True, post_inc=True)

        if self.is_throwing_mock:
            builder.append_line("self.error = error")
        for name, _ in overrides:
            builder.append_line(f"self.{name} = {name}")
        if not self.is_throwing_mock and not overrides:
            builder.append_line("pass")
        builder.dec_indent()

    def add_operation_body(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        operation_name: str,
        operation: OperationDescription,
        invoke_type: InvokeType,
        file_type: ClientFileType,
    ) -> None:
        override = f"self.{self._override_name(generator, operation_name, invoke_type)}"
        call = f"{override}(input)" if operation.input else f"{override}()"
        if invoke_type is InvokeType.ASYNC:
            call = f"await {call}"

        builder.append_line(f"if {override} is not None:", post_inc=True)
        if operation.output:
            builder.append_line(f"return {call}", post_dec=True)
        else:
            builder.append_line(call)
            builder.append_line("return", post_dec=True)

        if self.is_throwing_mock:
            builder.append_line("raise self.error")
        elif operation.output:
            builder.append_line(f"return _defaults.{generator.default_factory_name(operation.output)}()")
