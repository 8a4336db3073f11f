"""
Delegate for the client protocol every generated client implements.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import ClientFileType, ClientType, InvokeType, ModelClientDelegate

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription


class ClientProtocolDelegate(ModelClientDelegate):
    """Generates ``<Base>ClientProtocol``, a ``typing.Protocol`` of every operation."""

    @property
    def client_type(self) -> ClientType:
        return ClientType(f"{self.base_name}ClientProtocol", ("typing.Protocol",))

    def add_type_description(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        builder.append_line(f"Client protocol for the {self.base_name} service.")

    def add_custom_file_header(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        pass

    def add_common_functions(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        sorted_operations: list[tuple[str, OperationDescription]],
        file_type: ClientFileType,
    ) -> None:
        pass

    def add_operation_body(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        operation_name: str,
        operation: OperationDescription,
        invoke_type: InvokeType,
        file_type: ClientFileType,
    ) -> None:
        builder.append_line("...")
