"""
Base class for client generation delegates.

A delegate supplies the parts of a client file that differ between client
flavours; the generator core supplies everything else.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription


class ClientFileType(Enum):
    """Which file of a client is being generated."""

    CLIENT_IMPLEMENTATION = "clientImplementation"
    CONFIGURATION_OBJECT = "configurationObject"
    CLIENT_GENERATOR = "clientGenerator"

    @property
    def suffix(self) -> str:
        return {
            ClientFileType.CLIENT_IMPLEMENTATION: "",
            ClientFileType.CONFIGURATION_OBJECT: "Configuration",
            ClientFileType.CLIENT_GENERATOR: "Generator",
        }[self]


class InvokeType(Enum):
    SYNC = "sync"
    ASYNC = "async"


class DelegateKind(Enum):
    """The closed set of client delegates."""

    PROTOCOL = "protocol"
    AWS = "aws"
    API_GATEWAY = "api-gateway"
    MOCK = "mock"
    THROWING = "throwing"


@dataclass(frozen=True)
class ClientType:
    """Name and base classes of a generated client class."""

    name: str
    base_classes: tuple[str, ...] = ()


class ModelClientDelegate(ABC):
    """Abstract base class for client delegates."""

    def __init__(self, base_name: str):
        """
        Initialize the delegate.

        Args:
            base_name: The service base name
        """
        self.base_name = base_name

    @property
    @abstractmethod
    def client_type(self) -> ClientType:
        """The class generated by this delegate."""

    @abstractmethod
    def add_type_description(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        """Add the class docstring text."""

    @abstractmethod
    def add_custom_file_header(self, generator: ServiceModelCodeGenerator, builder: FileBuilder, file_type: ClientFileType) -> None:
        """Add imports and module-level definitions needed before the class."""

    @abstractmethod
    def add_common_functions(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        sorted_operations: list[tuple[str, OperationDescription]],
        file_type: ClientFileType,
    ) -> None:
        """Add the initializer and any other non-operation methods."""

    @abstractmethod
    def add_operation_body(
        self,
        generator: ServiceModelCodeGenerator,
        builder: FileBuilder,
        operation_name: str,
        operation: OperationDescription,
        invoke_type: InvokeType,
        file_type: ClientFileType,
    ) -> None:
        """Add the statements of one operation function at the current indent."""


def create_delegate(kind: DelegateKind, base_name: str, **kwargs) -> ModelClientDelegate:
    """
    Create the delegate for a kind.

    Args:
        kind: Which delegate to create
        base_name: The service base name
        **kwargs: Delegate specific options (see each delegate's initializer)

    Returns:
        The delegate
    """
    from .aws_client_delegate import APIGatewayClientDelegate, AWSClientDelegate
    from .mock_client_delegate import MockClientDelegate
    from .protocol_delegate import ClientProtocolDelegate

    if kind is DelegateKind.PROTOCOL:
        return ClientProtocolDelegate(base_name)
    if kind is DelegateKind.AWS:
        return AWSClientDelegate(base_name, **kwargs)
    if kind is DelegateKind.API_GATEWAY:
        return APIGatewayClientDelegate(base_name, **kwargs)
    if kind is DelegateKind.MOCK:
        return MockClientDelegate(base_name, is_throwing_mock=False)
    return MockClientDelegate(base_name, is_throwing_mock=True)
