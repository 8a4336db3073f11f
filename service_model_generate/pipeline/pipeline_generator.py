"""
Pipeline orchestration.

Runs the generation phases in order:

1. Phase 1 (Shape decoder): decode the shapes of a Coral document
2. Phase 2 (Model builder): build the unified service model (Coral or OpenAPI)
3. Phase 3 (Override layer): apply the declarative model override
4. Phase 4 (Generator + delegates): emit the model and client packages
5. Phase 5 (Manifest): emit the packaging files of the generated library
"""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Any

from .config import ApplicationDescription, ClientConfigurationType, CodeGenerationCustomizations
from .delegates.base import ClientFileType, DelegateKind, create_delegate
from .delegates.errors_delegate import ModelErrorsDelegate, generate_model_errors
from .emission.manifest import ManifestGenerator
from .generator import ServiceModelCodeGenerator
from .model.coral_builder import CoralServiceModelBuilder
from .model.model_nodes import PayloadType, ServiceModel
from .model.openapi_builder import OpenAPIServiceModelBuilder
from .model.override import ModelOverride, apply_model_override
from .model_files.client_input import generate_client_input
from .model_files.client_output import generate_client_output
from .model_files.default_instances import generate_default_instances
from .model_files.model_operations import generate_model_operations
from .model_files.model_structures import generate_model_structures
from .model_files.model_types import generate_model_types
from .model_files.reporting import generate_invocations_reporting, generate_operations_reporting

logger = logging.getLogger(__name__)


class GenerationType(Enum):
    MODEL = "model"
    CLIENT = "client"
    ALL = "all"


class ModelFormat(Enum):
    CORAL = "coral"
    OPENAPI = "openapi"
    SWAGGER = "swagger"


class ClientTarget(Enum):
    """Which concrete client is generated."""

    AWS = "aws"
    API_GATEWAY = "api-gateway"

    @property
    def client_prefix(self) -> str:
        return "AWS" if self is ClientTarget.AWS else "APIGateway"

    @property
    def delegate_kind(self) -> DelegateKind:
        return DelegateKind.AWS if self is ClientTarget.AWS else DelegateKind.API_GATEWAY


def declared_model_files(base_name: str) -> list[str]:
    """Names of the files written into the model package."""
    return [
        f"{base_name}ModelErrors.py",
        f"{base_name}ModelStructures.py",
        f"{base_name}ModelDefaultInstances.py",
        f"{base_name}ModelOperations.py",
        f"{base_name}ModelTypes.py",
    ]


def declared_client_files(
    base_name: str,
    client_prefix: str = "AWS",
    configuration_type: ClientConfigurationType = ClientConfigurationType.CONFIGURATION_OBJECT,
) -> list[str]:
    """Names of the files written into the client package."""
    return [
        f"{client_prefix}{base_name}Client.py",
        f"{base_name}ClientProtocol.py",
        f"{base_name}OperationsClientOutput.py",
        f"{client_prefix}{base_name}Client{configuration_type.suffix}.py",
        f"{base_name}InvocationsReporting.py",
        f"{base_name}OperationsReporting.py",
        f"Mock{base_name}Client.py",
        f"{base_name}OperationsClientInput.py",
        f"Throwing{base_name}Client.py",
    ]


def build_service_model(document: dict[str, Any], model_format: ModelFormat, base_name: str) -> ServiceModel:
    """Build the unified service model from a parsed model document."""
    if model_format is ModelFormat.CORAL:
        return CoralServiceModelBuilder().build(document)
    return OpenAPIServiceModelBuilder(base_name).build(document)


class PipelineGenerator:
    """Generates the model and client packages of a service from its model document."""

    def __init__(
        self,
        document: dict[str, Any],
        application_description: ApplicationDescription,
        customizations: CodeGenerationCustomizations | None = None,
        model_format: ModelFormat = ModelFormat.CORAL,
        client_target: ClientTarget = ClientTarget.AWS,
        model_override: ModelOverride | None = None,
        strict_overrides: bool = False,
        generation_command: str | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            document: The parsed model document
            application_description: Naming and placement of the output
            customizations: Generation options
            model_format: Format of ``document``
            client_target: Which concrete client to generate
            model_override: Override applied to the model before generation
            strict_overrides: Fail on override entries that match nothing in the model
            generation_command: Command line recorded in generated files
        """
        self.document = document
        self.application_description = application_description
        self.customizations = customizations or CodeGenerationCustomizations()
        self.model_format = model_format
        self.client_target = client_target
        self.model_override = model_override
        self.strict_overrides = strict_overrides
        self.generation_command = generation_command

    def build_model(self) -> ServiceModel:
        """Run the model phases: build the service model and apply the override."""
        model = build_service_model(self.document, self.model_format, self.application_description.base_name)
        return apply_model_override(model, self.model_override, strict=self.strict_overrides)

    def generate(self, generation_type: GenerationType = GenerationType.ALL, package_files: bool = True) -> list[Path]:
        """
        Run the whole pipeline.

        Args:
            generation_type: Which packages to generate
            package_files: Also write the packaging files of the generated library

        Returns:
            The paths of every written file, in the order they were written
        """
        model = self.build_model()
        generator = ServiceModelCodeGenerator(model, self.application_description, self.customizations, self.generation_command)

        written: list[Path] = []
        packages: dict[str, list[str]] = {}
        if generation_type in (GenerationType.MODEL, GenerationType.ALL):
            model_files = self.generate_model_files(generator)
            written.extend(model_files)
            packages[generator.model_target_name] = [path.stem for path in model_files]
        if generation_type in (GenerationType.CLIENT, GenerationType.ALL):
            client_files = self.generate_client_files(generator)
            written.extend(client_files)
            packages[generator.client_target_name] = [path.stem for path in client_files]
        if package_files:
            written.extend(ManifestGenerator(generator).generate(packages))

        logger.info("Generated %d files for %s", len(written), generator.base_name)
        return written

    def errors_delegate(self, model: ServiceModel) -> ModelErrorsDelegate:
        # API Gateway errors are always JSON
        if self.client_target is ClientTarget.API_GATEWAY:
            return ModelErrorsDelegate(PayloadType.JSON)
        return ModelErrorsDelegate(model.metadata.payload_type)

    def generate_model_files(self, generator: ServiceModelCodeGenerator) -> list[Path]:
        logger.info("Generating model package %s", generator.model_target_name)
        return [
            generate_model_errors(generator, self.errors_delegate(generator.model)),
            generate_model_structures(generator),
            generate_default_instances(generator),
            generate_model_operations(generator),
            generate_model_types(generator),
        ]

    def generate_client_files(self, generator: ServiceModelCodeGenerator) -> list[Path]:
        logger.info("Generating client package %s", generator.client_target_name)
        base_name = generator.base_name
        concrete = create_delegate(self.client_target.delegate_kind, base_name)
        if self.customizations.client_configuration_type is ClientConfigurationType.GENERATOR:
            companion = ClientFileType.CLIENT_GENERATOR
        else:
            companion = ClientFileType.CONFIGURATION_OBJECT

        return [
            generator.generate_client(concrete),
            generator.generate_client(create_delegate(DelegateKind.PROTOCOL, base_name)),
            generate_client_output(generator),
            generator.generate_client(concrete, companion),
            generate_invocations_reporting(generator),
            generate_operations_reporting(generator),
            generator.generate_client(create_delegate(DelegateKind.MOCK, base_name)),
            generate_client_input(generator),
            generator.generate_client(create_delegate(DelegateKind.THROWING, base_name)),
        ]
