"""
Pipeline - service model to client library generator.

This module provides a multi-phase architecture for generating a client
library from a service model document:

1. Phase 1 (Shape decoder): Decode Coral shapes
2. Phase 2 (Model builder): Build the unified service model (Coral or OpenAPI)
3. Phase 3 (Override layer): Apply the declarative model override
4. Phase 4 (Generator + delegates): Emit the model and client packages
5. Phase 5 (Manifest): Emit the packaging files of the generated library
"""

from __future__ import annotations

from .config import (
    ApplicationDescription,
    ClientConfigurationType,
    CodeGenerationCustomizations,
    HttpClientConfiguration,
    KnownErrorsDefaultRetryBehavior,
)
from .errors import (
    ConfigurationError,
    FileBuilderError,
    FileEmissionError,
    ModelConsistencyError,
    ModelDecodeError,
    OverrideError,
    ServiceModelGenerateError,
)
from .model.override import ModelOverride
from .pipeline_generator import (
    ClientTarget,
    GenerationType,
    ModelFormat,
    PipelineGenerator,
    declared_client_files,
    declared_model_files,
)

__all__ = [
    "PipelineGenerator",
    "GenerationType",
    "ModelFormat",
    "ClientTarget",
    "declared_model_files",
    "declared_client_files",
    "ApplicationDescription",
    "ClientConfigurationType",
    "CodeGenerationCustomizations",
    "HttpClientConfiguration",
    "KnownErrorsDefaultRetryBehavior",
    "ModelOverride",
    "ServiceModelGenerateError",
    "ModelDecodeError",
    "ModelConsistencyError",
    "OverrideError",
    "ConfigurationError",
    "FileBuilderError",
    "FileEmissionError",
]
