"""Service Model Code Generator

A Python package for generating typed client libraries from AWS Coral
service models and OpenAPI/Swagger documents. Produces a model package
(structures, types, errors, operations, default instances) and a client
package (protocol, AWS or API Gateway client, mock clients, request
inputs, outputs and reporting).
"""

__version__ = "1.0.0"

from .pipeline import (
    ApplicationDescription,
    ClientTarget,
    CodeGenerationCustomizations,
    GenerationType,
    HttpClientConfiguration,
    ModelFormat,
    ModelOverride,
    PipelineGenerator,
    ServiceModelGenerateError,
)

__all__ = [
    "PipelineGenerator",
    "ApplicationDescription",
    "CodeGenerationCustomizations",
    "HttpClientConfiguration",
    "ModelOverride",
    "GenerationType",
    "ModelFormat",
    "ClientTarget",
    "ServiceModelGenerateError",
]
