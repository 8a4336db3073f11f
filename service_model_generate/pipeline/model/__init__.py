"""
Model module.

Contains the unified service model, its builders, reference validation
and the override layer.
"""

from __future__ import annotations

from .model_nodes import (
    InputLocation,
    MemberLocation,
    OperationDescription,
    PayloadType,
    ServiceMetadata,
    ServiceModel,
    StructureDescription,
)
from .coral_builder import CoralServiceModelBuilder
from .loader import load_document
from .openapi_builder import OpenAPIServiceModelBuilder
from .override import ModelOverride, apply_model_override
from .reference_resolver import ReferenceResolver

__all__ = [
    "InputLocation",
    "MemberLocation",
    "OperationDescription",
    "PayloadType",
    "ServiceMetadata",
    "ServiceModel",
    "StructureDescription",
    "CoralServiceModelBuilder",
    "OpenAPIServiceModelBuilder",
    "ModelOverride",
    "apply_model_override",
    "ReferenceResolver",
    "load_document",
]
