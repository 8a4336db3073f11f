"""
Exceptions raised by the generation pipeline.

Every stage raises a subclass of ServiceModelGenerateError so that callers
(the CLI in particular) can report any fatal condition uniformly.
"""

from __future__ import annotations


class ServiceModelGenerateError(Exception):
    """Base class for all generation errors."""


class ModelDecodeError(ServiceModelGenerateError):
    """A shape or document could not be decoded."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message} (at {path})"
        super().__init__(message)


class ModelConsistencyError(ServiceModelGenerateError):
    """The decoded model references something it does not declare, or is otherwise inconsistent."""


class OverrideError(ServiceModelGenerateError):
    """An override targets entities that do not exist in the model (strict mode only)."""

    def __init__(self, unknown_targets: list[str]):
        self.unknown_targets = unknown_targets
        super().__init__("Model override references unknown or invalid targets: " + ", ".join(unknown_targets))


class ConfigurationError(ServiceModelGenerateError):
    """A configuration, override or model file is unreadable or invalid."""


class FileBuilderError(ServiceModelGenerateError):
    """Invalid use of a FileBuilder, such as decrementing the indent below zero."""


class FileEmissionError(ServiceModelGenerateError):
    """A generated file failed validation and was not written."""
