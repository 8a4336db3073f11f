"""
Generation of the model errors file.

The errors delegate decides the wire coding keys of error payloads and
whether an AccessDenied identity has to be added to the model's errors.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import python_identifier, string_literal, to_upper_snake_case, upper_camel_case
from ..model.model_nodes import PayloadType

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator

logger = logging.getLogger(__name__)

ACCESS_DENIED_IDENTITY = "AccessDenied"
ACCESS_DENIED_CASE = "ACCESS_DENIED"


def normalized_error_name(error_type: str) -> str:
    """Error type name without its Exception suffix ("ThrottlingException" -> "Throttling")."""
    name = upper_camel_case(error_type)
    if name.endswith("Exception") and name != "Exception":
        name = name.removesuffix("Exception")
    return name


def error_case_names(generator: ServiceModelCodeGenerator) -> list[tuple[str, str]]:
    """(identity, enum case name) of every modelled error, sorted by case name.

    The identity is the error's wire code when it has one, its type name otherwise.
    """
    cases = []
    taken: set[str] = set()
    for error_type in sorted(generator.model.error_types, key=lambda name: (normalized_error_name(name), name)):
        case_name = python_identifier(to_upper_snake_case(normalized_error_name(error_type)))
        unique = case_name
        index = 2
        while unique in taken:
            unique = f"{case_name}_{index}"
            index += 1
        taken.add(unique)
        cases.append((generator.model.error_code_mappings.get(error_type, error_type), unique))
    return sorted(cases, key=lambda case: case[1])


class ModelErrorsDelegate:
    """Customizes the errors file for a wire payload type."""

    def __init__(self, payload_type: PayloadType = PayloadType.JSON):
        self.payload_type = payload_type

    @property
    def coding_keys(self) -> tuple[str, str]:
        """(type key, message key) of an error payload."""
        if self.payload_type is PayloadType.XML:
            return "Code", "Message"
        return "__type", "message"

    def add_access_denied_error(self, cases: list[tuple[str, str]]) -> bool:
        return all(case_name != ACCESS_DENIED_CASE for _, case_name in cases)

    def error_cases(self, generator: ServiceModelCodeGenerator) -> list[tuple[str, str]]:
        """The modelled error cases plus any added by this delegate."""
        cases = error_case_names(generator)
        if self.add_access_denied_error(cases):
            cases = sorted([*cases, (ACCESS_DENIED_IDENTITY, ACCESS_DENIED_CASE)], key=lambda case: case[1])
        return cases


def generate_model_errors(generator: ServiceModelCodeGenerator, delegate: ModelErrorsDelegate) -> Path:
    """Generate ``<Base>ModelErrors.py``."""
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Errors of the {base_name} service model.")
    builder.append_empty_line()
    builder.append_line("import enum")
    builder.append_line("import typing")
    builder.append_empty_line()
    _add_error_type_enum(builder, base_name, delegate.error_cases(generator))
    _add_error_classes(builder, base_name)
    _add_decode_error(builder, base_name, delegate)
    return generator.write_model_file(builder, f"{base_name}ModelErrors.py")


def _add_error_type_enum(builder: FileBuilder, base_name: str, cases: list[tuple[str, str]]) -> None:
    builder.append_empty_line()
    builder.append_line(f"class {base_name}ErrorType(str, enum.Enum):", post_inc=True)
    builder.append_line(f'"""Identities of the errors returned by the {base_name} service."""')
    builder.append_empty_line()
    for identity, case_name in cases:
        builder.append_line(f"{case_name} = {string_literal(identity)}")
    builder.dec_indent()


def _add_error_classes(builder: FileBuilder, base_name: str) -> None:
    builder.append_line(f'''


        class {base_name}Error(Exception):
            """
            An error returned by the {base_name} service.

            Attributes:
                error_type: The identity of the error, None for validation and unrecognized errors
                message: The message returned with the error, if any
            """

            def __init__(self, error_type: typing.Optional[{base_name}ErrorType], message: typing.Optional[str] = None) -> None:
                if message is None and error_type is not None:
                    super().__init__(error_type.value)
                else:
                    super().__init__(message or "")
                self.error_type = error_type
                self.message = message

            @property
            def identity(self) -> str:
                return self.error_type.value if self.error_type is not None else type(self).__name__


        class ValidationError({base_name}Error):
            """A value does not satisfy the constraints of its model type."""

            def __init__(self, reason: str) -> None:
                super().__init__(None, reason)
                self.reason = reason


        class UnrecognizedError({base_name}Error):
            """An error whose identity is not part of the {base_name} model."""

            def __init__(self, error_type_name: str, message: typing.Optional[str] = None) -> None:
                super().__init__(None, message)
                self.error_type_name = error_type_name

            @property
            def identity(self) -> str:
                return self.error_type_name
        ''')


def _add_decode_error(builder: FileBuilder, base_name: str, delegate: ModelErrorsDelegate) -> None:
    type_key, message_key = delegate.coding_keys
    builder.append_line(f'''


        TYPE_CODING_KEY = {string_literal(type_key)}
        MESSAGE_CODING_KEY = {string_literal(message_key)}


        def decode_error(payload: typing.Mapping[str, typing.Any]) -> {base_name}Error:
            """
            Decodes an error from its wire payload.

            Any namespace prefix of the identity, up to and including "#", is removed.
            Identities that are not part of the model decode to UnrecognizedError.
            """
            error_reason = str(payload.get(TYPE_CODING_KEY, ""))
            error_message = payload.get(MESSAGE_CODING_KEY)
            if "#" in error_reason:
                error_reason = error_reason[error_reason.index("#") + 1 :]

            try:
                error_type = {base_name}ErrorType(error_reason)
            except ValueError:
                return UnrecognizedError(error_reason, error_message)
            return {base_name}Error(error_type, error_message)
        ''')
