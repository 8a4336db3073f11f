"""
Generation of the per-operation HTTP outputs of the client package.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import string_literal
from .client_input import wire_keys

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription


def generate_client_output(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>OperationsClientOutput.py``.

    Each output composes the operation's output structure from the decoded
    response body and the response headers bound to output members.
    """
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"HTTP outputs of the {base_name} operations.")
    builder.append_empty_line()
    builder.append_line("import typing")
    builder.append_empty_line()
    builder.append_line(f"from {generator.model_target_name} import {base_name}ModelStructures as _structures")

    for operation_name, operation in generator.sorted_operations():
        if operation.output:
            _add_output(generator, builder, operation_name, operation)

    return generator.write_client_file(builder, f"{base_name}OperationsClientOutput.py")


def _add_output(generator: ServiceModelCodeGenerator, builder: FileBuilder, operation_name: str, operation: OperationDescription) -> None:
    description = operation.output_description
    output_type = f"_structures.{generator.type_name(operation.output)}"
    # Headers bind to members of the wrapped shape, not of the synthesized wrapper
    wrapper_key = None
    headers_structure = operation.output
    if description.result_wrapper is not None:
        wrapper_member = generator.model.structure_descriptions[operation.output].members[description.result_wrapper]
        wrapper_key = generator.coding_key(operation.output, description.result_wrapper, wrapper_member)
        headers_structure = wrapper_member.value
    header_keys = wire_keys(generator, headers_structure, description.header_fields)
    payload_keys = wire_keys(generator, operation.output, (description.payload_as_member,)) if description.payload_as_member else []

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {generator.operation_class_prefix(operation_name)}OperationHTTPOutput:", post_inc=True)
    builder.append_line(f'"""HTTP output of the {operation_name} operation."""')
    builder.append_empty_line()
    builder.append_line("@classmethod")
    builder.append_line("def compose(", post_inc=True)
    builder.append_line("cls,")
    builder.append_line("body: typing.Any,")
    builder.append_line("headers: typing.Mapping[str, str],")
    builder.append_line(f") -> {output_type}:", pre_dec=True, post_inc=True)
    builder.append_line('"""Creates the operation output from the response body and headers."""')

    if payload_keys:
        builder.append_line(f"values: dict[str, typing.Any] = {{{string_literal(payload_keys[0])}: body}}")
    else:
        builder.append_line("values: dict[str, typing.Any] = dict(body or {})")
    if header_keys:
        target = "values"
        if wrapper_key is not None:
            target = "wrapped"
            builder.append_line(f"wrapped: dict[str, typing.Any] = dict(values.get({string_literal(wrapper_key)}) or {{}})")
        keys = ", ".join(string_literal(key) for key in header_keys)
        builder.append_line(f"for key in ({keys},):")
        builder.append_line("if key in headers:", pre_inc=True)
        builder.append_line(f"{target}[key] = headers[key]", pre_inc=True, post_dec=True)
        builder.dec_indent()
        if wrapper_key is not None:
            builder.append_line(f"values[{string_literal(wrapper_key)}] = wrapped")
    builder.append_line(f"return {output_type}.from_dict(values)")
    builder.dec_indent()
    builder.dec_indent()
