"""
Generation of the per-operation HTTP request inputs of the client package.

A request input splits the wire form of an operation's input into the parts
sent in the path, the query string, additional headers and the body.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import string_literal
from ..model.model_nodes import InputLocation

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import OperationDescription


def wire_keys(generator: ServiceModelCodeGenerator, structure_name: str, member_names: tuple[str, ...]) -> list[str]:
    """Coding keys of the named members of a structure, skipping names it does not declare."""
    members = generator.model.structure_descriptions[structure_name].members
    return [generator.coding_key(structure_name, name, members[name]) for name in member_names if name in members]


def _tuple_literal(keys: list[str]) -> str:
    if len(keys) == 1:
        return f"({string_literal(keys[0])},)"
    return "(" + ", ".join(string_literal(key) for key in keys) + ")"


def generate_client_input(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>OperationsClientInput.py``."""
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"HTTP request inputs of the {base_name} operations.")
    builder.append_empty_line()
    builder.append_line("import typing")
    builder.append_empty_line()
    builder.append_line(f"from {generator.model_target_name} import {base_name}ModelStructures as _structures")
    builder.append_line('''


        def _select(values: dict[str, typing.Any], keys: tuple[str, ...]) -> typing.Optional[dict[str, typing.Any]]:
            selected = {key: values[key] for key in keys if key in values}
            return selected or None


        def _exclude(values: dict[str, typing.Any], keys: tuple[str, ...]) -> typing.Optional[dict[str, typing.Any]]:
            remaining = {key: value for key, value in values.items() if key not in keys}
            return remaining or None
        ''')

    for operation_name, operation in generator.sorted_operations():
        if operation.input:
            _add_request_input(generator, builder, operation_name, operation)

    return generator.write_client_file(builder, f"{base_name}OperationsClientInput.py")


def _add_request_input(generator: ServiceModelCodeGenerator, builder: FileBuilder, operation_name: str, operation: OperationDescription) -> None:
    description = operation.input_description
    input_name = operation.input
    path_keys = wire_keys(generator, input_name, description.path_fields)
    query_keys = wire_keys(generator, input_name, description.query_fields)
    header_keys = wire_keys(generator, input_name, description.additional_header_fields)
    bound_keys = [*path_keys, *query_keys, *header_keys]

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {generator.operation_class_prefix(operation_name)}OperationHTTPRequestInput:", post_inc=True)
    builder.append_line(f'"""HTTP request input of the {operation_name} operation."""')
    builder.append_empty_line()
    builder.append_line(f"def __init__(self, encodable: _structures.{generator.type_name(input_name)}) -> None:", post_inc=True)
    builder.append_line("values = encodable.to_dict()")

    builder.append_line(f"self.path_encodable = _select(values, {_tuple_literal(path_keys)})" if path_keys else "self.path_encodable = None")
    builder.append_line(
        f"self.additional_headers_encodable = _select(values, {_tuple_literal(header_keys)})"
        if header_keys
        else "self.additional_headers_encodable = None"
    )

    unbound = f"_exclude(values, {_tuple_literal(bound_keys)})" if bound_keys else "values or None"
    if description.payload_as_member is not None:
        payload_key = wire_keys(generator, input_name, (description.payload_as_member,))
        body = f"values.get({string_literal(payload_key[0])})" if payload_key else "None"
        query = f"_select(values, {_tuple_literal(query_keys)})" if query_keys else "None"
    elif description.default_input_location is InputLocation.QUERY:
        body = "None"
        query = f"_exclude(values, {_tuple_literal([*path_keys, *header_keys])})" if path_keys or header_keys else "values or None"
    else:
        body = unbound
        query = f"_select(values, {_tuple_literal(query_keys)})" if query_keys else "None"
    builder.append_line(f"self.query_encodable = {query}")
    builder.append_line(f"self.body_encodable = {body}")

    template_key = wire_keys(generator, input_name, (description.path_template_field,)) if description.path_template_field else []
    if template_key:
        builder.append_line(f"self.path_postfix = values.get({string_literal(template_key[0])})")
    else:
        builder.append_line("self.path_postfix = None")
    builder.dec_indent()
    builder.dec_indent()
