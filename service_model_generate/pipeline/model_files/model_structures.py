"""
Generation of the model structures file.

Every structure becomes a dataclass with its required members first and
its optional members (defaulting to None) after them, each group in
declaration order. Each dataclass knows its wire coding keys and can
validate itself and convert to and from its wire form.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import docstring_text, string_literal
from .model_types import needs_validation, validation_call

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator
    from ..model.model_nodes import Member, StructureDescription

logger = logging.getLogger(__name__)


def member_annotation(generator: ServiceModelCodeGenerator, member: Member) -> str:
    """Annotation of a member inside the structures module."""
    if generator.is_structure(member.value):
        annotation = generator.type_name(member.value)
    else:
        annotation = f"_types.{generator.type_name(member.value)}"
    return annotation if member.required else f"typing.Optional[{annotation}]"


def generate_model_structures(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>ModelStructures.py``."""
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Structures of the {base_name} service model.")
    builder.append_empty_line()
    builder.append_line("import dataclasses")
    builder.append_line("import typing")
    builder.append_empty_line()
    builder.append_line(f"from . import {base_name}ModelTypes as _types")

    for structure_name, structure in generator.sorted_structures():
        _add_structure(generator, builder, structure_name, structure)
        logger.debug("Generated structure %s", structure_name)

    return generator.write_model_file(builder, f"{base_name}ModelStructures.py")


def _add_structure(generator: ServiceModelCodeGenerator, builder: FileBuilder, structure_name: str, structure: StructureDescription) -> None:
    type_name = generator.type_name(structure_name)
    members = generator.ordered_members(structure)
    attributes = generator.attribute_names(structure_name)

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line("@dataclasses.dataclass")
    builder.append_line(f"class {type_name}:", post_inc=True)
    _add_docstring(builder, type_name, structure, members, attributes)
    builder.append_empty_line()

    for member_name, member in members:
        default = "" if member.required else " = None"
        builder.append_line(f"{attributes[member_name]}: {member_annotation(generator, member)}{default}")
    if members:
        builder.append_empty_line()

    builder.append_line("CODING_KEYS: typing.ClassVar[dict[str, str]] = {", post_inc=True)
    for member_name, member in members:
        builder.append_line(f"{string_literal(attributes[member_name])}: {string_literal(generator.coding_key(structure_name, member_name, member))},")
    builder.append_line("}", pre_dec=True)

    _add_validate(generator, builder, members, attributes)
    _add_to_dict(generator, builder, structure_name, members, attributes)
    _add_from_dict(generator, builder, structure_name, type_name, members, attributes)
    builder.dec_indent()


def _add_docstring(
    builder: FileBuilder,
    type_name: str,
    structure: StructureDescription,
    members: list[tuple[str, Member]],
    attributes: dict[str, str],
) -> None:
    summary = docstring_text(structure.documentation) if structure.documentation else f"Structure {type_name}."
    documented = [(attributes[name], docstring_text(member.documentation)) for name, member in members if member.documentation]
    if not documented:
        builder.append_line(f'"""{summary}"""')
        return
    builder.append_line('"""')
    builder.append_line(summary)
    builder.append_empty_line()
    builder.append_line("Attributes:")
    for attribute, documentation in documented:
        builder.append_line(f"    {attribute}: {documentation}")
    builder.append_line('"""')


def _add_validate(generator: ServiceModelCodeGenerator, builder: FileBuilder, members: list[tuple[str, Member]], attributes: dict[str, str]) -> None:
    builder.append_empty_line()
    builder.append_line("def validate(self) -> None:", post_inc=True)
    builder.append_line('"""Raises ValidationError if a member violates the constraints of its type."""')
    for member_name, member in members:
        if not needs_validation(generator, member.value):
            continue
        attribute = f"self.{attributes[member_name]}"
        call = validation_call(generator, member.value, attribute, "_types.")
        if member.required:
            builder.append_line(call)
        else:
            builder.append_line(f"if {attribute} is not None:")
            builder.append_line(call, pre_inc=True, post_dec=True)
    builder.dec_indent()


def _add_to_dict(
    generator: ServiceModelCodeGenerator,
    builder: FileBuilder,
    structure_name: str,
    members: list[tuple[str, Member]],
    attributes: dict[str, str],
) -> None:
    builder.append_empty_line()
    builder.append_line("def to_dict(self) -> dict[str, typing.Any]:", post_inc=True)
    builder.append_line('"""Returns the wire form of this structure; members that are None are omitted."""')
    builder.append_line("result: dict[str, typing.Any] = {}")
    for member_name, member in members:
        attribute = f"self.{attributes[member_name]}"
        key = string_literal(generator.coding_key(structure_name, member_name, member))
        builder.append_line(f"if {attribute} is not None:")
        builder.append_line(f"result[{key}] = {generator.encode_expression(member.value, attribute)}", pre_inc=True, post_dec=True)
    builder.append_line("return result", post_dec=True)


def _add_from_dict(
    generator: ServiceModelCodeGenerator,
    builder: FileBuilder,
    structure_name: str,
    type_name: str,
    members: list[tuple[str, Member]],
    attributes: dict[str, str],
) -> None:
    builder.append_empty_line()
    builder.append_line("@classmethod")
    builder.append_line(f"def from_dict(cls, values: typing.Mapping[str, typing.Any]) -> {type_name}:", post_inc=True)
    builder.append_line('"""Creates an instance from its wire form."""')
    if not members:
        builder.append_line("return cls()", post_dec=True)
        return

    builder.append_line("return cls(", post_inc=True)
    for member_name, member in members:
        key = string_literal(generator.coding_key(structure_name, member_name, member))
        if member.required:
            value = generator.decode_expression(member.value, f"values[{key}]")
        else:
            decoded = generator.decode_expression(member.value, f"values[{key}]")
            if decoded == f"values[{key}]":
                value = f"values.get({key})"
            else:
                value = f"{decoded} if values.get({key}) is not None else None"
        builder.append_line(f"{attributes[member_name]}={value},")
    builder.append_line(")", pre_dec=True)
    builder.dec_indent()
