"""
Generation of the model types file: a type alias for every field, a str
enum for every enumeration, and a validator for every constrained field.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import string_literal
from ..emission.validation_rules import rules_for_constraint
from ..model.model_nodes import ListField, MapField

if TYPE_CHECKING:
    from ..emission.file_builder import FileBuilder
    from ..generator import ServiceModelCodeGenerator


def needs_validation(generator: ServiceModelCodeGenerator, raw_name: str) -> bool:
    """Whether values of a type have constraints to check.

    Fields replaced by a raw type override are never validated.
    """
    if generator.is_structure(raw_name):
        return True
    if raw_name in generator.model.type_mappings:
        return False
    constraint = generator.model.field_descriptions[raw_name]
    if rules_for_constraint(constraint, "value", raw_name):
        return True
    if isinstance(constraint, ListField):
        return needs_validation(generator, constraint.element_type)
    if isinstance(constraint, MapField):
        return needs_validation(generator, constraint.value_type)
    return False


def validation_call(generator: ServiceModelCodeGenerator, raw_name: str, expression: str, types: str = "") -> str:
    """Statement validating the value of ``expression``."""
    if generator.is_structure(raw_name):
        return f"{expression}.validate()"
    return f"{types}{generator.validator_name(raw_name)}({expression})"


def mapped_type_modules(generator: ServiceModelCodeGenerator) -> list[str]:
    """Modules of dotted raw type override targets ("datetime.datetime" -> "datetime")."""
    modules = {mapping.type_name.rsplit(".", 1)[0] for mapping in generator.model.type_mappings.values() if "." in mapping.type_name}
    return sorted(modules)


def generate_model_types(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>ModelTypes.py``."""
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Types of the {base_name} service model.")
    builder.append_empty_line()
    for module in sorted({"enum", "re", *mapped_type_modules(generator)}):
        builder.append_line(f"import {module}")
    builder.append_empty_line()
    builder.append_line(f"from .{base_name}ModelErrors import ValidationError")

    fields = generator.sorted_fields()
    aliases = [(raw_name, constraint) for raw_name, constraint in fields if not generator.is_enum(raw_name)]
    if aliases:
        builder.append_empty_line()
    for raw_name, _ in aliases:
        builder.append_line(f"{generator.type_name(raw_name)} = {generator.python_type(raw_name)}")

    for raw_name, _ in fields:
        if generator.is_enum(raw_name):
            _add_enum(generator, builder, raw_name)

    for raw_name, _ in fields:
        if needs_validation(generator, raw_name):
            _add_validator(generator, builder, raw_name)

    return generator.write_model_file(builder, f"{base_name}ModelTypes.py")


def _add_enum(generator: ServiceModelCodeGenerator, builder: FileBuilder, raw_name: str) -> None:
    type_name = generator.type_name(raw_name)
    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {type_name}(str, enum.Enum):", post_inc=True)
    builder.append_line(f'"""Enumeration {type_name}."""')
    builder.append_empty_line()
    for case_name, value in generator.enum_cases(raw_name):
        builder.append_line(f"{case_name} = {string_literal(value)}")
    builder.dec_indent()


def _add_validator(generator: ServiceModelCodeGenerator, builder: FileBuilder, raw_name: str) -> None:
    type_name = generator.type_name(raw_name)
    constraint = generator.model.field_descriptions[raw_name]

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"def {generator.validator_name(raw_name)}(value: {type_name}) -> None:", post_inc=True)
    builder.append_line(f'"""Raises ValidationError if the value violates the constraints of {type_name}."""')
    for rule in rules_for_constraint(constraint, "value", type_name):
        for line in rule.generate_code():
            builder.append_line(line)

    if isinstance(constraint, ListField) and needs_validation(generator, constraint.element_type):
        builder.append_line("for item in value:")
        builder.append_line(validation_call(generator, constraint.element_type, "item"), pre_inc=True, post_dec=True)
    elif isinstance(constraint, MapField) and needs_validation(generator, constraint.value_type):
        builder.append_line("for item in value.values():")
        builder.append_line(validation_call(generator, constraint.value_type, "item"), pre_inc=True, post_dec=True)
    builder.dec_indent()
