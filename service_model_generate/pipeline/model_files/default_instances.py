"""
Generation of the model default instances file.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from .model_types import mapped_type_modules

if TYPE_CHECKING:
    from ..generator import ServiceModelCodeGenerator


def generate_default_instances(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>ModelDefaultInstances.py``.

    Every structure gets a ``default_<name>()`` factory that sets its required
    members to valid default values; raw type overrides supply their own
    default value expression.
    """
    base_name = generator.base_name
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Default instances of the {base_name} service model structures.")
    modules = mapped_type_modules(generator)
    if modules:
        builder.append_empty_line()
    for module in modules:
        builder.append_line(f"import {module}")
    builder.append_empty_line()
    builder.append_line(f"from . import {base_name}ModelStructures as _structures")
    builder.append_line(f"from . import {base_name}ModelTypes as _types")

    for structure_name, structure in generator.sorted_structures():
        type_name = generator.type_name(structure_name)
        attributes = generator.attribute_names(structure_name)
        required = [(name, member) for name, member in generator.ordered_members(structure) if member.required]

        builder.append_empty_line()
        builder.append_empty_line()
        builder.append_line(f"def {generator.default_factory_name(structure_name)}() -> _structures.{type_name}:", post_inc=True)
        builder.append_line(f'"""Returns a default instance of {type_name}."""')
        if not required:
            builder.append_line(f"return _structures.{type_name}()", post_dec=True)
            continue
        builder.append_line(f"return _structures.{type_name}(", post_inc=True)
        for member_name, member in required:
            builder.append_line(f"{attributes[member_name]}={generator.default_value_expression(member.value)},")
        builder.append_line(")", pre_dec=True, post_dec=True)

    return generator.write_model_file(builder, f"{base_name}ModelDefaultInstances.py")
