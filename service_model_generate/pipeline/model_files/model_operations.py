"""
Generation of the model operations file.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from ...utils import string_literal

if TYPE_CHECKING:
    from ..generator import ServiceModelCodeGenerator


def generate_model_operations(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>ModelOperations.py``: an enum of the operations and their HTTP paths.

    Operations without an HTTP path are sent to ``/``.
    """
    base_name = generator.base_name
    enum_name = f"{base_name}ModelOperations"
    operations = generator.sorted_operations()

    builder = generator.new_builder()
    generator.add_file_header(builder, f"Operations of the {base_name} service model.")
    builder.append_empty_line()
    builder.append_line("import enum")
    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {enum_name}(str, enum.Enum):", post_inc=True)
    builder.append_line(f'"""Operations of the {base_name} service."""')
    builder.append_empty_line()
    for operation_name, _ in operations:
        builder.append_line(f"{generator.operation_case_name(operation_name)} = {string_literal(operation_name)}")
    if operations:
        builder.append_empty_line()
    builder.append_line("""
        @property
        def operation_path(self) -> str:
            return OPERATION_PATHS[self]
        """)
    builder.dec_indent()

    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"OPERATION_PATHS: dict[{enum_name}, str] = {{", post_inc=True)
    for operation_name, operation in operations:
        path = string_literal(operation.http_url or "/")
        builder.append_line(f"{enum_name}.{generator.operation_case_name(operation_name)}: {path},")
    builder.append_line("}", pre_dec=True)

    return generator.write_model_file(builder, f"{enum_name}.py")
