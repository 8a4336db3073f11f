"""
Generation of the operation and invocation reporting files of the client package.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..generator import ServiceModelCodeGenerator


def generate_operations_reporting(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>OperationsReporting.py``, one operation reporting per operation."""
    base_name = generator.base_name
    runtime = generator.customizations.runtime_package
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Operation reporting of the {base_name} client operations.")
    builder.append_empty_line()
    builder.append_line("import typing")
    builder.append_empty_line()
    builder.append_line(f"from {runtime} import OperationReportingConfiguration, StandardSmokeAWSOperationReporting")
    builder.append_line(f"from {generator.model_target_name}.{base_name}ModelOperations import {base_name}ModelOperations")
    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {base_name}OperationsReporting:", post_inc=True)
    builder.append_line(f'"""Operation reporting for each operation of a {base_name} client."""')
    builder.append_empty_line()
    builder.append_line(
        "def __init__(self, client_name: str, configuration: typing.Optional[OperationReportingConfiguration] = None) -> None:",
        post_inc=True,
    )
    builder.append_line("self.client_name = client_name")
    builder.append_line("self.configuration = configuration or OperationReportingConfiguration.default()")
    for operation_name, _ in generator.sorted_operations():
        builder.append_line(f"""
            self.{generator.operation_function_name(operation_name)} = StandardSmokeAWSOperationReporting(
                client_name=client_name,
                operation={base_name}ModelOperations.{generator.operation_case_name(operation_name)},
                configuration=self.configuration,
            )
            """)
    builder.dec_indent()
    builder.dec_indent()

    return generator.write_client_file(builder, f"{base_name}OperationsReporting.py")


def generate_invocations_reporting(generator: ServiceModelCodeGenerator) -> Path:
    """Generate ``<Base>InvocationsReporting.py``, one HTTP client invocation reporting per operation."""
    base_name = generator.base_name
    runtime = generator.customizations.runtime_package
    builder = generator.new_builder()
    generator.add_file_header(builder, f"Invocation reporting of the {base_name} client operations.")
    builder.append_empty_line()
    builder.append_line("import typing")
    builder.append_empty_line()
    builder.append_line(f"from {runtime} import InvocationReporting, SmokeAWSHTTPClientInvocationReporting")
    builder.append_empty_line()
    builder.append_line(f"from .{base_name}OperationsReporting import {base_name}OperationsReporting")
    builder.append_empty_line()
    builder.append_empty_line()
    builder.append_line(f"class {base_name}InvocationsReporting:", post_inc=True)
    builder.append_line(f'"""Invocation reporting for each operation of a {base_name} client."""')
    builder.append_empty_line()
    builder.append_line(
        f"def __init__(self, reporting: typing.Optional[InvocationReporting], operations_reporting: {base_name}OperationsReporting) -> None:",
        post_inc=True,
    )
    builder.append_line("self.reporting = reporting")
    for operation_name, _ in generator.sorted_operations():
        function_name = generator.operation_function_name(operation_name)
        builder.append_line(f"""
            self.{function_name} = SmokeAWSHTTPClientInvocationReporting(
                invocation_reporting=reporting,
                operation_reporting=operations_reporting.{function_name},
            )
            """)
    builder.dec_indent()
    builder.dec_indent()

    return generator.write_client_file(builder, f"{base_name}InvocationsReporting.py")
