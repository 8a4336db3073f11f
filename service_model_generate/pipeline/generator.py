"""
Code generator core.

Phase 4 of the pipeline: owns the naming and type-resolution rules shared
by every generated file, and drives client delegates through the
file-type / invoke-type / operation loops.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .. import __version__
from ..utils import python_identifier, string_literal, to_snake_case, to_upper_snake_case, upper_camel_case
from .config import ApplicationDescription, CodeGenerationCustomizations
from .delegates.base import ClientFileType, InvokeType, ModelClientDelegate
from .emission.file_builder import FileBuilder
from .errors import ModelConsistencyError
from .model.model_nodes import (
    BlobField,
    BooleanField,
    DoubleField,
    FieldConstraint,
    IntegerField,
    ListField,
    LongField,
    MapField,
    Member,
    OperationDescription,
    ServiceModel,
    StringField,
    StructureDescription,
    TimestampField,
)

logger = logging.getLogger(__name__)

# Python types of unconstrained primitive fields
PRIMITIVE_TYPES: dict[type, str] = {
    StringField: "str",
    IntegerField: "int",
    LongField: "int",
    DoubleField: "float",
    BooleanField: "bool",
    TimestampField: "str",
    BlobField: "bytes",
}

DEFAULT_STRING_VALUE = "value"
DEFAULT_TIMESTAMP_VALUE = "2013-02-18T17:00:00Z"

# Attribute names that would clash inside generated methods
RESERVED_ATTRIBUTE_NAMES = frozenset({"self", "cls", "values", "result", "validate", "to_dict", "from_dict"})

# Class names the generated model modules define or import themselves
RESERVED_TYPE_NAMES = frozenset({"ValidationError", "UnrecognizedError"})


class ServiceModelCodeGenerator:
    """Generates the model and client packages of one service."""

    def __init__(
        self,
        model: ServiceModel,
        application_description: ApplicationDescription,
        customizations: CodeGenerationCustomizations | None = None,
        generation_command: str | None = None,
    ):
        """
        Initialize the generator.

        Args:
            model: The service model, after overrides are applied
            application_description: Naming and placement of the output
            customizations: Generation options
            generation_command: Command line recorded in the generation comment
        """
        self.model = model
        self.application_description = application_description
        self.customizations = customizations or CodeGenerationCustomizations()
        self.generation_command = generation_command or "service_model_generate"
        self._type_names = self._assign_type_names()

    # Naming

    @property
    def base_name(self) -> str:
        return self.application_description.base_name

    @property
    def model_target_name(self) -> str:
        return self.customizations.model_target_name or f"{self.base_name}Model"

    @property
    def client_target_name(self) -> str:
        return self.customizations.client_target_name or f"{self.base_name}Client"

    @property
    def model_directory(self) -> Path:
        return Path(self.application_description.base_file_path) / self.model_target_name

    @property
    def client_directory(self) -> Path:
        return Path(self.application_description.base_file_path) / self.client_target_name

    @property
    def invoke_types(self) -> list[InvokeType]:
        if self.customizations.async_apis:
            return [InvokeType.SYNC, InvokeType.ASYNC]
        return [InvokeType.SYNC]

    def _assign_type_names(self) -> dict[str, str]:
        """Map every declared type to a unique Python class name."""
        names: dict[str, str] = {}
        taken: set[str] = set()
        for raw_name in sorted([*self.model.structure_descriptions, *self.model.field_descriptions]):
            candidate = python_identifier(upper_camel_case(raw_name) or "Shape", RESERVED_TYPE_NAMES)
            unique = candidate
            index = 2
            while unique in taken:
                unique = f"{candidate}{index}"
                index += 1
            taken.add(unique)
            names[raw_name] = unique
        return names

    def type_name(self, raw_name: str) -> str:
        """Python name of a declared structure or field type."""
        if raw_name not in self._type_names:
            raise ModelConsistencyError(f"Type '{raw_name}' is not declared in the model")
        return self._type_names[raw_name]

    def attribute_names(self, structure_name: str) -> dict[str, str]:
        """Map the members of a structure to unique attribute names, honouring name overrides."""
        names: dict[str, str] = {}
        taken: set[str] = set()
        structure = self.model.structure_descriptions[structure_name]
        for member_name, _ in self.ordered_members(structure):
            override = self.model.name_overrides.get(f"{structure_name}.{member_name}")
            candidate = python_identifier(override or to_snake_case(member_name), RESERVED_ATTRIBUTE_NAMES)
            unique = candidate
            index = 2
            while unique in taken:
                unique = f"{candidate}_{index}"
                index += 1
            taken.add(unique)
            names[member_name] = unique
        return names

    def coding_key(self, structure_name: str, member_name: str, member: Member) -> str:
        """Wire name of a member."""
        override = self.model.coding_key_overrides.get(f"{structure_name}.{member_name}")
        return override or member.location_name or member_name

    def operation_function_name(self, operation_name: str) -> str:
        return python_identifier(to_snake_case(operation_name))

    def operation_case_name(self, operation_name: str) -> str:
        return python_identifier(to_upper_snake_case(operation_name))

    def operation_class_prefix(self, operation_name: str) -> str:
        """Prefix of the per-operation classes of the client package ("GetWidget")."""
        return python_identifier(upper_camel_case(operation_name))

    def validator_name(self, raw_name: str) -> str:
        return f"validate_{to_snake_case(self.type_name(raw_name))}"

    def default_factory_name(self, raw_name: str) -> str:
        return f"default_{to_snake_case(self.type_name(raw_name))}"

    def enum_cases(self, raw_name: str) -> list[tuple[str, str]]:
        """(case name, wire value) pairs of a string enumeration, with unique case names."""
        constraint = self.model.field_descriptions[raw_name]
        upper_camel = raw_name in self.model.upper_camel_enum_types
        cases = []
        seen: set[str] = set()
        for name, value in constraint.value_constraints:
            base = upper_camel_case(name) if upper_camel else to_upper_snake_case(name)
            case_name = python_identifier(base, frozenset({"_"}))
            unique = case_name
            index = 2
            while unique in seen:
                unique = f"{case_name}_{index}"
                index += 1
            seen.add(unique)
            cases.append((unique, value))
        return cases

    # Type resolution

    def sorted_operations(self) -> list[tuple[str, OperationDescription]]:
        return sorted(self.model.operation_descriptions.items())

    def sorted_structures(self) -> list[tuple[str, StructureDescription]]:
        return sorted(self.model.structure_descriptions.items())

    def sorted_fields(self) -> list[tuple[str, FieldConstraint]]:
        return sorted(self.model.field_descriptions.items())

    def ordered_members(self, structure: StructureDescription) -> list[tuple[str, Member]]:
        """Required members first, then optional ones, each group by position."""
        members = sorted(structure.members.items(), key=lambda item: item[1].position)
        return [item for item in members if item[1].required] + [item for item in members if not item[1].required]

    def is_structure(self, raw_name: str) -> bool:
        return raw_name in self.model.structure_descriptions

    def is_enum(self, raw_name: str) -> bool:
        constraint = self.model.field_descriptions.get(raw_name)
        return isinstance(constraint, StringField) and bool(constraint.value_constraints) and raw_name not in self.model.type_mappings

    def python_type(self, raw_name: str) -> str:
        """Right-hand side of the type alias generated for a field."""
        if raw_name in self.model.type_mappings:
            return self.model.type_mappings[raw_name].type_name
        constraint = self.model.field_descriptions[raw_name]
        if isinstance(constraint, ListField):
            return f'list["{self.type_name(constraint.element_type)}"]'
        if isinstance(constraint, MapField):
            return f'dict["{self.type_name(constraint.key_type)}", "{self.type_name(constraint.value_type)}"]'
        return PRIMITIVE_TYPES[type(constraint)]

    def encode_expression(self, raw_name: str, expression: str, depth: int = 0) -> str:
        """Expression converting a typed value into its wire (JSON-compatible) form."""
        if self.is_structure(raw_name):
            return f"{expression}.to_dict()"
        if self.is_enum(raw_name):
            return f"{expression}.value"
        constraint = self.model.field_descriptions[raw_name]
        if raw_name not in self.model.type_mappings:
            item = f"item{depth}"
            if isinstance(constraint, ListField) and self._needs_conversion(constraint.element_type):
                return f"[{self.encode_expression(constraint.element_type, item, depth + 1)} for {item} in {expression}]"
            if isinstance(constraint, MapField) and self._needs_conversion(constraint.value_type):
                key = f"key{depth}"
                return f"{{{key}: {self.encode_expression(constraint.value_type, item, depth + 1)} for {key}, {item} in {expression}.items()}}"
        return expression

    def decode_expression(self, raw_name: str, expression: str, structures: str = "", types: str = "_types.", depth: int = 0) -> str:
        """Expression converting a wire value into its typed form.

        Args:
            raw_name: The declared type of the value
            expression: Expression holding the wire value
            structures: Qualifier of structure class names
            types: Qualifier of enum class names
            depth: Nesting depth, used to keep comprehension variables distinct
        """
        if self.is_structure(raw_name):
            return f"{structures}{self.type_name(raw_name)}.from_dict({expression})"
        if self.is_enum(raw_name):
            return f"{types}{self.type_name(raw_name)}({expression})"
        constraint = self.model.field_descriptions[raw_name]
        if raw_name not in self.model.type_mappings:
            item = f"item{depth}"
            if isinstance(constraint, ListField) and self._needs_conversion(constraint.element_type):
                return f"[{self.decode_expression(constraint.element_type, item, structures, types, depth + 1)} for {item} in {expression}]"
            if isinstance(constraint, MapField) and self._needs_conversion(constraint.value_type):
                key = f"key{depth}"
                return f"{{{key}: {self.decode_expression(constraint.value_type, item, structures, types, depth + 1)} for {key}, {item} in {expression}.items()}}"
        return expression

    def _needs_conversion(self, raw_name: str) -> bool:
        if self.is_structure(raw_name) or self.is_enum(raw_name):
            return True
        constraint = self.model.field_descriptions[raw_name]
        if raw_name in self.model.type_mappings:
            return False
        if isinstance(constraint, ListField):
            return self._needs_conversion(constraint.element_type)
        if isinstance(constraint, MapField):
            return self._needs_conversion(constraint.value_type)
        return False

    def default_value_expression(self, raw_name: str, types: str = "_types.") -> str:
        """Expression building a valid default instance of a type.

        Structures are built by calling their default instance factory.

        Args:
            raw_name: The declared type
            types: Qualifier of enum classes
        """
        if self.is_structure(raw_name):
            return f"{self.default_factory_name(raw_name)}()"
        mapping = self.model.type_mappings.get(raw_name)
        if mapping is not None and mapping.default_value is not None:
            return mapping.default_value
        if self.is_enum(raw_name):
            return f"{types}{self.type_name(raw_name)}.{self.enum_cases(raw_name)[0][0]}"

        constraint = self.model.field_descriptions[raw_name]
        if isinstance(constraint, StringField):
            value = DEFAULT_STRING_VALUE
            if constraint.length.minimum is not None and constraint.length.minimum > len(value):
                value = value + "x" * (constraint.length.minimum - len(value))
            if constraint.length.maximum is not None:
                value = value[: constraint.length.maximum]
            return string_literal(value)
        if isinstance(constraint, (IntegerField, LongField, DoubleField)):
            number = 0
            if constraint.range.minimum is not None and number < constraint.range.minimum:
                number = constraint.range.minimum
            if constraint.range.maximum is not None and number > constraint.range.maximum:
                number = constraint.range.maximum
            return repr(float(number)) if isinstance(constraint, DoubleField) else repr(int(number))
        if isinstance(constraint, BooleanField):
            return "False"
        if isinstance(constraint, TimestampField):
            return string_literal(DEFAULT_TIMESTAMP_VALUE)
        if isinstance(constraint, BlobField):
            return 'b""'
        if isinstance(constraint, ListField):
            minimum = constraint.length.minimum or 0
            if minimum > 0:
                return f"[{self.default_value_expression(constraint.element_type, types)}] * {minimum}"
            return "[]"
        return "{}"

    # File emission

    @property
    def generation_comment(self) -> str:
        return f"# Generated by service_model_generate v{__version__} : {self.generation_command}"

    def new_builder(self) -> FileBuilder:
        return FileBuilder(validate=self.customizations.validate_output)

    def add_file_header(self, builder: FileBuilder, description: str) -> None:
        """Add the generation comment, custom header, module docstring and future import."""
        if self.customizations.add_generation_comment:
            builder.append_line(self.generation_comment)
        if self.customizations.file_header:
            for line in self.customizations.file_header.splitlines():
                builder.append_line(f"# {line}".rstrip())
        builder.append_line(f'"""{description}"""')
        builder.append_empty_line()
        builder.append_line("from __future__ import annotations")

    def write_model_file(self, builder: FileBuilder, file_name: str) -> Path:
        return builder.write(file_name, self.model_directory)

    def write_client_file(self, builder: FileBuilder, file_name: str) -> Path:
        return builder.write(file_name, self.client_directory)

    def generate_client(self, delegate: ModelClientDelegate, file_type: ClientFileType = ClientFileType.CLIENT_IMPLEMENTATION) -> Path:
        """
        Generate one client file through a delegate.

        Operation functions are only emitted for client implementations; the
        configuration and generator files carry the delegate's common
        functions only.

        Args:
            delegate: The delegate providing the file's specific parts
            file_type: Which file of the client to generate

        Returns:
            The path of the written file
        """
        client_type = delegate.client_type
        type_name = client_type.name + file_type.suffix
        builder = self.new_builder()

        self.add_file_header(builder, f"{type_name} for the {self.base_name} service.")
        builder.append_empty_line()
        builder.append_line("import typing")
        builder.append_empty_line()
        if file_type is ClientFileType.CLIENT_IMPLEMENTATION:
            builder.append_line(f"from {self.model_target_name} import {self.base_name}ModelStructures as _structures")
        delegate.add_custom_file_header(self, builder, file_type)
        builder.append_empty_line()
        builder.append_empty_line()

        if file_type is ClientFileType.CLIENT_IMPLEMENTATION and client_type.base_classes:
            builder.append_line(f"class {type_name}({', '.join(client_type.base_classes)}):", post_inc=True)
        else:
            builder.append_line(f"class {type_name}:", post_inc=True)
        builder.append_line('"""')
        delegate.add_type_description(self, builder, file_type)
        builder.append_line('"""')

        sorted_operations = self.sorted_operations()
        delegate.add_common_functions(self, builder, sorted_operations, file_type)

        if file_type is ClientFileType.CLIENT_IMPLEMENTATION:
            for operation_name, operation in sorted_operations:
                for invoke_type in self.invoke_types:
                    self._add_operation(builder, delegate, operation_name, operation, invoke_type, file_type)
        builder.dec_indent()

        return self.write_client_file(builder, f"{type_name}.py")

    def operation_signature(self, operation_name: str, operation: OperationDescription, invoke_type: InvokeType) -> str:
        function_name = self.operation_function_name(operation_name)
        output_type = f"_structures.{self.type_name(operation.output)}" if operation.output else "None"
        parameters = f"self, input: _structures.{self.type_name(operation.input)}" if operation.input else "self"
        if invoke_type is InvokeType.ASYNC:
            return f"async def {function_name}_async({parameters}) -> {output_type}:"
        return f"def {function_name}({parameters}) -> {output_type}:"

    def _add_operation(
        self,
        builder: FileBuilder,
        delegate: ModelClientDelegate,
        operation_name: str,
        operation: OperationDescription,
        invoke_type: InvokeType,
        file_type: ClientFileType,
    ) -> None:
        builder.append_empty_line()
        builder.append_line(self.operation_signature(operation_name, operation, invoke_type), post_inc=True)

        verb = "Invokes" if invoke_type is InvokeType.SYNC else "Invokes, without blocking,"
        builder.append_line(f'"""{verb} the {operation_name} operation.')
        if operation.input:
            builder.append_empty_line()
            builder.append_line("Args:")
            builder.append_line(
                f"    input: The validated {self.type_name(operation.input)} object being passed to this operation."
            )
        if operation.output:
            builder.append_empty_line()
            builder.append_line("Returns:")
            builder.append_line(f"    The {self.type_name(operation.output)} object returned by this operation.")
        if operation.errors:
            error_names = ", ".join(sorted(error for error, _ in operation.errors))
            builder.append_empty_line()
            builder.append_line("Raises:")
            builder.append_line(f"    {self.base_name}Error: With one of the types {error_names}.")
        builder.append_line('"""')

        delegate.add_operation_body(self, builder, operation_name, operation, invoke_type, file_type)
        builder.dec_indent()
        logger.debug("Generated %s %s for %s", invoke_type.value, operation_name, delegate.client_type.name)
