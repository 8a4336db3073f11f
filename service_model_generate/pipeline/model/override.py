"""
Declarative model overrides.

Phase 3 of the pipeline: a pure transformation from one ServiceModel to a
new one, driven by a ModelOverride document.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from ..errors import ConfigurationError, OverrideError
from .model_nodes import (
    FIELD_KIND_NAMES,
    InputLocation,
    OperationInputDescription,
    RawTypeOverride,
    ServiceModel,
    StringField,
    StructureDescription,
    field_kind_name,
    frozen_mapping,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnumerationNaming:
    """Enumeration types whose cases use UpperCamelCase instead of UPPER_SNAKE_CASE names."""

    using_upper_camel_case: frozenset[str] = frozenset()


@dataclass(frozen=True)
class ModelOverride:
    """Per-model customizations applied after the model is built."""

    field_raw_type_overrides: dict[str, RawTypeOverride] = field(default_factory=dict)
    coding_key_overrides: dict[str, str] = field(default_factory=dict)
    enumerations: EnumerationNaming = field(default_factory=EnumerationNaming)
    additional_errors: frozenset[str] = frozenset()
    operation_input_overrides: dict[str, OperationInputDescription] = field(default_factory=dict)
    required_overrides: dict[str, bool] = field(default_factory=dict)
    name_overrides: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def from_dict(d: dict) -> ModelOverride:
        """Create an override from its JSON form (camelCase keys).

        Raises:
            ConfigurationError: If a value has the wrong shape
        """
        try:
            return ModelOverride(
                field_raw_type_overrides={key: RawTypeOverride.from_dict(value) for key, value in d.get("fieldRawTypeOverride", {}).items()},
                coding_key_overrides=dict(d.get("codingKeyOverrides", {})),
                enumerations=EnumerationNaming(
                    using_upper_camel_case=frozenset(d.get("enumerations", {}).get("usingUpperCamelCase", [])),
                ),
                additional_errors=frozenset(d.get("additionalErrors", [])),
                operation_input_overrides={
                    key: _input_description_from_dict(value) for key, value in d.get("operationInputOverrides", {}).items()
                },
                required_overrides={key: bool(value) for key, value in d.get("requiredOverrides", {}).items()},
                name_overrides=dict(d.get("nameOverrides", {})),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid model override: {e}") from e

    def is_empty(self) -> bool:
        return self == ModelOverride()


def _input_description_from_dict(d: dict) -> OperationInputDescription:
    return OperationInputDescription(
        path_fields=tuple(d.get("pathFields", [])),
        query_fields=tuple(d.get("queryFields", [])),
        additional_header_fields=tuple(d.get("additionalHeaderFields", [])),
        default_input_location=InputLocation(d.get("defaultInputLocation", "body")),
        payload_as_member=d.get("payloadAsMember"),
        path_template_field=d.get("pathTemplateField"),
    )


def find_unknown_targets(model: ServiceModel, override: ModelOverride) -> list[str]:
    """List every override target that does not exist in the model, or that the model cannot accept."""
    unknown = []
    for key in sorted(override.field_raw_type_overrides):
        if key not in model.field_descriptions and key not in FIELD_KIND_NAMES.values():
            unknown.append(f"fieldRawTypeOverride:{key}")
    for label, keys in (
        ("codingKeyOverrides", override.coding_key_overrides),
        ("requiredOverrides", override.required_overrides),
        ("nameOverrides", override.name_overrides),
    ):
        for key in sorted(keys):
            if not _member_exists(model, key):
                unknown.append(f"{label}:{key}")
    for key in sorted(override.enumerations.using_upper_camel_case):
        constraint = model.field_descriptions.get(key)
        if not isinstance(constraint, StringField) or not constraint.value_constraints:
            unknown.append(f"enumerations:{key}")
    for key in sorted(override.operation_input_overrides):
        if key not in model.operation_descriptions:
            unknown.append(f"operationInputOverrides:{key}")
        else:
            unknown.extend(_input_override_problems(model, key, override.operation_input_overrides[key]))
    return unknown


def _input_override_problems(model: ServiceModel, operation_name: str, description: OperationInputDescription) -> list[str]:
    """Members an input override names that the operation input lacks, and a payload member also bound to a location."""
    input_name = model.operation_descriptions[operation_name].input
    structure = model.structure_descriptions.get(input_name) if input_name is not None else None
    members = structure.members if structure is not None else {}
    located = (*description.path_fields, *description.query_fields, *description.additional_header_fields)

    problems = []
    for member_name in (*located, description.payload_as_member, description.path_template_field):
        if member_name is not None and member_name not in members:
            problems.append(f"operationInputOverrides:{operation_name}.{member_name}")
    if description.payload_as_member is not None and description.payload_as_member in located:
        problems.append(f"operationInputOverrides:{operation_name}.payloadAsMember={description.payload_as_member}")
    return problems


def _member_exists(model: ServiceModel, key: str) -> bool:
    structure_name, _, member_name = key.partition(".")
    structure = model.structure_descriptions.get(structure_name)
    return structure is not None and member_name in structure.members


def apply_model_override(model: ServiceModel, override: ModelOverride | None, strict: bool = False) -> ServiceModel:
    """
    Apply an override to a model.

    The input model is never modified. Targets that do not exist in the model
    are ignored, unless ``strict`` is set.

    Args:
        model: The model built by a front end
        override: The override, or None for no override
        strict: Raise instead of ignoring unknown or invalid targets

    Returns:
        A new model with the override applied (the same model when the
        override is absent or empty)

    Raises:
        OverrideError: In strict mode, listing every unknown target; nothing
            is applied in that case
    """
    if override is None or override.is_empty():
        return model

    unknown = find_unknown_targets(model, override)
    if unknown and strict:
        raise OverrideError(unknown)
    for target in unknown:
        logger.debug("Ignoring override of unknown target %s", target)

    type_mappings = dict(model.type_mappings)
    for field_name in sorted(model.field_descriptions):
        kind = field_kind_name(model.field_descriptions[field_name])
        if field_name in override.field_raw_type_overrides:
            type_mappings[field_name] = override.field_raw_type_overrides[field_name]
        elif kind in override.field_raw_type_overrides:
            type_mappings[field_name] = override.field_raw_type_overrides[kind]

    structures = dict(model.structure_descriptions)
    for key in sorted(override.required_overrides):
        if not _member_exists(model, key):
            continue
        structure_name, _, member_name = key.partition(".")
        structure = structures[structure_name]
        members = dict(structure.members)
        members[member_name] = dataclasses.replace(members[member_name], required=override.required_overrides[key])
        structures[structure_name] = StructureDescription(members=frozen_mapping(members), documentation=structure.documentation)

    operations = dict(model.operation_descriptions)
    for operation_name in sorted(override.operation_input_overrides):
        if operation_name not in operations:
            continue
        if _input_override_problems(model, operation_name, override.operation_input_overrides[operation_name]):
            continue
        operations[operation_name] = dataclasses.replace(
            operations[operation_name],
            input_description=override.operation_input_overrides[operation_name],
        )

    upper_camel = {name for name in override.enumerations.using_upper_camel_case if name in model.field_descriptions}

    logger.info("Applied model override")
    return dataclasses.replace(
        model,
        operation_descriptions=frozen_mapping(operations),
        structure_descriptions=frozen_mapping(structures),
        error_types=model.error_types | override.additional_errors,
        type_mappings=frozen_mapping(type_mappings),
        coding_key_overrides=frozen_mapping(
            {**model.coding_key_overrides, **{key: value for key, value in override.coding_key_overrides.items() if _member_exists(model, key)}}
        ),
        name_overrides=frozen_mapping(
            {**model.name_overrides, **{key: value for key, value in override.name_overrides.items() if _member_exists(model, key)}}
        ),
        upper_camel_enum_types=model.upper_camel_enum_types | frozenset(upper_camel),
    )
