"""
Service model node definitions.

These nodes are the unified, immutable representation of a service that
every front end (Coral, OpenAPI) builds and every generator reads. All
type references are by name into ``structure_descriptions`` or
``field_descriptions``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping


def frozen_mapping(values: Mapping | None = None) -> Mapping:
    """Return a read-only copy of a mapping."""
    return MappingProxyType(dict(values or {}))


class InputLocation(Enum):
    """Where input members not bound to a path, query or header are sent."""

    BODY = "body"
    QUERY = "query"


class MemberLocation(Enum):
    """HTTP location of a structure member."""

    URI = "uri"
    QUERY = "querystring"
    HEADER = "header"
    HEADERS = "headers"
    STATUS_CODE = "statusCode"


class PayloadType(Enum):
    JSON = "json"
    XML = "xml"


@dataclass(frozen=True)
class LengthRange:
    """Inclusive length bounds; either side may be open."""

    minimum: int | None = None
    maximum: int | None = None


@dataclass(frozen=True)
class NumericRange:
    """Inclusive numeric bounds; either side may be open."""

    minimum: float | None = None
    maximum: float | None = None


@dataclass(frozen=True)
class StringField:
    regex: str | None = None
    length: LengthRange = field(default_factory=LengthRange)
    value_constraints: tuple[tuple[str, str], ...] = ()  # (name, value) pairs for enumerations


@dataclass(frozen=True)
class IntegerField:
    range: NumericRange = field(default_factory=NumericRange)


@dataclass(frozen=True)
class LongField:
    range: NumericRange = field(default_factory=NumericRange)


@dataclass(frozen=True)
class DoubleField:
    range: NumericRange = field(default_factory=NumericRange)


@dataclass(frozen=True)
class BooleanField:
    pass


@dataclass(frozen=True)
class TimestampField:
    pass


@dataclass(frozen=True)
class BlobField:
    pass


@dataclass(frozen=True)
class ListField:
    element_type: str
    length: LengthRange = field(default_factory=LengthRange)


@dataclass(frozen=True)
class MapField:
    key_type: str
    value_type: str
    length: LengthRange = field(default_factory=LengthRange)


FieldConstraint = StringField | IntegerField | LongField | DoubleField | BooleanField | TimestampField | BlobField | ListField | MapField

# Primitive kind names, as used by raw type overrides
FIELD_KIND_NAMES: dict[type, str] = {
    StringField: "String",
    IntegerField: "Integer",
    LongField: "Long",
    DoubleField: "Double",
    BooleanField: "Boolean",
    TimestampField: "Timestamp",
    BlobField: "Blob",
}


def field_kind_name(constraint: FieldConstraint) -> str | None:
    """Return the primitive kind name of a field, or None for containers."""
    return FIELD_KIND_NAMES.get(type(constraint))


@dataclass(frozen=True)
class Member:
    """A structure member."""

    value: str  # Referenced type name
    position: int
    required: bool = False
    location_name: str | None = None  # Wire name, when it differs from the member name
    documentation: str | None = None


@dataclass(frozen=True)
class StructureDescription:
    members: Mapping[str, Member] = field(default_factory=frozen_mapping)
    documentation: str | None = None


@dataclass(frozen=True)
class OperationInputDescription:
    path_fields: tuple[str, ...] = ()
    query_fields: tuple[str, ...] = ()
    additional_header_fields: tuple[str, ...] = ()
    default_input_location: InputLocation = InputLocation.BODY
    payload_as_member: str | None = None
    path_template_field: str | None = None


@dataclass(frozen=True)
class OperationOutputDescription:
    header_fields: tuple[str, ...] = ()
    payload_as_member: str | None = None
    result_wrapper: str | None = None  # member of the synthesized wrapper holding the output shape


@dataclass(frozen=True)
class OperationDescription:
    input: str | None = None
    output: str | None = None
    http_verb: str | None = None
    http_url: str | None = None
    errors: tuple[tuple[str, int], ...] = ()  # (error type, http status)
    input_description: OperationInputDescription = field(default_factory=OperationInputDescription)
    output_description: OperationOutputDescription = field(default_factory=OperationOutputDescription)
    documentation: str | None = None


@dataclass(frozen=True)
class ServiceDescription:
    operations: tuple[str, ...] = ()


@dataclass(frozen=True)
class RawTypeOverride:
    """Replacement target type for a field, with an optional default value expression."""

    type_name: str
    default_value: str | None = None

    @staticmethod
    def from_dict(d: dict) -> RawTypeOverride:
        return RawTypeOverride(type_name=d["typeName"], default_value=d.get("defaultValue"))


@dataclass(frozen=True)
class ServiceMetadata:
    api_version: str | None = None
    endpoint_prefix: str = ""
    protocol: str = "json"
    signature_version: str | None = None
    target_prefix: str | None = None
    global_endpoint: str | None = None
    service_full_name: str | None = None

    @property
    def payload_type(self) -> PayloadType:
        return PayloadType.XML if self.protocol in ("query", "ec2", "rest-xml") else PayloadType.JSON


@dataclass(frozen=True)
class ServiceModel:
    """The unified service model.

    Immutable once built; the override layer returns a new instance.
    """

    service_descriptions: Mapping[str, ServiceDescription] = field(default_factory=frozen_mapping)
    operation_descriptions: Mapping[str, OperationDescription] = field(default_factory=frozen_mapping)
    structure_descriptions: Mapping[str, StructureDescription] = field(default_factory=frozen_mapping)
    field_descriptions: Mapping[str, FieldConstraint] = field(default_factory=frozen_mapping)
    error_types: frozenset[str] = frozenset()
    type_mappings: Mapping[str, RawTypeOverride] = field(default_factory=frozen_mapping)
    error_code_mappings: Mapping[str, str] = field(default_factory=frozen_mapping)

    # Generation metadata carried from the override layer
    coding_key_overrides: Mapping[str, str] = field(default_factory=frozen_mapping)
    name_overrides: Mapping[str, str] = field(default_factory=frozen_mapping)
    upper_camel_enum_types: frozenset[str] = frozenset()

    metadata: ServiceMetadata = field(default_factory=ServiceMetadata)
    content_type: str = "application/json"

    @property
    def default_input_location(self) -> InputLocation:
        return InputLocation.QUERY if self.metadata.protocol in ("query", "ec2") else InputLocation.BODY
