"""
Coral shape decoder.

Phase 1 of the pipeline: decode each entry of a document's ``shapes`` map
into either a field constraint or a structure, without resolving
references between shapes.
"""

from __future__ import annotations

import logging
from typing import Any

from ..errors import ModelDecodeError
from ..model.model_nodes import (
    BlobField,
    BooleanField,
    DoubleField,
    FieldConstraint,
    IntegerField,
    LengthRange,
    ListField,
    LongField,
    MapField,
    Member,
    MemberLocation,
    NumericRange,
    StringField,
    TimestampField,
    frozen_mapping,
)
from .nodes import ErrorAttributes, StructureAttributes

logger = logging.getLogger(__name__)


class ShapeDecoder:
    """Decodes Coral shapes."""

    # Discriminators decoded without sub-shapes
    SIMPLE_TYPES = {
        "boolean": BooleanField,
        "timestamp": TimestampField,
        "blob": BlobField,
    }

    def decode(self, name: str, raw: dict[str, Any]) -> FieldConstraint | StructureAttributes:
        """
        Decode a single shape.

        Args:
            name: The shape name
            raw: The shape's JSON object

        Returns:
            A FieldConstraint, or StructureAttributes for structures

        Raises:
            ModelDecodeError: If the discriminator is unknown or a mandatory
                sub-key is missing
        """
        path = f"#/shapes/{name}"
        if not isinstance(raw, dict):
            raise ModelDecodeError(f"Shape '{name}' is not an object", path)

        shape_type = raw.get("type")
        if shape_type == "structure":
            return self._decode_structure(name, raw, path)
        if shape_type == "string":
            return StringField(
                regex=raw.get("pattern"),
                length=self._length(raw),
                value_constraints=tuple((value, value) for value in raw.get("enum", [])),
            )
        if shape_type == "integer":
            return IntegerField(range=self._range(raw))
        if shape_type == "long":
            return LongField(range=self._range(raw))
        if shape_type in ("double", "float"):
            return DoubleField(range=self._range(raw))
        if shape_type in self.SIMPLE_TYPES:
            return self.SIMPLE_TYPES[shape_type]()
        if shape_type == "list":
            return ListField(
                element_type=self._shape_ref(name, raw, "member", path),
                length=self._length(raw),
            )
        if shape_type == "map":
            return MapField(
                key_type=self._shape_ref(name, raw, "key", path),
                value_type=self._shape_ref(name, raw, "value", path),
                length=self._length(raw),
            )

        raise ModelDecodeError(f"Shape '{name}' has unrecognized type '{shape_type}'", path)

    def _decode_structure(self, name: str, raw: dict[str, Any], path: str) -> StructureAttributes:
        if "members" not in raw:
            raise ModelDecodeError(f"Structure '{name}' is missing 'members'", path)

        required = set(raw.get("required", []))
        members: dict[str, Member] = {}
        locations: dict[str, MemberLocation] = {}
        position = 0
        for member_name in sorted(raw["members"]):
            member_raw = raw["members"][member_name]
            if member_raw.get("deprecated", False):
                logger.debug("Skipping deprecated member %s.%s", name, member_name)
                continue
            if "shape" not in member_raw:
                raise ModelDecodeError(f"Member '{name}.{member_name}' is missing 'shape'", f"{path}/members/{member_name}")

            members[member_name] = Member(
                value=member_raw["shape"],
                position=position,
                required=member_name in required,
                location_name=member_raw.get("locationName"),
                documentation=member_raw.get("documentation"),
            )
            position += 1

            location = member_raw.get("location")
            if location is not None:
                try:
                    locations[member_name] = MemberLocation(location)
                except ValueError:
                    raise ModelDecodeError(
                        f"Member '{name}.{member_name}' has unrecognized location '{location}'",
                        f"{path}/members/{member_name}",
                    ) from None

        error_attributes = None
        if "error" in raw:
            error = raw["error"]
            error_attributes = ErrorAttributes(
                code=error.get("code"),
                http_status_code=error.get("httpStatusCode"),
                sender_fault=error.get("senderFault", False),
            )

        return StructureAttributes(
            members=frozen_mapping(members),
            member_locations=frozen_mapping(locations),
            payload_as_member=raw.get("payload"),
            error_attributes=error_attributes,
            is_exception=raw.get("exception", False) or error_attributes is not None,
            documentation=raw.get("documentation"),
        )

    def _shape_ref(self, name: str, raw: dict[str, Any], key: str, path: str) -> str:
        ref = raw.get(key)
        if not isinstance(ref, dict) or "shape" not in ref:
            raise ModelDecodeError(f"Shape '{name}' is missing '{key}'", path)
        return ref["shape"]

    @staticmethod
    def _length(raw: dict[str, Any]) -> LengthRange:
        minimum = raw.get("min")
        maximum = raw.get("max")
        return LengthRange(
            minimum=int(minimum) if minimum is not None else None,
            maximum=int(maximum) if maximum is not None else None,
        )

    @staticmethod
    def _range(raw: dict[str, Any]) -> NumericRange:
        return NumericRange(minimum=raw.get("min"), maximum=raw.get("max"))
