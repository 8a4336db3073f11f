"""
Decoded shape nodes.

Phase 1 output: the per-shape view of a Coral document, before operations
are classified and before the unified service model is assembled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from ..model.model_nodes import Member, MemberLocation, frozen_mapping


@dataclass(frozen=True)
class ErrorAttributes:
    """The ``error`` block of an exception structure."""

    code: str | None = None
    http_status_code: int | None = None
    sender_fault: bool = False


@dataclass(frozen=True)
class StructureAttributes:
    """A decoded structure shape."""

    members: Mapping[str, Member] = field(default_factory=frozen_mapping)
    member_locations: Mapping[str, MemberLocation] = field(default_factory=frozen_mapping)
    payload_as_member: str | None = None
    error_attributes: ErrorAttributes | None = None
    is_exception: bool = False
    documentation: str | None = None

    def fields_at(self, *locations: MemberLocation) -> tuple[str, ...]:
        """Return the sorted names of the members bound to any of the given locations."""
        return tuple(sorted(name for name, location in self.member_locations.items() if location in locations))
