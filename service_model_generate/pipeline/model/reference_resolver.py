"""
Reference resolver for service model type names.

Checks that every name a model refers to is declared, so generators can
resolve types without further checks.
"""

from __future__ import annotations

from ..errors import ModelConsistencyError
from .model_nodes import FieldConstraint, ListField, MapField, ServiceModel, StructureDescription


class ReferenceResolver:
    """Resolves type names to structure or field descriptions."""

    def __init__(self, model: ServiceModel):
        """
        Initialize the resolver.

        Args:
            model: The model whose references are resolved
        """
        self.model = model

    def resolve(self, type_name: str) -> StructureDescription | FieldConstraint | None:
        """Return the declaration for a type name, or None if it is not declared."""
        if type_name in self.model.structure_descriptions:
            return self.model.structure_descriptions[type_name]
        return self.model.field_descriptions.get(type_name)

    def validate(self) -> None:
        """Check every member, element, operation and operation error reference.

        Raises:
            ModelConsistencyError: On the first dangling reference, naming the
                referencing entity
        """
        for structure_name in sorted(self.model.structure_descriptions):
            structure = self.model.structure_descriptions[structure_name]
            for member_name in sorted(structure.members):
                self._check(structure.members[member_name].value, f"member '{structure_name}.{member_name}'")

        for field_name in sorted(self.model.field_descriptions):
            constraint = self.model.field_descriptions[field_name]
            if isinstance(constraint, ListField):
                self._check(constraint.element_type, f"list '{field_name}'")
            elif isinstance(constraint, MapField):
                self._check(constraint.key_type, f"map '{field_name}'")
                self._check(constraint.value_type, f"map '{field_name}'")

        for operation_name in sorted(self.model.operation_descriptions):
            operation = self.model.operation_descriptions[operation_name]
            for shape_name in (operation.input, operation.output):
                if shape_name is not None and shape_name not in self.model.structure_descriptions:
                    raise ModelConsistencyError(f"Operation '{operation_name}' references undeclared structure '{shape_name}'")
            for error_name, _ in operation.errors:
                if error_name not in self.model.structure_descriptions:
                    raise ModelConsistencyError(f"Operation '{operation_name}' references undeclared error structure '{error_name}'")

    def _check(self, type_name: str, referrer: str) -> None:
        if self.resolve(type_name) is None:
            raise ModelConsistencyError(f"The {referrer} references undeclared type '{type_name}'")
