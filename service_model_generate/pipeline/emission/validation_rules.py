"""
Validation rule objects that generate validation code.

Each rule represents one constraint carried by a FieldConstraint and knows
how to render the ``if``/``raise`` lines that enforce it in generated code.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..model.model_nodes import (
    DoubleField,
    FieldConstraint,
    IntegerField,
    ListField,
    LongField,
    MapField,
    StringField,
)


class ValidationRule(ABC):
    """Base class for all validation rules"""

    # Templates formatted with the rule parameters plus ``subject`` and ``type_name``
    CONDITION: str = ""
    ERROR_MESSAGE: str = ""

    def __init__(self, subject: str, type_name: str, error_type: str = "ValidationError"):
        """
        Initialize a validation rule.

        Args:
            subject: Expression holding the value being validated
            type_name: Name of the validated type, used in the error message
            error_type: Expression naming the exception class to raise
        """
        self.subject = subject
        self.type_name = type_name
        self.error_type = error_type
        self.use_plain_string = False

    @abstractmethod
    def get_template_params(self) -> dict[str, Any]:
        """
        Get rule-specific parameters for template formatting.

        Returns:
            Dictionary with parameters specific to this validation rule
        """

    def generate_code(self) -> list[str]:
        """Generate validation code lines for this rule."""
        params = {"subject": self.subject, "type_name": self.type_name}
        params.update(self.get_template_params())

        condition = self.CONDITION.format(**params)
        error_message = self.ERROR_MESSAGE.format(**params)
        string_prefix = "" if self.use_plain_string else "f"
        return [
            f"if {condition}:",
            f'    raise {self.error_type}({string_prefix}"{error_message}")',
        ]


class PatternRule(ValidationRule):
    """Validates that a string fully matches a regex pattern"""

    CONDITION = "re.fullmatch({pattern}, {subject}) is None"
    ERROR_MESSAGE = "The provided value to {type_name} violated the regular expression constraint."

    def __init__(self, subject: str, type_name: str, pattern: str, error_type: str = "ValidationError"):
        super().__init__(subject, type_name, error_type)
        self.pattern = pattern
        self.use_plain_string = True

    def get_template_params(self) -> dict[str, Any]:
        return {"pattern": repr(self.pattern)}


class MinLengthRule(ValidationRule):
    """Validates minimum length"""

    CONDITION = "len({subject}) < {min_length}"
    ERROR_MESSAGE = "The provided value to {type_name} violated the minimum length constraint of {min_length} (length {{len({subject})}})."

    def __init__(self, subject: str, type_name: str, min_length: int, error_type: str = "ValidationError"):
        super().__init__(subject, type_name, error_type)
        self.min_length = min_length

    def get_template_params(self) -> dict[str, Any]:
        return {"min_length": self.min_length}


class MaxLengthRule(ValidationRule):
    """Validates maximum length"""

    CONDITION = "len({subject}) > {max_length}"
    ERROR_MESSAGE = "The provided value to {type_name} violated the maximum length constraint of {max_length} (length {{len({subject})}})."

    def __init__(self, subject: str, type_name: str, max_length: int, error_type: str = "ValidationError"):
        super().__init__(subject, type_name, error_type)
        self.max_length = max_length

    def get_template_params(self) -> dict[str, Any]:
        return {"max_length": self.max_length}


class MinimumRule(ValidationRule):
    """Validates minimum numeric value"""

    CONDITION = "{subject} < {minimum}"
    ERROR_MESSAGE = "The provided value to {type_name} violated the minimum value constraint of {minimum} (value {{{subject}}})."

    def __init__(self, subject: str, type_name: str, minimum: float, error_type: str = "ValidationError"):
        super().__init__(subject, type_name, error_type)
        self.minimum = minimum

    def get_template_params(self) -> dict[str, Any]:
        return {"minimum": self.minimum}


class MaximumRule(ValidationRule):
    """Validates maximum numeric value"""

    CONDITION = "{subject} > {maximum}"
    ERROR_MESSAGE = "The provided value to {type_name} violated the maximum value constraint of {maximum} (value {{{subject}}})."

    def __init__(self, subject: str, type_name: str, maximum: float, error_type: str = "ValidationError"):
        super().__init__(subject, type_name, error_type)
        self.maximum = maximum

    def get_template_params(self) -> dict[str, Any]:
        return {"maximum": self.maximum}


def rules_for_constraint(
    constraint: FieldConstraint,
    subject: str,
    type_name: str,
    error_type: str = "ValidationError",
) -> list[ValidationRule]:
    """Build the validation rules enforcing a field constraint.

    String enumerations are enforced by their generated enum class and get
    no rules here.

    Args:
        constraint: The field constraint to enforce
        subject: Expression holding the value being validated
        type_name: Name of the validated type
        error_type: Expression naming the exception class to raise

    Returns:
        The rules, in a stable order (pattern, then bounds)
    """
    rules: list[ValidationRule] = []
    if isinstance(constraint, StringField):
        if constraint.value_constraints:
            return rules
        if constraint.regex is not None:
            rules.append(PatternRule(subject, type_name, constraint.regex, error_type))
        length = constraint.length
    elif isinstance(constraint, (ListField, MapField)):
        length = constraint.length
    elif isinstance(constraint, (IntegerField, LongField, DoubleField)):
        if constraint.range.minimum is not None:
            rules.append(MinimumRule(subject, type_name, constraint.range.minimum, error_type))
        if constraint.range.maximum is not None:
            rules.append(MaximumRule(subject, type_name, constraint.range.maximum, error_type))
        return rules
    else:
        return rules

    if length.minimum is not None and length.minimum > 0:
        rules.append(MinLengthRule(subject, type_name, length.minimum, error_type))
    if length.maximum is not None:
        rules.append(MaxLengthRule(subject, type_name, length.maximum, error_type))
    return rules
