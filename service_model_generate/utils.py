"""
Naming utilities for the service model generator.
"""

import json
import keyword
import re

# Regex pattern to split text into words, handling camelCase boundaries
_WORD_PATTERN = re.compile(r"[a-z]+|[A-Z][a-z]*|[0-9]+")

# Acronym followed by a capitalized word ("HTTPClient" -> "HTTP", "Client")
_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")
_NON_IDENTIFIER = re.compile(r"[^0-9a-zA-Z]+")


def _normalize_separators(text: str) -> str:
    """Normalize separators (underscores, hyphens) to spaces."""
    return text.replace("_", " ").replace("-", " ")


def _split_into_words(text: str) -> list[str]:
    """Split text into words, handling camelCase boundaries."""
    return _WORD_PATTERN.findall(text)


def _capitalize_and_join(words: list[str]) -> str:
    """Capitalize each word and join them together."""
    return "".join(word.capitalize() for word in words if word)


def snake_to_pascal_case(text: str) -> str:
    """Convert snake_case, camelCase, or space-separated text to PascalCase.

    Examples:
        "first_name" -> "FirstName"
        "FIRST_NAME" -> "FirstName"
        "actionTemplate" -> "ActionTemplate"
        "first 3 rows" -> "First3Rows"
        "ABC" -> "Abc"

    Args:
        text: The text to convert (snake_case, camelCase, UPPER_SNAKE_CASE, or space-separated)

    Returns:
        PascalCase string
    """
    if not text:
        return ""
    normalized = _normalize_separators(text)
    words = _split_into_words(normalized)
    return _capitalize_and_join(words)


def upper_camel_case(text: str) -> str:
    """Uppercase the first letter of every separator-delimited part, keeping interior case.

    Examples:
        "listPets" -> "ListPets"
        "list_pets" -> "ListPets"
        "getHTTPThing" -> "GetHTTPThing"
        "Gateway.NotAttached" -> "GatewayNotAttached"
    """
    parts = [part for part in _NON_IDENTIFIER.split(text) if part]
    return "".join(part[0].upper() + part[1:] for part in parts)


def to_snake_case(text: str) -> str:
    """Convert camelCase, PascalCase or separated text to snake_case.

    Examples:
        "GetWidget" -> "get_widget"
        "AWSAccountIds" -> "aws_account_ids"
        "dataHttpClient" -> "data_http_client"
        "s3:ObjectCreated" -> "s3_object_created"
    """
    text = _ACRONYM_BOUNDARY.sub(r"\1_\2", text)
    text = _CAMEL_BOUNDARY.sub(r"\1_\2", text)
    text = _NON_IDENTIFIER.sub("_", text)
    return text.strip("_").lower()


def to_upper_snake_case(text: str) -> str:
    """Convert text to UPPER_SNAKE_CASE ("ObjectCreated" -> "OBJECT_CREATED")."""
    return to_snake_case(text).upper()


def python_identifier(name: str, reserved: frozenset[str] = frozenset()) -> str:
    """Make a name usable as a Python identifier.

    Keywords and names in ``reserved`` get a trailing underscore, names
    starting with a digit get a leading underscore, and an empty name
    becomes ``_``.
    """
    if not name:
        return "_"
    if name[0].isdigit():
        name = f"_{name}"
    if keyword.iskeyword(name) or name in reserved:
        name = f"{name}_"
    return name


def string_literal(value: str) -> str:
    """Return a double-quoted Python string literal for ``value``."""
    return json.dumps(value)


def docstring_text(text: str) -> str:
    """Collapse documentation text to one line that is safe inside a triple-quoted docstring."""
    return " ".join(text.split()).replace("\\", "\\\\").replace('"', '\\"')
