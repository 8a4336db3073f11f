"""
Loading of model, override and configuration documents.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)

YAML_SUFFIXES = (".yaml", ".yml")


def load_document(path: str | Path) -> dict[str, Any]:
    """
    Load a JSON or YAML document.

    YAML is used for ``.yaml``/``.yml`` files, JSON otherwise.

    Args:
        path: The document path

    Returns:
        The parsed document

    Raises:
        ConfigurationError: If the file cannot be read or parsed, or is not an object
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            if path.suffix.lower() in YAML_SUFFIXES:
                document = yaml.safe_load(f)
            else:
                document = json.load(f)
    except OSError as e:
        raise ConfigurationError(f"Cannot read {path}: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot parse {path}: {e}") from e

    if not isinstance(document, dict):
        raise ConfigurationError(f"{path} does not contain an object")
    logger.debug("Loaded %s", path)
    return document
