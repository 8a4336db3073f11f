"""
Atomic file writer for generated sources.

Ensures that an interrupted run never leaves a half-written file behind.
"""

from __future__ import annotations

import ast
import logging
import tempfile
from collections.abc import Callable
from pathlib import Path

from ..errors import FileEmissionError

logger = logging.getLogger(__name__)


class AtomicWriter:
    """Handles atomic file writes with validation.

    Uses a two-phase commit approach:
    1. Write to a temporary file in the same directory
    2. Validate the content
    3. Atomically replace the target file
    """

    def __init__(self, validate_python: Callable[[str], None] | None = None):
        """Initialize the atomic writer.

        Args:
            validate_python: Optional validation function for Python code
        """
        self._validate_python = validate_python or self._default_validate_python

    def write(self, path: Path, content: str, validate: bool = True) -> None:
        """Write content to file atomically.

        Python files (``.py``) are validated before the target is replaced;
        other files are written as-is.

        Args:
            path: Target file path
            content: Content to write
            validate: Whether to validate Python content before finalizing

        Raises:
            FileEmissionError: If validation fails
            OSError: If file operations fail
        """
        path.parent.mkdir(parents=True, exist_ok=True)

        # Same directory ensures atomic rename on the same filesystem
        temp_fd, temp_path_str = tempfile.mkstemp(
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            text=True,
        )
        temp_path = Path(temp_path_str)

        try:
            with open(temp_fd, "w", encoding="utf-8") as f:
                f.write(content)

            if validate and path.suffix == ".py":
                self._validate_python(content)

            temp_path.replace(path)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug("Wrote %s (%d bytes)", path, len(content))

    def _default_validate_python(self, content: str) -> None:
        """Default Python validation.

        Args:
            content: Python code to validate

        Raises:
            FileEmissionError: If the content does not parse
        """
        try:
            ast.parse(content)
        except SyntaxError as e:
            raise FileEmissionError(f"Generated Python code is not valid: {e}") from e
