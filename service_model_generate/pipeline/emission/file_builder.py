"""
Indent-tracking builder for generated source files.
"""

from __future__ import annotations

import logging
import textwrap
from pathlib import Path

from ..errors import FileBuilderError, FileEmissionError
from .atomic_writer import AtomicWriter

logger = logging.getLogger(__name__)

INDENT = "    "


class FileBuilder:
    """Accumulates lines of a generated file at a tracked indentation level.

    The indent level can be adjusted before or after a line is appended, which
    keeps block openers and closers readable at the call site::

        builder.append_line("class Foo:", post_inc=True)
        builder.append_line("pass", post_dec=True)
    """

    def __init__(self, writer: AtomicWriter | None = None, validate: bool = True):
        self.lines: list[str] = []
        self.indent_level = 0
        self.validate = validate
        self._writer = writer or AtomicWriter()

    def inc_indent(self) -> None:
        self.indent_level += 1

    def dec_indent(self) -> None:
        if self.indent_level == 0:
            raise FileBuilderError("Cannot decrement indent below zero")
        self.indent_level -= 1

    def append_line(
        self,
        text: str,
        pre_inc: bool = False,
        pre_dec: bool = False,
        post_inc: bool = False,
        post_dec: bool = False,
    ) -> None:
        """Append text at the current indent level.

        A single line keeps its leading whitespace. Multi-line text is dedented
        first, then every line is emitted at the current indent (blank lines
        stay blank). A newline directly after the opening quotes of a
        triple-quoted block, and the whitespace before its closing quotes, are
        not part of the text.

        Args:
            text: The line (or lines) to append
            pre_inc: Increment the indent before appending
            pre_dec: Decrement the indent before appending
            post_inc: Increment the indent after appending
            post_dec: Decrement the indent after appending

        Raises:
            FileBuilderError: If a decrement would take the indent below zero
        """
        if pre_inc:
            self.inc_indent()
        if pre_dec:
            self.dec_indent()

        if "\n" in text:
            text = textwrap.dedent(text)
            text = text.removeprefix("\n")
            last_newline = text.rfind("\n")
            if last_newline != -1 and not text[last_newline + 1 :].strip():
                text = text[:last_newline]

        prefix = INDENT * self.indent_level
        for line in text.split("\n"):
            self.lines.append(prefix + line if line.strip() else "")

        if post_inc:
            self.inc_indent()
        if post_dec:
            self.dec_indent()

    def append_empty_line(self) -> None:
        self.lines.append("")

    def contents(self) -> str:
        """Return the accumulated text, newline terminated."""
        return "\n".join(self.lines) + "\n"

    def reset(self) -> None:
        self.lines = []
        self.indent_level = 0

    def write(self, file_name: str, file_path: str | Path) -> Path:
        """Write the accumulated lines to ``file_path/file_name``.

        Intermediate directories are created. The write is atomic, and Python
        output is syntax-checked first when validation is enabled.

        Args:
            file_name: Name of the file to write
            file_path: Directory to write it into

        Returns:
            The path of the written file

        Raises:
            FileEmissionError: If the content fails validation
        """
        path = Path(file_path) / file_name
        try:
            self._writer.write(path, self.contents(), validate=self.validate)
        except FileEmissionError as e:
            raise FileEmissionError(f"{path}: {e}") from e
        logger.info("Generated %s", path)
        return path
