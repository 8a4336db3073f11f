"""
Companion files of a generated library.

Renders, from jinja2 templates, the ``pyproject.toml`` and ``.gitignore`` at
the output root and the ``__init__.py`` of each generated package.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import jinja2

from ...utils import docstring_text, to_snake_case
from .atomic_writer import AtomicWriter

if TYPE_CHECKING:
    from ..generator import ServiceModelCodeGenerator

logger = logging.getLogger(__name__)


def _distribution_name(name: str) -> str:
    return to_snake_case(name).replace("_", "-")


class ManifestGenerator:
    """Writes the packaging files of the generated model and client packages."""

    def __init__(self, generator: ServiceModelCodeGenerator, writer: AtomicWriter | None = None):
        """
        Initialize the manifest generator.

        Args:
            generator: The code generator whose output is being packaged
            writer: Writer used for every file
        """
        self.generator = generator
        self.writer = writer or AtomicWriter()
        self._setup_templates()

    def _setup_templates(self) -> None:
        """Set up Jinja2 templates."""
        template_dir = Path(__file__).parent.parent.parent / "templates" / "manifest"
        self.jinja_env = jinja2.Environment(
            loader=jinja2.FileSystemLoader(str(template_dir)),
            lstrip_blocks=True,
            trim_blocks=True,
            keep_trailing_newline=True,
        )
        self.jinja_env.filters["distribution"] = _distribution_name

        self.pyproject_template = self.jinja_env.get_template("pyproject.toml.jinja2")
        self.gitignore_template = self.jinja_env.get_template("gitignore.jinja2")
        self.package_init_template = self.jinja_env.get_template("package_init.py.jinja2")

    @property
    def generation_comment(self) -> str | None:
        if self.generator.customizations.add_generation_comment:
            return self.generator.generation_comment
        return None

    def generate(self, packages: dict[str, list[str]]) -> list[Path]:
        """
        Write the companion files.

        Args:
            packages: The generated package names, each mapped to the names of
                the modules written into it

        Returns:
            The paths of the written files
        """
        generator = self.generator
        root = Path(generator.application_description.base_file_path)
        description = generator.application_description.application_description or f"Client library for the {generator.base_name} service."
        distribution_name = _distribution_name(f"{generator.base_name}{generator.application_description.application_suffix or 'Client'}")

        written = []
        for package, modules in sorted(packages.items()):
            path = root / package / "__init__.py"
            content = self.package_init_template.render(
                generation_comment=self.generation_comment,
                description=docstring_text(f"{package} package."),
                modules=sorted(modules),
            )
            self.writer.write(path, content, validate=generator.customizations.validate_output)
            written.append(path)

        pyproject_path = root / "pyproject.toml"
        self.writer.write(
            pyproject_path,
            self.pyproject_template.render(
                generation_comment=self.generation_comment,
                distribution_name=distribution_name,
                description=description,
                runtime_package=generator.customizations.runtime_package,
                packages=sorted(packages),
            ),
        )
        written.append(pyproject_path)

        gitignore_path = root / ".gitignore"
        self.writer.write(gitignore_path, self.gitignore_template.render())
        written.append(gitignore_path)

        for path in written:
            logger.info("Generated %s", path)
        return written
