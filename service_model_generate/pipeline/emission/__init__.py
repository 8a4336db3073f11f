"""
Emission module.

Indent-tracking file building, atomic writes and packaging files.
"""

from __future__ import annotations

from .atomic_writer import AtomicWriter
from .file_builder import FileBuilder
from .manifest import ManifestGenerator

__all__ = [
    "AtomicWriter",
    "FileBuilder",
    "ManifestGenerator",
]
