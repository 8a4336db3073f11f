"""
Shape AST module.

Contains the decoded shape nodes and the decoder for Coral shapes.
"""

from __future__ import annotations

from .nodes import ErrorAttributes, StructureAttributes
from .parser import ShapeDecoder

__all__ = [
    "ErrorAttributes",
    "StructureAttributes",
    "ShapeDecoder",
]
