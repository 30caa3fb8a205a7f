"""Markdown to Google Docs request compiler.

Classifies markdown into blocks and compiles them into append-addressed
content requests plus deferred formatting and table directives.
"""

from .block_classifier import BlockClassifier, detect_inline_spans
from .errors import CompilerError, ClassificationError
from .mutation_compiler import MutationCompiler

__all__ = [
    "BlockClassifier",
    "detect_inline_spans",
    "CompilerError",
    "ClassificationError",
    "MutationCompiler",
]
