"""
Models package for docsplice

Contains data structures and type definitions for the assembly pipeline.
"""

from .state import ProgramState, pipeline
from .directives import DirectiveSpec, DirectiveCategory
from .document import AttributeEntry, Directive, Document, DocumentSet, Node, TextBlock
from .parser import DirectiveMatch, ParsedLine
from .tags import TagSelection

__all__ = [
    "ProgramState",
    "pipeline",
    "DirectiveSpec",
    "DirectiveCategory",
    "AttributeEntry",
    "Directive",
    "Document",
    "DocumentSet",
    "Node",
    "TextBlock",
    "DirectiveMatch",
    "ParsedLine",
    "TagSelection",
]
