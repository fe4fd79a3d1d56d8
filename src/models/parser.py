"""
Parser-specific data models

Type-safe structures for parser operations and return values.
"""

from dataclasses import dataclass
from typing import List, TYPE_CHECKING

if TYPE_CHECKING:
    from .document import Node


@dataclass
class DirectiveMatch:
    """
    Result of matching a name::target[attrlist] pattern in source text

    Returned by Parser.directive_match() for whole-line directives and by
    Parser.markers_find() for inline tag markers.

    Attributes:
        name: The directive name (e.g., "include", "tag", "ifdef")
        target: Text between '::' and '['
        attrlist: Text between the brackets
        escaped: True when the directive was written with a leading backslash
        start: Character offset of the match within the scanned line
        end: Character offset just past the match

    Example:
        For line "include::chapters/intro.adoc[leveloffset=+1]":
        DirectiveMatch(name="include", target="chapters/intro.adoc",
                       attrlist="leveloffset=+1", escaped=False, start=0, end=44)
    """
    name: str
    target: str
    attrlist: str
    escaped: bool
    start: int
    end: int


@dataclass
class ParsedLine:
    """
    Result of splitting one source line into document nodes

    Attributes:
        nodes: Text blocks and inline markers in source order
    """
    nodes: List['Node']
