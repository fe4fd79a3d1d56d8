"""
Document data model

A Document is the parsed, immutable form of one source file: an ordered
tuple of text blocks, directives and attribute entries. Joining the raw
text of every node reproduces the source exactly.
"""

from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional, Set, Tuple, Union


@dataclass(frozen=True)
class TextBlock:
    """
    Literal source text (one line or part of a line, newline included)

    Attributes:
        text: The text exactly as it should be emitted
        line_number: 1-based source line the text came from
        raw: Source text the block was parsed from; differs from text only
             for escaped directives (\\include::, \\tag::), where the
             backslash is dropped from text
    """
    text: str
    line_number: int
    raw: Optional[str] = None

    @property
    def source(self) -> str:
        return self.text if self.raw is None else self.raw


@dataclass(frozen=True)
class Directive:
    """
    A name::target[attrlist] directive

    Covers include references (include), tag boundaries (tag, end) and
    conditional boundaries (ifdef, ifndef, endif).

    Attributes:
        name: Directive name without the trailing '::'
        target: Text between '::' and '[' (include path, tag name, attribute names)
        attrlist: Raw text between the brackets
        line_number: 1-based source line
        raw: Exact source text consumed by the directive (a whole line for
             block directives, only the marker for inline tag markers)
        resolved: Absolute path of the include target, set by the loader
    """
    name: str
    target: str
    attrlist: str
    line_number: int
    raw: str
    resolved: Optional[Path] = None

    @property
    def source(self) -> str:
        return self.raw

    @property
    def attributes(self) -> Dict[str, str]:
        """
        Parse attrlist into a dict of key=value pairs.

        Values may be single or double quoted; positional entries are stored
        under their index as a string key ('1', '2', ...).

        Example:
            >>> Directive('include', 'a.adoc', 'tags="a;b", leveloffset=+1', 1, '').attributes
            {'tags': 'a;b', 'leveloffset': '+1'}
        """
        result: Dict[str, str] = {}
        position = 0
        for entry in attrlist_split(self.attrlist):
            if not entry:
                continue
            if '=' in entry:
                key, value = entry.split('=', 1)
                result[key.strip()] = value.strip().strip('"\'')
            else:
                position += 1
                result[str(position)] = entry.strip('"\'')
        return result


@dataclass(frozen=True)
class AttributeEntry:
    """
    A document attribute definition line

    ':version: 3.2' defines, ':draft!:' (or ':!draft:') unsets.
    """
    name: str
    value: str
    unset: bool
    line_number: int
    raw: str

    @property
    def source(self) -> str:
        return self.raw


Node = Union[TextBlock, Directive, AttributeEntry]


def attrlist_split(attrlist: str) -> Iterator[str]:
    """Split an attrlist on commas that are not inside quotes"""
    current = []
    quote = ''
    for char in attrlist:
        if quote:
            if char == quote:
                quote = ''
            current.append(char)
        elif char in '"\'':
            quote = char
            current.append(char)
        elif char == ',':
            yield ''.join(current).strip()
            current = []
        else:
            current.append(char)
    tail = ''.join(current).strip()
    if tail:
        yield tail


@dataclass(frozen=True)
class Document:
    """
    Parsed source document, immutable once loaded

    Attributes:
        path: Resolved path of the source file (None for in-memory sources)
        nodes: Ordered text blocks, directives and attribute entries
    """
    path: Optional[Path]
    nodes: Tuple[Node, ...] = field(default_factory=tuple)

    def source_text(self) -> str:
        """Reproduce the exact text this document was parsed from"""
        return ''.join(node.source for node in self.nodes)

    def tagNames_get(self) -> Set[str]:
        """Names of every tag region opened in this document"""
        return {
            node.target for node in self.nodes
            if isinstance(node, Directive) and node.name == 'tag'
        }

    @property
    def name(self) -> str:
        return self.path.name if self.path is not None else '<string>'


@dataclass(frozen=True)
class DocumentSet:
    """
    Result of loading a root document and everything it includes

    Attributes:
        root: Resolved path of the root document
        documents: Read-only mapping of resolved path to Document
        order: Paths in inclusion order (depth-first, first occurrence)
    """
    root: Path
    documents: Mapping[Path, Document]
    order: Tuple[Path, ...]

    @classmethod
    def build(cls, root: Path, documents: Dict[Path, Document], order: Tuple[Path, ...]) -> "DocumentSet":
        return cls(root=root, documents=MappingProxyType(dict(documents)), order=order)

    @property
    def root_document(self) -> Document:
        return self.documents[self.root]

    def __getitem__(self, path: Path) -> Document:
        return self.documents[path]

    def __iter__(self) -> Iterator[Document]:
        for path in self.order:
            yield self.documents[path]

    def __len__(self) -> int:
        return len(self.order)
