"""
Document loader

Reads a root document and every document it (transitively) includes,
returning a DocumentSet in inclusion order. Include targets are resolved
relative to the including document; each file is read and parsed once,
however many times it is included.

Loading fails fast on a missing include target, an include cycle, a file
that does not decode in the configured encoding, or
nesting deeper than the configured maximum.
"""

from dataclasses import replace
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from ..models.document import AttributeEntry, Directive, Document, DocumentSet, Node
from .attributes import AttributeSet, attributes_substitute
from .directives import DirectiveRegistry
from .errors import CircularIncludeError, IncludeDepthError, IncludeNotFoundError, SourceDecodeError
from .log import LOG, WARN
from .parser import Parser


class DocumentLoader:
    """
    Resolves include:: directives into a DocumentSet

    Attributes:
        attributes: Invocation attributes used to expand {refs} in include
                    targets (None values are unset)
        encoding: Source file encoding
        depth_max: Maximum include nesting depth
        registry: DirectiveRegistry shared by every parser
    """

    def __init__(
        self,
        attributes: Optional[Mapping[str, Optional[str]]] = None,
        encoding: Optional[str] = None,
        depth_max: Optional[int] = None,
        registry: Optional[DirectiveRegistry] = None,
    ) -> None:
        from ..config import appsettings

        self.attributes: Dict[str, Optional[str]] = dict(attributes or {})
        self.encoding = encoding or appsettings.source_encoding
        self.depth_max = depth_max if depth_max is not None else appsettings.include_depth_max
        self.registry = registry or DirectiveRegistry()
        self.attribute_set = AttributeSet(invocation=self.attributes)

    def load(self, root: Path) -> DocumentSet:
        """
        Load the root document and everything it includes

        Args:
            root: Path of the root document

        Returns:
            DocumentSet keyed by resolved path, ordered depth-first by first
            inclusion

        Raises:
            IncludeNotFoundError: Root or include target missing
            CircularIncludeError: A document includes itself, directly or not
            IncludeDepthError: Include nesting exceeds depth_max
            DocumentSyntaxError: A document contains a malformed directive
            SourceDecodeError: A document is not valid in the configured encoding
        """
        root = Path(root).resolve()
        documents: Dict[Path, Document] = {}
        order: List[Path] = []
        known = self.attribute_set.initial_get()

        self.document_load(root, (), None, documents, order, known)

        LOG(f"Loaded {len(order)} document(s) from {root.name}", level=2)
        return DocumentSet.build(root, documents, tuple(order))

    def document_load(
        self,
        path: Path,
        chain: Tuple[Path, ...],
        origin: Optional[Directive],
        documents: Dict[Path, Document],
        order: List[Path],
        known: Dict[str, str],
    ) -> None:
        """
        Load one document and recurse into its includes

        Args:
            path: Resolved path to load
            chain: Paths of the documents currently being loaded, root first
            origin: Include directive that referenced this path (None for root)
            documents: Loaded documents, filled in place
            order: Inclusion order, filled in place
            known: Attributes visible for target expansion, filled in place
        """
        including = chain[-1] if chain else None
        line_number = origin.line_number if origin is not None else None

        if path in chain:
            raise CircularIncludeError(chain + (path,), line_number)
        if len(chain) > self.depth_max:
            raise IncludeDepthError(
                f"include depth exceeds {self.depth_max} at {path}", including, line_number
            )
        if path in documents:
            LOG(f"Reusing already loaded {path}", level=3)
            return
        if not path.is_file():
            raise IncludeNotFoundError(path, including, line_number)

        order.append(path)
        source = self.source_read(path, including, line_number)
        parsed = Parser(source, path=path, registry=self.registry).parse()
        LOG(f"Parsed {path} ({len(parsed.nodes)} nodes)", level=2)

        nodes: List[Node] = []
        for node in parsed.nodes:
            if isinstance(node, AttributeEntry):
                self.attribute_set.entry_apply(known, node)
            elif isinstance(node, Directive) and node.name == 'include':
                node = self.include_resolve(node, path, chain, documents, order, known)
            nodes.append(node)

        documents[path] = Document(path=path, nodes=tuple(nodes))

    def include_resolve(
        self,
        directive: Directive,
        path: Path,
        chain: Tuple[Path, ...],
        documents: Dict[Path, Document],
        order: List[Path],
        known: Dict[str, str],
    ) -> Directive:
        """Resolve an include target, load it, and return the directive with its resolved path"""
        target_text = attributes_substitute(directive.target, known)
        target = (path.parent / target_text).resolve()

        optional = 'optional' in directive.attributes.get('opts', '').split(',')
        if optional and not target.is_file():
            WARN(f"{path}:{directive.line_number}: skipping missing optional include {target_text}")
            return directive

        LOG(f"Including {target} from {path.name}:{directive.line_number}", level=2)
        self.document_load(target, chain + (path,), directive, documents, order, known)
        return replace(directive, resolved=target)

    def source_read(self, path: Path, including: Optional[Path] = None,
                    line_number: Optional[int] = None) -> str:
        """
        Read one source file

        Raises:
            SourceDecodeError: The file is not valid in the configured encoding
        """
        try:
            with open(path, 'r', encoding=self.encoding) as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise SourceDecodeError(
                path, self.encoding, f"{e.reason} at byte {e.start}", including, line_number
            ) from e
