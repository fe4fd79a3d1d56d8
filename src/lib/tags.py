"""
Tag extractor

Applies a TagSelection to a Document: text inside regions the selection
rejects is removed, and every tag::/end:: marker is dropped. The input
Document is never modified, so extracting with and without an exclusion
from the same Document always starts from the full text.

Example:
    >>> from docsplice.lib.parser import Parser
    >>> doc = Parser("a\\ntag::update_1[]b\\nend::update_1[]\\nc\\n").parse()
    >>> TagExtractor(TagSelection.exclude(['update_1'])).extract(doc).source_text()
    'a\\nc\\n'
"""

from typing import List, Optional, Tuple

from ..models.document import Directive, Document, Node
from ..models.tags import TagSelection
from .errors import TagMismatchError, UnclosedTagError
from .log import LOG


class TagExtractor:
    """
    Filters tagged regions out of Documents

    Attributes:
        selection: Tag selection deciding which regions are kept
    """

    def __init__(self, selection: Optional[TagSelection] = None) -> None:
        self.selection = selection or TagSelection()

    def extract(self, document: Document) -> Document:
        """
        Return a copy of document with rejected regions and all markers removed

        Args:
            document: Parsed document

        Returns:
            New Document with the same path

        Raises:
            TagMismatchError: end:: with no open tag, or closing the wrong tag
            UnclosedTagError: tag:: still open at end of document
        """
        kept: List[Node] = []
        open_tags: List[Tuple[str, int]] = []
        dropped = 0

        for node in document.nodes:
            if isinstance(node, Directive) and node.name == 'tag':
                open_tags.append((node.target, node.line_number))
                continue
            if isinstance(node, Directive) and node.name == 'end':
                self.region_close(node, open_tags, document)
                continue
            if self.selection.decide([name for name, _ in open_tags]):
                kept.append(node)
            else:
                dropped += 1

        if open_tags:
            name, line_number = open_tags[-1]
            raise UnclosedTagError(name, document.path, line_number)

        if dropped:
            LOG(f"Dropped {dropped} node(s) from {document.name}", level=3)
        return Document(path=document.path, nodes=tuple(kept))

    def region_close(self, node: Directive, open_tags: List[Tuple[str, int]], document: Document) -> None:
        if not open_tags:
            raise TagMismatchError(node.target, document.path, node.line_number)
        name, _ = open_tags[-1]
        if name != node.target:
            raise TagMismatchError(node.target, document.path, node.line_number, expected=name)
        open_tags.pop()
