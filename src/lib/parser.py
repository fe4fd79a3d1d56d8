r"""
Parser for docsplice source documents

Splits a source text into an immutable Document of text blocks,
directives and attribute entries.

The parser operates line by line:
1. Attribute entries (:name: value) outside verbatim blocks
2. Whole-line directives (include::, ifdef::, ifndef::, endif::)
3. Tag marker lines (tag::name[] / end::name[], optionally behind a comment leader)
4. Inline tag markers inside ordinary text

Key features:
- Directive names validated against the DirectiveRegistry
- Backslash escaping (\include::, \tag::) for literal directive text
- Verbatim block tracking (----, ...., ////, ++++) so attribute entries
  inside code listings stay literal
- Line number tracking for error reporting

Example:
    >>> doc = Parser("= Title\ninclude::core.adoc[]\n").parse()
    >>> [type(n).__name__ for n in doc.nodes]
    ['TextBlock', 'Directive']
    >>> doc.nodes[1].target
    'core.adoc'
"""

import re
from pathlib import Path
from typing import List, Optional

from ..models.document import AttributeEntry, Directive, Document, Node, TextBlock
from ..models.parser import DirectiveMatch, ParsedLine
from .errors import DocumentSyntaxError
from .log import LOG


ATTRIBUTE_ENTRY_RX = re.compile(r'^:(!)?([A-Za-z0-9_][A-Za-z0-9_-]*)(!)?:(?:[ \t]+(.*?))?[ \t]*$')
BLOCK_DIRECTIVE_RX = re.compile(r'^(\\)?([a-z]+)::([^\[]*)\[(.*)\]$')
VERBATIM_DELIMITER_RX = re.compile(r'^(-{4,}|\.{4,}|/{4,}|\+{4,})$')
COMMENT_LEADER = r'(?://+|#+|--|;+|%+|\'|<!--|/\*)?'
COMMENT_TRAILER = r'(?:-->|\*/)?'
LINE_CONTINUATION = ' \\'


class Parser:
    r"""
    Parser for docsplice source text

    Handles:
    - Whole-line directives validated against the registry
    - Tag markers on their own line or inline
    - Attribute entries, including ' \' continued values
    - Backslash escaping
    - Error reporting with path, line number and context
    """

    def __init__(self, source: str, path: Optional[Path] = None, debug: bool = False, registry=None):
        """
        Initialize parser with source text

        Args:
            source: Raw document text
            path: Path the text was read from (used for error reporting)
            debug: Enable debug output for parser operations
            registry: Optional DirectiveRegistry for validating directive names
        """
        self.source = source
        self.path = path
        self.debug = debug
        self.line_number = 0
        self.line = ''
        self.nodes: List[Node] = []
        self.verbatim_delimiter: Optional[str] = None

        if registry is None:
            from .directives import DirectiveRegistry
            registry = DirectiveRegistry()
        self.registry = registry

        inline_names = sorted(
            name for name, spec in self.registry.specs.items() if spec.inline
        )
        self.marker_rx = re.compile(
            r'(\\)?\b(' + '|'.join(inline_names) + r')::([A-Za-z0-9_][\w.-]*)\[([^\]]*)\]'
        )
        self.marker_line_rx = re.compile(
            r'^\s*' + COMMENT_LEADER + r'\s*(' + '|'.join(inline_names) + r')::'
            r'([A-Za-z0-9_][\w.-]*)\[([^\]]*)\]\s*' + COMMENT_TRAILER + r'\s*$'
        )

    def parse(self) -> Document:
        """
        Parse source text into a Document

        Returns:
            Document whose nodes reproduce the source text exactly when
            their raw text is joined

        Raises:
            DocumentSyntaxError: If a registered directive is malformed
                (missing target, content where none is allowed)
        """
        self.nodes = []
        self.verbatim_delimiter = None
        lines = self.source.splitlines(keepends=True)

        index = 0
        while index < len(lines):
            self.line_number = index + 1
            self.line = lines[index]
            content = self.line.rstrip('\r\n')

            if self.verbatim_delimiter is None:
                entry_end = self.attributeEntry_parse(lines, index)
                if entry_end is not None:
                    index = entry_end
                    continue

            parsed = self.line_parse(content)
            self.nodes.extend(parsed.nodes)
            self.verbatim_track(content)
            index += 1

        LOG(f"Parsed {len(self.nodes)} nodes from {self.path or '<string>'}", level=3)
        return Document(path=self.path, nodes=tuple(self.nodes))

    def attributeEntry_parse(self, lines: List[str], index: int) -> Optional[int]:
        """
        Parse an attribute entry starting at lines[index].

        Values ending in ' \\' continue on the next line; the continuation
        marker is replaced by a single space.

        Returns:
            Index of the first line after the entry, or None if the line is
            not an attribute entry
        """
        content = lines[index].rstrip('\r\n')
        match = ATTRIBUTE_ENTRY_RX.match(content)
        if not match:
            return None

        unset = bool(match.group(1) or match.group(3))
        name = match.group(2).lower()
        value = match.group(4) or ''
        raw = lines[index]
        end = index + 1

        while value.endswith(LINE_CONTINUATION) and end < len(lines):
            value = value[:-len(LINE_CONTINUATION)] + ' ' + lines[end].rstrip('\r\n').strip()
            raw += lines[end]
            end += 1

        if unset and value:
            self.error(f"attribute unset ':{name}!:' cannot carry a value")

        self.nodes.append(AttributeEntry(
            name=name,
            value=value.strip(),
            unset=unset,
            line_number=index + 1,
            raw=raw,
        ))
        return end

    def line_parse(self, content: str) -> ParsedLine:
        """Split one line into nodes"""
        match = self.directive_match(content)
        if match is not None:
            spec = self.registry.spec_get(match.name)
            if match.escaped:
                text = self.line.replace('\\', '', 1)
                return ParsedLine(nodes=[TextBlock(text, self.line_number, raw=self.line)])
            problem = spec.validate(match.target, match.attrlist)
            if problem:
                self.error(problem)
            directive = Directive(
                name=match.name,
                target=match.target.strip(),
                attrlist=match.attrlist,
                line_number=self.line_number,
                raw=self.line,
            )
            return ParsedLine(nodes=[directive])

        marker_line = self.marker_line_rx.match(content)
        if marker_line is not None:
            name, target, attrlist = marker_line.group(1), marker_line.group(2), marker_line.group(3)
            problem = self.registry.spec_get(name).validate(target, attrlist)
            if problem:
                self.error(problem)
            directive = Directive(name, target, attrlist, self.line_number, raw=self.line)
            return ParsedLine(nodes=[directive])

        return ParsedLine(nodes=self.markers_split())

    def directive_match(self, content: str) -> Optional[DirectiveMatch]:
        """
        Match a whole-line, registered, non-inline directive

        Unregistered names (e.g. 'image::a.png[]') are ordinary text.

        Example:
            For line "ifdef::backend-pdf[]":
            Returns DirectiveMatch(name="ifdef", target="backend-pdf", attrlist="", ...)
        """
        match = BLOCK_DIRECTIVE_RX.match(content)
        if not match:
            return None
        spec = self.registry.spec_get(match.group(2))
        if spec is None or spec.inline:
            return None
        return DirectiveMatch(
            name=match.group(2),
            target=match.group(3),
            attrlist=match.group(4),
            escaped=bool(match.group(1)),
            start=0,
            end=len(content),
        )

    def markers_find(self, text: str) -> List[DirectiveMatch]:
        """Find every inline tag marker in text"""
        return [
            DirectiveMatch(
                name=m.group(2),
                target=m.group(3),
                attrlist=m.group(4),
                escaped=bool(m.group(1)),
                start=m.start(),
                end=m.end(),
            )
            for m in self.marker_rx.finditer(text)
        ]

    def markers_split(self) -> List[Node]:
        """
        Split the current line around inline tag markers

        Text around each marker is preserved exactly; escaped markers become
        literal text without their backslash.

        Example:
            "Use tag::update_1[]Kafka 2.5end::update_1[] today\\n" becomes
            [TextBlock("Use "), Directive(tag), TextBlock("Kafka 2.5"),
             Directive(end), TextBlock(" today\\n")]
        """
        line = self.line
        matches = self.markers_find(line)
        if not matches:
            return [TextBlock(line, self.line_number)]

        nodes: List[Node] = []
        pending = ''
        pending_raw = ''
        pos = 0
        for match in matches:
            pending += line[pos:match.start]
            pending_raw += line[pos:match.start]
            marker = line[match.start:match.end]
            if match.escaped:
                pending += marker[1:]
                pending_raw += marker
            else:
                problem = self.registry.spec_get(match.name).validate(match.target, match.attrlist)
                if problem:
                    self.error(problem)
                if pending_raw:
                    nodes.append(self.textBlock_make(pending, pending_raw))
                pending = pending_raw = ''
                nodes.append(Directive(match.name, match.target, match.attrlist, self.line_number, raw=marker))
            pos = match.end

        pending += line[pos:]
        pending_raw += line[pos:]
        if pending_raw:
            nodes.append(self.textBlock_make(pending, pending_raw))

        if self.debug:
            LOG(f"Line {self.line_number}: split into {len(nodes)} nodes", level=3)
        return nodes

    def textBlock_make(self, text: str, raw: str) -> TextBlock:
        return TextBlock(text, self.line_number, raw=None if raw == text else raw)

    def verbatim_track(self, content: str) -> None:
        """Enter or leave a verbatim (listing, literal, comment, passthrough) block"""
        delimiter = content.rstrip()
        if not VERBATIM_DELIMITER_RX.match(delimiter):
            return
        if self.verbatim_delimiter is None:
            self.verbatim_delimiter = delimiter
        elif self.verbatim_delimiter == delimiter:
            self.verbatim_delimiter = None

    def error(self, message: str) -> None:
        """
        Report parser error with source context

        Raises:
            DocumentSyntaxError: Always (this is an error reporting function)

        Example output:
            docs/core.adoc:12: 'include::' requires a target
            Context: include::[]
        """
        context = self.line.rstrip('\r\n')
        raise DocumentSyntaxError(
            f"{message}\nContext: {context}",
            path=self.path,
            line_number=self.line_number,
        )
