"""
Renderer for loaded document sets

Walks the root document and produces one text:
- include:: directives are replaced by the rendered, tag-filtered target
  (with its own tags= selection and leveloffset= applied)
- ifdef::/ifndef::/endif:: blocks are kept or dropped
- attribute entries are consumed and take effect from the point they are
  rendered, so entries in dropped regions or false conditionals never count;
  {name} references are substituted with the values in force at that line
- text inside verbatim blocks (----, ...., ////, ++++) is emitted as is

The output is a pure function of the documents, the invocation
attributes and the tag selection: per-render state is rebuilt at the
start of every render() call.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

from ..models.directives import DirectiveCategory
from ..models.document import AttributeEntry, Directive, Document, DocumentSet, TextBlock
from ..models.tags import TagSelection
from .attributes import BUILTIN_ATTRIBUTES, AttributeSet, attributes_substitute
from .directives import DirectiveRegistry, condition_evaluate
from .errors import DocumentSyntaxError, MissingAttributeError, TagNotFoundError
from .log import LOG, WARN
from .parser import VERBATIM_DELIMITER_RX
from .tags import TagExtractor


HEADING_RX = re.compile(r'^(=+)([ \t]+\S.*)$')
LEVELOFFSET_RX = re.compile(r'^([+-]?)(\d+)$')


@dataclass
class RenderScope:
    """
    Per-document render state

    Attributes:
        document: Document being rendered (already tag-filtered)
        leveloffset: Heading level shift for this document
        conditions: Open ifdef/ifndef frames and whether each is satisfied
        verbatim: Delimiter of the verbatim block currently open, if any
    """
    document: Document
    leveloffset: int = 0
    conditions: List[Tuple[Directive, bool]] = field(default_factory=list)
    verbatim: Optional[str] = None

    @property
    def active(self) -> bool:
        return all(satisfied for _, satisfied in self.conditions)


class Renderer:
    """
    Assembles a DocumentSet into a single text

    Attributes:
        documents: Loaded document set
        attributes: Invocation attributes (None value = unset, '@' suffix = soft)
        selection: Tag selection applied to every document
        attribute_missing: Policy for unresolved references
        strict: Treat warnings as errors
        attributes_effective: Attributes in force; after render() the final values
    """

    def __init__(
        self,
        documents: DocumentSet,
        attributes: Optional[Mapping[str, Optional[str]]] = None,
        selection: Optional[TagSelection] = None,
        attribute_missing: Optional[str] = None,
        strict: Optional[bool] = None,
        registry: Optional[DirectiveRegistry] = None,
    ) -> None:
        from ..config import appsettings

        self.documents = documents
        self.attributes = dict(attributes or {})
        self.selection = selection or TagSelection()
        self.attribute_missing = attribute_missing or appsettings.attribute_missing
        self.strict = appsettings.strict_mode if strict is None else strict
        self.registry = registry or DirectiveRegistry()

        if self.attribute_missing not in ('passthrough', 'drop', 'error'):
            raise ValueError(f"Unknown attribute_missing policy: {self.attribute_missing}")

        self.filtered: Dict[Path, Document] = {}
        self.attribute_set = AttributeSet(invocation=self.attributes)
        self.attributes_effective: Dict[str, str] = {}

    def render(self) -> str:
        """
        Render the root document

        Returns:
            The assembled text

        Raises:
            TagMismatchError / UnclosedTagError: Unbalanced tag regions
            DocumentSyntaxError: Unbalanced conditionals, bad leveloffset
            MissingAttributeError: Unresolved reference under the 'error' policy
            TagNotFoundError: Strict mode, include selects an absent tag
        """
        extractor = TagExtractor(self.selection)
        self.filtered = {document.path: extractor.extract(document) for document in self.documents}

        builtins = dict(BUILTIN_ATTRIBUTES)
        builtins['docname'] = self.documents.root.stem
        self.attribute_set = AttributeSet(invocation=self.attributes, builtins=builtins)
        self.attributes_effective = self.attribute_set.initial_get()
        LOG(f"Rendering with {len(self.attributes_effective)} attributes in force", level=3)

        text = self.document_render(self.filtered[self.documents.root], 0)
        LOG(f"Rendered {len(text)} characters from {len(self.documents)} document(s)", level=2)
        return text

    def document_render(self, document: Document, leveloffset: int) -> str:
        """Render one (already tag-filtered) document"""
        scope = RenderScope(document=document, leveloffset=leveloffset)
        parts: List[str] = []

        for node in document.nodes:
            if isinstance(node, Directive):
                spec = self.registry.spec_get(node.name)
                if spec.category is DirectiveCategory.CONDITIONAL or scope.active:
                    parts.append(spec.handler(node, self, scope))
            elif not scope.active:
                continue
            elif isinstance(node, AttributeEntry):
                self.attribute_set.entry_apply(self.attributes_effective, node)
            else:
                parts.append(self.text_render(node, scope))

        if scope.conditions:
            opened, _ = scope.conditions[-1]
            raise DocumentSyntaxError(
                f"unclosed '{opened.name}::{opened.target}[]' block",
                document.path,
                opened.line_number,
            )
        return ''.join(parts)

    def text_render(self, node: TextBlock, scope: RenderScope) -> str:
        """Apply level offset and attribute substitution to one text block"""
        text = node.text
        content = text.rstrip('\r\n')
        delimiter = content.rstrip()

        if scope.verbatim is not None:
            if delimiter == scope.verbatim:
                scope.verbatim = None
            return text
        if VERBATIM_DELIMITER_RX.match(delimiter):
            scope.verbatim = delimiter
            return text

        if scope.leveloffset:
            text = self.heading_shift(content, scope.leveloffset) + text[len(content):]

        return attributes_substitute(
            text,
            self.attributes_effective,
            missing=lambda name: self.attribute_missingHandle(name, scope.document, node.line_number),
        )

    def heading_shift(self, content: str, offset: int) -> str:
        match = HEADING_RX.match(content)
        if not match:
            return content
        level = max(1, len(match.group(1)) + offset)
        return '=' * level + match.group(2)

    def attribute_missingHandle(self, name: str, document: Document, line_number: int) -> str:
        """Apply the missing-attribute policy to one unresolved reference"""
        if self.attribute_missing == 'error':
            raise MissingAttributeError(name, document.path, line_number)
        where = f"{document.path or document.name}:{line_number}"
        if self.attribute_missing == 'drop':
            WARN(f"{where}: dropping reference to missing attribute {{{name}}}")
            return ''
        WARN(f"{where}: skipping reference to missing attribute {{{name}}}")
        return '{' + name + '}'

    def include_render(self, directive: Directive, scope: RenderScope) -> str:
        """Render the target of an include:: directive in place"""
        if directive.resolved is None:
            return ''

        attributes = directive.attributes
        include_selection = TagSelection.parse(attributes.get('tags') or attributes.get('tag'))
        target = self.documents[directive.resolved]

        if include_selection.is_empty:
            document = self.filtered[directive.resolved]
        else:
            self.tags_check(include_selection, target, directive, scope)
            document = TagExtractor(self.selection.intersect(include_selection)).extract(target)

        offset = self.leveloffset_resolve(attributes.get('leveloffset'), directive, scope)
        LOG(f"Splicing {target.name} at {scope.document.name}:{directive.line_number}", level=3)

        text = self.document_render(document, offset)
        if text and not text.endswith('\n') and directive.raw.endswith('\n'):
            text += '\n'
        return text

    def tags_check(self, selection: TagSelection, target: Document, directive: Directive,
                   scope: RenderScope) -> None:
        """Report tags an include selects that its target never defines"""
        absent = selection.names - target.tagNames_get()
        if not absent:
            return
        if self.strict:
            raise TagNotFoundError(absent, scope.document.path, directive.line_number)
        names = ', '.join(sorted(absent))
        WARN(f"{scope.document.path}:{directive.line_number}: tag(s) {names} not found in {target.path}")

    def leveloffset_resolve(self, value: Optional[str], directive: Directive, scope: RenderScope) -> int:
        """'+1' / '-1' shift relative to the including document, '2' is absolute"""
        if value is None or not value.strip():
            return scope.leveloffset
        match = LEVELOFFSET_RX.match(value.strip())
        if not match:
            raise DocumentSyntaxError(
                f"invalid leveloffset '{value}'", scope.document.path, directive.line_number
            )
        sign, amount = match.group(1), int(match.group(2))
        if sign == '+':
            return scope.leveloffset + amount
        if sign == '-':
            return scope.leveloffset - amount
        return amount

    def conditional_open(self, directive: Directive, scope: RenderScope) -> str:
        """Open an ifdef/ifndef block, or render its single-line content"""
        satisfied = scope.active and condition_evaluate(directive, self.attributes_effective)

        if directive.attrlist:
            if not satisfied:
                return ''
            newline = '\n' if directive.raw.endswith('\n') else ''
            line = TextBlock(directive.attrlist + newline, directive.line_number)
            return self.text_render(line, scope)

        scope.conditions.append((directive, satisfied))
        return ''

    def conditional_close(self, directive: Directive, scope: RenderScope) -> str:
        """Close the innermost ifdef/ifndef block"""
        if not scope.conditions:
            raise DocumentSyntaxError(
                "unmatched 'endif::[]' (no open ifdef/ifndef)",
                scope.document.path,
                directive.line_number,
            )
        opened, _ = scope.conditions[-1]
        if directive.target and directive.target != opened.target:
            raise DocumentSyntaxError(
                f"mismatched 'endif::{directive.target}[]', expected 'endif::{opened.target}[]'",
                scope.document.path,
                directive.line_number,
            )
        scope.conditions.pop()
        return ''
