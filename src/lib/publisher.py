"""
HTML publisher for rendered documents

Converts assembled docsplice markup into one standalone, print-ready HTML
page: document metadata in the head, theme CSS (including the @page rule
used when printing to PDF) inlined, and source listings highlighted with
Pygments.

Supported block structure:
    = Title / == Section ... ====== Section    headings with stable ids
    [source,java] + ---- ... ----             highlighted listings
    .... ... ....                             literal blocks
    ++++ ... ++++                             raw HTML passthrough
    //// ... //// and // comment              dropped
    * item / - item / . item                  lists
    NOTE: / TIP: / IMPORTANT: / WARNING: / CAUTION:   admonitions
    .Block title                              caption for the next block
    <<<                                       page break
    '''                                       thematic break
"""

import re
from typing import Dict, List, Mapping, Optional, Tuple

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name, TextLexer
from pygments.util import ClassNotFound

from .lexer import get_lexer
from .log import LOG
from .theme import Theme


HEADING_RX = re.compile(r'^(=+)[ \t]+(.+?)[ \t]*$')
BLOCK_ATTRIBUTES_RX = re.compile(r'^\[([^\]]*)\]$')
BLOCK_TITLE_RX = re.compile(r'^\.([^\s.].*)$')
UNORDERED_ITEM_RX = re.compile(r'^[ \t]*(\*+|-)[ \t]+(.*)$')
ORDERED_ITEM_RX = re.compile(r'^[ \t]*(\.+)[ \t]+(.*)$')
ADMONITION_RX = re.compile(r'^(NOTE|TIP|IMPORTANT|WARNING|CAUTION):[ \t]+(.*)$')
ENTITY_SAFE_AMP_RX = re.compile(r'&(?!#\d+;|#x[0-9a-fA-F]+;|[a-zA-Z][a-zA-Z0-9]*;)')
MONOSPACE_RX = re.compile(r'`([^`]+)`')
STRONG_RX = re.compile(r'(?<![\w*])\*(\S(?:.*?\S)?)\*(?![\w*])')
EMPHASIS_RX = re.compile(r'(?<![\w_])_(\S(?:.*?\S)?)_(?![\w_])')
LINK_RX = re.compile(r'(https?://[^\s\[<]+)\[([^\]]*)\]')
DELIMITERS = {'----': 'listing', '....': 'literal', '++++': 'pass', '////': 'comment'}
HIGHLIGHT_ALIASES = {'docsplice', 'asciidoc-include'}


def html_escape(text: str) -> str:
    """Escape markup characters, keeping character references intact"""
    text = ENTITY_SAFE_AMP_RX.sub('&amp;', text)
    return text.replace('<', '&lt;').replace('>', '&gt;')


def id_make(title: str, taken: Dict[str, int]) -> str:
    """
    Section id in the '_lower_snake' style, de-duplicated with a counter

    Example:
        >>> id_make('Fault Tolerance', {})
        '_fault_tolerance'
    """
    base = '_' + re.sub(r'[^a-z0-9]+', '_', re.sub(r'<[^>]+>|&[^;]+;', '', title.lower())).strip('_')
    count = taken.get(base, 0) + 1
    taken[base] = count
    return base if count == 1 else f"{base}_{count}"


class HtmlPublisher:
    """
    Publishes rendered docsplice markup as a standalone HTML document

    Responsibilities:
    - Convert block structure to HTML
    - Highlight source listings
    - Apply inline formatting
    - Build the head from document attributes and theme
    """

    def __init__(
        self,
        text: str,
        attributes: Optional[Mapping[str, str]] = None,
        theme: Optional[Theme] = None,
    ) -> None:
        """
        Initialize publisher

        Args:
            text: Rendered markup
            attributes: Effective attributes of the render (author, revnumber, ...)
            theme: Theme to apply (built-in default when None)
        """
        self.text = text
        self.attributes = dict(attributes or {})
        self.theme = theme or Theme()
        self.doctitle: Optional[str] = None
        self.section_ids: Dict[str, int] = {}

    def publish(self) -> str:
        """
        Convert the rendered markup to a complete HTML document

        Returns:
            HTML text
        """
        self.doctitle = None
        self.section_ids = {}
        body = self.blocks_convert(self.text.splitlines())
        LOG(f"Converted {len(self.section_ids)} section heading(s) to HTML", level=2)
        return self.htmlDocument_build(body)

    def blocks_convert(self, lines: List[str]) -> str:
        """Convert markup lines to HTML block elements"""
        html_parts: List[str] = []
        paragraph: List[str] = []
        items: List[Tuple[str, str]] = []
        admonition: Optional[str] = None
        block_attributes: List[str] = []
        block_title: Optional[str] = None

        def flush() -> None:
            nonlocal admonition, block_title
            if paragraph:
                text = self.inline_format(' '.join(line.strip() for line in paragraph))
                if admonition:
                    html_parts.append(
                        f'<div class="admonition {admonition.lower()}">'
                        f'<span class="label">{admonition}</span>{text}</div>'
                    )
                else:
                    html_parts.append(f'<p>{text}</p>')
                paragraph.clear()
                admonition = None
            if items:
                tag = 'ol' if items[0][0] == 'ol' else 'ul'
                caption = self.caption_render(block_title)
                block_title = None
                rendered = ''.join(f'<li>{self.inline_format(text)}</li>' for _, text in items)
                html_parts.append(f'{caption}<{tag}>{rendered}</{tag}>')
                items.clear()

        i = 0
        while i < len(lines):
            line = lines[i]
            stripped = line.strip()

            if stripped in DELIMITERS:
                flush()
                end = i + 1
                while end < len(lines) and lines[end].strip() != stripped:
                    end += 1
                content = '\n'.join(lines[i + 1:end]) + '\n'
                kind = DELIMITERS[stripped]
                if kind == 'listing':
                    html_parts.append(self.listing_render(content, block_attributes, block_title))
                elif kind == 'literal':
                    caption = self.caption_render(block_title)
                    html_parts.append(f'<div class="literal">{caption}<pre>{html_escape(content)}</pre></div>')
                elif kind == 'pass':
                    html_parts.append(content)
                block_attributes = []
                block_title = None
                i = end + 1
                continue

            if stripped.startswith('//'):
                i += 1
                continue

            if not stripped:
                flush()
                i += 1
                continue

            if stripped == '<<<':
                flush()
                html_parts.append('<div class="page-break"></div>')
                i += 1
                continue

            if stripped == "'''":
                flush()
                html_parts.append('<hr>')
                i += 1
                continue

            match = BLOCK_ATTRIBUTES_RX.match(stripped)
            if match and not paragraph:
                flush()
                block_attributes = [a.strip() for a in match.group(1).split(',')]
                i += 1
                continue

            match = HEADING_RX.match(line)
            if match:
                flush()
                html_parts.append(self.heading_render(len(match.group(1)), match.group(2)))
                block_attributes = []
                i += 1
                continue

            match = BLOCK_TITLE_RX.match(stripped)
            if match and not paragraph and not items:
                block_title = match.group(1)
                i += 1
                continue

            match = UNORDERED_ITEM_RX.match(line) or ORDERED_ITEM_RX.match(line)
            if match:
                if paragraph:
                    flush()
                kind = 'ol' if match.group(1).startswith('.') else 'ul'
                if items and items[0][0] != kind:
                    flush()
                items.append((kind, match.group(2)))
                i += 1
                continue

            if items:
                kind, text = items[-1]
                items[-1] = (kind, f"{text} {stripped}")
                i += 1
                continue

            match = ADMONITION_RX.match(stripped)
            if match and not paragraph:
                admonition = match.group(1)
                paragraph.append(match.group(2))
                i += 1
                continue

            paragraph.append(line)
            i += 1

        flush()
        return '\n'.join(html_parts)

    def heading_render(self, level: int, title: str) -> str:
        """Render a section title; the first level-0 title becomes the document title"""
        text = self.inline_format(title)
        if level == 1 and self.doctitle is None:
            self.doctitle = title
        section_id = id_make(text, self.section_ids)
        tag = f"h{min(level, 6)}"
        return f'<{tag} id="{section_id}">{text}</{tag}>'

    def caption_render(self, title: Optional[str]) -> str:
        if not title:
            return ''
        return f'<div class="title">{self.inline_format(title)}</div>'

    def listing_render(self, code: str, block_attributes: List[str], title: Optional[str]) -> str:
        """
        Render a ---- listing, highlighted when preceded by [source,lang]

        Args:
            code: Raw listing content
            block_attributes: Positional attributes of the preceding [..] line
            title: Optional block title

        Returns:
            Highlighted (or escaped) listing HTML
        """
        language = ''
        if block_attributes and block_attributes[0] == 'source' and len(block_attributes) > 1:
            language = block_attributes[1].strip()

        lexer: Lexer
        try:
            if language.lower() in HIGHLIGHT_ALIASES:
                lexer = get_lexer()
            elif language:
                lexer = get_lexer_by_name(language)
            else:
                lexer = TextLexer()
        except ClassNotFound:
            LOG(f"No lexer for '{language}', rendering as plain text", level=2)
            lexer = TextLexer()

        formatter = HtmlFormatter(style=self.theme.pygmentsStyle_get(), noclasses=True)
        highlighted = highlight(code, lexer, formatter)
        caption = self.caption_render(title)
        return f'<div class="listing">{caption}{highlighted}</div>'

    def inline_format(self, text: str) -> str:
        """
        Apply inline formatting to one line of text

        Monospace spans and links are swapped for placeholders first so their content
        is not formatted, then restored.

        Example:
            >>> HtmlPublisher('').inline_format('Use *@Inject* with `a*b*c`')
            'Use <strong>@Inject</strong> with <code>a*b*c</code>'
        """
        from ..config import appsettings

        protected: List[str] = []

        def protect(html: str) -> str:
            protected.append(html)
            return appsettings.placeHolder_make(len(protected) - 1)

        def restore(match: re.Match[str]) -> str:
            index = appsettings.spanIndex_extract(match.group(0))
            if index is None or index >= len(protected):
                return match.group(0)
            return protected[index]

        result = MONOSPACE_RX.sub(lambda m: protect(f"<code>{m.group(1)}</code>"), html_escape(text))
        result = LINK_RX.sub(
            lambda m: protect(f'<a href="{m.group(1)}">{m.group(2) or m.group(1)}</a>'), result
        )
        result = STRONG_RX.sub(r'<strong>\1</strong>', result)
        result = EMPHASIS_RX.sub(r'<em>\1</em>', result)

        placeholder_rx = re.escape(appsettings.placeholder_prefix) + r'\d+' + re.escape(appsettings.placeholder_suffix)
        return re.sub(placeholder_rx, restore, result)

    def htmlDocument_build(self, body: str) -> str:
        """
        Build complete HTML document with head metadata and details header

        Args:
            body: Converted body HTML

        Returns:
            Complete HTML document
        """
        from . import __version__

        title = self.attributes.get('doctitle') or self.doctitle or self.attributes.get('docname', 'Document')
        author = self.attributes.get('author')
        revision = self.attributes.get('revnumber') or self.attributes.get('version')

        meta = [
            '<meta charset="utf-8">',
            f'<meta name="generator" content="docsplice {__version__}">',
        ]
        if author:
            meta.append(f'<meta name="author" content="{html_escape(author)}">')
        if revision:
            meta.append(f'<meta name="revision" content="{html_escape(revision)}">')
        if self.attributes.get('description'):
            meta.append(f'<meta name="description" content="{html_escape(self.attributes["description"])}">')

        details = []
        if author:
            details.append(f'<span class="author">{html_escape(author)}</span>')
        if revision:
            details.append(f'<span class="revnumber">version {html_escape(revision)}</span>')
        details_html = f'<div class="details">{" ".join(details)}</div>\n' if details else ''

        head = '\n'.join(meta)
        return f"""<!DOCTYPE html>
<html>
<head>
{head}
<title>{html_escape(title)}</title>
<style>
{self.theme.css_get()}</style>
</head>
<body>
{details_html}<main>
{body}
</main>
</body>
</html>
"""
