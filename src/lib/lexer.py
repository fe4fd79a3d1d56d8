"""
Custom Pygments lexer for docsplice syntax highlighting

Provides syntax highlighting for docsplice markup when a document shows
docsplice source in a [source,docsplice] listing.

Token types:
- Comment.Preproc: include::, ifdef::, ifndef::, endif:: directives
- Name.Tag: tag::/end:: region markers
- Name.Variable: attribute entries (:name: value) and {name} references
- Generic.Heading: section titles (= Title, == Section)
- Comment.Single: // line comments
- Punctuation: block delimiters (----, ....)
"""

from pygments.lexer import RegexLexer, bygroups
from pygments.token import (
    Text,
    Punctuation,
    Name,
    String,
    Comment,
    Generic,
    Keyword,
)


class DocspliceLexer(RegexLexer):
    """
    Lexer for docsplice markup

    Example:
        :version: 3.2
        include::core.adoc[leveloffset=+1]
        // tag::update_1[]
        Quarkus {version}
        // end::update_1[]

    Tokens:
        :version:  → Name.Variable
        include::  → Comment.Preproc
        [leveloffset=+1] → Name.Attribute
        tag::update_1[]  → Name.Tag
        {version}  → Name.Variable
    """

    name = 'Docsplice'
    aliases = ['docsplice', 'asciidoc-include']
    filenames = ['*.adoc', '*.asciidoc']

    tokens = {
        'root': [
            # Tag region markers, optionally behind a comment leader
            (r'^(\s*(?://|#)?\s*)((?:tag|end)::)([\w.-]+)(\[\])(\s*\n)',
             bygroups(Comment.Single, Name.Tag, Name.Label, Punctuation, Text)),

            # Line comments
            (r'^//.*?\n', Comment.Single),

            # Preprocessor directives
            (r'^(\\?(?:include|ifdef|ifndef|endif)::)([^\[\n]*)(\[)([^\n]*)(\])(\s*\n)',
             bygroups(Comment.Preproc, String, Punctuation, Name.Attribute, Punctuation, Text)),

            # Attribute entries
            (r'^(:!?[\w-]+!?:)([^\n]*\n)', bygroups(Name.Variable, String)),

            # Section titles
            (r'^=+[ \t]+[^\n]*\n', Generic.Heading),

            # Block delimiters
            (r'^(?:-{4,}|\.{4,}|/{4,}|\+{4,}|={4,})[ \t]*\n', Punctuation),

            # Block attribute lines ([source,java])
            (r'^\[[^\]\n]*\][ \t]*\n', Keyword.Declaration),

            # Inline tag markers
            (r'(?:tag|end)::[\w.-]+\[\]', Name.Tag),

            # Attribute references
            (r'\\?\{[\w-]+\}', Name.Variable),

            # Everything else is text
            (r'[^{\n:te\\]+', Text),
            (r'\n', Text),
            (r'.', Text),
        ],
    }


def get_lexer() -> DocspliceLexer:
    """
    Get the DocspliceLexer instance

    Returns:
        DocspliceLexer instance ready for use with Pygments
    """
    return DocspliceLexer()
