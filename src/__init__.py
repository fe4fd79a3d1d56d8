"""
docsplice - include-aware document assembler

Assembles a reference document split across topic files into a single
text or print-ready HTML document.
"""

__version__ = "1.0.0"
__author__ = "docsplice developers"

from .lib import (
    Parser,
    DocumentLoader,
    TagExtractor,
    Renderer,
    HtmlPublisher,
    DirectiveRegistry,
    LOG,
    state_connectToLogger,
)

__all__ = [
    "Parser",
    "DocumentLoader",
    "TagExtractor",
    "Renderer",
    "HtmlPublisher",
    "DirectiveRegistry",
    "LOG",
    "state_connectToLogger",
    "__version__",
]
