"""
docsplice - include-aware document assembler

Resolves include:: directives, filters tag:: regions and substitutes
{attribute} references to publish a multi-file document as one.
"""

__version__ = "1.0.0"
__author__ = "docsplice developers"

from .parser import Parser
from .loader import DocumentLoader
from .tags import TagExtractor
from .renderer import Renderer
from .publisher import HtmlPublisher
from .directives import DirectiveRegistry
from .log import LOG, WARN, state_connectToLogger

__all__ = [
    "Parser",
    "DocumentLoader",
    "TagExtractor",
    "Renderer",
    "HtmlPublisher",
    "DirectiveRegistry",
    "LOG",
    "WARN",
    "state_connectToLogger",
    "__version__",
]
