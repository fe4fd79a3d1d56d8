"""
Exception hierarchy for docsplice

Every failure is a load-time or render-time error about a specific
document; each exception carries the offending path and, where known,
the source line.
"""

from pathlib import Path
from typing import Optional, Sequence


class DocspliceError(Exception):
    """Base class for all document assembly errors"""

    def __init__(self, message: str, path: Optional[Path] = None, line_number: Optional[int] = None):
        self.message = message
        self.path = path
        self.line_number = line_number
        super().__init__(self.location_format())

    def location_format(self) -> str:
        if self.path is None:
            return self.message
        if self.line_number is None:
            return f"{self.path}: {self.message}"
        return f"{self.path}:{self.line_number}: {self.message}"


class DocumentSyntaxError(DocspliceError):
    """Malformed directive, or an unbalanced ifdef/ifndef/endif block"""


class IncludeNotFoundError(DocspliceError):
    """Raised when an include target does not exist"""

    def __init__(self, target: Path, path: Optional[Path] = None, line_number: Optional[int] = None):
        self.target = target
        super().__init__(f"include target not found: {target}", path, line_number)


class CircularIncludeError(DocspliceError):
    """Raised when a document (transitively) includes itself"""

    def __init__(self, chain: Sequence[Path], line_number: Optional[int] = None):
        self.chain = list(chain)
        trail = " -> ".join(str(p) for p in self.chain)
        super().__init__(f"circular include: {trail}", self.chain[-2], line_number)


class IncludeDepthError(DocspliceError):
    """Raised when include nesting exceeds the configured maximum"""


class TagMismatchError(DocspliceError):
    """Raised for an end:: boundary with no matching open tag"""

    def __init__(self, tag: str, path: Optional[Path] = None, line_number: Optional[int] = None,
                 expected: Optional[str] = None):
        self.tag = tag
        self.expected = expected
        if expected is None:
            message = f"unmatched end tag 'end::{tag}[]' (no open tag)"
        else:
            message = f"mismatched end tag 'end::{tag}[]', expected 'end::{expected}[]'"
        super().__init__(message, path, line_number)


class UnclosedTagError(DocspliceError):
    """Raised when a tag:: region is still open at end of document"""

    def __init__(self, tag: str, path: Optional[Path] = None, line_number: Optional[int] = None):
        self.tag = tag
        super().__init__(f"unclosed tag 'tag::{tag}[]'", path, line_number)


class MissingAttributeError(DocspliceError):
    """Raised for an unresolved {name} reference under the 'error' policy"""

    def __init__(self, name: str, path: Optional[Path] = None, line_number: Optional[int] = None):
        self.name = name
        super().__init__(f"missing attribute reference '{{{name}}}'", path, line_number)


class TagNotFoundError(DocspliceError):
    """Raised in strict mode when an include selects tags the target never defines"""

    def __init__(self, tags: Sequence[str], path: Optional[Path] = None, line_number: Optional[int] = None):
        self.tags = sorted(tags)
        names = ", ".join(self.tags)
        super().__init__(f"tag(s) not found in include target: {names}", path, line_number)


class SourceDecodeError(DocspliceError):
    """Raised when a source document is not valid in the configured encoding"""

    def __init__(self, path: Path, encoding: str, reason: str, including: Optional[Path] = None,
                 line_number: Optional[int] = None):
        self.encoding = encoding
        self.including = including
        message = f"cannot decode as {encoding}: {reason}"
        if including is not None:
            message += f" (included from {including}:{line_number})"
        super().__init__(message, path)
