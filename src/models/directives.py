"""
Directive specification and metadata models

Defines the structure and categories of docsplice directives for
parsing, validation and registry management.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, List, Optional


class DirectiveCategory(Enum):
    """
    Categories of docsplice directives

    Used for organization and validation.
    """
    INCLUSION = "inclusion"      # include::path[]
    CONDITIONAL = "conditional"  # ifdef::a[], ifndef::a[], endif::[]
    TAG = "tag"                  # tag::name[], end::name[]


@dataclass
class DirectiveSpec:
    """
    Specification for a docsplice directive

    Defines metadata, validation rules, and render handler for a directive.
    Used by DirectiveRegistry to manage available directives.

    Attributes:
        name: Directive name (without trailing '::')
        category: Category for organization
        description: Human-readable description
        handler: Render function (directive, renderer, scope) -> str
        requires_target: Whether the directive is malformed without a target
        allows_content: Whether text inside the brackets is permitted
        inline: Whether the directive may appear mid-line (tag markers);
                all others must occupy a whole line
        examples: Example usage strings
        aliases: Alternative names for the directive
    """
    name: str
    category: DirectiveCategory
    description: str
    handler: Callable
    requires_target: bool = True
    allows_content: bool = True
    inline: bool = False
    examples: List[str] = field(default_factory=list)
    aliases: List[str] = field(default_factory=list)

    def validate(self, target: str, attrlist: str) -> Optional[str]:
        """
        Check a parsed directive against this spec.

        Returns:
            Error message describing the problem, or None if valid
        """
        if self.requires_target and not target.strip():
            return f"'{self.name}::' requires a target"
        if not self.allows_content and attrlist.strip():
            return f"'{self.name}::' does not accept content between brackets"
        return None

