"""
Directive implementations for docsplice

Each directive spec carries the metadata the parser validates against and
the handler the renderer dispatches to. Handlers have the signature
(directive, renderer, scope) -> str and return the text emitted in place
of the directive.
"""

from typing import Any, Callable, Dict, Mapping, Optional

from ..models.directives import DirectiveSpec, DirectiveCategory
from ..models.document import Directive


def condition_evaluate(directive: Directive, attributes: Mapping[str, str]) -> bool:
    """
    Evaluate an ifdef/ifndef condition against the effective attributes.

    'a,b' is true when any attribute is set, 'a+b' when all are set; ifndef
    negates the result.

    Example:
        >>> d = Directive('ifdef', 'pdf,html', '', 1, '')
        >>> condition_evaluate(d, {'html': ''})
        True
    """
    target = directive.target.strip().lower()
    if ',' in target:
        names = [n.strip() for n in target.split(',') if n.strip()]
        defined = any(n in attributes for n in names)
    elif '+' in target:
        names = [n.strip() for n in target.split('+') if n.strip()]
        defined = all(n in attributes for n in names)
    else:
        defined = target in attributes
    return defined if directive.name == 'ifdef' else not defined


class DirectiveRegistry:
    """
    Registry of directive specifications and handlers

    Maps directive names to DirectiveSpec objects containing metadata
    and render handlers.
    """

    def __init__(self) -> None:
        """Initialize the directive registry and register all built-in directives"""
        self.specs: Dict[str, DirectiveSpec] = {}
        self.inclusionDirectives_register()
        self.conditionalDirectives_register()
        self.tagDirectives_register()

    def register(self, spec: DirectiveSpec) -> None:
        """Register a directive specification"""
        self.specs[spec.name] = spec
        for alias in spec.aliases:
            self.specs[alias] = spec

    def get(self, name: str) -> Optional[Callable[[Any, Any, Any], str]]:
        """
        Get directive handler by name

        Returns:
            Handler function or None if not found
        """
        spec = self.spec_get(name)
        return spec.handler if spec is not None else None

    def spec_get(self, name: str) -> Optional[DirectiveSpec]:
        """Get full directive specification by name"""
        return self.specs.get(name)

    def directives_listByCategory(self, category: DirectiveCategory) -> list[DirectiveSpec]:
        """Get all directives in a category"""
        return [spec for spec in self.specs.values() if spec.category == category]

    def inclusionDirectives_register(self) -> None:
        """Register include::"""

        def include_handler(directive: Directive, renderer: Any, scope: Any) -> str:
            """Handle include:: - splice the rendered target in place"""
            return renderer.include_render(directive, scope)

        self.register(DirectiveSpec(
            name='include',
            category=DirectiveCategory.INCLUSION,
            description='Splice another document in place of this line',
            handler=include_handler,
            examples=[
                'include::core/cdi.adoc[]',
                'include::{snippets}/kafka.adoc[tags=update_3, leveloffset=+1]',
                'include::extras.adoc[opts=optional]',
            ],
        ))

    def conditionalDirectives_register(self) -> None:
        """Register ifdef::, ifndef:: and endif::"""

        def condition_handler(directive: Directive, renderer: Any, scope: Any) -> str:
            """Handle ifdef::/ifndef:: - open a block, or emit single-line content"""
            return renderer.conditional_open(directive, scope)

        def endif_handler(directive: Directive, renderer: Any, scope: Any) -> str:
            """Handle endif:: - close the innermost conditional block"""
            return renderer.conditional_close(directive, scope)

        self.register(DirectiveSpec(
            name='ifdef',
            category=DirectiveCategory.CONDITIONAL,
            description='Keep the enclosed lines only when the attribute(s) are set',
            handler=condition_handler,
            examples=['ifdef::backend-pdf[]', 'ifdef::author+email[]', 'ifdef::draft[DRAFT]'],
        ))

        self.register(DirectiveSpec(
            name='ifndef',
            category=DirectiveCategory.CONDITIONAL,
            description='Keep the enclosed lines only when the attribute(s) are not set',
            handler=condition_handler,
            examples=['ifndef::release[]'],
        ))

        self.register(DirectiveSpec(
            name='endif',
            category=DirectiveCategory.CONDITIONAL,
            description='Close the innermost ifdef/ifndef block',
            handler=endif_handler,
            requires_target=False,
            allows_content=False,
            examples=['endif::[]', 'endif::backend-pdf[]'],
        ))

    def tagDirectives_register(self) -> None:
        """Register tag:: and end:: region markers"""

        def marker_handler(directive: Directive, renderer: Any, scope: Any) -> str:
            """Tag markers never emit text"""
            return ''

        self.register(DirectiveSpec(
            name='tag',
            category=DirectiveCategory.TAG,
            description='Open a named region',
            handler=marker_handler,
            allows_content=False,
            inline=True,
            examples=['// tag::update_1[]'],
        ))

        self.register(DirectiveSpec(
            name='end',
            category=DirectiveCategory.TAG,
            description='Close a named region',
            handler=marker_handler,
            allows_content=False,
            inline=True,
            examples=['// end::update_1[]'],
        ))
