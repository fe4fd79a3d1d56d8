"""
Directive registry tests

Tests directive registration, spec validation, condition evaluation and
the syntax highlighting lexer for docsplice markup.
"""

from pygments.token import Comment, Name

from docsplice.lib.directives import DirectiveRegistry, condition_evaluate
from docsplice.lib.lexer import get_lexer
from docsplice.models import Directive, DirectiveCategory, DirectiveSpec


class TestRegistry:
    """Test built-in directives"""

    def test_builtins_registered(self):
        registry = DirectiveRegistry()
        assert set(registry.specs) == {"include", "ifdef", "ifndef", "endif", "tag", "end"}

    def test_get_handler(self):
        registry = DirectiveRegistry()

        assert callable(registry.get("include"))
        assert registry.get("image") is None
        assert registry.spec_get("image") is None

    def test_categories(self):
        registry = DirectiveRegistry()

        conditional = {s.name for s in registry.directives_listByCategory(DirectiveCategory.CONDITIONAL)}
        tags = {s.name for s in registry.directives_listByCategory(DirectiveCategory.TAG)}

        assert conditional == {"ifdef", "ifndef", "endif"}
        assert tags == {"tag", "end"}

    def test_only_markers_inline(self):
        registry = DirectiveRegistry()
        assert {name for name, spec in registry.specs.items() if spec.inline} == {"tag", "end"}

    def test_alias(self):
        registry = DirectiveRegistry()
        registry.register(DirectiveSpec(
            name="ifset",
            category=DirectiveCategory.CONDITIONAL,
            description="Alias test",
            handler=lambda directive, renderer, scope: "",
            aliases=["ifattr"],
        ))

        assert registry.spec_get("ifattr") is registry.spec_get("ifset")


class TestValidation:
    """Test DirectiveSpec.validate"""

    def test_valid(self):
        spec = DirectiveRegistry().spec_get("include")
        assert spec.validate("a.adoc", "leveloffset=+1") is None

    def test_missing_target(self):
        spec = DirectiveRegistry().spec_get("include")
        assert "requires a target" in spec.validate("  ", "")

    def test_endif_needs_no_target(self):
        spec = DirectiveRegistry().spec_get("endif")
        assert spec.validate("", "") is None


class TestConditions:
    """Test ifdef/ifndef evaluation"""

    def test_ifdef(self):
        directive = Directive("ifdef", "pdf", "", 1, "")

        assert condition_evaluate(directive, {"pdf": ""})
        assert not condition_evaluate(directive, {})

    def test_ifndef(self):
        directive = Directive("ifndef", "pdf", "", 1, "")
        assert condition_evaluate(directive, {})

    def test_any(self):
        directive = Directive("ifdef", "pdf,html", "", 1, "")

        assert condition_evaluate(directive, {"html": ""})
        assert not condition_evaluate(directive, {"epub": ""})

    def test_all(self):
        directive = Directive("ifdef", "author+email", "", 1, "")

        assert condition_evaluate(directive, {"author": "a", "email": "e"})
        assert not condition_evaluate(directive, {"author": "a"})

    def test_ifndef_any(self):
        directive = Directive("ifndef", "pdf,html", "", 1, "")
        assert not condition_evaluate(directive, {"pdf": ""})


class TestLexer:
    """Test DocspliceLexer tokens"""

    def tokens(self, text):
        return list(get_lexer().get_tokens(text))

    def test_include(self):
        assert (Comment.Preproc, "include::") in self.tokens("include::core.adoc[leveloffset=+1]\n")

    def test_tag_marker_line(self):
        tokens = self.tokens("// tag::update_1[]\n")

        assert (Name.Tag, "tag::") in tokens
        assert (Name.Label, "update_1") in tokens

    def test_attribute_entry_and_reference(self):
        tokens = self.tokens(":version: 3.2\nQuarkus {version}\n")

        assert (Name.Variable, ":version:") in tokens
        assert (Name.Variable, "{version}") in tokens
