"""
Attribute tests

Tests command line assignments, YAML attribute files, reference
substitution and the precedence of invocation and document values.
"""

import pytest

from docsplice.lib.attributes import (
    AttributeFileError,
    AttributeSet,
    attributes_loadFile,
    attributes_parseAssignments,
    attributes_substitute,
)
from docsplice.lib.parser import Parser
from docsplice.models.document import AttributeEntry


def entries(source):
    return [node for node in Parser(source).parse().nodes if isinstance(node, AttributeEntry)]


def apply(attribute_set, source=""):
    """Effective attributes after applying the entries of source in order"""
    effective = attribute_set.initial_get()
    for entry in entries(source):
        attribute_set.entry_apply(effective, entry)
    return effective


class TestAssignments:
    """Test -a name=value parsing"""

    def test_forms(self):
        assert attributes_parseAssignments(["version=3.2", "draft!", "toc"]) == {
            "version": "3.2",
            "draft": None,
            "toc": "",
        }

    def test_value_may_contain_equals(self):
        assert attributes_parseAssignments(["url=a=b"]) == {"url": "a=b"}

    def test_soft_marker_kept(self):
        assert attributes_parseAssignments(["version=3.2@"]) == {"version": "3.2@"}

    def test_none(self):
        assert attributes_parseAssignments(None) == {}


class TestAttributesFile:
    """Test loading attributes from YAML"""

    def test_scalars(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text("version: '3.2'\nrelease: 7\ndraft: false\ntoc: true\nauthor: null\n")

        assert attributes_loadFile(path) == {
            "version": "3.2",
            "release": "7",
            "draft": None,
            "toc": "",
            "author": None,
        }

    def test_empty_file(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text("")
        assert attributes_loadFile(path) == {}

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text("- a\n- b\n")

        with pytest.raises(AttributeFileError, match="mapping"):
            attributes_loadFile(path)

    def test_nested_value(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text("versions:\n  quarkus: 3.2\n")

        with pytest.raises(AttributeFileError, match="scalar"):
            attributes_loadFile(path)

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_text("a: [unclosed\n")

        with pytest.raises(AttributeFileError):
            attributes_loadFile(path)

    def test_not_utf8(self, tmp_path):
        path = tmp_path / "attrs.yaml"
        path.write_bytes(b"author: caf\xe9\n")

        with pytest.raises(AttributeFileError, match="not valid UTF-8"):
            attributes_loadFile(path)


class TestSubstitution:
    """Test {name} reference replacement"""

    def test_simple(self):
        assert attributes_substitute("Quarkus {version}", {"version": "3.2"}) == "Quarkus 3.2"

    def test_case_insensitive_name(self):
        assert attributes_substitute("{Version}", {"version": "3.2"}) == "3.2"

    def test_missing_left_verbatim_by_default(self):
        assert attributes_substitute("{nope}", {}) == "{nope}"

    def test_missing_callback(self):
        assert attributes_substitute("a{nope}b", {}, missing=lambda name: f"<{name}>") == "a<nope>b"

    def test_escaped_reference(self):
        assert attributes_substitute("\\{version}", {"version": "3.2"}) == "{version}"

    def test_single_pass(self):
        """Substituted values are not scanned again"""
        assert attributes_substitute("{a}", {"a": "{b}", "b": "x"}) == "{b}"

    def test_not_a_reference(self):
        assert attributes_substitute("{ not a ref }", {}) == "{ not a ref }"


class TestPrecedence:
    """Test AttributeSet.initial_get and entry_apply"""

    def test_builtins(self):
        effective = apply(AttributeSet())
        assert effective["amp"] == "&"
        assert effective["empty"] == ""

    def test_document_entries(self):
        effective = apply(AttributeSet(), ":version: 3.2\n:name: Quarkus {version}\n")
        assert effective["name"] == "Quarkus 3.2"

    def test_locked_invocation_beats_document(self):
        effective = apply(AttributeSet(invocation={"version": "9"}), ":version: 3.2\n")
        assert effective["version"] == "9"

    def test_soft_invocation_loses_to_document(self):
        effective = apply(AttributeSet(invocation={"version": "9@"}), ":version: 3.2\n")
        assert effective["version"] == "3.2"

    def test_soft_invocation_used_when_not_set(self):
        effective = apply(AttributeSet(invocation={"version": "9@"}))
        assert effective["version"] == "9"

    def test_locked_unset(self):
        effective = apply(AttributeSet(invocation={"draft": None}), ":draft: yes\n")
        assert "draft" not in effective

    def test_document_unset(self):
        effective = apply(AttributeSet(), ":draft: yes\n:draft!:\n")
        assert "draft" not in effective

    def test_document_cannot_unset_locked(self):
        effective = apply(AttributeSet(invocation={"version": "9"}), ":version!:\n")
        assert effective["version"] == "9"

    def test_entries_see_invocation_values(self):
        effective = apply(AttributeSet(invocation={"base": "3"}), ":full: {base}.2\n")
        assert effective["full"] == "3.2"

    def test_later_entry_wins(self):
        effective = apply(AttributeSet(), ":v: 1\n:v: 2\n")
        assert effective["v"] == "2"

    def test_entry_sees_only_earlier_values(self):
        effective = apply(AttributeSet(), ":full: {base}.2\n:base: 3\n")
        assert effective["full"] == "{base}.2"

    def test_initial_get_returns_fresh_mapping(self):
        attributes = AttributeSet()
        effective = attributes.initial_get()
        attributes.entry_apply(effective, entries(":v: 1\n")[0])

        assert "v" not in attributes.initial_get()
