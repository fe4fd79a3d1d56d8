"""
Document loader tests

Tests include resolution, inclusion order, shared includes, and the
failures a broken include graph produces.
"""

import pytest

from docsplice.lib.loader import DocumentLoader
from docsplice.lib.errors import (
    CircularIncludeError,
    DocspliceError,
    IncludeDepthError,
    IncludeNotFoundError,
    SourceDecodeError,
)


def tree_write(root, files):
    """Write {relative path: text} under root and return the resolved root"""
    for name, text in files.items():
        path = root / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return root.resolve()


class TestInclusionOrder:
    """Test which documents are loaded and in what order"""

    def test_single_document(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "= Root\n"})
        documents = DocumentLoader().load(base / "root.adoc")

        assert len(documents) == 1
        assert documents.root == base / "root.adoc"
        assert documents.root_document.source_text() == "= Root\n"

    def test_depth_first_order(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::a.adoc[]\ninclude::b.adoc[]\n",
            "a.adoc": "include::c.adoc[]\nA\n",
            "b.adoc": "B\n",
            "c.adoc": "C\n",
        })
        documents = DocumentLoader().load(base / "root.adoc")

        assert [p.name for p in documents.order] == ["root.adoc", "a.adoc", "c.adoc", "b.adoc"]
        assert [d.name for d in documents] == ["root.adoc", "a.adoc", "c.adoc", "b.adoc"]

    def test_relative_to_including_document(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::core/cdi.adoc[]\n",
            "core/cdi.adoc": "include::../shared.adoc[]\ninclude::inject.adoc[]\n",
            "core/inject.adoc": "@Inject\n",
            "shared.adoc": "shared\n",
        })
        documents = DocumentLoader().load(base / "root.adoc")

        assert base / "shared.adoc" in documents.documents
        assert base / "core" / "inject.adoc" in documents.documents

    def test_resolved_path_recorded(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "include::a.adoc[]\n", "a.adoc": "A\n"})
        documents = DocumentLoader().load(base / "root.adoc")

        directive = documents.root_document.nodes[0]
        assert directive.resolved == base / "a.adoc"

    def test_shared_include_loaded_once(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::a.adoc[]\ninclude::b.adoc[]\n",
            "a.adoc": "include::shared.adoc[]\n",
            "b.adoc": "include::shared.adoc[]\n",
            "shared.adoc": "S\n",
        })
        documents = DocumentLoader().load(base / "root.adoc")

        assert len(documents) == 4
        assert [p.name for p in documents.order].count("shared.adoc") == 1

    def test_same_file_included_twice(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::a.adoc[tag=x]\ninclude::a.adoc[tag=y]\n",
            "a.adoc": "A\n",
        })
        documents = DocumentLoader().load(base / "root.adoc")
        assert len(documents) == 2

    def test_documents_mapping_read_only(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "x\n"})
        documents = DocumentLoader().load(base / "root.adoc")

        with pytest.raises(TypeError):
            documents.documents[base / "other.adoc"] = documents.root_document


class TestTargetAttributes:
    """Test {attribute} references in include targets"""

    def test_document_attribute(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": ":part: chapters\ninclude::{part}/a.adoc[]\n",
            "chapters/a.adoc": "A\n",
        })
        documents = DocumentLoader().load(base / "root.adoc")
        assert base / "chapters" / "a.adoc" in documents.documents

    def test_invocation_attribute(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::{snippets}/a.adoc[]\n",
            "snips/a.adoc": "A\n",
        })
        documents = DocumentLoader(attributes={"snippets": "snips"}).load(base / "root.adoc")
        assert base / "snips" / "a.adoc" in documents.documents

    def test_locked_invocation_attribute_wins(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": ":snippets: wrong\ninclude::{snippets}/a.adoc[]\n",
            "snips/a.adoc": "A\n",
        })
        documents = DocumentLoader(attributes={"snippets": "snips"}).load(base / "root.adoc")
        assert base / "snips" / "a.adoc" in documents.documents

    def test_soft_invocation_attribute_overridden(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": ":snippets: snips\ninclude::{snippets}/a.adoc[]\n",
            "snips/a.adoc": "A\n",
        })
        documents = DocumentLoader(attributes={"snippets": "wrong@"}).load(base / "root.adoc")
        assert base / "snips" / "a.adoc" in documents.documents


class TestFailures:
    """Test missing targets, cycles and depth limits"""

    def test_missing_root(self, tmp_path):
        with pytest.raises(IncludeNotFoundError):
            DocumentLoader().load(tmp_path / "nope.adoc")

    def test_missing_target(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "= Root\ninclude::missing.adoc[]\n"})

        with pytest.raises(IncludeNotFoundError) as exc:
            DocumentLoader().load(base / "root.adoc")

        assert exc.value.path == base / "root.adoc"
        assert exc.value.line_number == 2
        assert exc.value.target == base / "missing.adoc"
        assert "root.adoc:2:" in str(exc.value)

    def test_optional_missing_target_skipped(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "include::missing.adoc[opts=optional]\nX\n"})
        documents = DocumentLoader().load(base / "root.adoc")

        assert len(documents) == 1
        assert documents.root_document.nodes[0].resolved is None

    def test_undecodable_target(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "= Root\ninclude::bad.adoc[]\n"})
        (base / "bad.adoc").write_bytes(b"caf\xe9\n")

        with pytest.raises(SourceDecodeError) as exc:
            DocumentLoader(encoding="utf-8").load(base / "root.adoc")

        assert exc.value.path == base / "bad.adoc"
        assert exc.value.including == base / "root.adoc"
        assert "cannot decode as utf-8" in str(exc.value)
        assert f"included from {base / 'root.adoc'}:2" in str(exc.value)

    def test_undecodable_root(self, tmp_path):
        (tmp_path / "root.adoc").write_bytes(b"\xff\xfe= Root\n")

        with pytest.raises(DocspliceError, match="cannot decode"):
            DocumentLoader(encoding="utf-8").load(tmp_path / "root.adoc")

    def test_configured_encoding_used(self, tmp_path):
        (tmp_path / "root.adoc").write_bytes(b"caf\xe9\n")
        documents = DocumentLoader(encoding="latin-1").load(tmp_path / "root.adoc")

        assert documents.root_document.source_text() == "café\n"

    def test_self_include(self, tmp_path):
        base = tree_write(tmp_path, {"root.adoc": "include::root.adoc[]\n"})

        with pytest.raises(CircularIncludeError) as exc:
            DocumentLoader().load(base / "root.adoc")

        assert exc.value.chain == [base / "root.adoc", base / "root.adoc"]

    def test_indirect_cycle(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "include::a.adoc[]\n",
            "a.adoc": "include::b.adoc[]\n",
            "b.adoc": "text\ninclude::a.adoc[]\n",
        })

        with pytest.raises(CircularIncludeError) as exc:
            DocumentLoader().load(base / "root.adoc")

        assert [p.name for p in exc.value.chain] == ["root.adoc", "a.adoc", "b.adoc", "a.adoc"]
        assert exc.value.path == base / "b.adoc"
        assert exc.value.line_number == 2
        assert " -> " in str(exc.value)

    def test_cycle_is_docsplice_error(self, tmp_path):
        base = tree_write(tmp_path, {"a.adoc": "include::b.adoc[]\n", "b.adoc": "include::a.adoc[]\n"})

        with pytest.raises(DocspliceError):
            DocumentLoader().load(base / "a.adoc")

    def test_depth_limit(self, tmp_path):
        base = tree_write(tmp_path, {
            "d0.adoc": "include::d1.adoc[]\n",
            "d1.adoc": "include::d2.adoc[]\n",
            "d2.adoc": "include::d3.adoc[]\n",
            "d3.adoc": "deep\n",
        })

        with pytest.raises(IncludeDepthError):
            DocumentLoader(depth_max=2).load(base / "d0.adoc")

        assert len(DocumentLoader(depth_max=3).load(base / "d0.adoc")) == 4

    def test_include_inside_false_conditional_still_loaded(self, tmp_path):
        base = tree_write(tmp_path, {
            "root.adoc": "ifdef::never[]\ninclude::missing.adoc[]\nendif::[]\n",
        })

        with pytest.raises(IncludeNotFoundError):
            DocumentLoader().load(base / "root.adoc")
