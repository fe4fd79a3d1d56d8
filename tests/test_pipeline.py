"""
End-to-end pipeline tests

Tests the full pipeline: ProgramState → env_check → document_load →
document_render → output_write, for both backends.
"""

from argparse import Namespace

import pytest

from docsplice.__main__ import (
    document_load,
    document_render,
    env_check,
    output_write,
    results_report,
)
from docsplice.models import ProgramState, pipeline


CHEAT_SHEET = {
    "cheat-sheet.adoc": (
        "= Quarkus Cheat Sheet\n"
        ":author: Quarkus Team\n"
        "\n"
        "Version {version}\n"
        "\n"
        "include::core/cdi.adoc[leveloffset=+1]\n"
    ),
    "core/cdi.adoc": (
        "= CDI\n"
        "\n"
        "Use *@Inject* to inject beans.\n"
        "// tag::update_1[]\n"
        "\n"
        "Kafka 2.5 support.\n"
        "// end::update_1[]\n"
    ),
}


def sources_write(inputdir, files):
    for name, text in files.items():
        path = inputdir / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


def state_make(tmp_path, **options):
    inputdir = tmp_path / "in"
    inputdir.mkdir(exist_ok=True)
    sources_write(inputdir, CHEAT_SHEET)
    defaults = {"inputFile": "cheat-sheet.adoc", "verbosity": 0}
    defaults.update(options)
    return ProgramState(inputdir=inputdir, outputdir=tmp_path / "out", **defaults)


def assemble(state):
    return pipeline(state, env_check, document_load, document_render, output_write, results_report)


class TestTextBackend:
    """Test assembling markup"""

    def test_assembled_output(self, tmp_path):
        state = assemble(state_make(tmp_path, attribute=["version=3.2"]))

        assert state.outputFile == tmp_path / "out" / "cheat-sheet.adoc"
        assert state.outputFile.read_text(encoding="utf-8") == (
            "= Quarkus Cheat Sheet\n"
            "\n"
            "Version 3.2\n"
            "\n"
            "== CDI\n"
            "\n"
            "Use *@Inject* to inject beans.\n"
            "\n"
            "Kafka 2.5 support.\n"
        )
        assert state.effectiveAttributes["author"] == "Quarkus Team"
        assert len(state.documentSet) == 2

    def test_update_removed(self, tmp_path):
        state = assemble(state_make(tmp_path, attribute=["version=3.2"], tags="!update_1"))

        assert "Kafka" not in state.outputText
        assert state.outputText.endswith("Use *@Inject* to inject beans.\n")

    def test_output_subdir(self, tmp_path):
        state = assemble(state_make(tmp_path, outputSubdir="assembled"))
        assert state.outputFile == tmp_path / "out" / "assembled" / "cheat-sheet.adoc"

    def test_never_overwrites_source(self, tmp_path):
        state = state_make(tmp_path)
        state.outputdir = state.inputdir

        state = assemble(state)

        assert state.outputFile.name == "cheat-sheet.assembled.adoc"
        assert "include::" in (state.inputdir / "cheat-sheet.adoc").read_text(encoding="utf-8")

    def test_attributes_file(self, tmp_path):
        state = state_make(tmp_path, attributesFile="attrs.yaml")
        (state.inputdir / "attrs.yaml").write_text("version: '3.1'\n")

        state = assemble(state)

        assert "Version 3.1\n" in state.outputText

    def test_command_line_beats_attributes_file(self, tmp_path):
        state = state_make(tmp_path, attributesFile="attrs.yaml", attribute=["version=3.2"])
        (state.inputdir / "attrs.yaml").write_text("version: '3.1'\n")

        state = assemble(state)

        assert "Version 3.2\n" in state.outputText


class TestHtmlBackend:
    """Test publishing HTML"""

    def test_html_output(self, tmp_path):
        state = assemble(state_make(tmp_path, attribute=["version=3.2"], backend="html"))

        html = state.outputFile.read_text(encoding="utf-8")
        assert state.outputFile.suffix == ".html"
        assert "<title>Quarkus Cheat Sheet</title>" in html
        assert '<meta name="author" content="Quarkus Team">' in html
        assert '<h2 id="_cdi">CDI</h2>' in html
        assert "<strong>@Inject</strong>" in html

    def test_themed_output(self, tmp_path):
        themes = tmp_path / "themes"
        (themes / "letter").mkdir(parents=True)
        (themes / "letter" / "theme.yaml").write_text("page:\n  size: Letter\n")

        state = assemble(state_make(tmp_path, backend="html", theme="letter", themesDir=str(themes)))

        assert "size: Letter" in state.outputText


class TestFailures:
    """Test stages exit on bad input"""

    def test_missing_input_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            env_check(state_make(tmp_path, inputFile="nope.adoc"))
        assert exc.value.code == 1

    def test_unknown_theme(self, tmp_path):
        with pytest.raises(SystemExit):
            env_check(state_make(tmp_path, backend="html", theme="nope"))

    def test_bad_attributes_file(self, tmp_path):
        state = state_make(tmp_path, attributesFile="attrs.yaml")
        (state.inputdir / "attrs.yaml").write_text("- not\n- a mapping\n")

        with pytest.raises(SystemExit):
            env_check(state)

    def test_missing_include(self, tmp_path, capsys):
        state = state_make(tmp_path)
        (state.inputdir / "core" / "cdi.adoc").unlink()

        with pytest.raises(SystemExit):
            document_load(env_check(state))

        assert "include target not found" in capsys.readouterr().err

    def test_undecodable_source(self, tmp_path, capsys):
        state = state_make(tmp_path)
        (state.inputdir / "core" / "cdi.adoc").write_bytes(b"caf\xe9\n")

        with pytest.raises(SystemExit) as exc:
            document_load(env_check(state))

        assert exc.value.code == 1
        err = capsys.readouterr().err
        assert "cannot decode" in err
        assert "cdi.adoc" in err

    def test_missing_attribute_error_policy(self, tmp_path):
        state = state_make(tmp_path, attributeMissing="error")

        with pytest.raises(SystemExit):
            document_render(document_load(env_check(state)))

    def test_render_without_documents(self, tmp_path):
        with pytest.raises(SystemExit):
            document_render(state_make(tmp_path))


class TestProgramState:
    """Test ProgramState construction and copying"""

    def test_from_namespace_drops_unknown(self, tmp_path):
        options = Namespace(inputFile="a.adoc", tags="!x", verbosity=2, json=False)
        state = ProgramState.state_createFromNamespace(options, tmp_path, tmp_path / "out")

        assert state.inputFile == "a.adoc"
        assert state.tags == "!x"
        assert state.outputdir == tmp_path / "out"
        assert not hasattr(state, "json")

    def test_copy_independent(self, tmp_path):
        state = ProgramState(inputdir=tmp_path)
        copy = state.copy()
        copy.tags = "a"

        assert state.tags is None
