#!/usr/bin/env python3
"""
docsplice - include-aware document assembler

Assembles a reference document (a "cheat sheet") written as many topic
files into one output document.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Philosophy:
    - Text-first: topic files stay readable and editable on their own
    - Preprocessor markup: include::, tag::/end::, ifdef::/endif::, {attribute}
    - One root document in, one assembled document out
    - Deterministic: the same inputs always produce the same bytes

Key Features:
    - include:: resolution with cycle detection, tags= and leveloffset=
    - Version "update" regions kept or removed by tag selection
    - Attribute substitution with a configurable missing-reference policy
    - Text backend (assembled markup) or standalone, print-ready HTML

Usage:
    docsplice inputdir/ outputdir/ --inputFile cheat-sheet.adoc

Examples:
    # Assemble the markup with a version attribute
    docsplice . output/ --inputFile cheat-sheet.adoc -a version=3.2

    # Drop the regions added in update 1 and publish HTML for printing
    docsplice . output/ --inputFile cheat-sheet.adoc --tags '!update_1' --backend html

    # Verbose output
    docsplice . output/ --inputFile cheat-sheet.adoc -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import DocumentLoader, Renderer, HtmlPublisher, __version__, LOG, state_connectToLogger
from .lib.attributes import AttributeFileError, attributes_loadFile, attributes_parseAssignments
from .lib.errors import DocspliceError
from .lib.theme import Theme, ThemeError, themes_listAvailable
from .models import ProgramState, TagSelection, pipeline


DISPLAY_TITLE = r"""
     _                     _ _
  __| | ___   ___ ___ _ __ | (_) ___ ___
 / _` |/ _ \ / __/ __| '_ \| | |/ __/ _ \
| (_| | (_) | (__\__ \ |_) | | | (_|  __/
 \__,_|\___/ \___|___/ .__/|_|_|\___\___|
                     |_|

  Include-aware document assembler
"""

OUTPUT_SUFFIXES = {"text": ".adoc", "html": ".html"}

# Define CLI arguments
parser = ArgumentParser(
    description="docsplice - assemble a multi-file document into one",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Root document (relative to inputdir)"
)

parser.add_argument(
    "-a",
    "--attribute",
    action="append",
    default=None,
    help="Document attribute: name=value, name (empty value), name! (unset); a trailing @ lets the document override it",
)

parser.add_argument(
    "--attributesFile",
    default=None,
    type=str,
    help="YAML file mapping attribute names to values (relative to inputdir)",
)

parser.add_argument(
    "--tags",
    default=None,
    type=str,
    help="Tag selection applied to every document, e.g. '!update_1' or '**;!draft'",
)

parser.add_argument(
    "--backend",
    default=None,
    choices=sorted(OUTPUT_SUFFIXES),
    help="Output backend (defaults to DOCSPLICE_DEFAULT_BACKEND, 'text')",
)

parser.add_argument(
    "--attributeMissing",
    default=None,
    choices=["passthrough", "drop", "error"],
    help="Policy for unresolved {name} references (defaults to DOCSPLICE_ATTRIBUTE_MISSING)",
)

parser.add_argument(
    "--theme",
    default=None,
    type=str,
    help="Theme for the html backend (defaults to DOCSPLICE_DEFAULT_THEME)",
)

parser.add_argument(
    "--themesDir",
    default=None,
    type=str,
    help="Directory containing theme subdirectories",
)

parser.add_argument(
    "--outputSubdir",
    default=".",
    type=str,
    help="Subdirectory within outputdir for the assembled document",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and resolve invocation settings.

    Verifies that the root document exists, parses invocation attributes
    and the tag selection, checks the theme, then creates the output
    directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to the root document
            - invocationAttributes: Attributes from -a and --attributesFile
            - tagSelection: Parsed --tags expression
            - docOutputdir: Created output directory path
            - envOK: True if environment is valid

    Exits:
        1 if the root document, attributes file or theme is unusable
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.is_file():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file.resolve()
    LOG(f"Input file: {state.inputSourceFile}", level=2)

    attributes = {}
    if state.attributesFile:
        try:
            attributes.update(attributes_loadFile(state.inputdir / state.attributesFile))
        except (AttributeFileError, OSError) as e:
            print(f"Error: {e}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)
    attributes.update(attributes_parseAssignments(state.attribute))
    state.invocationAttributes = attributes
    LOG(f"Invocation attributes: {sorted(attributes)}", level=2)

    state.tagSelection = TagSelection.parse(state.tags)
    state.backend = state.backend or appsettings.default_backend

    if state.backend == "html":
        state.theme = state.theme or appsettings.default_theme
        if state.theme not in themes_listAvailable(state.themesDir):
            print(f"Error: Theme not found: {state.theme}", file=sys.stderr)
            print(f"Available: {', '.join(themes_listAvailable(state.themesDir))}", file=sys.stderr)
            state.envOK = False
            sys.exit(1)

    state.docOutputdir = state.outputdir / state.outputSubdir
    state.docOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.docOutputdir}", level=2)

    state.envOK = True
    return state


def document_load(inputstate: ProgramState) -> ProgramState:
    """
    Read the root document and resolve every include.

    Args:
        inputstate: Program state with inputSourceFile set

    Returns:
        ProgramState with added field:
            - documentSet: DocumentSet in inclusion order

    Exits:
        1 on a missing include target, include cycle or malformed directive
    """

    state = inputstate.copy()

    LOG("Loading documents...", level=1)

    try:
        loader = DocumentLoader(attributes=state.invocationAttributes)
        state.documentSet = loader.load(state.inputSourceFile)
    except DocspliceError as e:
        print(f"Load error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error reading input: {e}", file=sys.stderr)
        sys.exit(1)

    LOG(f"Loaded {len(state.documentSet)} document(s)", level=2)
    return state


def document_render(inputstate: ProgramState) -> ProgramState:
    """
    Render the loaded documents into one output text.

    Applies the tag selection, substitutes attributes and, for the html
    backend, publishes the result as a standalone HTML page.

    Args:
        inputstate: Program state with documentSet

    Returns:
        ProgramState with added fields:
            - renderedText: Assembled markup
            - effectiveAttributes: Attributes in force while rendering
            - outputText: Text to write (markup or HTML)

    Exits:
        1 if documentSet is None or rendering fails
    """

    state = inputstate.copy()

    LOG("Rendering...", level=1)

    if state.documentSet is None:
        print("Error: No loaded documents available", file=sys.stderr)
        sys.exit(1)

    try:
        renderer = Renderer(
            state.documentSet,
            attributes=state.invocationAttributes,
            selection=state.tagSelection,
            attribute_missing=state.attributeMissing,
        )
        state.renderedText = renderer.render()
        state.effectiveAttributes = dict(renderer.attributes_effective)
    except DocspliceError as e:
        print(f"Render error: {e}", file=sys.stderr)
        sys.exit(1)

    if state.backend == "html":
        try:
            theme = Theme(state.theme or appsettings.default_theme, state.themesDir)
        except ThemeError as e:
            print(f"Theme error: {e}", file=sys.stderr)
            sys.exit(1)
        state.outputText = HtmlPublisher(state.renderedText, state.effectiveAttributes, theme).publish()
    else:
        state.outputText = state.renderedText

    LOG(f"Rendered {len(state.outputText)} characters ({state.backend})", level=2)
    return state


def output_write(inputstate: ProgramState) -> ProgramState:
    """
    Write the output text next to the other outputs.

    Returns:
        ProgramState with added field:
            - outputFile: Path of the written document

    Exits:
        1 if there is nothing to write or the write fails
    """

    state = inputstate.copy()

    if state.outputText is None:
        print("Error: Rendering produced no output", file=sys.stderr)
        sys.exit(1)

    suffix = OUTPUT_SUFFIXES.get(state.backend or "text", ".adoc")
    output_file = state.docOutputdir / (state.inputSourceFile.stem + suffix)
    if output_file.resolve() == state.inputSourceFile:
        output_file = state.docOutputdir / (state.inputSourceFile.stem + ".assembled" + suffix)

    try:
        output_file.write_text(state.outputText, encoding="utf-8")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)

    state.outputFile = output_file
    LOG(f"Wrote {output_file}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display assembly results to the user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if outputFile is None
    """
    state: ProgramState = inputstate.copy()
    if not state.outputFile:
        print("Error: Assembly failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("\n✓ Assembly successful!", level=1)
        LOG(f"  Output:    {state.outputFile}", level=1)
        LOG(f"  Documents: {len(state.documentSet) if state.documentSet else 0}", level=1)
        LOG(f"  Backend:   {state.backend}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="docsplice - include-aware document assembler",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - assemble a multi-file document into one output.

    Orchestrates the full pipeline:
        1. env_check: Validate paths, attributes, tag selection and theme
        2. document_load: Read the root document and resolve includes
        3. document_render: Filter tags, substitute attributes, publish
        4. output_write: Write the assembled document
        5. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the source documents
        outputdir: Directory where the assembled document will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, document_load, document_render, output_write, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
