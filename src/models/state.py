"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Optional, Type, TypeVar, List, Dict, Callable, TYPE_CHECKING
from dataclasses import dataclass, field

# Forward reference for type hint - avoid circular import
if TYPE_CHECKING:
    from .document import DocumentSet
    from .tags import TagSelection


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the assembly pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the assembly progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, attribute,
          attributesFile, tags, backend, attributeMissing, theme, themesDir,
          outputSubdir
        - env_check: inputSourceFile, docOutputdir, invocationAttributes,
          tagSelection, envOK
        - document_load: documentSet
        - document_render: renderedText, effectiveAttributes, outputText
        - output_write: outputFile
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the source documents
        outputdir: Base output directory
        verbosity: Logging verbosity level (1-3)
        inputFile: Root document filename (relative to inputdir)
        attribute: Raw -a name=value assignments from the command line
        attributesFile: Optional YAML file of invocation attributes
        tags: Tag selection expression (e.g. '!update_1')
        backend: Output backend, 'text' or 'html' (None = settings default)
        attributeMissing: Missing-attribute policy override
        theme: Theme name for the html backend (None = settings default)
        themesDir: Directory holding theme subdirectories
        outputSubdir: Subdirectory within outputdir for output
        envOK: Environment validation passed
        inputSourceFile: Resolved path to the root document
        docOutputdir: Final output directory (outputdir + outputSubdir)
        invocationAttributes: Parsed invocation attributes (None value = unset)
        tagSelection: Parsed tag selection
        documentSet: Loaded documents
        renderedText: Assembled markup
        effectiveAttributes: Attributes in force while rendering
        outputText: Final text written to disk (markup or HTML)
        outputFile: Path of the written output
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    attribute: Optional[List[str]] = field(default=None)
    attributesFile: Optional[str] = field(default=None)
    tags: Optional[str] = field(default=None)
    backend: Optional[str] = field(default=None)
    attributeMissing: Optional[str] = field(default=None)
    theme: Optional[str] = field(default=None)
    themesDir: Optional[str] = field(default=None)
    outputSubdir: str = field(default=".")

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    docOutputdir: Path = field(default=Path("/"))
    invocationAttributes: Dict[str, Optional[str]] = field(default_factory=dict)
    tagSelection: Optional["TagSelection"] = field(default=None)
    documentSet: Optional["DocumentSet"] = field(default=None)
    renderedText: Optional[str] = field(default=None)
    effectiveAttributes: Optional[Dict[str, str]] = field(default=None)
    outputText: Optional[str] = field(default=None)
    outputFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the assembly pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, attribute, tags, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for assembled output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Unknown options (e.g. chris_plugin's own flags) are dropped
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}

        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            document_load,
            document_render,
            output_write,
            results_report
        )

    This is equivalent to:
        results_report(output_write(document_render(document_load(env_check(initial_state)))))
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
