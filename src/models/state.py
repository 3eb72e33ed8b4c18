"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing transformation stages.
"""

from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the export pipeline (state bus pattern).

    This dataclass carries all program state through the functional pipeline,
    with each stage adding new fields as the export progresses.

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, backend, outputSubdir,
                   hideEditorComments, strict, disable
        - env_check: inputSourceFile, exportOutputdir, settings, envOK
        - source_parse: orgSource
        - document_export: exportResult
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Directory containing the source .org file
        outputdir: Base output directory for exported files
        verbosity: Logging verbosity level (1-3)
        inputFile: Input .org filename (relative to inputdir)
        backend: Export backend tag (html, latex, ...)
        outputSubdir: Subdirectory within outputdir for output
        hideEditorComments: Suppress edcomm blocks in the output
        strict: Re-raise handler failures
        disable: Pass every custom block and link through unchanged
        envOK: Environment validation passed
        inputSourceFile: Resolved path to input .org file
        exportOutputdir: Final output directory (outputdir + outputSubdir)
        settings: AppSettings with CLI overrides applied
        orgSource: Raw Org source text
        exportResult: Export results (output_file, block_count, link_count, status)
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    backend: Optional[str] = field(default=None)
    outputSubdir: str = field(default=".")
    hideEditorComments: bool = field(default=False)
    strict: bool = field(default=False)
    disable: bool = field(default=False)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    exportOutputdir: Path = field(default=Path("/"))
    settings: Optional[Any] = field(default=None)  # AppSettings at runtime
    orgSource: Optional[str] = field(default=None)
    exportResult: Optional[Dict] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Merges CLI options with explicitly provided directories to create
        the initial program state for the export pipeline.

        Args:
            options: Parsed CLI arguments (inputFile, backend, etc.)
            inputdir: Directory containing source files
            outputdir: Directory for export output

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)

        import dataclasses
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Drop argparse/plugin extras that are not pipeline state
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

    Args:
        initial_state: Starting ProgramState
        *stages: Variable number of stage functions to execute in order

    Returns:
        Final ProgramState after all transformations

    Example:
        final_state = pipeline(
            initial_state,
            env_check,
            source_parse,
            document_export,
            results_report
        )
    """
    from functools import reduce
    return reduce(lambda state, stage: stage(state), stages, initial_state)
