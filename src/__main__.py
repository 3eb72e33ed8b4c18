#!/usr/bin/env python3
"""
orgblocks - Custom block and link exports for Org documents

Exports an Org file, replacing its custom blocks and links with HTML or
LaTeX markup. Text outside custom blocks and links is copied unchanged.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Blocks:
    #+begin_red ... #+end_red          (and every other supported colour)
    #+begin_color  :color: teal        generic colour
    #+begin_parallel3NB                3 columns, no rule (1-5, NB = no rule)
    #+begin_details  :title: Proof     collapsible section
    #+begin_edcomm   :ed: Name         editor comment (:replacewith: splits)

Links:
    [[red:text]]  [[link-here:anchor]]  [[badge:key|value|color|url|logo]]
    [[github-stars:user/repo]]  [[social:twitter-follow|name]]

Usage:
    orgblocks inputdir/ outputdir/ --inputFile notes.org

Examples:
    # HTML export
    orgblocks . output/ --inputFile notes.org

    # LaTeX export without editor comments
    orgblocks . output/ --inputFile notes.org --backend latex --hideEditorComments

    # Fail on the first broken block, verbose output
    orgblocks . output/ --inputFile notes.org --strict -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .lib import Exporter, __version__, LOG, state_connectToLogger
from .lib.errors import OrgBlocksError
from .models import ProgramState, pipeline
from .config import appsettings


parser = ArgumentParser(
    description="orgblocks - custom block and link exports for Org documents",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile", required=True, type=str, help="Input Org (.org) file (relative to inputdir)"
)

parser.add_argument(
    "--backend",
    default=appsettings.default_backend,
    type=str,
    help="Export backend: html, latex, or any other tag (generic output)",
)

parser.add_argument(
    "--outputSubdir",
    default=".",
    type=str,
    help="Subdirectory within outputdir for the exported document",
)

parser.add_argument(
    "--hideEditorComments",
    action="store_true",
    default=appsettings.hide_editor_comments,
    help="Render editor comments (edcomm blocks) as nothing",
)

parser.add_argument(
    "--strict",
    action="store_true",
    default=appsettings.strict_mode,
    help="Abort on the first block or link that fails to export",
)

parser.add_argument(
    "--disable",
    action="store_true",
    default=not appsettings.enabled,
    help="Leave every custom block and link unchanged",
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
    Validate environment, resolve file paths and build export settings.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved path to .org input file
            - exportOutputdir: Created output directory path
            - settings: AppSettings with CLI overrides applied
            - envOK: True if environment is valid

    Exits:
        1 if input file not found
    """

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile

    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    state.exportOutputdir = state.outputdir / state.outputSubdir
    state.exportOutputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.exportOutputdir}", level=2)

    state.backend = state.backend or appsettings.default_backend
    state.settings = appsettings.model_copy(update={
        "enabled": not state.disable,
        "hide_editor_comments": state.hideEditorComments,
        "strict_mode": state.strict,
    })
    LOG(f"Backend: {state.backend}", level=2)

    state.envOK = True
    return state


def source_parse(inputstate: ProgramState) -> ProgramState:
    """
    Read the Org source file.

    Args:
        inputstate: Program state with inputSourceFile path set

    Returns:
        ProgramState with added field:
            - orgSource: Raw Org text

    Exits:
        1 if file read fails
    """

    state = inputstate.copy()

    LOG("Reading source file...", level=1)

    try:
        state.orgSource = state.inputSourceFile.read_text(encoding="utf-8")
        LOG(f"Read {len(state.orgSource)} characters from {state.inputSourceFile.name}", level=2)
    except Exception as e:
        print(f"Error reading input file: {e}", file=sys.stderr)
        sys.exit(1)
    return state


def document_export(inputstate: ProgramState) -> ProgramState:
    """
    Export custom blocks and links and write the output document.

    Args:
        inputstate: Program state with settings and resolved paths

    Returns:
        ProgramState with added field:
            - exportResult: Dict containing:
                - status: bool (export success)
                - output_file: str (path to exported document)
                - block_count: int (custom blocks rendered)
                - link_count: int (custom links rendered)
                - failures: list (blocks/links left unchanged after an error)

    Exits:
        1 if the document is malformed, or a handler fails in strict mode
    """

    state = inputstate.copy()

    LOG(f"Exporting to {state.backend}...", level=1)

    exporter = Exporter(backend=state.backend, settings=state.settings)
    try:
        state.exportResult = exporter.export(state.inputSourceFile, state.exportOutputdir, source=state.orgSource)
        LOG(f"Export complete: {state.exportResult['block_count']} blocks", level=2)
    except SyntaxError as e:
        print(f"Parse error: {e}", file=sys.stderr)
        sys.exit(1)
    except OrgBlocksError as e:
        print(f"Export error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Export error: {e}", file=sys.stderr)
        if state.verbosity >= 3:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display export results to user.

    Args:
        inputstate: Program state with exportResult populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if exportResult is None
    """
    state: ProgramState = inputstate.copy()
    if not state.exportResult:
        print("Error: Export failed", file=sys.stderr)
        sys.exit(1)

    if state.verbosity >= 1:
        LOG("\n✓ Export successful!", level=1)
        LOG(f"  Output: {state.exportResult['output_file']}", level=1)
        LOG(f"  Blocks: {state.exportResult['block_count']}", level=1)
        LOG(f"  Links:  {state.exportResult['link_count']}", level=1)
        for failure in state.exportResult['failures']:
            LOG(f"  Unchanged (line {failure['line']}): {failure['where']}: {failure['error']}", level=1)
    return state


@chris_plugin(
    parser=parser,
    title="orgblocks - custom block and link exports for Org documents",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - export an Org document's custom blocks and links.

    Orchestrates the full export pipeline:
        1. env_check: Validate paths, build settings
        2. source_parse: Read the .org file
        3. document_export: Dispatch blocks/links, write output
        4. results_report: Display results to user

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing Org source files
        outputdir: Directory where the exported document will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, source_parse, document_export, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
