"""VCL Preprocessor Main Entry Point

Pipeline and command-line interface:

    parse main unit -> resolve includes -> merge contexts
        -> expand macros -> expand defines -> write output
"""

import argparse
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from . import __version__
from .directives import parse_source_file
from .errors import IncludeOpenError, PathLike, PreprocessorError, SourceIOError
from .expansion import expand_defines, expand_macros
from .includes import merge_context, resolve_includes
from .output import default_output_path, output_lines, render_output, write_output

logger = logging.getLogger(__name__)


@dataclass
class PreprocessResult:
    lines: List[str]
    warnings: List[str] = field(default_factory=list)


@dataclass
class RunResult:
    """Outcome of one preprocessor run: either an output path or an error."""
    input_path: Path
    output_path: Path
    warnings: List[str] = field(default_factory=list)
    error: Optional[PreprocessorError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1


def preprocess_file(input_path: PathLike) -> PreprocessResult:
    """Preprocess *input_path* in memory.

    Raises:
        PreprocessorError: on any fatal error.
    """
    main_unit = parse_source_file(input_path)
    include_units = resolve_includes(main_unit)
    context = merge_context(main_unit, include_units)

    expanded = expand_macros(main_unit.code_lines, context, main_unit.path)
    expanded = expand_defines(expanded, context)
    return PreprocessResult(output_lines(expanded), list(main_unit.warnings))


def run_preprocessor(input_path: PathLike, output_path: Optional[PathLike] = None,
                     add_vcl_junk: bool = False) -> RunResult:
    """Preprocess *input_path* and write the result to *output_path*.

    The output file is only opened once the whole text is ready, so a
    failed run never creates or overwrites it.
    """
    input_path = Path(input_path)
    output_path = default_output_path(input_path) if output_path is None else Path(output_path)
    result = RunResult(input_path, output_path)

    try:
        if output_path.resolve() == input_path.resolve():
            raise SourceIOError("Output file would overwrite the input file!", output_path)
        processed = preprocess_file(input_path)
        result.warnings = processed.warnings
        write_output(output_path, render_output(processed.lines, add_vcl_junk))
        logger.debug("wrote %d line(s) to %s", len(processed.lines), output_path)
    except PreprocessorError as e:
        result.error = e
    return result


def report(result: RunResult, console: Console) -> None:
    for warning in result.warnings:
        console.print(f"[yellow]WARNING:[/yellow] {escape(warning)}")
    if result.ok:
        return
    errors = result.error.failures if isinstance(result.error, IncludeOpenError) else [result.error]
    for error in errors:
        console.print(f"[red]ERROR:[/red] {escape(str(error))}")
    console.print("Terminating due to previous error(s)...")


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vclpp",
        description="Applies custom preprocessing to a VU source file prior to running VCL.\n"
                    "Supports C-style #define constants and custom #macro directives.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  vclpp program.vcl                  # Preprocess to program.vsm
  vclpp program.vcl out.vsm          # Specify output file
  vclpp program.vcl -j               # Add the VCL prologue/epilogue
"""
    )

    parser.add_argument(
        "input",
        type=Path,
        help="Input VU source file"
    )

    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        help="Output file (default: input name with a .vsm extension)"
    )

    parser.add_argument(
        "-j", "--vcljunk",
        action="store_true",
        help="Add the standard VCL prologue/epilogue to the output"
    )

    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"VCL Preprocessor v{__version__}"
    )
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the preprocessor."""
    args = _build_arg_parser().parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    result = run_preprocessor(args.input, args.output, add_vcl_junk=args.vcljunk)
    report(result, Console(stderr=True))
    if result.ok:
        print(f"Preprocessing successful: {result.input_path} -> {result.output_path}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
