"""VCL Directive Parser

Splits one source unit into its directives and its plain code lines:

    #include "path"                 -- record an include path
    #define NAME value...           -- record a constant (value may be empty)
    #macro NAME[: p0, p1, ...]      -- open a macro block
    #endmacro                       -- close the current macro block
    #vuprog / #endvuprog            -- program start/end markers
    ; comment                       -- full-line comment, dropped

The parser is a two-state machine (NORMAL, INSIDE_MACRO). Macro bodies are
stored verbatim; nothing inside them is interpreted until expansion time.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Iterable, List, Optional, Tuple

from .errors import DirectiveSyntaxError, PathLike, SourceIOError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Constant:
    name: str
    value: str


@dataclass(frozen=True)
class MacroDefinition:
    name: str
    parameters: Tuple[str, ...] = ()
    body: Tuple[str, ...] = ()
    line: int = 0


@dataclass(frozen=True)
class Include:
    """A quoted ``#include`` path and the line that referenced it."""
    path: str
    line: int = 0


@dataclass(frozen=True)
class CodeLine:
    line: int
    text: str


@dataclass(frozen=True)
class DirectiveSet:
    includes: Tuple[Include, ...] = ()
    constants: Tuple[Constant, ...] = ()
    macros: Tuple[MacroDefinition, ...] = ()
    program_start: bool = False
    program_end: bool = False


@dataclass
class SourceUnit:
    """Result of parsing one file: its directives, code lines and warnings."""
    path: PathLike
    directives: DirectiveSet
    code_lines: List[CodeLine] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    is_include: bool = False


class ParserState(Enum):
    NORMAL = auto()
    INSIDE_MACRO = auto()


def is_blank(line: str) -> bool:
    return not line.strip()


def read_source_lines(path: PathLike) -> List[str]:
    """Read a source unit line by line, raising SourceIOError if it cannot be opened."""
    try:
        with open(path, 'r', encoding='utf-8') as f:
            return [line.rstrip('\r\n') for line in f]
    except (OSError, UnicodeError) as e:
        raise SourceIOError(f"Unable to open file \"{path}\" for reading: {e}", path) from e


class DirectiveParser:
    """Parses the lines of a single source unit."""

    def __init__(self, path: PathLike, is_include: bool = False):
        self.path = path
        self.is_include = is_include
        self.line_number = 0

        self.state = ParserState.NORMAL
        self.includes: List[Include] = []
        self.constants: List[Constant] = []
        self.macros: List[MacroDefinition] = []
        self.code_lines: List[CodeLine] = []

        self._macro_name = ""
        self._macro_params: Tuple[str, ...] = ()
        self._macro_body: List[str] = []
        self._macro_line = 0

        self.program_start = False
        self.program_end = False

    def error(self, message: str) -> DirectiveSyntaxError:
        return DirectiveSyntaxError(message, self.path, self.line_number)

    def parse(self, lines: Iterable[str]) -> SourceUnit:
        for line_number, line in enumerate(lines, start=1):
            self.line_number = line_number
            if is_blank(line):
                continue
            if self.state is ParserState.INSIDE_MACRO:
                self._macro_line_in(line)
            elif not line.startswith('#'):
                if not line.startswith(';'):
                    self.code_lines.append(CodeLine(self.line_number, line))
            else:
                self._directive(line.split())

        if self.state is ParserState.INSIDE_MACRO:
            raise self.error(
                "End of file reached while parsing a macro directive! "
                f"Last macro seen '{self._macro_name}' (opened on line {self._macro_line})."
            )

        warnings: List[str] = []
        if not self.is_include:
            if not self.program_start:
                warnings.append("Program start directive '#vuprog' was not found!")
            if not self.program_end:
                warnings.append("Program end directive '#endvuprog' was not found!")

        directives = DirectiveSet(
            includes=tuple(self.includes),
            constants=tuple(self.constants),
            macros=tuple(self.macros),
            program_start=self.program_start,
            program_end=self.program_end,
        )
        logger.debug("parsed %s: %d include(s), %d constant(s), %d macro(s), %d code line(s)",
                     self.path, len(self.includes), len(self.constants),
                     len(self.macros), len(self.code_lines))
        return SourceUnit(self.path, directives, self.code_lines, warnings, self.is_include)

    # ------------------------------------------------------------------
    # Macro blocks
    # ------------------------------------------------------------------

    def _macro_line_in(self, line: str) -> None:
        if line == '#endmacro':
            self.macros.append(MacroDefinition(
                self._macro_name, self._macro_params,
                tuple(self._macro_body), self._macro_line,
            ))
            self.state = ParserState.NORMAL
            return
        if line.startswith('#'):
            raise self.error(f"Preprocessor directive inside macro block: '{line}'")
        self._macro_body.append(line)

    def _read_macro_header(self, tokens: List[str]) -> None:
        if len(tokens) < 2:
            raise self.error("'#macro' requires a macro name")

        name = tokens[1]
        params: List[str] = []

        # A colon glued to the name introduces a parameter list.
        if name.endswith(':'):
            name = name[:-1]
            if not name:
                raise self.error("'#macro' requires a macro name before ':'")
            last = len(tokens) - 1
            for index in range(2, len(tokens)):
                param = tokens[index]
                if param == ',':
                    raise self.error(f"Lost comma in macro '{name}' parameter list!")
                if param.endswith(','):
                    param = param[:-1]
                    if index == last:
                        raise self.error(
                            f"Extraneous comma after last macro parameter '{param}'!")
                    if param.endswith(','):
                        raise self.error(f"Lost comma after macro parameter '{param[:-1]}'!")
                elif index != last:
                    raise self.error(f"Missing comma after macro parameter '{param}'!")
                params.append(param)
        elif len(tokens) > 2 and not tokens[2].startswith(';'):
            raise self.error(
                "More text follows macro declaration. "
                "Add a ':' right after the macro name to define a param list!"
            )

        self._macro_name = name
        self._macro_params = tuple(params)
        self._macro_body = []
        self._macro_line = self.line_number
        self.state = ParserState.INSIDE_MACRO

    # ------------------------------------------------------------------
    # Single-line directives
    # ------------------------------------------------------------------

    def _directive(self, tokens: List[str]) -> None:
        directive = tokens[0]
        if directive == '#include':
            self.includes.append(self._read_include(tokens))
        elif directive == '#define':
            self.constants.append(self._read_define(tokens))
        elif directive == '#macro':
            self._read_macro_header(tokens)
        elif directive == '#vuprog':
            self.program_start = True
        elif directive == '#endvuprog':
            self.program_end = True
        else:
            raise self.error(f"Unknown preprocessor directive '{directive}'!")

    def _read_include(self, tokens: List[str]) -> Include:
        quoted = tokens[1] if len(tokens) > 1 else ''
        if (len(quoted) < 3 or not quoted.startswith('"') or not quoted.endswith('"')
                or '"' in quoted[1:-1]):
            raise self.error(
                "Include directive must be between double quotes and contain no spaces!")
        return Include(quoted[1:-1], self.line_number)

    def _read_define(self, tokens: List[str]) -> Constant:
        if len(tokens) < 2:
            raise self.error("'#define' requires a constant name")
        return Constant(tokens[1], ' '.join(tokens[2:]))


def parse_directives(lines: Iterable[str], path: PathLike = "<string>",
                     is_include: bool = False) -> SourceUnit:
    """Run the directive parser over already-read *lines*."""
    return DirectiveParser(path, is_include).parse(lines)


def parse_source_file(path: PathLike, is_include: bool = False,
                      lines: Optional[List[str]] = None) -> SourceUnit:
    """Open *path* (unless its *lines* were read already) and parse it."""
    if lines is None:
        lines = read_source_lines(path)
    return parse_directives(lines, Path(path), is_include)
