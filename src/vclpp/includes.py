"""VCL Include Resolver

Opens every ``#include`` of the main unit, parses it as a non-recursive
include unit and merges all directive sets into one ordered lookup context.
"""

import logging
from pathlib import Path
from typing import Iterator, List, Sequence, Tuple

from .directives import (
    Constant, DirectiveSet, MacroDefinition, SourceUnit,
    parse_source_file, read_source_lines,
)
from .errors import IncludeOpenError, SourceIOError, StructuralError

logger = logging.getLogger(__name__)


class MergedContext:
    """Ordered list of directive sets: each include in discovery order, main unit last.

    Lookups walk the sets in order and each set in declaration order, so the
    first definition of a duplicated name wins.
    """

    def __init__(self, directive_sets: Sequence[DirectiveSet] = ()):
        self.directive_sets: Tuple[DirectiveSet, ...] = tuple(directive_sets)

    def __len__(self) -> int:
        return len(self.directive_sets)

    def constants(self) -> Iterator[Constant]:
        for directives in self.directive_sets:
            yield from directives.constants

    def macros(self) -> Iterator[MacroDefinition]:
        for directives in self.directive_sets:
            yield from directives.macros


def resolve_include_path(include: str, base_dir: Path) -> Path:
    path = Path(include)
    return path if path.is_absolute() else base_dir / path


def resolve_includes(main_unit: SourceUnit) -> List[SourceUnit]:
    """Parse every include of *main_unit*.

    Raises:
        IncludeOpenError: after all includes were tried, if any failed to open.
        StructuralError:  if an include declares includes of its own.
    """
    base_dir = Path(main_unit.path).parent
    opened: List[Tuple[Path, List[str]]] = []
    failures: List[SourceIOError] = []

    for include in main_unit.directives.includes:
        path = resolve_include_path(include.path, base_dir)
        try:
            opened.append((path, read_source_lines(path)))
        except SourceIOError as e:
            logger.debug("include %s failed to open", path)
            failures.append(SourceIOError(e.message, main_unit.path, include.line))

    if failures:
        raise IncludeOpenError(failures)

    units: List[SourceUnit] = []
    for path, lines in opened:
        unit = parse_source_file(path, is_include=True, lines=lines)
        if unit.directives.includes:
            raise StructuralError(
                "Include directives are not allowed inside #included files!",
                path, unit.directives.includes[0].line,
            )
        logger.debug("resolved include %s", path)
        units.append(unit)
    return units


def merge_context(main_unit: SourceUnit, include_units: Sequence[SourceUnit]) -> MergedContext:
    return MergedContext([unit.directives for unit in include_units] + [main_unit.directives])
