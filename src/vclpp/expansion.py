"""VCL Macro and Define Expansion

Macro expansion runs first over the main unit's code lines, define expansion
second over its result. Both use the merged context and both are single
pass: a replacement is never rescanned for further names.

A macro invocation looks like::

    Name{ arg0, arg1, ... }

At most one invocation is recognized per line. The invocation line becomes
a block: a leading empty line, then every body line with its parameters
substituted, each ending in a newline.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from .directives import CodeLine, MacroDefinition
from .errors import InvocationError, PathLike
from .includes import MergedContext
from .substitution import is_invocation_boundary, substitute_name

logger = logging.getLogger(__name__)


def find_invocation(line: str, context: MergedContext) -> Optional[Tuple[MacroDefinition, int]]:
    """Return the first macro (in merge order) invoked on *line* and its position."""
    for macro in context.macros():
        if not macro.name:
            continue
        pos = line.find(macro.name)
        while pos >= 0:
            if is_invocation_boundary(line, pos, len(macro.name)):
                return macro, pos
            pos = line.find(macro.name, pos + len(macro.name))
    return None


def strip_argument_commas(arg: str) -> str:
    """Drop at most one trailing and one leading comma."""
    if arg.endswith(','):
        arg = arg[:-1]
    if arg.startswith(','):
        arg = arg[1:]
    return arg


def invocation_arguments(line: str, macro: MacroDefinition, pos: int,
                         path: Optional[PathLike] = None, line_number: int = 0) -> List[str]:
    """Split the ``{ ... }`` of an invocation into whitespace-delimited tokens."""
    open_brace = pos + len(macro.name)
    close_brace = line.find('}', open_brace + 1)
    if close_brace < 0:
        raise InvocationError(
            f"Macro '{macro.name}' invocation is missing its closing '}}'!", path, line_number)
    args = line[open_brace + 1:close_brace].split()

    if len(args) != len(macro.parameters):
        if macro.parameters:
            expected = f"takes {len(macro.parameters)} arguments"
        else:
            expected = "takes no arguments"
        raise InvocationError(
            f"Macro '{macro.name}' {expected}, but {len(args)} were provided!",
            path, line_number,
        )
    return args


def expand_macro_body(macro: MacroDefinition, args: Sequence[str]) -> str:
    if not macro.body:
        return ""
    body = list(macro.body)
    for param, arg in zip(macro.parameters, args):
        value = strip_argument_commas(arg)
        body = [substitute_name(text, param, value) for text in body]
    return "\n" + "".join(text + "\n" for text in body)


def expand_invocation(line: str, context: MergedContext,
                      path: Optional[PathLike] = None, line_number: int = 0) -> Optional[str]:
    """Expand the macro invoked on *line*, or return None if there is none."""
    found = find_invocation(line, context)
    if found is None:
        return None
    macro, pos = found
    args = invocation_arguments(line, macro, pos, path, line_number)
    logger.debug("%s:%d: expanding macro '%s' with %d argument(s)",
                 path, line_number, macro.name, len(args))
    return expand_macro_body(macro, args)


def expand_macros(code_lines: Sequence[CodeLine], context: MergedContext,
                  path: Optional[PathLike] = None) -> List[CodeLine]:
    expanded: List[CodeLine] = []
    for code in code_lines:
        text = expand_invocation(code.text, context, path, code.line)
        expanded.append(code if text is None else CodeLine(code.line, text))
    return expanded


def expand_defines(code_lines: Sequence[CodeLine], context: MergedContext) -> List[CodeLine]:
    constants = list(context.constants())
    expanded: List[CodeLine] = []
    for code in code_lines:
        text = code.text
        for constant in constants:
            text = substitute_name(text, constant.name, constant.value)
        expanded.append(CodeLine(code.line, text))
    return expanded
