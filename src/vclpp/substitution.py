"""Boundary-safe name substitution.

A name referenced in code must be surrounded by whitespace, punctuation or
the line edges, so defining ``FOO`` never touches ``FOOBAR``::

    mul vf01, FOO, vf02     -> replaced
    FOOBAR                  -> untouched
"""

import string

_SEPARATORS = frozenset(string.punctuation)


def is_separator(ch: str) -> bool:
    return ch.isspace() or ch in _SEPARATORS


def is_name_boundary(line: str, pos: int, length: int) -> bool:
    """True if ``line[pos:pos + length]`` is flanked by separators or line edges."""
    before = pos - 1
    after = pos + length
    if before >= 0 and not is_separator(line[before]):
        return False
    return after >= len(line) or is_separator(line[after])


def is_invocation_boundary(line: str, pos: int, length: int) -> bool:
    """True if ``line[pos:pos + length]`` is a macro name followed directly by ``{``."""
    after = pos + length
    if after >= len(line) or line[after] != '{':
        return False
    return pos == 0 or is_separator(line[pos - 1])


def substitute_name(line: str, name: str, replacement: str) -> str:
    """Replace every boundary-matched occurrence of *name* in *line*.

    Scanning resumes after the inserted text, so a replacement that contains
    *name* is never substituted again.
    """
    if not name:
        return line
    pos = line.find(name)
    while pos >= 0:
        if is_name_boundary(line, pos, len(name)):
            line = line[:pos] + replacement + line[pos + len(name):]
            pos += len(replacement)
        else:
            pos += len(name)
        pos = line.find(name, pos)
    return line
