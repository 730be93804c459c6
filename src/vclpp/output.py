"""VCL Output Writer

Turns expanded code lines into the final ``.vsm`` text: strips ``;``
comments, drops lines left blank and optionally wraps the body in the
standard VCL prologue/epilogue.
"""

import os
from pathlib import Path
from typing import Iterable, List

from .directives import CodeLine, is_blank
from .errors import PathLike, SourceIOError

VCL_PROLOGUE = (
    "\n"
    ".init_vf_all\n"
    ".init_vi_all\n"
    ".syntax new\n"
    ".vu\n"
    "\n"
    "--enter\n"
    "--endenter\n"
    "\n"
)

VCL_EPILOGUE = (
    "\n"
    "--exit\n"
    "--endexit\n"
    "\n"
)

OUTPUT_SUFFIX = '.vsm'


def default_output_path(input_path: PathLike) -> Path:
    return Path(input_path).with_suffix(OUTPUT_SUFFIX)


def strip_comment(line: str) -> str:
    pos = line.find(';')
    return line if pos < 0 else line[:pos]


def output_lines(code_lines: Iterable[CodeLine]) -> List[str]:
    """Physical output lines: comments stripped, blank lines dropped."""
    lines: List[str] = []
    for code in code_lines:
        # A macro expansion is a block of several physical lines.
        for line in code.text.split('\n'):
            line = strip_comment(line)
            if not is_blank(line):
                lines.append(line)
    return lines


def render_output(lines: Iterable[str], add_vcl_junk: bool = False) -> str:
    body = "".join(line + "\n" for line in lines)
    if add_vcl_junk:
        return VCL_PROLOGUE + body + VCL_EPILOGUE
    return body


def write_output(path: PathLike, text: str) -> None:
    """Write *text* to a sibling temporary file, then move it over *path*."""
    path = Path(path)
    tmp_path = path.with_name(path.name + '.tmp')
    try:
        with open(tmp_path, 'w', encoding='utf-8') as f:
            f.write(text)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path.exists():
            tmp_path.unlink()
        raise SourceIOError(f"Unable to open file \"{path}\" for writing: {e}", path) from e
