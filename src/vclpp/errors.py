"""VCL Preprocessor Errors

Every error is fatal to the run. Each one remembers the source unit and the
1-based line where it was detected.
"""

from pathlib import Path
from typing import List, Optional, Union


PathLike = Union[str, Path]


class PreprocessorError(Exception):
    """Base class for all preprocessor errors."""

    def __init__(self, message: str, path: Optional[PathLike] = None, line: int = 0):
        self.message = message
        self.path = path
        self.line = line
        super().__init__(f"{self.location}{message}")

    @property
    def location(self) -> str:
        if self.path is not None:
            return f"{self.path}:{self.line}: " if self.line else f"{self.path}: "
        return f"line {self.line}: " if self.line else ""


class SourceIOError(PreprocessorError):
    """An input, include or output path could not be opened."""


class IncludeOpenError(SourceIOError):
    """One or more #include files failed to open.

    Raised only after every include of the unit has been attempted, so the
    message lists all of the failures at once.
    """

    def __init__(self, failures: List[SourceIOError]):
        self.failures = list(failures)
        details = "; ".join(str(failure) for failure in self.failures)
        super().__init__(f"failed to open {len(self.failures)} include file(s): {details}")


class DirectiveSyntaxError(PreprocessorError):
    """Malformed directive, macro header or macro block."""


class StructuralError(PreprocessorError):
    """An included unit declares includes of its own."""


class InvocationError(PreprocessorError):
    """A macro was invoked with the wrong number of arguments."""

