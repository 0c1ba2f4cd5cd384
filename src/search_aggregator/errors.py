"""Error types raised by the search aggregator."""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional


class AggregatorError(Exception):
    """Base class for failures that abort a search call."""


class BinaryNotFoundError(AggregatorError):
    """No ripgrep executable could be located."""

    def __init__(self, message: str, candidates: Optional[List[Path]] = None):
        super().__init__(message)
        self.candidates = list(candidates or [])


class ExecError(AggregatorError):
    """The search process failed to spawn or reported an error."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.returncode = returncode


@dataclass(frozen=True)
class ParseWarning:
    """A single event line that could not be decoded.

    Never raised; collected by the event parser for diagnostics.
    """

    line_number: int
    reason: str
    excerpt: str
