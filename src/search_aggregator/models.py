"""Data models for the search pipeline. Every struct flows one way: events -> groups -> files -> report."""

from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class SearchRequest:
    """Immutable input of one search call."""

    root_path: str
    regex_pattern: str
    file_glob: str = "*"
    context_lines: int = 1


@dataclass(frozen=True)
class BeginEvent:
    path: str


@dataclass(frozen=True)
class MatchEvent:
    line_number: int
    text: str
    byte_offset: int


@dataclass(frozen=True)
class ContextEvent:
    line_number: int
    text: str


@dataclass(frozen=True)
class EndEvent:
    path: str


RawEvent = Union[BeginEvent, MatchEvent, ContextEvent, EndEvent]


@dataclass
class LineEntry:
    """One rendered line of a match group."""

    line_number: int
    text: str
    is_match: bool


@dataclass
class MatchGroup:
    """Contiguous block of match and context lines within one file."""

    entries: List[LineEntry] = field(default_factory=list)

    @property
    def last_line_number(self) -> int:
        return self.entries[-1].line_number

    def accepts(self, line_number: int) -> bool:
        """True when line_number continues this block."""
        return bool(self.entries) and line_number <= self.last_line_number + 1


@dataclass
class FileResult:
    """All match groups of one file, in stream order."""

    file_path: str
    groups: List[MatchGroup] = field(default_factory=list)

    def add_entry(self, entry: LineEntry) -> None:
        if self.groups and self.groups[-1].accepts(entry.line_number):
            self.groups[-1].entries.append(entry)
        else:
            self.groups.append(MatchGroup(entries=[entry]))


@dataclass(frozen=True)
class Report:
    """Rendered search report plus the accounting behind its summary line."""

    text: str
    total_group_count: int
    shown_group_count: int

    @property
    def truncated(self) -> bool:
        return self.shown_group_count < self.total_group_count

    def __str__(self) -> str:
        return self.text
