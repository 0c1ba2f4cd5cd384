"""
Shared pytest fixtures for Search Aggregator tests.

Provides builders for ripgrep --json event lines so parser, service and CLI
tests can describe search output without a ripgrep install.
"""

import json
from typing import Callable, List

import pytest


def rg_begin(path: str) -> str:
    return json.dumps({"type": "begin", "data": {"path": {"text": path}}})


def rg_end(path: str) -> str:
    return json.dumps(
        {
            "type": "end",
            "data": {
                "path": {"text": path},
                "binary_offset": None,
                "stats": {"matches": 1, "matched_lines": 1},
            },
        }
    )


def rg_match(path: str, line_number: int, text: str, offset: int = 0) -> str:
    return json.dumps(
        {
            "type": "match",
            "data": {
                "path": {"text": path},
                "lines": {"text": text + "\n"},
                "line_number": line_number,
                "absolute_offset": offset,
                "submatches": [{"match": {"text": text}, "start": 0, "end": len(text)}],
            },
        }
    )


def rg_context(path: str, line_number: int, text: str) -> str:
    return json.dumps(
        {
            "type": "context",
            "data": {
                "path": {"text": path},
                "lines": {"text": text + "\n"},
                "line_number": line_number,
                "absolute_offset": 0,
                "submatches": [],
            },
        }
    )


def rg_summary() -> str:
    return json.dumps(
        {
            "type": "summary",
            "data": {"elapsed_total": {"secs": 0, "nanos": 1}, "stats": {}},
        }
    )


def rg_file(path: str, lines: List[tuple]) -> List[str]:
    """Event lines for one file; lines are (line_number, text, is_match)."""
    events = [rg_begin(path)]
    for line_number, text, is_match in lines:
        if is_match:
            events.append(rg_match(path, line_number, text))
        else:
            events.append(rg_context(path, line_number, text))
    events.append(rg_end(path))
    return events


@pytest.fixture
def rg_output() -> Callable[..., str]:
    """Join event lines into raw ripgrep output text."""

    def _build(*event_lines: str) -> str:
        return "".join(line + "\n" for line in event_lines)

    return _build
