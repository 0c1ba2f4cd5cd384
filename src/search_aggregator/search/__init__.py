"""Search pipeline stages: locate, execute, parse, filter, format."""

from .binary_locator import locate_ripgrep, resolve
from .event_parser import EventStreamParser, decode_event, parse_events
from .result_filter import filter_results
from .result_formatter import format_results

__all__ = [
    "locate_ripgrep",
    "resolve",
    "EventStreamParser",
    "decode_event",
    "parse_events",
    "filter_results",
    "format_results",
]
