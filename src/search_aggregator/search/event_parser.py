"""
Parse ripgrep --json output into per-file match groups.

Each output line is one JSON event (begin, match, context, end, summary).
The parser folds them in order, keeping a cursor on the file whose begin
event was seen last. Match and context lines join the previous group while
their line numbers stay contiguous, which rebuilds the "match plus context"
blocks ripgrep prints without explicit group boundaries.
"""

import base64
import binascii
import json
import logging
from typing import Any, Dict, List, Optional

from ..errors import ParseWarning
from ..models import (
    BeginEvent,
    ContextEvent,
    EndEvent,
    FileResult,
    LineEntry,
    MatchEvent,
    RawEvent,
)

logger = logging.getLogger(__name__)

MAX_LINE_LENGTH = 500
TRUNCATION_MARKER = " [truncated...]"

# Event types ripgrep emits that carry nothing the report needs
IGNORED_EVENT_TYPES = {"summary"}


class EventDecodeError(ValueError):
    """A line is not a well-formed ripgrep event."""


def _decode_arbitrary_data(value: Any, field_name: str) -> str:
    """Decode ripgrep's {"text": ...} / {"bytes": <base64>} wrapper."""
    if not isinstance(value, dict):
        raise EventDecodeError(f"{field_name} is not an object")
    if "text" in value:
        return str(value["text"])
    if "bytes" in value:
        try:
            raw = base64.b64decode(value["bytes"])
        except (binascii.Error, TypeError, ValueError) as e:
            raise EventDecodeError(f"{field_name} has invalid base64: {e}")
        return raw.decode("utf-8", errors="replace")
    raise EventDecodeError(f"{field_name} has neither text nor bytes")


def _line_number(data: Dict[str, Any]) -> int:
    value = data.get("line_number")
    if not isinstance(value, int) or isinstance(value, bool):
        raise EventDecodeError("line_number missing or not an integer")
    return value


def _line_text(data: Dict[str, Any]) -> str:
    return _decode_arbitrary_data(data.get("lines"), "lines").rstrip("\r\n")


def decode_event(line: str) -> Optional[RawEvent]:
    """Decode one output line.

    Returns:
        The event, or None for event types that are recognised but unused

    Raises:
        EventDecodeError: If the line is not a valid event
    """
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        raise EventDecodeError(f"invalid JSON: {e.msg}")
    except (ValueError, RecursionError) as e:
        # Oversized integer literals or pathologically nested arrays
        raise EventDecodeError(f"invalid JSON: {e}")

    if not isinstance(payload, dict):
        raise EventDecodeError("event is not an object")
    event_type = payload.get("type")
    data = payload.get("data")
    if event_type in IGNORED_EVENT_TYPES:
        return None
    if not isinstance(data, dict):
        raise EventDecodeError("event data is not an object")

    if event_type == "begin":
        return BeginEvent(path=_decode_arbitrary_data(data.get("path"), "path"))
    if event_type == "end":
        return EndEvent(path=_decode_arbitrary_data(data.get("path"), "path"))
    if event_type == "match":
        offset = data.get("absolute_offset", 0)
        return MatchEvent(
            line_number=_line_number(data),
            text=_line_text(data),
            byte_offset=offset if isinstance(offset, int) else 0,
        )
    if event_type == "context":
        return ContextEvent(line_number=_line_number(data), text=_line_text(data))

    raise EventDecodeError(f"unknown event type: {event_type!r}")


def truncate_line(text: str, max_length: int = MAX_LINE_LENGTH) -> str:
    if len(text) > max_length:
        return text[:max_length] + TRUNCATION_MARKER
    return text


class EventStreamParser:
    """Folds a ripgrep event stream into sealed FileResults."""

    def __init__(self, max_line_length: int = MAX_LINE_LENGTH):
        self.max_line_length = max_line_length
        self.warnings: List[ParseWarning] = []

    def parse(self, raw_text: str) -> List[FileResult]:
        """Parse raw ripgrep output.

        Malformed lines are recorded in self.warnings and skipped. Files whose
        end event never arrived (e.g. the process was stopped at the line cap)
        are dropped.
        """
        self.warnings = []
        results: List[FileResult] = []
        current: Optional[FileResult] = None

        # str.splitlines() would also break on U+2028 left unescaped inside JSON strings
        for index, line in enumerate(raw_text.split("\n"), start=1):
            line = line.rstrip("\r")
            if not line.strip():
                continue

            try:
                event = decode_event(line)
            except EventDecodeError as e:
                self.warnings.append(
                    ParseWarning(line_number=index, reason=str(e), excerpt=line[:100])
                )
                logger.debug(f"Skipping malformed search output line {index}: {e}")
                continue

            if isinstance(event, BeginEvent):
                current = FileResult(file_path=event.path)
            elif isinstance(event, EndEvent):
                if current is not None:
                    results.append(current)
                    current = None
            elif isinstance(event, (MatchEvent, ContextEvent)):
                if current is None:
                    continue
                current.add_entry(
                    LineEntry(
                        line_number=event.line_number,
                        text=truncate_line(event.text, self.max_line_length),
                        is_match=isinstance(event, MatchEvent),
                    )
                )

        if current is not None:
            logger.debug(f"Dropping unterminated results for {current.file_path}")

        return results


def parse_events(raw_text: str, max_line_length: int = MAX_LINE_LENGTH) -> List[FileResult]:
    """Parse raw ripgrep output with a throwaway parser."""
    return EventStreamParser(max_line_length=max_line_length).parse(raw_text)
