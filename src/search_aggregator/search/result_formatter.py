"""Render file results as a line-numbered, file-grouped report."""

import os
from pathlib import Path
from typing import List, Tuple

from ..models import FileResult, MatchGroup, Report

GROUP_SEPARATOR = "----"


def relative_display_path(file_path: str, base_path: str) -> str:
    """file_path relative to base_path, always with forward slashes."""
    try:
        relative = os.path.relpath(file_path, base_path)
    except ValueError:
        # Different drives on Windows
        relative = file_path
    return Path(relative).as_posix()


def summary_line(total: int, shown: int) -> str:
    if shown < total:
        return (
            f"Showing first {shown} of {total} results. "
            "Use a more specific search if necessary."
        )
    return f"Found {total} result." if total == 1 else f"Found {total} results."


def format_group(group: MatchGroup) -> List[str]:
    lines = [f"{entry.line_number:>3} | {entry.text}" for entry in group.entries]
    lines.append(GROUP_SEPARATOR)
    return lines


def format_results(results: List[FileResult], base_path: str, max_groups: int) -> Report:
    """Render results, showing at most max_groups groups across all files.

    The cap is global: groups are taken in file order, so one file with many
    matches can use up the whole budget.
    """
    total = sum(len(result.groups) for result in results)

    shown: List[Tuple[int, MatchGroup]] = []
    for file_index, result in enumerate(results):
        for group in result.groups:
            if len(shown) >= max_groups:
                break
            shown.append((file_index, group))

    sections: List[str] = []
    current_index = None
    section_lines: List[str] = []
    for file_index, group in shown:
        if file_index != current_index:
            if section_lines:
                sections.append("\n".join(section_lines))
            current_index = file_index
            header = relative_display_path(results[file_index].file_path, base_path)
            section_lines = [f"# {header}"]
        section_lines.extend(format_group(group))
    if section_lines:
        sections.append("\n".join(section_lines))

    text = "\n\n".join([summary_line(total, len(shown))] + sections)
    return Report(
        text=text.rstrip(),
        total_group_count=total,
        shown_group_count=len(shown),
    )
