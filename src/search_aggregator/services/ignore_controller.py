"""Ignore-policy predicate backed by a gitignore-syntax file.

Paths matched by the workspace's ignore file (``.searchignore`` by default)
are hidden from search reports. Paths outside the workspace root are never
blocked; the policy only governs the workspace it was created for.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

import pathspec

logger = logging.getLogger(__name__)

DEFAULT_IGNORE_FILE_NAME = ".searchignore"


class IgnoreController:
    """Decides whether a file path may appear in search results."""

    def __init__(
        self,
        workspace_root: Union[str, Path],
        ignore_file_name: str = DEFAULT_IGNORE_FILE_NAME,
        patterns: Optional[List[str]] = None,
    ):
        """Initialize the controller.

        Args:
            workspace_root: Directory the ignore rules are relative to
            ignore_file_name: Name of the ignore file inside workspace_root
            patterns: Extra gitignore-style patterns applied on top of the file
        """
        self.workspace_root = Path(os.path.abspath(workspace_root))
        self.ignore_file_path = self.workspace_root / ignore_file_name
        self.patterns: List[str] = []
        self._spec: Optional[pathspec.PathSpec] = None
        self.reload(extra_patterns=patterns)

    def reload(self, extra_patterns: Optional[List[str]] = None) -> None:
        """(Re)read the ignore file and rebuild the matcher."""
        patterns: List[str] = []
        if self.ignore_file_path.is_file():
            try:
                with open(self.ignore_file_path, "r", encoding="utf-8", errors="ignore") as f:
                    for line in f:
                        line = line.strip()
                        if line and not line.startswith("#"):
                            patterns.append(line)
            except OSError as e:
                logger.warning(f"Could not read {self.ignore_file_path}: {e}")
        if extra_patterns:
            patterns.extend(extra_patterns)

        self.patterns = patterns
        self._spec = (
            pathspec.PathSpec.from_lines("gitwildmatch", patterns) if patterns else None
        )

    def validate_access(self, file_path: Union[str, Path]) -> bool:
        """Return True when file_path may be shown."""
        if self._spec is None:
            return True

        absolute = Path(file_path)
        if not absolute.is_absolute():
            absolute = self.workspace_root / absolute
        try:
            relative = Path(
                os.path.relpath(os.path.abspath(absolute), self.workspace_root)
            ).as_posix()
        except ValueError:
            return True
        if relative == ".." or relative.startswith("../"):
            return True

        return not self._spec.match_file(relative)

    def __call__(self, file_path: str) -> bool:
        return self.validate_access(file_path)
