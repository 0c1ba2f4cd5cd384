"""
Ripgrep search service.

Composes the search pipeline: run ripgrep in JSON mode under a line cap,
parse its event stream into match groups, drop ignored files, and render
the capped report.
"""

import logging
import os
import time
from pathlib import Path
from typing import List, Optional, Union

from ..config import SearchConfig
from ..errors import ParseWarning
from ..models import Report, SearchRequest
from ..search import process_executor
from ..search.event_parser import EventStreamParser
from ..search.result_filter import AccessPredicate, filter_results
from ..search.result_formatter import format_results

logger = logging.getLogger(__name__)


def build_ripgrep_args(request: SearchRequest, default_glob: str = "*") -> List[str]:
    """Argument vector for one search, without the executable."""
    return [
        "--json",
        "-e",
        request.regex_pattern,
        "--glob",
        request.file_glob or default_glob,
        "--context",
        str(request.context_lines),
        request.root_path,
    ]


def report_base_path(root_path: str) -> str:
    """Directory report headers are relative to; a searched file reports against its parent."""
    if os.path.isfile(root_path):
        return os.path.dirname(os.path.abspath(root_path))
    return root_path


class RipgrepSearchService:
    """Runs ripgrep searches and renders their reports."""

    def __init__(self, config: Optional[SearchConfig] = None):
        """Initialize the service.

        Args:
            config: Search limits; defaults are used when omitted
        """
        self.config = config or SearchConfig()
        self.last_parse_warnings: List[ParseWarning] = []

    async def search(
        self,
        request: SearchRequest,
        binary_path: Union[str, Path],
        predicate: Optional[AccessPredicate] = None,
    ) -> Report:
        """Execute one search and return its report.

        Args:
            request: What to search for and where
            binary_path: ripgrep executable
            predicate: Ignore policy; files it rejects are left out

        Returns:
            Report with the rendered text and group accounting

        Raises:
            ExecError: If ripgrep cannot be started or reports an error
        """
        start_time = time.time()

        raw_output = await process_executor.run(
            str(binary_path),
            build_ripgrep_args(request, self.config.default_file_glob),
            max_lines=self.config.max_lines,
            stream_limit=self.config.stream_limit_bytes,
        )

        parser = EventStreamParser(max_line_length=self.config.max_line_length)
        results = parser.parse(raw_output)
        self.last_parse_warnings = parser.warnings
        if parser.warnings:
            logger.debug(f"Skipped {len(parser.warnings)} malformed event line(s)")

        results = filter_results(results, predicate)
        report = format_results(
            results, report_base_path(request.root_path), self.config.max_results
        )

        elapsed_ms = (time.time() - start_time) * 1000
        logger.debug(
            f"Search for {request.regex_pattern!r} in {request.root_path}: "
            f"{report.shown_group_count}/{report.total_group_count} groups "
            f"in {elapsed_ms:.0f}ms"
        )
        return report


async def search(
    request: SearchRequest,
    binary_path: Union[str, Path],
    predicate: Optional[AccessPredicate] = None,
    config: Optional[SearchConfig] = None,
) -> Report:
    """Run a single search with a one-off service."""
    return await RipgrepSearchService(config).search(request, binary_path, predicate)
