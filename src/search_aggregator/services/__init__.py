"""Search services and ignore policies."""

from .ignore_controller import IgnoreController
from .ripgrep_search import RipgrepSearchService, build_ripgrep_args, search

__all__ = ["IgnoreController", "RipgrepSearchService", "build_ripgrep_args", "search"]
