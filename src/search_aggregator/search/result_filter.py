"""Drop file results rejected by an ignore policy."""

import logging
from typing import Callable, List, Optional

from ..models import FileResult

logger = logging.getLogger(__name__)

AccessPredicate = Callable[[str], bool]


def filter_results(
    results: List[FileResult], predicate: Optional[AccessPredicate] = None
) -> List[FileResult]:
    """Keep results whose file_path the predicate accepts, in order."""
    if predicate is None:
        return list(results)

    kept = [result for result in results if predicate(result.file_path)]
    if len(kept) != len(results):
        logger.debug(f"Ignore policy removed {len(results) - len(kept)} file(s)")
    return kept
