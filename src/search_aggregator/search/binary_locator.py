"""Locate the ripgrep executable bundled with a host installation."""

import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional, Union

from ..errors import BinaryNotFoundError

logger = logging.getLogger(__name__)

# Probed in order; archive-packed installs keep native binaries in *.asar.unpacked
CANDIDATE_DIRS = [
    Path("node_modules") / "@vscode" / "ripgrep" / "bin",
    Path("node_modules") / "vscode-ripgrep" / "bin",
    Path("node_modules.asar.unpacked") / "vscode-ripgrep" / "bin",
    Path("node_modules.asar.unpacked") / "@vscode" / "ripgrep" / "bin",
]


def binary_name(platform: Optional[str] = None) -> str:
    """Executable file name of ripgrep on the given platform."""
    platform = platform or sys.platform
    return "rg.exe" if platform.startswith("win") else "rg"


def candidate_paths(
    install_root: Union[str, Path], platform: Optional[str] = None
) -> List[Path]:
    root = Path(install_root)
    name = binary_name(platform)
    return [root / directory / name for directory in CANDIDATE_DIRS]


def _is_regular_file(path: Path) -> bool:
    try:
        return path.is_file()
    except OSError:
        return False


def resolve(install_root: Union[str, Path], platform: Optional[str] = None) -> Path:
    """Return the first candidate under install_root that is a regular file.

    Raises:
        BinaryNotFoundError: If no candidate exists
    """
    candidates = candidate_paths(install_root, platform)
    for candidate in candidates:
        if _is_regular_file(candidate):
            logger.debug(f"Resolved ripgrep binary: {candidate}")
            return candidate

    raise BinaryNotFoundError(
        f"ripgrep binary not found under {install_root}", candidates=candidates
    )


def locate_ripgrep(install_root: Optional[Union[str, Path]] = None) -> Path:
    """Resolve ripgrep from an install root, falling back to PATH.

    Raises:
        BinaryNotFoundError: If neither the install root nor PATH provides rg
    """
    candidates: List[Path] = []
    if install_root is not None:
        try:
            return resolve(install_root)
        except BinaryNotFoundError as e:
            candidates.extend(e.candidates)
            logger.debug(f"{e}; falling back to PATH")

    rg_path = shutil.which("rg")
    if rg_path:
        return Path(rg_path)

    raise BinaryNotFoundError(
        "ripgrep binary not found (install ripgrep or configure install_root)",
        candidates=candidates,
    )
