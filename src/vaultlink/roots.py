"""Work out which vault directory a file belongs to."""

from __future__ import annotations

import logging
from pathlib import Path

from vaultlink.vault import NOTE_SUFFIX

logger = logging.getLogger(__name__)

VAULT_MARKER = ".obsidian"

# Heuristic tuning, not correctness requirements
MARKER_SEARCH_DEPTH = 10
DENSITY_SEARCH_DEPTH = 5
DENSITY_THRESHOLD = 5


def _ancestors(start: Path, levels: int):
    """Yield ``start`` and its parents, at most ``levels`` directories."""
    current: Path | None = start
    seen = 0
    while current is not None and seen < levels:
        yield current
        parent = current.parent
        current = parent if parent != current else None
        seen += 1


def _has_marker(directory: Path, marker: str) -> bool:
    try:
        return (directory / marker).is_dir()
    except OSError:
        return False


def count_note_files(directory: Path) -> int:
    """Number of note files directly inside ``directory`` (not recursive)."""
    try:
        return sum(
            1
            for child in directory.iterdir()
            if child.suffix == NOTE_SUFFIX and child.is_file()
        )
    except OSError:
        return 0


def detect_vault_root(
    path: str | Path | None,
    marker: str = VAULT_MARKER,
    marker_depth: int = MARKER_SEARCH_DEPTH,
    density_depth: int = DENSITY_SEARCH_DEPTH,
    density_threshold: int = DENSITY_THRESHOLD,
) -> Path | None:
    """Return the vault root for ``path``.

    1. The nearest ancestor (up to ``marker_depth`` levels) holding a
       ``marker`` directory.
    2. Otherwise the nearest ancestor (up to ``density_depth`` levels) with
       at least ``density_threshold`` note files directly in it.
    3. Otherwise the directory the search started from.

    The search starts at ``path`` itself when it is a directory, else at its
    parent; a relative path is taken from the current directory. Reads
    the filesystem on every call; nothing is cached.
    """
    if path is None:
        return None

    path = Path(path).absolute()
    start = path if path.is_dir() else path.parent

    for directory in _ancestors(start, marker_depth):
        if _has_marker(directory, marker):
            return directory

    for directory in _ancestors(start, density_depth):
        if count_note_files(directory) >= density_threshold:
            logger.debug("No %s found, using note-dense directory %s", marker, directory)
            return directory

    return start
