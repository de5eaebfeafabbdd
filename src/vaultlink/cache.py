"""Cached note listings, one scope at a time."""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Sequence

from vaultlink.vault import list_note_files

logger = logging.getLogger(__name__)


class NoteFileCache:
    """Holds the note listing of the most recently requested scope.

    Asking for a different scope throws the previous listing away. Readers
    always get an immutable tuple: a rebuild builds a fresh tuple and swaps
    it in with one assignment, so a concurrent reader sees either the old
    snapshot or the new one.

    ``project_root`` is the scope used for project-wide resolution.
    """

    def __init__(
        self,
        lister: Callable[[Path], Sequence[Path]] = list_note_files,
        project_root: str | Path | None = None,
    ):
        self._lister = lister
        self.project_root = Path(project_root) if project_root is not None else None
        self._lock = threading.Lock()
        self._snapshot: tuple[Path, tuple[Path, ...]] | None = None

    def get_or_load(self, scope: str | Path) -> tuple[Path, ...]:
        scope = Path(scope)
        snapshot = self._snapshot
        if snapshot is not None and snapshot[0] == scope:
            return snapshot[1]

        with self._lock:
            snapshot = self._snapshot
            if snapshot is not None and snapshot[0] == scope:
                return snapshot[1]
            files = tuple(self._lister(scope))
            logger.debug("Cached %d note files for %s", len(files), scope)
            self._snapshot = (scope, files)
            return files

    def invalidate(self) -> None:
        self._snapshot = None

    @property
    def scope(self) -> Path | None:
        snapshot = self._snapshot
        return snapshot[0] if snapshot is not None else None
