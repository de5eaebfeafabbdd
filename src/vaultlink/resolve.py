"""Resolve wikilink text to a note file.

Ranking follows Obsidian's behaviour when several notes share a name:

1. A candidate whose path ends with the link's folder structure wins
   (``[[docs/Note]]`` -> ``.../docs/Note.md``).
2. Otherwise the candidate with the shortest full path wins.

The sort is stable, so candidates that tie on both keys keep the order in
which the listing produced them.
"""

from __future__ import annotations

import logging
import threading
from collections import defaultdict
from pathlib import Path
from typing import Callable, Iterable, Sequence

from vaultlink.cache import NoteFileCache
from vaultlink.vault import NOTE_SUFFIX, clean_link

logger = logging.getLogger(__name__)

NameLookup = Callable[[str], Sequence[Path]]


def _with_suffix(name: str) -> str:
    return name if name.endswith(NOTE_SUFFIX) else name + NOTE_SUFFIX


def full_path(path: Path) -> str:
    """Slash-normalized path string used for matching and ranking."""
    return str(path).replace("\\", "/")


def target_filename(link: str) -> str:
    """``"Folder/Note"`` -> ``"Note.md"``; an existing ``.md`` is kept."""
    return _with_suffix(link.replace("\\", "/").rsplit("/", 1)[-1])


def matches_path(path: Path, link: str) -> bool:
    """True if ``path`` ends with the link's structure plus ``.md``."""
    expected = _with_suffix(link.replace("\\", "/"))
    return full_path(path).endswith(expected)


def resolve_link(
    link_text: str,
    candidates: Iterable[Path],
    find_by_name: NameLookup | None = None,
) -> Path | None:
    """Pick the best note for ``link_text`` among ``candidates``.

    ``find_by_name`` is an optional exact-name index. It is consulted first;
    when it returns nothing the candidates are scanned by name, since name
    indexes tend to miss files whose names start with ``@`` or an emoji.
    Returns None for an empty link, an alias-only link or no match.
    """
    link = clean_link(link_text)
    if not link:
        return None

    filename = target_filename(link)

    matches: list[Path] = list(find_by_name(filename)) if find_by_name else []
    if not matches:
        matches = [path for path in candidates if path.name == filename]

    if not matches:
        logger.debug("No note matches [[%s]]", link_text)
        return None

    ranked = sorted(
        matches,
        key=lambda path: (not matches_path(path, link), len(full_path(path))),
    )
    return ranked[0]


class NameIndex:
    """Best-effort exact filename index over a note listing.

    Mirrors the editor indexes the resolver has to live with: names that do
    not start with an ASCII letter or digit are left out.
    """

    def __init__(self, files: Iterable[Path]):
        self._by_name: dict[str, list[Path]] = defaultdict(list)
        for path in files:
            if self.indexable(path.name):
                self._by_name[path.name].append(path)

    @staticmethod
    def indexable(name: str) -> bool:
        return bool(name) and name[0].isascii() and name[0].isalnum()

    def __call__(self, name: str) -> list[Path]:
        return list(self._by_name.get(name, ()))

    def __len__(self) -> int:
        return sum(len(paths) for paths in self._by_name.values())


class LinkResolver:
    """Resolves links within one scope, reusing a shared listing cache.

    ``root`` is the vault directory the links are scoped to. None means
    project-wide: the cache's ``project_root``, or the current directory
    when the cache has none.
    """

    def __init__(
        self,
        root: str | Path | None,
        cache: NoteFileCache | None = None,
        use_index: bool = True,
    ):
        self.cache = cache if cache is not None else NoteFileCache()
        if root is None:
            root = self.cache.project_root or Path.cwd()
        self.root = Path(root)
        self.use_index = use_index
        self._lock = threading.Lock()
        self._indexed: tuple[tuple[Path, ...], NameIndex] | None = None

    def candidates(self) -> tuple[Path, ...]:
        return self.cache.get_or_load(self.root)

    def _index_for(self, files: tuple[Path, ...]) -> NameIndex:
        indexed = self._indexed
        if indexed is not None and indexed[0] is files:
            return indexed[1]
        with self._lock:
            index = NameIndex(files)
            self._indexed = (files, index)
        return index

    def resolve(self, link_text: str) -> Path | None:
        files = self.candidates()
        index = self._index_for(files) if self.use_index else None
        return resolve_link(link_text, files, index)

    def is_resolvable(self, link_text: str) -> bool:
        return self.resolve(link_text) is not None

    def invalidate(self) -> None:
        self.cache.invalidate()
        self._indexed = None
