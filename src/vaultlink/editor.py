"""Helpers behind the editor features: completion, link highlighting, date markers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from vaultlink.config import VaultInfo
from vaultlink.periods import Period, parse_iso_date
from vaultlink.resolve import LinkResolver
from vaultlink.store import find_note
from vaultlink.vault import NOTE_SUFFIX, WikiLink, find_wikilinks

MAX_COMPLETIONS = 500

_DATE_RE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


def is_inside_wikilink(text: str, offset: int) -> bool:
    """True if ``offset`` sits after an opening ``[[`` that is not closed yet."""
    if offset < 2:
        return False
    open_at = text.rfind("[[", 0, offset)
    if open_at == -1:
        return False
    close_at = text.find("]]", open_at)
    return close_at == -1 or close_at >= offset


@dataclass(frozen=True)
class CompletionItem:
    insert_text: str  # note name without extension
    lookup: str  # what the typed prefix is matched against
    detail: str  # root-relative path without extension


def _display_path(path: Path, root: Path) -> str:
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = path.as_posix()
    return relative[: -len(NOTE_SUFFIX)] if relative.endswith(NOTE_SUFFIX) else relative


def _has_prefix_symbol(name: str) -> bool:
    first = name[0]
    return first == "@" or not first.isascii() or not first.isalnum()


def completion_items(
    files: Iterable[Path],
    root: str | Path,
    max_results: int = MAX_COMPLETIONS,
) -> list[CompletionItem]:
    """Completion entries for ``[[`` in the notes below ``root``.

    Names starting with ``@``, an emoji or another symbol get a second entry
    matched without that first character, so typing "Ar" offers "@Artur".
    """
    root = Path(root)
    items: list[CompletionItem] = []
    for path in files:
        if len(items) >= max_results:
            break
        stem = path.stem
        detail = _display_path(path, root)
        items.append(CompletionItem(insert_text=stem, lookup=stem, detail=detail))

        if stem and _has_prefix_symbol(stem) and len(stem) > 1 and len(items) < max_results:
            items.append(CompletionItem(insert_text=stem, lookup=stem[1:], detail=detail))
    return items


@dataclass(frozen=True)
class LinkAnnotation:
    link: WikiLink
    target: Path | None

    @property
    def resolved(self) -> bool:
        return self.target is not None

    @property
    def message(self) -> str | None:
        if self.resolved:
            return None
        return f"Cannot resolve wiki link: [[{self.link.text}]]"


def annotate_links(text: str, resolver: LinkResolver) -> list[LinkAnnotation]:
    """Every wikilink in ``text`` with the note it resolves to, if any."""
    return [
        LinkAnnotation(link=link, target=resolver.resolve(link.text))
        for link in find_wikilinks(text)
    ]


@dataclass(frozen=True)
class DateMarker:
    start: int
    end: int
    date_text: str
    note: Path


def daily_note_markers(text: str, vault: VaultInfo) -> list[DateMarker]:
    """ISO dates in ``text`` that have a daily note in ``vault``."""
    config = vault.period_config(Period.DAILY)
    if config is None or not config.enabled:
        return []

    fmt = config.effective_format(Period.DAILY.default_format)
    markers: list[DateMarker] = []
    for match in _DATE_RE.finditer(text):
        date = parse_iso_date(match.group(1))
        if date is None:
            continue
        note = find_note(vault.path, config.folder, Period.DAILY.format(date, fmt))
        if note is not None:
            markers.append(DateMarker(match.start(1), match.end(1), match.group(1), note))
    return markers
