"""Find and create periodic note files."""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from pathlib import Path

from vaultlink.config import VaultInfo
from vaultlink.periods import Period
from vaultlink.vault import NOTE_SUFFIX

logger = logging.getLogger(__name__)


def note_path(root: str | Path, folder: str, filename: str) -> Path:
    return Path(root) / folder / f"{filename}{NOTE_SUFFIX}"


def find_note(root: str | Path, folder: str, filename: str) -> Path | None:
    """``root/folder/filename.md`` if it exists, else None."""
    path = note_path(root, folder, filename)
    return path if path.is_file() else None


def read_template(root: str | Path, template: str | None) -> str:
    """Content of a note template, or "" when there is none or it can't be read.

    Relative template paths are taken from the vault root. Templates are
    usually configured without their extension, so ``.md`` is tried too.
    """
    if template is None or not template.strip():
        return ""

    path = Path(root) / template.strip()
    candidates = [path]
    if not path.suffix:
        candidates.append(path.with_name(path.name + NOTE_SUFFIX))

    for candidate in candidates:
        try:
            return candidate.read_text(encoding="utf-8")
        except FileNotFoundError:
            continue
        except (OSError, UnicodeDecodeError) as e:
            logger.debug("Could not read template %s: %s", candidate, e)
            return ""
    logger.debug("Template %s not found", path)
    return ""


def create_note(
    root: str | Path,
    folder: str,
    filename: str,
    template: str | None = None,
) -> Path | None:
    """Create ``root/folder/filename.md``, seeded from ``template``.

    An existing file is never overwritten; its path is returned as is.
    Returns None when the folder or the file cannot be written.
    """
    path = note_path(root, folder, filename)
    content = read_template(root, template)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("x", encoding="utf-8") as f:
            f.write(content)
    except FileExistsError:
        if not path.is_file():
            logger.warning("Could not create note %s: a directory is in the way", path)
            return None
    except OSError as e:
        logger.warning("Could not create note %s: %s", path, e)
        return None
    return path


def open_periodic_note(
    vault: VaultInfo,
    period: Period,
    date: dt.date | None = None,
    create: bool = True,
) -> Path | None:
    """Path of the vault's note for ``period`` containing ``date`` (default today).

    Returns None if the period is not enabled in the vault, or if the note
    does not exist and ``create`` is false or creation fails.
    """
    config = vault.period_config(period)
    if config is None or not config.enabled:
        return None

    date = date or dt.date.today()
    filename = period.format(date, config.effective_format(period.default_format))

    existing = find_note(vault.path, config.folder, filename)
    if existing is not None or not create:
        return existing
    return create_note(vault.path, config.folder, filename, config.template)


@dataclass(frozen=True)
class PeriodStatus:
    """One row of the periodic notes overview."""

    period: Period
    filename: str
    path: Path
    exists: bool


def period_overview(vault: VaultInfo, date: dt.date | None = None) -> list[PeriodStatus]:
    """The enabled periods of a vault with the note each one points to for ``date``."""
    date = date or dt.date.today()
    rows: list[PeriodStatus] = []
    for period in Period:
        config = vault.period_config(period)
        if config is None or not config.enabled:
            continue
        filename = period.format(date, config.effective_format(period.default_format))
        path = note_path(vault.path, config.folder, filename)
        rows.append(PeriodStatus(period=period, filename=filename, path=path, exists=path.is_file()))
    return rows
