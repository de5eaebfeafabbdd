"""Periodic Notes plugin configuration and vault discovery."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from vaultlink.periods import Period
from vaultlink.roots import VAULT_MARKER

logger = logging.getLogger(__name__)

CONFIG_RELPATH = Path("plugins") / "periodic-notes" / "data.json"
DISCOVERY_DEPTH = 3


@dataclass(frozen=True)
class PeriodConfig:
    """Settings of one period in the Periodic Notes plugin."""

    folder: str = ""
    enabled: bool = False
    format: str | None = None
    template: str | None = None

    def effective_format(self, default: str) -> str:
        return self.format if self.format and self.format.strip() else default

    @classmethod
    def from_dict(cls, data: dict) -> PeriodConfig:
        """Build from a JSON section; values of the wrong type are dropped."""
        return cls(
            folder=_str_or_none(data.get("folder")) or "",
            enabled=_parse_bool(data.get("enabled")),
            format=_str_or_none(data.get("format")),
            template=_str_or_none(data.get("template")),
        )


def _str_or_none(value) -> str | None:
    return value if isinstance(value, str) else None


def _parse_bool(value) -> bool:
    # "true" in any case counts, like Gson reading a quoted boolean
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return False


def _bool_or_none(value) -> bool | None:
    return value if isinstance(value, bool) else None


@dataclass(frozen=True)
class PeriodicNotesConfig:
    """Parsed ``data.json`` of the Periodic Notes plugin."""

    daily: PeriodConfig | None = None
    weekly: PeriodConfig | None = None
    monthly: PeriodConfig | None = None
    quarterly: PeriodConfig | None = None
    yearly: PeriodConfig | None = None
    show_getting_started_banner: bool | None = None
    has_migrated_daily_note_settings: bool | None = None
    has_migrated_weekly_note_settings: bool | None = None

    def for_period(self, period: Period) -> PeriodConfig | None:
        return getattr(self, period.key)

    def is_enabled(self, period: Period) -> bool:
        config = self.for_period(period)
        return config is not None and config.enabled

    @classmethod
    def from_dict(cls, data: dict) -> PeriodicNotesConfig:
        periods = {}
        for period in Period:
            section = data.get(period.key)
            if isinstance(section, dict):
                periods[period.key] = PeriodConfig.from_dict(section)
        return cls(
            **periods,
            show_getting_started_banner=_bool_or_none(data.get("showGettingStartedBanner")),
            has_migrated_daily_note_settings=_bool_or_none(data.get("hasMigratedDailyNoteSettings")),
            has_migrated_weekly_note_settings=_bool_or_none(data.get("hasMigratedWeeklyNoteSettings")),
        )


def load_periodic_config(path: str | Path) -> PeriodicNotesConfig | None:
    """Load a Periodic Notes ``data.json``.

    A missing, unreadable or malformed file gives None: the vault simply has
    no periodic notes configuration.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.debug("Ignoring unreadable config %s: %s", path, e)
        return None

    if not isinstance(data, dict):
        logger.debug("Ignoring config %s: top level is not an object", path)
        return None
    return PeriodicNotesConfig.from_dict(data)


@dataclass(frozen=True)
class VaultInfo:
    """A discovered vault with its periodic notes configuration."""

    name: str
    path: Path
    config: PeriodicNotesConfig

    def period_config(self, period: Period) -> PeriodConfig | None:
        return self.config.for_period(period)


def find_marker_dirs(
    start: Path,
    marker: str = VAULT_MARKER,
    max_depth: int = DISCOVERY_DEPTH,
    depth: int = 0,
) -> list[Path]:
    """Find ``marker`` directories below ``start``, at most ``max_depth`` levels down.

    Hidden directories are not descended into. A directory that cannot be
    listed contributes nothing.
    """
    if depth > max_depth or not start.is_dir():
        return []

    found: list[Path] = []
    try:
        with os.scandir(start) as it:
            entries = sorted(it, key=lambda e: e.name)
    except OSError as e:
        logger.debug("Skipping %s: %s", start, e)
        return []

    for entry in entries:
        try:
            is_dir = entry.is_dir()
        except OSError:
            continue
        if not is_dir:
            continue
        child = Path(entry.path)
        if entry.name == marker:
            found.append(child)
        elif not entry.name.startswith("."):
            found.extend(find_marker_dirs(child, marker, max_depth, depth + 1))
    return found


def vault_display_name(vault_path: Path, search_paths: Iterable[Path]) -> str:
    """Shortest path of the vault relative to any search path."""
    best: str | None = None
    for search_path in search_paths:
        try:
            relative = vault_path.relative_to(search_path)
        except ValueError:
            continue
        name = relative.as_posix()
        if name in ("", "."):
            name = search_path.name or "Root"
        if best is None or len(name) < len(best):
            best = name
    return best or vault_path.name or "Unknown"


class VaultRegistry:
    """Vaults with a Periodic Notes configuration under some search paths.

    The scan runs on first use and is kept until ``reload()``.
    """

    def __init__(
        self,
        search_paths: Iterable[str | Path],
        marker: str = VAULT_MARKER,
        max_depth: int = DISCOVERY_DEPTH,
    ):
        unique: list[Path] = []
        for p in search_paths:
            path = Path(p)
            if path not in unique:
                unique.append(path)
        self.search_paths = unique
        self.marker = marker
        self.max_depth = max_depth
        self._lock = threading.Lock()
        self._vaults: tuple[VaultInfo, ...] | None = None

    def _scan(self) -> tuple[VaultInfo, ...]:
        vaults: list[VaultInfo] = []
        seen: set[Path] = set()
        for search_path in self.search_paths:
            for marker_dir in find_marker_dirs(search_path, self.marker, self.max_depth):
                config = load_periodic_config(marker_dir / CONFIG_RELPATH)
                if config is None:
                    continue
                vault_path = marker_dir.parent
                if vault_path in seen:
                    continue
                seen.add(vault_path)
                name = vault_display_name(vault_path, self.search_paths)
                vaults.append(VaultInfo(name=name, path=vault_path, config=config))
        logger.debug("Discovered %d vault(s)", len(vaults))
        return tuple(vaults)

    @property
    def vaults(self) -> tuple[VaultInfo, ...]:
        vaults = self._vaults
        if vaults is None:
            with self._lock:
                if self._vaults is None:
                    self._vaults = self._scan()
                vaults = self._vaults
        return vaults

    def reload(self) -> tuple[VaultInfo, ...]:
        with self._lock:
            self._vaults = self._scan()
            return self._vaults

    def is_available(self) -> bool:
        return bool(self.vaults)

    def primary(self) -> VaultInfo | None:
        vaults = self.vaults
        return vaults[0] if vaults else None

    def is_period_enabled(self, period: Period) -> bool:
        vault = self.primary()
        return vault is not None and vault.config.is_enabled(period)

    def find_vault_for_file(self, path: str | Path) -> VaultInfo | None:
        path = Path(path)
        for vault in self.vaults:
            if path == vault.path or vault.path in path.parents:
                return vault
        return None

    def contextual_vault(self, current_file: str | Path | None = None) -> VaultInfo | None:
        """Vault of ``current_file``, or the first vault."""
        if current_file is not None:
            vault = self.find_vault_for_file(current_file)
            if vault is not None:
                return vault
        return self.primary()

    def debug_info(self) -> str:
        lines = ["=== Periodic Notes Debug Info ==="]
        lines.append(f"Search paths ({len(self.search_paths)}):")
        lines.extend(f"  - {p}" for p in self.search_paths)
        vaults = self.vaults
        lines.append("")
        lines.append(f"Detected vaults ({len(vaults)}):")
        for vault in vaults:
            lines.append(f"  - Name: {vault.name}")
            lines.append(f"    Path: {vault.path}")
            for period in Period:
                config = vault.period_config(period)
                if config is None:
                    lines.append(f"    {period.label}: not configured")
                    continue
                lines.append(
                    f"    {period.label}: enabled={config.enabled} "
                    f"folder={config.folder!r} template={config.template!r}"
                )
        return "\n".join(lines) + "\n"
