"""Read an Obsidian vault: enumerate notes, parse frontmatter, find wikilinks."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

NOTE_SUFFIX = ".md"

# Matches [[target]] and [[target|alias]], brackets included in the span
_WIKILINK_RE = re.compile(r"\[\[([^\]]+)]]")

# Matches YAML frontmatter delimited by ---
_FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---\n?", re.DOTALL)

# Heading (#) and block (^) references inside a link target
_FRAGMENT_RE = re.compile(r"[#^].*\Z", re.DOTALL)


def clean_link(link_text: str) -> str:
    """Drop the alias part (everything after the first ``|``) and trim."""
    return link_text.split("|", 1)[0].strip()


@dataclass(frozen=True)
class WikiLink:
    """One ``[[...]]`` occurrence in a piece of text."""

    start: int  # offset of the opening [[
    end: int  # offset just past the closing ]]
    text: str  # raw content between the brackets

    @property
    def target(self) -> str:
        return clean_link(self.text)

    @property
    def alias(self) -> str | None:
        if "|" not in self.text:
            return None
        return self.text.split("|", 1)[1]


def find_wikilinks(text: str) -> list[WikiLink]:
    """Return every wikilink in ``text`` in document order."""
    if "[[" not in text:
        return []
    return [
        WikiLink(start=m.start(), end=m.end(), text=m.group(1))
        for m in _WIKILINK_RE.finditer(text)
    ]


@dataclass
class Note:
    """A single Obsidian markdown note."""

    path: Path
    title: str
    content: str  # body text with frontmatter stripped
    frontmatter: dict = field(default_factory=dict)
    outgoing_links: list[str] = field(default_factory=list)  # wikilink targets

    @property
    def slug(self) -> str:
        """Canonical identifier: filename without extension, lowercased."""
        return self.path.stem.lower()


def parse_note(path: Path) -> Note:
    """Parse a single markdown file into a Note."""
    raw = path.read_text(encoding="utf-8")

    frontmatter: dict = {}
    body = raw
    fm_match = _FRONTMATTER_RE.match(raw)
    if fm_match:
        try:
            loaded = yaml.safe_load(fm_match.group(1))
        except yaml.YAMLError:
            logger.debug("Ignoring malformed frontmatter in %s", path)
            loaded = None
        frontmatter = loaded if isinstance(loaded, dict) else {}
        body = raw[fm_match.end() :]

    # "Folder/Note#heading|alias" -> "Folder/Note"
    outgoing = [_FRAGMENT_RE.sub("", link.target).strip() for link in find_wikilinks(body)]
    outgoing = [link for link in outgoing if link]

    title = frontmatter.get("title") or path.stem

    return Note(
        path=path,
        title=str(title),
        content=body.strip(),
        frontmatter=frontmatter,
        outgoing_links=outgoing,
    )


def list_note_files(root: str | Path) -> list[Path]:
    """Recursively list the markdown files below ``root``, sorted by path.

    Hidden directories (.obsidian, .trash) are skipped. A subdirectory that
    cannot be read contributes nothing and the walk carries on.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    def _skip(err: OSError) -> None:
        logger.debug("Skipping unreadable directory %s: %s", err.filename, err)

    files: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, onerror=_skip):
        dirnames[:] = [d for d in dirnames if not d.startswith(".")]
        for name in filenames:
            if name.endswith(NOTE_SUFFIX):
                files.append(Path(dirpath) / name)
    files.sort()
    return files


def load_vault(vault_path: str | Path) -> list[Note]:
    """Load all markdown notes from an Obsidian vault directory.

    Notes that cannot be decoded are skipped with a warning.
    """
    vault = Path(vault_path)
    if not vault.is_dir():
        raise FileNotFoundError(f"Vault directory not found: {vault}")

    notes: list[Note] = []
    for md_file in list_note_files(vault):
        try:
            notes.append(parse_note(md_file))
        except (UnicodeDecodeError, OSError) as e:
            logger.warning("Could not read %s: %s", md_file, e)

    return notes
