"""Tests for completion, link annotation and daily note markers."""

from pathlib import Path

import pytest

from vaultlink.config import PeriodConfig, PeriodicNotesConfig, VaultInfo
from vaultlink.editor import (
    annotate_links,
    completion_items,
    daily_note_markers,
    is_inside_wikilink,
)
from vaultlink.resolve import LinkResolver


@pytest.mark.parametrize(
    "text, offset, inside",
    [
        ("See [[No", 8, True),
        ("See [[Note]] done", 8, True),
        ("See [[Note]] done", 12, False),
        ("See [[Note]] and [[Ot", 21, True),
        ("[", 1, False),
        ("no links here", 5, False),
        ("[[", 2, True),
    ],
)
def test_is_inside_wikilink(text, offset, inside):
    assert is_inside_wikilink(text, offset) is inside


def test_completion_items():
    root = Path("/v")
    files = [Path("/v/Note.md"), Path("/v/people/@Artur.md"), Path("/v/✨Ideas.md")]
    items = completion_items(files, root)
    assert [(i.insert_text, i.lookup, i.detail) for i in items] == [
        ("Note", "Note", "Note"),
        ("@Artur", "@Artur", "people/@Artur"),
        ("@Artur", "Artur", "people/@Artur"),
        ("✨Ideas", "✨Ideas", "✨Ideas"),
        ("✨Ideas", "Ideas", "✨Ideas"),
    ]


def test_completion_items_max_results():
    files = [Path(f"/v/@{i}x.md") for i in range(10)]
    items = completion_items(files, "/v", max_results=5)
    assert len(items) == 5


def test_completion_single_symbol_name_has_no_alternate():
    items = completion_items([Path("/v/@.md")], "/v")
    assert len(items) == 1


@pytest.fixture
def vault(tmp_path):
    (tmp_path / "Note.md").write_text("")
    (tmp_path / "docs").mkdir()
    (tmp_path / "docs" / "Note.md").write_text("")
    return tmp_path


def test_annotate_links(vault):
    text = "[[Note]] then [[docs/Note|docs]] and [[Missing]]"
    annotations = annotate_links(text, LinkResolver(vault))
    assert [a.target for a in annotations] == [vault / "Note.md", vault / "docs" / "Note.md", None]
    assert annotations[0].message is None
    assert annotations[2].message == "Cannot resolve wiki link: [[Missing]]"
    assert text[annotations[2].link.start : annotations[2].link.end] == "[[Missing]]"


def _vault_info(path, **daily):
    return VaultInfo(name="v", path=path, config=PeriodicNotesConfig(daily=PeriodConfig(**daily)))


def test_daily_note_markers(tmp_path):
    daily = tmp_path / "Daily"
    daily.mkdir()
    (daily / "2025-11-20.md").write_text("")
    text = "Met on 2025-11-20, planned 2025-11-21, bogus 2025-02-30, id 12025-11-20x"
    markers = daily_note_markers(text, _vault_info(tmp_path, folder="Daily", enabled=True))
    assert [(m.date_text, m.note) for m in markers] == [("2025-11-20", daily / "2025-11-20.md")]
    assert text[markers[0].start : markers[0].end] == "2025-11-20"


def test_daily_note_markers_use_configured_format(tmp_path):
    (tmp_path / "2025").mkdir()
    (tmp_path / "2025" / "11-20.md").write_text("")
    vault = _vault_info(tmp_path, folder="", enabled=True, format="YYYY/MM-DD")
    assert [m.date_text for m in daily_note_markers("on 2025-11-20", vault)] == ["2025-11-20"]


def test_daily_note_markers_disabled(tmp_path):
    (tmp_path / "2025-11-20.md").write_text("")
    vault = _vault_info(tmp_path, folder="", enabled=False)
    assert daily_note_markers("2025-11-20", vault) == []
