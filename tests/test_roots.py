"""Tests for vault root detection."""

import pytest

from vaultlink.roots import count_note_files, detect_vault_root


def _touch_notes(directory, count, prefix="n"):
    directory.mkdir(parents=True, exist_ok=True)
    for i in range(count):
        (directory / f"{prefix}{i}.md").write_text("")


@pytest.fixture
def marked_vault(tmp_path):
    """A vault with .obsidian nested under a note-dense parent directory."""
    _touch_notes(tmp_path, 6)  # the parent alone passes the density check
    vault = tmp_path / "vault"
    (vault / ".obsidian").mkdir(parents=True)
    note = vault / "a" / "b" / "c" / "Note.md"
    note.parent.mkdir(parents=True)
    note.write_text("")
    return tmp_path, vault, note


def test_marker_wins_over_density(marked_vault):
    _, vault, note = marked_vault
    assert detect_vault_root(note) == vault


def test_directory_input_starts_at_itself(marked_vault):
    _, vault, _ = marked_vault
    assert detect_vault_root(vault) == vault
    assert detect_vault_root(vault / "a") == vault


def test_marker_beyond_depth_is_ignored(tmp_path):
    (tmp_path / ".obsidian").mkdir()
    deep = tmp_path.joinpath(*[f"d{i}" for i in range(10)])
    deep.mkdir(parents=True)
    note = deep / "Note.md"
    note.write_text("")
    # ten levels searched: d9 .. d0, tmp_path is the eleventh
    assert detect_vault_root(note) == deep
    assert detect_vault_root(note, marker_depth=11) == tmp_path


def test_marker_must_be_a_directory(tmp_path):
    (tmp_path / ".obsidian").write_text("not a dir")
    note = tmp_path / "sub" / "Note.md"
    note.parent.mkdir()
    note.write_text("")
    assert detect_vault_root(note) == tmp_path / "sub"


def test_density_fallback(tmp_path):
    _touch_notes(tmp_path / "notes", 5)
    note = tmp_path / "notes" / "inbox" / "Note.md"
    note.parent.mkdir()
    note.write_text("")
    assert detect_vault_root(note, marker=".no-such-marker") == tmp_path / "notes"


def test_density_threshold_counts_only_direct_md_files(tmp_path):
    target = tmp_path / "notes"
    _touch_notes(target, 4)
    (target / "image.png").write_text("")
    (target / "dir.md").mkdir()
    _touch_notes(target / "nested", 10)
    assert count_note_files(target) == 4
    note = target / "inbox" / "Note.md"
    note.parent.mkdir()
    note.write_text("")
    root = detect_vault_root(note, marker=".no-such-marker", density_depth=2)
    assert root == target / "inbox"


def test_last_resort_is_parent(tmp_path):
    note = tmp_path / "lonely" / "Note.md"
    note.parent.mkdir()
    note.write_text("")
    assert detect_vault_root(note, marker=".no-such-marker", density_threshold=100) == note.parent


def test_none_input():
    assert detect_vault_root(None) is None


def test_deterministic(marked_vault):
    _, _, note = marked_vault
    assert detect_vault_root(note) == detect_vault_root(note)


def test_relative_path_walks_up_from_cwd(marked_vault, monkeypatch):
    _, vault, note = marked_vault
    monkeypatch.chdir(note.parent)
    assert detect_vault_root("Note.md").samefile(vault)
    assert detect_vault_root(".").samefile(vault)
