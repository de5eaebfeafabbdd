"""Tests for vault reading and wikilink extraction."""

from textwrap import dedent

import pytest

from vaultlink.vault import clean_link, find_wikilinks, list_note_files, load_vault, parse_note


@pytest.fixture
def tmp_vault(tmp_path):
    """Create a minimal Obsidian vault with a few linked notes."""
    (tmp_path / "Epistemology.md").write_text(
        dedent("""\
        ---
        title: Theory of Knowledge
        tags: [philosophy]
        ---
        # Epistemology

        The study of knowledge. Closely related to [[Philosophy of Science]].
        See also [[Math/Bayesian Inference|Bayes]] for a formal framework.
        """)
    )
    (tmp_path / "Philosophy of Science.md").write_text(
        dedent("""\
        # Philosophy of Science

        Links to [[Epistemology#Definitions]] and [[Scientific Method]].
        """)
    )
    math = tmp_path / "Math"
    math.mkdir()
    (math / "Bayesian Inference.md").write_text("Updating beliefs. P(H|E) = P(E|H)P(H)/P(E).")
    (math / "figure.png").write_bytes(b"\x89PNG")
    # Hidden dir, skipped
    hidden = tmp_path / ".obsidian"
    hidden.mkdir()
    (hidden / "config.md").write_text("should be skipped")
    return tmp_path


def test_clean_link_strips_alias_and_whitespace():
    assert clean_link("  Folder/Note |Display") == "Folder/Note"
    assert clean_link("|Only alias") == ""
    assert clean_link("A|B|C") == "A"


def test_find_wikilinks_offsets_cover_brackets():
    text = "See [[Note|Alias]] and [[Other]]."
    links = find_wikilinks(text)
    assert [link.text for link in links] == ["Note|Alias", "Other"]
    assert text[links[0].start : links[0].end] == "[[Note|Alias]]"
    assert links[0].target == "Note"
    assert links[0].alias == "Alias"
    assert links[1].alias is None


def test_find_wikilinks_none():
    assert find_wikilinks("plain [text] only") == []


def test_parse_note_frontmatter(tmp_vault):
    note = parse_note(tmp_vault / "Epistemology.md")
    assert note.title == "Theory of Knowledge"
    assert note.frontmatter["tags"] == ["philosophy"]
    assert "---" not in note.content


def test_parse_note_links_keep_folder_drop_alias(tmp_vault):
    note = parse_note(tmp_vault / "Epistemology.md")
    assert note.outgoing_links == ["Philosophy of Science", "Math/Bayesian Inference"]


def test_parse_note_strips_heading(tmp_vault):
    note = parse_note(tmp_vault / "Philosophy of Science.md")
    assert note.title == "Philosophy of Science"  # falls back to filename stem
    assert note.outgoing_links == ["Epistemology", "Scientific Method"]


def test_parse_note_malformed_frontmatter(tmp_path):
    path = tmp_path / "broken.md"
    path.write_text("---\ntitle: [unclosed\n---\nBody [[Target]]\n")
    note = parse_note(path)
    assert note.frontmatter == {}
    assert note.outgoing_links == ["Target"]


def test_list_note_files_skips_hidden_and_other_types(tmp_vault):
    files = list_note_files(tmp_vault)
    names = [f.name for f in files]
    assert names == ["Epistemology.md", "Bayesian Inference.md", "Philosophy of Science.md"]


def test_list_note_files_missing_root(tmp_path):
    assert list_note_files(tmp_path / "nope") == []


def test_load_vault(tmp_vault):
    notes = load_vault(tmp_vault)
    assert {n.slug for n in notes} == {"epistemology", "philosophy of science", "bayesian inference"}


def test_load_vault_not_found():
    with pytest.raises(FileNotFoundError):
        load_vault("/nonexistent/vault")
