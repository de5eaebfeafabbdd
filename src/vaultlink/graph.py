"""Build the link graph of a vault from resolved wikilinks."""

from __future__ import annotations

import networkx as nx

from vaultlink.resolve import LinkResolver
from vaultlink.vault import Note


def _node_id(note_path, root) -> str:
    try:
        return note_path.relative_to(root).as_posix()
    except ValueError:
        return note_path.as_posix()


def build_link_graph(notes: list[Note], resolver: LinkResolver) -> nx.DiGraph:
    """Build a directed graph from the wikilinks between notes.

    Nodes are note paths relative to the resolver's root. An edge A -> B
    exists if a link in A resolves to B. Links to files outside ``notes``
    still add their target as a node.
    """
    G = nx.DiGraph()
    for note in notes:
        G.add_node(_node_id(note.path, resolver.root), title=note.title)

    for note in notes:
        source = _node_id(note.path, resolver.root)
        for link in note.outgoing_links:
            target = resolver.resolve(link)
            if target is None:
                continue
            target_id = _node_id(target, resolver.root)
            if target_id != source:
                G.add_edge(source, target_id)

    return G


def unresolved_links(notes: list[Note], resolver: LinkResolver) -> list[tuple[Note, str]]:
    """``(note, link)`` pairs whose link target does not exist."""
    return [
        (note, link)
        for note in notes
        for link in note.outgoing_links
        if resolver.resolve(link) is None
    ]
