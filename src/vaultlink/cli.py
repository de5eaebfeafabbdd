"""CLI entrypoint for vaultlink."""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path

import click
import networkx as nx
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from vaultlink.config import VaultRegistry
from vaultlink.editor import MAX_COMPLETIONS, completion_items
from vaultlink.graph import build_link_graph, unresolved_links
from vaultlink.periods import Period
from vaultlink.resolve import LinkResolver
from vaultlink.roots import VAULT_MARKER, detect_vault_root
from vaultlink.store import open_periodic_note, period_overview
from vaultlink.vault import load_vault

console = Console(soft_wrap=True)

PERIOD_CHOICE = click.Choice([p.key for p in Period], case_sensitive=False)


def _date_option(f):
    return click.option(
        "--date",
        "date_",
        type=click.DateTime(formats=["%Y-%m-%d"]),
        default=None,
        help="Date to use instead of today (YYYY-MM-DD).",
    )(f)


def _search_path_option(f):
    return click.option(
        "--search-path",
        "search_paths",
        multiple=True,
        type=click.Path(exists=True, file_okay=False),
        help="Directory to scan for vaults (repeatable, default: current directory).",
    )(f)


def _registry(search_paths: tuple[str, ...]) -> VaultRegistry:
    return VaultRegistry([Path(p).resolve() for p in search_paths] or [Path.cwd()])


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
def main(verbose: bool):
    """vaultlink: Obsidian wikilinks and periodic notes for plain markdown folders."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.argument("link")
def resolve(vault: str, link: str):
    """Print the note a [[LINK]] resolves to."""
    target = LinkResolver(vault).resolve(link)
    if target is None:
        console.print(f"[red]Cannot resolve wiki link: {escape(f'[[{link}]]')}[/red]")
        raise SystemExit(1)
    console.print(str(target), markup=False, highlight=False)


@main.command()
@click.argument("path", type=click.Path(exists=True))
@click.option("--marker", default=VAULT_MARKER, show_default=True, help="Vault marker directory.")
def root(path: str, marker: str):
    """Print the vault root a file or directory belongs to."""
    vault_root = detect_vault_root(Path(path).resolve(), marker=marker)
    console.print(str(vault_root), markup=False, highlight=False)


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
def check(vault: str):
    """List wikilinks that do not resolve to a note."""
    vault_path = Path(vault)

    with console.status("Loading vault..."):
        notes = load_vault(vault_path)
        broken = unresolved_links(notes, LinkResolver(vault_path))

    if not broken:
        console.print(f"[green]All links resolve in {len(notes)} notes.[/green]")
        return

    table = Table(title="Unresolved links")
    table.add_column("Note", style="cyan")
    table.add_column("Link", style="red")
    for note, link in broken:
        table.add_row(escape(note.path.relative_to(vault_path).as_posix()), escape(f"[[{link}]]"))
    console.print(table)
    raise SystemExit(1)


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
def stats(vault: str):
    """Print basic statistics about the vault's link structure."""
    vault_path = Path(vault)
    resolver = LinkResolver(vault_path)

    notes = load_vault(vault_path)
    link_graph = build_link_graph(notes, resolver)

    console.print(f"Notes: {len(notes)}")
    console.print(f"Resolved links: {link_graph.number_of_edges()}")
    console.print(f"Unresolved links: {len(unresolved_links(notes, resolver))}")

    if link_graph.number_of_nodes() > 0:
        components = nx.number_weakly_connected_components(link_graph)
        console.print(f"Connected components: {components}")
        console.print(f"Isolated notes (no links): {nx.number_of_isolates(link_graph)}")


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.argument("prefix", required=False, default="")
@click.option("--max-results", default=MAX_COMPLETIONS, show_default=True)
def complete(vault: str, prefix: str, max_results: int):
    """List completion candidates for [[PREFIX."""
    resolver = LinkResolver(vault)
    items = completion_items(resolver.candidates(), resolver.root, max_results=max_results)
    seen: set[tuple[str, str]] = set()
    for item in items:
        if not item.lookup.lower().startswith(prefix.lower()):
            continue
        if (item.insert_text, item.detail) in seen:
            continue
        seen.add((item.insert_text, item.detail))
        console.print(f"[bold]{escape(item.insert_text)}[/bold]  [dim]{escape(item.detail)}[/dim]")


@main.command("format")
@click.argument("period", type=PERIOD_CHOICE)
@_date_option
@click.option("--format", "fmt", default=None, help="Token format, e.g. 'GGGG-[W]WW'.")
def format_cmd(period: str, date_: dt.datetime | None, fmt: str | None):
    """Print the filename stem of a periodic note."""
    date = date_.date() if date_ else dt.date.today()
    console.print(Period.from_key(period).format(date, fmt), markup=False, highlight=False)


@main.command()
@click.argument("period", type=PERIOD_CHOICE)
@_date_option
@_search_path_option
@click.option("--file", "current_file", type=click.Path(), default=None,
              help="File being edited; picks the vault that contains it.")
@click.option("--no-create", is_flag=True, help="Do not create a missing note.")
def note(period: str, date_, search_paths, current_file: str | None, no_create: bool):
    """Open or create the periodic note and print its path."""
    registry = _registry(search_paths)
    vault = registry.contextual_vault(Path(current_file).resolve() if current_file else None)
    if vault is None:
        console.print("[red]No vault with periodic notes configured was found.[/red]")
        raise SystemExit(1)

    kind = Period.from_key(period)
    config = vault.period_config(kind)
    if config is None or not config.enabled:
        console.print(f"[yellow]{kind.label} notes are not enabled in vault: {escape(vault.name)}[/yellow]")
        raise SystemExit(1)

    date = date_.date() if date_ else None
    path = open_periodic_note(vault, kind, date, create=not no_create)
    if path is None:
        console.print(f"[red]Could not open {kind.label.lower()} note in {escape(vault.name)}.[/red]")
        raise SystemExit(1)
    console.print(str(path), markup=False, highlight=False)


@main.command()
@_search_path_option
@_date_option
@click.option("--debug", is_flag=True, help="Print vault detection details.")
def vaults(search_paths, date_, debug: bool):
    """Show discovered vaults and their periodic notes."""
    registry = _registry(search_paths)
    if debug:
        console.print(registry.debug_info(), highlight=False, markup=False)
        return

    if not registry.is_available():
        console.print("[yellow]Periodic Notes plugin not configured.[/yellow]")
        return

    date = date_.date() if date_ else None
    for vault in registry.vaults:
        table = Table(title=escape(f"{vault.name} ({vault.path})"))
        table.add_column("Period", style="cyan")
        table.add_column("Note")
        table.add_column("Status", justify="right")
        for row in period_overview(vault, date):
            status = "[green]open[/green]" if row.exists else "[dim]create[/dim]"
            table.add_row(row.period.label, escape(row.filename), status)
        console.print(table)


if __name__ == "__main__":
    main()
