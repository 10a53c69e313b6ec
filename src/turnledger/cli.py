from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from turnledger.cassette.store import CassetteStore, default_directory
from turnledger.errors import CassetteCorruptError, CassetteMissingError

app = typer.Typer(add_completion=False, no_args_is_help=True)
console = Console()
cassettes_app = typer.Typer(add_completion=False, no_args_is_help=True)
app.add_typer(cassettes_app, name="cassettes", help="Inspect recorded cassettes.")

_PREVIEW = 60


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log cassette and transport activity"),
) -> None:
    """Deterministic record/replay for conversational agent tests."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)],
        )


def _store(directory: Optional[Path]) -> CassetteStore:
    return CassetteStore(directory if directory is not None else default_directory())


def _preview(text: str) -> str:
    flat = " ".join(text.split())
    if len(flat) > _PREVIEW:
        return flat[: _PREVIEW - 3] + "..."
    return flat


@cassettes_app.command("list")
def list_cassettes(
    directory: Optional[Path] = typer.Option(None, "--dir", help="Cassette directory"),
) -> None:
    """List cassettes with their source, model and a content preview."""
    store = _store(directory)
    table = Table(title=f"Cassettes in {store.directory}", show_lines=False)
    table.add_column("Fingerprint", no_wrap=True, min_width=12)
    table.add_column("Source", no_wrap=True)
    table.add_column("Model")
    table.add_column("Tool calls", justify="right")
    table.add_column("Content")

    count = 0
    for fingerprint in store.iter_fingerprints():
        count += 1
        try:
            record = store.load(fingerprint)
        except CassetteCorruptError:
            table.add_row(fingerprint[:12], "[red]corrupt[/red]", "", "", "")
            continue
        table.add_row(
            fingerprint[:12],
            str(record.meta.get("source", "")),
            str(record.meta.get("model", "")),
            str(len(record.result.tool_calls)),
            _preview(record.result.content),
        )

    if count == 0:
        console.print(f"No cassettes found in {store.directory}")
        return
    console.print(table)


@cassettes_app.command("show")
def show_cassette(
    fingerprint: str = typer.Argument(..., help="Fingerprint, or a unique prefix of one"),
    directory: Optional[Path] = typer.Option(None, "--dir", help="Cassette directory"),
) -> None:
    """Print one cassette as formatted JSON."""
    store = _store(directory)
    matches = [candidate for candidate in store.iter_fingerprints() if candidate.startswith(fingerprint)]
    if len(matches) > 1:
        console.print(f"[red]Ambiguous fingerprint prefix:[/red] {fingerprint} ({len(matches)} matches)")
        raise typer.Exit(code=1)
    target = matches[0] if matches else fingerprint
    try:
        record = store.load(target)
    except (CassetteMissingError, CassetteCorruptError) as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print_json(json.dumps(record.to_document(), ensure_ascii=False))


@cassettes_app.command("verify")
def verify_cassettes(
    directory: Optional[Path] = typer.Option(None, "--dir", help="Cassette directory"),
) -> None:
    """Load every cassette; exit 1 if any of them is corrupt."""
    store = _store(directory)
    total = 0
    corrupt: list[tuple[str, str]] = []
    for fingerprint in store.iter_fingerprints():
        total += 1
        try:
            store.load(fingerprint)
        except CassetteCorruptError as exc:
            corrupt.append((fingerprint, str(exc)))

    if corrupt:
        for fingerprint, reason in corrupt:
            console.print(f"[red]CORRUPT[/red] {fingerprint}: {reason}")
        console.print(f"{len(corrupt)} of {total} cassette(s) are corrupt")
        raise typer.Exit(code=1)
    console.print(f"[green]OK[/green] {total} cassette(s) verified in {store.directory}")


if __name__ == "__main__":
    app()
