"""
CLI command for the installer audit ledger.
"""

from __future__ import annotations

import json
from pathlib import Path

import click


@click.command()
@click.option("--limit", "-n", default=10, type=int, help="Number of runs to show.")
@click.option(
    "--dir",
    "base_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory the installer ran in (default: current directory).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
def history(limit: int, base_dir: str | None, as_json: bool) -> None:
    """Show recent installer runs."""
    from neuron_installer.core.persistence.audit import AuditWriter

    root = Path(base_dir).expanduser() if base_dir else Path.cwd()
    entries = AuditWriter(base_dir=root.resolve()).read_recent(limit)

    if as_json:
        click.echo(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return

    if not entries:
        click.echo("No installer runs recorded.")
        return

    status_colors = {"ok": "green", "cancelled": "yellow", "failed": "red"}
    click.secho(f"\n📜 Last {len(entries)} run(s)", fg="cyan", bold=True)
    for entry in reversed(entries):
        click.secho(f"   {entry.status:<9}", fg=status_colors.get(entry.status, "white"), nl=False)
        click.echo(f" {entry.timestamp}  {', '.join(entry.projects)}")
        if entry.aborted_at:
            click.echo(f"             stopped at {entry.aborted_at}")
        for err in entry.errors:
            click.echo(f"             │ {err}")
    click.echo()
