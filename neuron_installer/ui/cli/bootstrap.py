"""
CLI command for the thin bootstrap launcher.

Thin wrapper over ``neuron_installer.core.services.launcher``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click


@click.command()
@click.option("--force", "-f", is_flag=True, help="Pass --force to the install script and skip prompts.")
@click.option("--url", "script_url", default=None, help="Install script URL (default: from config).")
@click.option("--start/--no-start", "start", default=None, help="Start the app when done (default: ask).")
@click.pass_context
def bootstrap(ctx: click.Context, force: bool, script_url: str | None, start: bool | None) -> None:
    """Download and run the published install script, then clean it up."""
    from neuron_installer.adapters.registry import AdapterRegistry
    from neuron_installer.core.errors import InstallerError
    from neuron_installer.core.services.launcher import (
        run_remote_installer,
        should_start,
        start_application,
    )
    from neuron_installer.core.services.prompts import Prompter
    from neuron_installer.main import load_config_or_exit, print_error

    config = load_config_or_exit(ctx)
    url = script_url or config.script_url
    workdir = Path.cwd()
    registry = AdapterRegistry.default()
    prompter = Prompter.for_force(force)

    click.secho("\n📦 Neuron Node Builder Installer", fg="cyan", bold=True)
    click.echo()

    try:
        builder_dir = workdir / config.builder.local_dir
        run_remote_installer(url, workdir, registry, force=force)
    except InstallerError as e:
        print_error(e)
        sys.exit(1)

    click.echo()
    if should_start(prompter, start):
        click.secho("🚀 Starting Neuron Node Builder...", fg="cyan")
        try:
            start_application(builder_dir, registry)
        except InstallerError as e:
            print_error(e)
            sys.exit(1)
    else:
        click.echo(f"To start, cd into the '{builder_dir.name}' directory and run 'npm run start'")
