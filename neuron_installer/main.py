"""
Neuron Node Builder installer — CLI entrypoint.

Usage:
    neuron-installer --help
    neuron-installer install
    neuron-installer install --force --no-start
    neuron-installer check --sdk
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from neuron_installer import __version__
from neuron_installer.core.observability.logging_config import setup_from_flags


def load_config_or_exit(ctx: click.Context):
    """Load installer.yml (or the built-in table); exit 1 on a bad file."""
    from neuron_installer.core.config.loader import load_config
    from neuron_installer.core.errors import ConfigError

    try:
        return load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red")
        sys.exit(1)


def print_error(error: Exception) -> None:
    from neuron_installer.core.errors import UserCancelled

    if isinstance(error, UserCancelled):
        click.secho(f"⊘ {error}", fg="yellow")
    else:
        click.secho(f"❌ Error: {error}", fg="red", err=True)


@click.group()
@click.version_option(version=__version__, prog_name="neuron-installer")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to installer.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """Neuron Node Builder installer — clone, configure, build and link the Neuron stack."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_flags(debug=debug, verbose=verbose, quiet=quiet)


@cli.command()
@click.option("--force", "-f", is_flag=True, help="Answer yes to every prompt (replaces existing checkouts).")
@click.option("--sdk/--no-sdk", "with_sdk", default=None, help="Install the Go SDK (default: ask).")
@click.option(
    "--registration/--no-registration",
    "with_registration",
    default=None,
    help="Install the registration module, if configured (default: ask).",
)
@click.option(
    "--dir",
    "base_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to clone into (default: current directory).",
)
@click.option("--start/--no-start", "start", default=None, help="Start the app when done (default: ask).")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def install(
    ctx: click.Context,
    force: bool,
    with_sdk: bool | None,
    with_registration: bool | None,
    base_dir: str | None,
    start: bool | None,
    as_json: bool,
) -> None:
    """Install Neuron Node Builder and its optional companions.

    Examples:

        neuron-installer install

        neuron-installer install --force --no-start

        neuron-installer install --sdk --dir ~/neuron
    """
    from neuron_installer.adapters.registry import AdapterRegistry
    from neuron_installer.core.engine.pipeline import Stage
    from neuron_installer.core.services.prompts import Prompter
    from neuron_installer.core.use_cases.install import run_install

    config = load_config_or_exit(ctx)
    quiet = ctx.obj.get("quiet", False) or as_json
    prompter = Prompter.for_force(force)
    registry = AdapterRegistry.default()

    def on_stage(stage: Stage) -> None:
        if not quiet:
            click.secho(f"\n▶ {stage.label}...", fg="cyan", bold=True)

    def echo(line: str) -> None:
        if not quiet:
            click.echo(f"   {line}" if line else "")

    if not quiet:
        click.secho("\n📦 Neuron Node Builder Installer", fg="cyan", bold=True)
        click.echo()

    result = run_install(
        config,
        prompter=prompter,
        force=force,
        with_sdk=with_sdk,
        with_registration=with_registration,
        base_dir=Path(base_dir).expanduser() if base_dir else None,
        registry=registry,
        on_stage=on_stage,
        echo=echo,
    )

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(0 if result.ok else 1)

    failure = result.failure
    if failure is not None:
        click.echo()
        print_error(failure)
        sys.exit(1)

    report, plan = result.report, result.plan
    if report is None or plan is None:
        raise click.ClickException("Installation did not run")

    for warning in report.warnings:
        click.secho(f"   ⚠️  {warning}", fg="yellow")
    for name, kind in report.links.items():
        click.echo(f"   🔗 {name}: {kind.value}")

    click.echo()
    click.secho("✅ Installation completed successfully!", fg="green", bold=True)
    click.echo("   Repositories installed in:")
    for line in result.summary:
        click.echo(f"   {line}")
    click.echo()

    from neuron_installer.core.services.launcher import should_start

    if should_start(prompter, start):
        _start(plan.builder_dir, registry)
    else:
        click.echo("To start the application:")
        click.echo(f"  from the {plan.builder.local_dir} directory run:")
        click.echo("  npm run start")
        click.echo()


@cli.command()
@click.option("--sdk/--no-sdk", "with_sdk", default=False, help="Include the Go SDK's prerequisites.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def check(ctx: click.Context, with_sdk: bool, as_json: bool) -> None:
    """Check that git, Node.js, npm (and Go) are installed and recent enough."""
    from neuron_installer.core.models.project import SDK
    from neuron_installer.core.services.prerequisites import survey_prerequisites
    from neuron_installer.core.use_cases.install import make_plan

    config = load_config_or_exit(ctx)
    projects = [p for p in config.projects if p.required or (with_sdk and p.name == SDK)]
    results = survey_prerequisites(make_plan(projects))
    all_ok = all(r["ok"] for r in results)

    if as_json:
        click.echo(json.dumps({"ok": all_ok, "tools": results}, indent=2))
        sys.exit(0 if all_ok else 1)

    click.secho("\n🔍 Prerequisites", fg="cyan", bold=True)
    for r in results:
        if r["ok"]:
            version = f" {r['version']}" if r.get("version") else ""
            click.secho(f"   ✓ {r['tool']}", fg="green", nl=False)
            click.echo(f"{version}  → {r['path']}")
        else:
            click.secho(f"   ✗ {r['tool']} ", fg="red", nl=False)
            click.echo(r["error"])
    click.echo()

    if not all_ok:
        sys.exit(1)


@cli.command()
@click.option(
    "--dir",
    "base_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory the builder was cloned into (default: current directory).",
)
@click.pass_context
def start(ctx: click.Context, base_dir: str | None) -> None:
    """Start an installed Neuron Node Builder (npm run start)."""
    from neuron_installer.adapters.registry import AdapterRegistry
    from neuron_installer.core.errors import ConfigError

    config = load_config_or_exit(ctx)
    try:
        builder = config.builder
    except ConfigError as e:
        print_error(e)
        sys.exit(1)
    root = Path(base_dir).expanduser() if base_dir else Path.cwd()
    _start((root / builder.local_dir).resolve(), AdapterRegistry.default())


def _start(builder_dir: Path, registry) -> None:
    from neuron_installer.core.errors import InstallerError
    from neuron_installer.core.services.launcher import start_application

    click.secho("🚀 Starting Neuron Node Builder...", fg="cyan")
    try:
        start_application(builder_dir, registry)
    except InstallerError as e:
        print_error(e)
        sys.exit(1)


# ── Register sub-commands from neuron_installer/ui/cli/ ─────────────

from neuron_installer.ui.cli.bootstrap import bootstrap  # noqa: E402
from neuron_installer.ui.cli.history import history  # noqa: E402

cli.add_command(bootstrap)
cli.add_command(history)


if __name__ == "__main__":
    cli()
