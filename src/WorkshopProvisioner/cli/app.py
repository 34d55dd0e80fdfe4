"""CLI application entrypoint built with Typer."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Callable, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..cluster import OpenShiftClient
from ..config import ProvisionerConfig, load_provisioner_config
from ..exceptions import ConfigError, ProvisionerError, UsageError
from ..logging_utils import configure_logging
from ..runner import RunMode, WorkshopRunner
from ..telemetry import configure_otel

PROG_NAME = "workshop-provisioner"

app = typer.Typer(help="Provision and verify OpenShift workshop users", no_args_is_help=True)

# Commands take the user count as raw text so that values such as "-1" reach
# our own validation instead of being parsed as options.
_COUNT_COMMAND_SETTINGS = {"ignore_unknown_options": True}

ClientBuilder = Callable[[ProvisionerConfig], OpenShiftClient]
client_builder: Optional[ClientBuilder] = None


def register_client_builder(builder: Optional[ClientBuilder]) -> None:
    """Override how the cluster client is constructed (used by tests and embedding tools)."""

    global client_builder
    client_builder = builder


def _build_client(config: ProvisionerConfig) -> OpenShiftClient:
    if client_builder is not None:
        return client_builder(config)
    return OpenShiftClient(binary=config.cluster.binary)


def _usage(command: str) -> None:
    typer.echo(f"Usage: {PROG_NAME} {command} <number_of_users>")
    typer.echo(f"Example: {PROG_NAME} {command} 7")


def _fail(message: str) -> None:
    typer.secho(f"Error: {message}", fg=typer.colors.RED)
    raise typer.Exit(code=1)


def _execute(ctx: typer.Context, users: Optional[str], mode: RunMode) -> None:
    config: ProvisionerConfig = ctx.obj["config"]
    logger: logging.Logger = ctx.obj["logger"]
    if users is None:
        _usage(mode.value)
        raise typer.Exit(code=1)

    runner = WorkshopRunner(config, client=_build_client(config))
    try:
        report = runner.run(users, mode=mode)
    except UsageError as exc:
        _fail(str(exc))
    except ProvisionerError as exc:
        logger.error("Run failed: %s", exc)
        _fail(str(exc))
    else:
        if report.report_path is not None:
            typer.echo()
            typer.echo(f"Run report: {report.report_path}")


@app.callback()
def main_callback(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(None, "--config", help="Path to provisioner configuration (YAML)."),
    scripts_dir: Optional[Path] = typer.Option(
        None, "--scripts-dir", help="Directory containing the provisioning scripts."
    ),
    log_format: Optional[str] = typer.Option(None, "--log-format", help="Log format for file output (text or json)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging."),
) -> None:
    """Resolve configuration and configure logging."""

    overrides = {"log_format": log_format, "verbose": verbose, "scripts_dir": scripts_dir}
    try:
        resolved = load_provisioner_config(config, overrides=overrides)
    except ConfigError as exc:
        _fail(str(exc))

    logger = configure_logging(
        resolved.reporting.log_path,
        resolved.reporting.log_format,
        resolved.reporting.verbose,
    )
    configure_otel(env=os.environ)
    ctx.obj = {"config": resolved, "logger": logger}


@app.command("run", context_settings=_COUNT_COMMAND_SETTINGS)
def run(
    ctx: typer.Context,
    users: Optional[str] = typer.Argument(None, metavar="NUMBER_OF_USERS", help="Number of workshop users."),
) -> None:
    """Run every provisioning script, then verify the user deployments."""

    _execute(ctx, users, RunMode.FULL)


@app.command("provision", context_settings=_COUNT_COMMAND_SETTINGS)
def provision(
    ctx: typer.Context,
    users: Optional[str] = typer.Argument(None, metavar="NUMBER_OF_USERS", help="Number of workshop users."),
) -> None:
    """Run the provisioning scripts without verification."""

    _execute(ctx, users, RunMode.PROVISION)


@app.command("verify", context_settings=_COUNT_COMMAND_SETTINGS)
def verify(
    ctx: typer.Context,
    users: Optional[str] = typer.Argument(None, metavar="NUMBER_OF_USERS", help="Number of workshop users."),
) -> None:
    """Verify that every user deployment exists and is available."""

    _execute(ctx, users, RunMode.VERIFY)


@app.command("scripts")
def scripts(ctx: typer.Context) -> None:
    """List the configured provisioning scripts in execution order."""

    config: ProvisionerConfig = ctx.obj["config"]
    directory = config.scripts.directory
    table = Table(title=f"Provisioning scripts in {directory}")
    table.add_column("#", justify="right")
    table.add_column("Script")
    table.add_column("Present")
    table.add_column("Executable")
    missing = 0
    for index, name in enumerate(config.scripts.names, start=1):
        path = directory / name
        present = path.is_file()
        executable = present and os.access(path, os.X_OK)
        if not present:
            missing += 1
        table.add_row(str(index), name, "yes" if present else "no", "yes" if executable else "no")
    Console(width=120).print(table)
    if missing:
        _fail(f"{missing} script(s) not found in {directory}")


def main() -> None:
    """Entrypoint for the CLI."""

    app(prog_name=PROG_NAME)


if __name__ == "__main__":  # pragma: no cover
    main()
