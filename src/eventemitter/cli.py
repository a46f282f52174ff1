"""CLI entry point for the eventemitter command."""

from __future__ import annotations

import math
from pathlib import Path

import click

from eventemitter.config import EmitterConfig, load_config, write_config
from eventemitter.emitter import EventEmitter
from eventemitter.errors import EventEmitterError
from eventemitter.logging import get_logger, setup_logging

_log = get_logger("cli")


class MaxListenersType(click.ParamType):
    """A positive integer, or ``unlimited``."""

    name = "count|unlimited"

    def convert(self, value, param, ctx):
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            count = value
        elif str(value).lower() == "unlimited":
            return math.inf
        else:
            try:
                count = int(value)
            except ValueError:
                self.fail(f"{value!r} is not an integer or 'unlimited'", param, ctx)
        if count < 1:
            self.fail(f"{value!r} must be >= 1", param, ctx)
        return count


@click.group()
@click.option(
    "--log-level",
    default=None,
    envvar="EVENTEMITTER_LOG_LEVEL",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    help="Logging verbosity (overrides the config file)",
)
@click.option(
    "--log-file",
    default=None,
    envvar="EVENTEMITTER_LOG_FILE",
    type=click.Path(),
    help="Log to file (overrides the config file)",
)
@click.version_option(package_name="eventemitter")
@click.pass_context
def main(ctx: click.Context, log_level: str | None, log_file: str | None) -> None:
    """eventemitter -- check and scaffold emitter configuration files."""
    # Store CLI overrides so commands that load a config can apply its
    # log settings underneath them.
    ctx.ensure_object(dict)
    ctx.obj["log_level"] = log_level
    ctx.obj["log_file"] = log_file
    setup_logging(level=log_level or "WARNING", log_file=log_file, stderr=True)


@main.command()
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True),
    help="Path to eventemitter.yaml",
)
@click.pass_context
def validate(ctx: click.Context, config_path: str | None) -> None:
    """Validate an eventemitter.yaml configuration."""
    try:
        cfg = load_config(config_path)
    except EventEmitterError as e:
        click.echo(f"Config error: {e}", err=True)
        raise SystemExit(1)

    errors = cfg.validate()
    if errors:
        click.echo(f"Found {len(errors)} error(s):", err=True)
        for e in errors:
            click.echo(f"  x {e}", err=True)
        raise SystemExit(1)

    cli_obj = ctx.obj or {}
    log_level = cli_obj.get("log_level") or cfg.log_level
    log_file = cli_obj.get("log_file") or cfg.log_file
    setup_logging(level=log_level, log_file=log_file, stderr=True)

    # Building the emitter is the final word on the vocabulary.
    try:
        EventEmitter.from_config(cfg, configure_logging=False)
    except EventEmitterError as e:
        click.echo(f"Found 1 error(s):\n  x {e}", err=True)
        raise SystemExit(1)

    limit = "unlimited" if cfg.max_listeners == math.inf else cfg.max_listeners
    _log.info("validated %s", cfg.source_path or "default config")
    click.echo(f"Config OK: {len(cfg.events)} events, max_listeners={limit}")


@main.command()
@click.option(
    "-o",
    "--output",
    "output_path",
    default="eventemitter.yaml",
    help="Output config path (default: ./eventemitter.yaml)",
)
@click.option("-e", "--event", "events", multiple=True, help="Allowed event name (repeatable)")
@click.option(
    "--max-listeners",
    type=MaxListenersType(),
    default=10,
    help="Listener warning threshold, or 'unlimited'",
)
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def init(output_path: str, events: tuple[str, ...], max_listeners: float, force: bool) -> None:
    """Write a starter eventemitter.yaml."""
    if Path(output_path).exists() and not force:
        click.echo(f"{output_path} already exists (use --force to overwrite)", err=True)
        raise SystemExit(1)

    cfg = EmitterConfig(events=list(events), max_listeners=max_listeners)
    errors = cfg.validate()
    if errors:
        for e in errors:
            click.echo(f"Config error: {e}", err=True)
        raise SystemExit(1)

    write_config(output_path, cfg)
    click.echo(f"Wrote {output_path}")
