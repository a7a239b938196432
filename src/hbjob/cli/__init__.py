"""CLI module for hbjob."""

import logging
from pathlib import Path

import click

from hbjob.cli.exit_codes import ExitCode
from hbjob.config import build_logging_config, get_config
from hbjob.exceptions import ConfigurationError
from hbjob.logging import configure_logging

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(package_name="hbjob")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: ~/.hbjob/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: info).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """hbjob - transcode media with HandBrake only when it is needed."""
    ctx.ensure_object(dict)

    # Preserve a config passed in by tests
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(config_path)
        except ConfigurationError as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(ExitCode.CONFIG_ERROR)

    config = ctx.obj["config"]
    configure_logging(
        build_logging_config(
            config.logging,
            level=log_level.lower() if log_level else None,
            file=log_file,
            format="json" if log_json else None,
        )
    )


# Defer import to avoid circular dependency
def _register_commands():
    from hbjob.cli.check import check_command
    from hbjob.cli.preset import preset_command
    from hbjob.cli.run import run_command

    main.add_command(check_command)
    main.add_command(preset_command)
    main.add_command(run_command)


_register_commands()
