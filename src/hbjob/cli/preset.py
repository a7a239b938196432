"""CLI preset command: show the target profile derived from a preset."""

import json
import logging
from dataclasses import asdict

import click

from hbjob.cli.errors import exit_code_for
from hbjob.cli.exit_codes import ExitCode
from hbjob.exceptions import ConfigurationError
from hbjob.profile import resolve_preset
from hbjob.tools import HANDBRAKE_CLI, require_tool

logger = logging.getLogger(__name__)


@click.command("preset")
@click.argument("name")
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the profile as JSON.",
)
@click.pass_context
def preset_command(ctx: click.Context, name: str, json_output: bool) -> None:
    """Show the constraints derived from HandBrake preset NAME."""
    config = ctx.obj["config"]

    try:
        handbrake = require_tool(HANDBRAKE_CLI, config.tools.handbrake)
        preset = resolve_preset(name, handbrake)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        code = exit_code_for(e)
        ctx.exit(
            ExitCode.PRESET_NOT_RESOLVED if code == ExitCode.CONFIG_ERROR else code
        )

    profile = asdict(preset.to_target_profile())
    if json_output:
        click.echo(json.dumps({"preset": name, **profile}, indent=2))
        return

    click.echo(f"Preset: {preset.preset_name or name}")
    for key, value in profile.items():
        click.echo(f"  {key}: {value if value is not None else '-'}")
