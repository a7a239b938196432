"""CLI check command: report whether a file needs transcoding."""

import asyncio
import json
import logging
from pathlib import Path

import click

from hbjob.cli.errors import exit_code_for
from hbjob.cli.exit_codes import ExitCode
from hbjob.exceptions import HBJobError
from hbjob.jobs import HandBrakeJobAction, NullProgressReporter
from hbjob.policy import SkipEvaluationResult

logger = logging.getLogger(__name__)


def _result_to_dict(file: Path, result: SkipEvaluationResult) -> dict:
    return {
        "file": str(file),
        "skip": result.skip,
        "reason": result.reason,
        "checks": [
            {
                "concern": check.concern.value,
                "source": check.source.value,
                "desired": check.desired,
                "actual": check.actual,
                "compliant": check.compliant,
            }
            for check in result.checks
        ],
    }


def _format_human(file: Path, result: SkipEvaluationResult) -> str:
    verdict = "already compliant" if result.skip else "transcode needed"
    lines = [f"{file}: {verdict}"]
    for check in result.checks:
        mark = "ok" if check.compliant else "FAIL"
        lines.append(
            f"  [{mark:>4}] {check.concern.value}: {check.actual!r} "
            f"vs {check.desired!r} ({check.source.value})"
        )
    if not result.checks:
        lines.append("  no constraints configured")
    return "\n".join(lines)


@click.command("check")
@click.argument("file", type=click.Path(path_type=Path))
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    help="Output the decision as JSON.",
)
@click.pass_context
def check_command(ctx: click.Context, file: Path, json_output: bool) -> None:
    """Decide whether FILE needs transcoding.

    Exits 0 when FILE already complies with the configured preset and
    settings, and 60 when a transcode is needed.
    """
    config = ctx.obj["config"]

    try:
        action = HandBrakeJobAction(
            config.job_action,
            tools=config.tools,
            progress_reporter=NullProgressReporter(),
        )
        result = asyncio.run(action.evaluate(file))
    except HBJobError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(exit_code_for(e))

    if json_output:
        click.echo(json.dumps(_result_to_dict(file, result), indent=2))
    else:
        click.echo(_format_human(file, result))

    ctx.exit(ExitCode.SUCCESS if result.skip else ExitCode.TRANSCODE_NEEDED)
