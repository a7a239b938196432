"""CLI run command: process one file as a job."""

import asyncio
import logging
import signal
import uuid
from pathlib import Path

import click

from hbjob.cli.errors import exit_code_for
from hbjob.cli.exit_codes import ExitCode
from hbjob.exceptions import HBJobError
from hbjob.jobs import (
    CompositeProgressReporter,
    HandBrakeJobAction,
    Job,
    LoggingProgressReporter,
    StderrProgressReporter,
)

logger = logging.getLogger(__name__)


async def run_job(action: HandBrakeJobAction, job: Job) -> Job:
    """Run a job, turning SIGINT into a kill request for it.

    The first Ctrl-C cancels the job at its next progress tick.
    """
    loop = asyncio.get_running_loop()
    try:
        loop.add_signal_handler(signal.SIGINT, action.kill, job.identifier)
        handler_installed = True
    except (NotImplementedError, RuntimeError):
        # No loop signal handlers on Windows or outside the main thread
        handler_installed = False

    try:
        return await action.start(job)
    finally:
        if handler_installed:
            loop.remove_signal_handler(signal.SIGINT)


@click.command("run")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for the transcoded file (default: next to FILE).",
)
@click.option(
    "--job-id",
    default=None,
    help="Job identifier (default: random).",
)
@click.option(
    "--progress/--no-progress",
    default=True,
    help="Show a progress line on stderr.",
)
@click.pass_context
def run_command(
    ctx: click.Context,
    file: Path,
    output_dir: Path | None,
    job_id: str | None,
    progress: bool,
) -> None:
    """Transcode FILE unless it already complies with the configuration.

    Prints the path of the new file, or a skip notice.
    """
    config = ctx.obj["config"]
    stderr_reporter = StderrProgressReporter(enabled=progress)
    job = Job(
        identifier=job_id or uuid.uuid4().hex[:12],
        src_path=file,
        output_dir=output_dir,
    )

    try:
        action = HandBrakeJobAction(
            config.job_action,
            tools=config.tools,
            progress_reporter=CompositeProgressReporter(
                [LoggingProgressReporter(), stderr_reporter]
            ),
        )
        job = asyncio.run(run_job(action, job))
    except HBJobError as e:
        stderr_reporter.on_complete()
        click.echo(f"Error: {e}", err=True)
        ctx.exit(exit_code_for(e))

    if job.dest_path is None:
        click.echo(f"Skipped: {file} already complies")
    else:
        stderr_reporter.on_complete()
        click.echo(str(job.dest_path))
    ctx.exit(ExitCode.SUCCESS)
