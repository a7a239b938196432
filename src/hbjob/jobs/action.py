"""HandBrake job action.

Owns the lifecycle of transcode jobs handed over by the host job system:

    Registered -> Probed -> Skipped
                         -> Encoding -> Completed | Cancelled | Failed

Cancellation is cooperative. kill() only removes the job from the
registry; the encoding loop notices on the next progress tick, asks the
worker to stop and fails the job with CancellationError. A worker that
never reports progress again runs to its own completion or failure.

The encoder process has always exited by the time start() returns or
raises, and only a completed encode leaves its output file behind.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import aclosing
from pathlib import Path

from hbjob.config.models import JobActionConfig, ToolPathsConfig
from hbjob.exceptions import CancellationError, HBJobError, WorkerError
from hbjob.executor import (
    EncodeOptions,
    EncoderWorker,
    HandBrakeWorker,
    WorkerEventKind,
    build_encode_options,
)
from hbjob.introspector import FFprobeIntrospector, MediaIntrospector
from hbjob.jobs.models import Job, JobIdentifier
from hbjob.jobs.progress import LoggingProgressReporter, ProgressReporter
from hbjob.jobs.registry import JobRegistry
from hbjob.logging.context import job_context
from hbjob.policy.skip import SkipEvaluationResult, evaluate_skip
from hbjob.profile import PresetResolver, TargetProfile

logger = logging.getLogger(__name__)

WorkerFactory = Callable[[EncodeOptions], EncoderWorker]


class HandBrakeJobAction:
    """Decides whether to transcode a job's source and supervises HandBrakeCLI.

    The preset profile is resolved once, at construction; a preset that
    cannot be resolved degrades to "no preset-derived constraints".
    """

    def __init__(
        self,
        config: JobActionConfig,
        *,
        tools: ToolPathsConfig | None = None,
        registry: JobRegistry | None = None,
        introspector: MediaIntrospector | None = None,
        preset_resolver: PresetResolver | None = None,
        worker_factory: WorkerFactory | None = None,
        progress_reporter: ProgressReporter | None = None,
    ) -> None:
        """Initialize the job action.

        Args:
            config: Job action settings.
            tools: External tool paths. PATH is searched for unset tools.
            registry: Registry of active jobs. A private one is created if None.
            introspector: Media prober. Defaults to ffprobe, created on first use.
            preset_resolver: Preset resolver. Defaults to HandBrakeCLI export.
            worker_factory: Builds an encoder worker from EncodeOptions.
            progress_reporter: Receives per-tick progress.
        """
        self.config = config
        self.tools = tools if tools is not None else ToolPathsConfig()
        self.registry = registry if registry is not None else JobRegistry()
        self._introspector = introspector
        self._worker_factory = worker_factory or self._default_worker
        self.progress_reporter = (
            progress_reporter
            if progress_reporter is not None
            else LoggingProgressReporter()
        )

        resolver = preset_resolver or PresetResolver(self.tools.handbrake)
        self.preset_profile: TargetProfile = resolver.resolve(config.preset)
        self.override_profile: TargetProfile = config.to_target_profile()

        logger.debug("Finished initializing job action: %s", config.name)

    def _default_worker(self, options: EncodeOptions) -> EncoderWorker:
        return HandBrakeWorker(options, self.tools.handbrake)

    @property
    def introspector(self) -> MediaIntrospector:
        if self._introspector is None:
            self._introspector = FFprobeIntrospector(self.tools.ffprobe)
        return self._introspector

    async def start(self, job: Job) -> Job:
        """Run a job to one of its terminal states.

        Args:
            job: The job to process.

        Returns:
            The job. dest_path is set if a new file was written and left
            None if the source was already compliant.

        Raises:
            ProbeError: If the source cannot be probed.
            NoVideoStreamError: If video constraints apply to a file without video.
            WorkerError: If the encoder fails.
            CancellationError: If the job was killed while encoding.
        """
        with job_context(job.identifier, job.src_path):
            logger.info(
                "Starting job action: %s",
                job.identifier,
                extra={"src_path": str(job.src_path)},
            )
            self.registry.add(job.identifier)
            try:
                return await self._run(job)
            except CancellationError:
                logger.warning(
                    "Job %s cancelled: %s", job.identifier, job.src_path
                )
                raise
            except HBJobError as e:
                logger.error(
                    "Job %s failed: %s",
                    job.identifier,
                    e,
                    extra={"src_path": str(job.src_path), "error": type(e).__name__},
                )
                raise
            finally:
                self.registry.discard(job.identifier)

    def kill(self, identifier: JobIdentifier) -> None:
        """Request cancellation of a job.

        The encoder is not terminated here; the job is cancelled on its
        next progress tick. Unknown identifiers are ignored.
        """
        if self.registry.discard(identifier):
            logger.info("Kill requested for job %s", identifier)
        else:
            logger.debug("Kill requested for inactive job %s", identifier)

    async def evaluate(self, src_path: Path) -> SkipEvaluationResult:
        """Probe a file and evaluate it against the target profiles."""
        probe = await self.introspector.probe(src_path)
        return evaluate_skip(probe, self.preset_profile, self.override_profile)

    async def _run(self, job: Job) -> Job:
        decision = await self.evaluate(job.src_path)

        if decision.skip:
            logger.info(
                "Skipping job %s, already compliant: %s",
                job.identifier,
                decision.reason,
                extra={"src_path": str(job.src_path), "skip": True},
            )
            return job

        logger.info(
            "Continuing job action %s: %s",
            job.identifier,
            decision.reason,
            extra={"src_path": str(job.src_path), "skip": False},
        )

        dest_path = job.build_dest_path(self.config.output_extension)
        options = build_encode_options(self.config, job.src_path, dest_path)
        worker = self._worker_factory(options)
        await worker.start()
        return await self._supervise(job, worker, dest_path)

    async def _supervise(
        self, job: Job, worker: EncoderWorker, dest_path: Path
    ) -> Job:
        completed = False
        try:
            async with aclosing(worker.events()) as events:
                async for event in events:
                    if not event.kind.is_terminal:
                        if job.identifier not in self.registry:
                            worker.cancel()
                            raise CancellationError(job.identifier)
                        if event.progress is not None:
                            self.progress_reporter.on_progress(
                                job.identifier, event.progress
                            )
                        continue

                    if event.kind is WorkerEventKind.ERROR:
                        raise WorkerError(
                            event.error or "Encoder reported an error",
                            job_id=job.identifier,
                        )
                    completed = True
                    break
        except asyncio.CancelledError:
            # The awaiting task itself was cancelled; stop the encoder too
            worker.cancel()
            raise
        finally:
            # Reap the encoder; only a completed encode keeps its output
            await worker.aclose(discard_output=not completed)

        if not completed:
            raise WorkerError(
                "Encoder stopped without reporting completion", job_id=job.identifier
            )

        job.dest_path = dest_path
        logger.info(
            "Completed job %s: %s",
            job.identifier,
            dest_path,
            extra={"dest_path": str(dest_path)},
        )
        return job
