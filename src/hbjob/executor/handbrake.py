"""HandBrakeCLI encoder worker.

Spawns HandBrakeCLI as an asyncio subprocess and turns its output into a
stream of WorkerEvents. Progress is read from stdout; stderr (HandBrake's
activity log) is drained concurrently into a bounded tail buffer so the
child never blocks on a full pipe, and the tail is used for error
messages.
"""

from __future__ import annotations

import asyncio
import codecs
import contextlib
import logging
import re
from collections import deque
from collections.abc import AsyncGenerator
from pathlib import Path

from hbjob.exceptions import WorkerError
from hbjob.executor.interface import WorkerEvent
from hbjob.executor.options import EncodeOptions
from hbjob.executor.progress import parse_progress_line
from hbjob.tools import HANDBRAKE_CLI, require_tool

logger = logging.getLogger(__name__)

_LINE_SPLIT = re.compile(r"[\r\n]")


class HandBrakeWorker:
    """Supervises one HandBrakeCLI process."""

    READ_CHUNK_SIZE = 4096
    STDERR_TAIL_LINES = 20
    TERMINATE_TIMEOUT = 10.0

    def __init__(
        self, options: EncodeOptions, handbrake_path: Path | None = None
    ) -> None:
        """Initialize the worker.

        Args:
            options: Encoder parameters.
            handbrake_path: Explicit HandBrakeCLI path; PATH is searched if None.

        Raises:
            ToolNotFoundError: If HandBrakeCLI is not available.
        """
        self.options = options
        self._handbrake_path = require_tool(HANDBRAKE_CLI, handbrake_path)
        self._process: asyncio.subprocess.Process | None = None
        self._stderr_task: asyncio.Task[None] | None = None
        self._stderr_tail: deque[str] = deque(maxlen=self.STDERR_TAIL_LINES)
        self._cancel_requested = False

    @property
    def command(self) -> list[str]:
        return [str(self._handbrake_path), *self.options.to_args()]

    @property
    def cancel_requested(self) -> bool:
        return self._cancel_requested

    @property
    def returncode(self) -> int | None:
        """Exit code of HandBrakeCLI, or None while running or before start."""
        if self._process is None:
            return None
        return self._process.returncode

    async def start(self) -> None:
        """Spawn HandBrakeCLI.

        Raises:
            WorkerError: If the worker was already started or cannot be spawned.
        """
        if self._process is not None:
            raise WorkerError("HandBrakeCLI worker already started")

        logger.debug("HandBrakeCLI command: %s", " ".join(self.command))
        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise WorkerError(f"Could not start HandBrakeCLI: {e}") from e

        logger.info(
            "Started HandBrakeCLI (pid %d): %s -> %s",
            self._process.pid,
            self.options.input,
            self.options.output,
            extra={"pid": self._process.pid},
        )
        self._stderr_task = asyncio.create_task(self._drain_stderr())

    async def _drain_stderr(self) -> None:
        assert self._process is not None and self._process.stderr is not None
        while True:
            raw = await self._process.stderr.readline()
            if not raw:
                break
            line = raw.decode("utf-8", errors="replace").rstrip()
            if line:
                self._stderr_tail.append(line)

    async def events(self) -> AsyncGenerator[WorkerEvent, None]:
        """Yield progress events, then one complete or error event.

        Raises:
            WorkerError: If the worker has not been started.
        """
        if self._process is None or self._process.stdout is None:
            raise WorkerError("HandBrakeCLI worker not started")

        stdout = self._process.stdout
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending = ""

        while True:
            chunk = await stdout.read(self.READ_CHUNK_SIZE)
            if not chunk:
                break
            pending += decoder.decode(chunk)
            *lines, pending = _LINE_SPLIT.split(pending)
            for line in lines:
                progress = parse_progress_line(line)
                if progress is not None:
                    yield WorkerEvent.progressed(progress)

        pending += decoder.decode(b"", final=True)
        progress = parse_progress_line(pending)
        if progress is not None:
            yield WorkerEvent.progressed(progress)

        returncode = await self._process.wait()
        if self._stderr_task is not None:
            await self._stderr_task

        yield self._final_event(returncode)

    def _final_event(self, returncode: int) -> WorkerEvent:
        if self._cancel_requested:
            return WorkerEvent.failed("HandBrakeCLI was cancelled")
        if returncode != 0:
            tail = "\n".join(self._stderr_tail)
            return WorkerEvent.failed(
                f"HandBrakeCLI exited with code {returncode}"
                + (f":\n{tail}" if tail else "")
            )
        if not self.options.output.exists():
            return WorkerEvent.failed(
                f"HandBrakeCLI exited without writing {self.options.output}"
            )
        return WorkerEvent.completed()

    def cancel(self) -> None:
        """Terminate the HandBrakeCLI process if it is still running."""
        self._cancel_requested = True
        if self._process is None or self._process.returncode is not None:
            return
        logger.info("Terminating HandBrakeCLI (pid %d)", self._process.pid)
        try:
            self._process.terminate()
        except ProcessLookupError:
            # Exited between the returncode check and terminate()
            logger.debug("HandBrakeCLI already exited")

    async def aclose(self, discard_output: bool = False) -> None:
        """Wait for HandBrakeCLI to exit and release its pipes.

        A still-running process is terminated, then killed if it does not
        exit within TERMINATE_TIMEOUT seconds.

        Args:
            discard_output: Remove the (partial) output file afterwards.
        """
        process = self._process
        if process is not None:
            if process.returncode is None:
                await self._stop(process)
            if self._stderr_task is not None:
                await self._stderr_task
        if discard_output:
            cleanup_partial_output(self.options.output)

    async def _stop(self, process: asyncio.subprocess.Process) -> None:
        with contextlib.suppress(ProcessLookupError):
            process.terminate()
        # Keep reading stdout so a full pipe cannot hold the child back
        drain = asyncio.create_task(self._discard_stdout())
        try:
            try:
                await asyncio.wait_for(process.wait(), self.TERMINATE_TIMEOUT)
            except asyncio.TimeoutError:
                logger.warning(
                    "HandBrakeCLI (pid %d) ignored SIGTERM for %ss, killing",
                    process.pid,
                    self.TERMINATE_TIMEOUT,
                )
                with contextlib.suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
        except BaseException:
            drain.cancel()
            raise
        await drain

    async def _discard_stdout(self) -> None:
        assert self._process is not None and self._process.stdout is not None
        while await self._process.stdout.read(self.READ_CHUNK_SIZE):
            pass


def cleanup_partial_output(path: Path) -> None:
    """Remove an incomplete encoder output file, logging any errors."""
    if path.exists():
        try:
            path.unlink()
            logger.info("Removed partial output: %s", path)
        except OSError as e:
            logger.warning("Could not remove partial output %s: %s", path, e)
