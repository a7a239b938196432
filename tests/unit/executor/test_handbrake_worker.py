"""Unit tests for HandBrakeWorker process supervision."""

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from hbjob.config.models import JobActionConfig
from hbjob.exceptions import CancellationError, WorkerError
from hbjob.executor.handbrake import HandBrakeWorker
from hbjob.executor.interface import WorkerEventKind
from hbjob.executor.options import EncodeOptions
from hbjob.introspector.models import ProbeResult, VideoStream
from hbjob.jobs.action import HandBrakeJobAction
from hbjob.jobs.models import Job
from hbjob.profile.models import TargetProfile

HANDBRAKE = Path("/usr/bin/HandBrakeCLI")


class FakeProcess:
    """Stand-in for asyncio.subprocess.Process with canned output.

    With running=True the process keeps its pipes open until terminate()
    or kill(); ignore_term makes it survive terminate().
    """

    def __init__(
        self,
        stdout_chunks: list[bytes],
        stderr_lines: list[bytes] | None = None,
        returncode: int = 0,
        running: bool = False,
        ignore_term: bool = False,
    ) -> None:
        self.pid = 4242
        self.returncode: int | None = None
        self._exit_code = returncode
        self._exited = asyncio.Event()
        self._ignore_term = ignore_term
        self.stdout = asyncio.StreamReader()
        for chunk in stdout_chunks:
            self.stdout.feed_data(chunk)
        self.stderr = asyncio.StreamReader()
        for line in stderr_lines or []:
            self.stderr.feed_data(line)
        self.terminate = MagicMock(side_effect=self._on_terminate)
        self.kill = MagicMock(side_effect=lambda: self._exit(-9))
        if not running:
            self._exit(returncode)

    def _on_terminate(self) -> None:
        if not self._ignore_term:
            self._exit(-15)

    def _exit(self, code: int) -> None:
        if self._exited.is_set():
            return
        self._exit_code = code
        self.stdout.feed_eof()
        self.stderr.feed_eof()
        self._exited.set()

    async def wait(self) -> int:
        await self._exited.wait()
        self.returncode = self._exit_code
        return self._exit_code


@pytest.fixture
def options(temp_dir: Path) -> EncodeOptions:
    return EncodeOptions(
        input=temp_dir / "movie.mkv",
        output=temp_dir / "movie.m4v",
        preset="Fast 1080p30",
    )


@pytest.fixture
def worker(options):
    with patch("hbjob.executor.handbrake.require_tool", return_value=HANDBRAKE):
        yield HandBrakeWorker(options)


async def _collect(worker: HandBrakeWorker) -> list:
    return [event async for event in worker.events()]


class TestCommand:
    """Tests for command construction."""

    def test_command_prefixes_executable(self, worker, options) -> None:
        assert worker.command[0] == str(HANDBRAKE)
        assert worker.command[1:] == options.to_args()


class TestWorkerEventKind:
    """Tests for WorkerEventKind."""

    @pytest.mark.parametrize(
        ("kind", "terminal"),
        [
            (WorkerEventKind.PROGRESS, False),
            (WorkerEventKind.COMPLETE, True),
            (WorkerEventKind.ERROR, True),
        ],
    )
    def test_is_terminal(self, kind, terminal) -> None:
        assert kind.is_terminal is terminal


class TestEvents:
    """Tests for the event stream."""

    @pytest.mark.asyncio
    async def test_progress_then_complete(self, worker, options) -> None:
        """Carriage-return separated updates split across reads are parsed."""
        options.output.touch()
        process = FakeProcess(
            [
                b"Encoding: task 1 of 1, 10.00 %\rEncod",
                b"ing: task 1 of 1, 50.00 % (90.00 fps, avg 95.00 fps, "
                b"ETA 00h01m00s)\r",
                b"\nEncode done!\n",
            ]
        )
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ) as mock_exec:
            await worker.start()
            events = await _collect(worker)

        assert mock_exec.call_args[0] == tuple(worker.command)
        kinds = [e.kind for e in events]
        assert kinds == [
            WorkerEventKind.PROGRESS,
            WorkerEventKind.PROGRESS,
            WorkerEventKind.COMPLETE,
        ]
        assert events[0].progress.percent_complete == 10.0
        assert events[1].progress.eta == "00h01m00s"

    @pytest.mark.asyncio
    async def test_unterminated_last_line(self, worker, options) -> None:
        """A final progress update without a line ending is still reported."""
        options.output.touch()
        process = FakeProcess([b"Encoding: task 1 of 1, 99.90 %"])
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            events = await _collect(worker)

        assert events[0].progress.percent_complete == 99.9
        assert events[-1].kind is WorkerEventKind.COMPLETE

    @pytest.mark.asyncio
    async def test_nonzero_exit_reports_stderr_tail(self, worker) -> None:
        process = FakeProcess(
            [b"Encoding: task 1 of 1, 1.00 %\r"],
            stderr_lines=[b"[10:00:00] starting job\n", b"ERROR: invalid preset\n"],
            returncode=3,
        )
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            events = await _collect(worker)

        final = events[-1]
        assert final.kind is WorkerEventKind.ERROR
        assert "exited with code 3" in final.error
        assert "ERROR: invalid preset" in final.error

    @pytest.mark.asyncio
    async def test_missing_output_is_error(self, worker, options) -> None:
        process = FakeProcess([b"Encode done!\n"])
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            events = await _collect(worker)

        assert len(events) == 1
        assert events[-1].kind is WorkerEventKind.ERROR
        assert str(options.output) in events[-1].error

    @pytest.mark.asyncio
    async def test_events_before_start(self, worker) -> None:
        with pytest.raises(WorkerError, match="not started"):
            await _collect(worker)


class TestStart:
    """Tests for process start."""

    @pytest.mark.asyncio
    async def test_start_twice(self, worker) -> None:
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=FakeProcess([])),
        ):
            await worker.start()
            with pytest.raises(WorkerError, match="already started"):
                await worker.start()

    @pytest.mark.asyncio
    async def test_spawn_failure(self, worker) -> None:
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(side_effect=PermissionError("denied")),
        ):
            with pytest.raises(WorkerError, match="Could not start"):
                await worker.start()


class TestCancel:
    """Tests for cancel()."""

    def test_cancel_before_start(self, worker) -> None:
        worker.cancel()
        assert worker.cancel_requested is True

    @pytest.mark.asyncio
    async def test_cancel_terminates_and_reports_error(self, worker, options) -> None:
        options.output.touch()
        process = FakeProcess([b"Encoding: task 1 of 1, 5.00 %\r"], returncode=-15)
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            worker.cancel()
            events = await _collect(worker)

        process.terminate.assert_called_once()
        assert events[-1].kind is WorkerEventKind.ERROR
        assert "cancelled" in events[-1].error

    @pytest.mark.asyncio
    async def test_cancel_after_exit_does_not_terminate(self, worker) -> None:
        process = FakeProcess([])
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            await _collect(worker)
            worker.cancel()

        process.terminate.assert_not_called()


class TestAclose:
    """Tests for aclose() process reaping and output cleanup."""

    @pytest.mark.asyncio
    async def test_cancel_then_aclose_reaps_and_discards(
        self, worker, options
    ) -> None:
        options.output.write_bytes(b"partial")
        process = FakeProcess(
            [b"Encoding: task 1 of 1, 5.00 %\r"],
            stderr_lines=[b"[10:00:00] encoding\n"],
            running=True,
        )
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            worker.cancel()
            await worker.aclose(discard_output=True)

        assert worker.returncode == -15
        assert worker._stderr_task.done()
        assert not options.output.exists()

    @pytest.mark.asyncio
    async def test_running_process_is_terminated(self, worker, options) -> None:
        """aclose() stops a process even without a prior cancel()."""
        process = FakeProcess([], running=True)
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            await worker.aclose()

        process.terminate.assert_called_once()
        process.kill.assert_not_called()
        assert worker.returncode is not None

    @pytest.mark.asyncio
    async def test_escalates_to_kill(self, worker) -> None:
        process = FakeProcess([], running=True, ignore_term=True)
        worker.TERMINATE_TIMEOUT = 0.05
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            await worker.aclose(discard_output=True)

        process.kill.assert_called_once()
        assert worker.returncode == -9

    @pytest.mark.asyncio
    async def test_completed_output_kept(self, worker, options) -> None:
        options.output.touch()
        process = FakeProcess([b"Encode done!\n"])
        with patch(
            "hbjob.executor.handbrake.asyncio.create_subprocess_exec",
            AsyncMock(return_value=process),
        ):
            await worker.start()
            events = await _collect(worker)
            await worker.aclose(discard_output=False)

        assert events[-1].kind is WorkerEventKind.COMPLETE
        process.terminate.assert_not_called()
        assert options.output.exists()

    @pytest.mark.asyncio
    async def test_aclose_before_start(self, worker, options) -> None:
        await worker.aclose(discard_output=True)
        assert worker.returncode is None


# Writes --output, then reports progress until signalled; slow to honour SIGTERM
FAKE_HANDBRAKE_SCRIPT = """#!/bin/sh
out=""
while [ $# -gt 0 ]; do
    if [ "$1" = "--output" ]; then out="$2"; shift; fi
    shift
done
echo partial > "$out"
trap 'sleep 0.3; exit 143' TERM
i=0
while true; do
    i=$((i + 1))
    printf 'Encoding: task 1 of 1, %d.00 %%\\r' "$i"
    sleep 0.05
done
"""


@pytest.mark.skipif(not Path("/bin/sh").exists(), reason="needs /bin/sh")
class TestRealProcessCancellation:
    """Cancellation against a real child process."""

    @pytest.mark.asyncio
    async def test_killed_job_leaves_no_process_or_output(self, temp_dir) -> None:
        script = temp_dir / "HandBrakeCLI"
        script.write_text(FAKE_HANDBRAKE_SCRIPT)
        script.chmod(0o755)
        src = temp_dir / "movie.mkv"
        src.touch()

        class Introspector:
            async def probe(self, path):
                return ProbeResult(
                    path=path,
                    format_name="matroska,webm",
                    video=VideoStream(index=0, codec_name="h264", height=1080),
                )

        class Resolver:
            def resolve(self, name):
                return TargetProfile()

        workers = []

        def factory(opts):
            w = HandBrakeWorker(opts, script)
            workers.append(w)
            return w

        action = HandBrakeJobAction(
            JobActionConfig(max_height=720),
            introspector=Introspector(),
            preset_resolver=Resolver(),
            worker_factory=factory,
        )

        class KillAfterTicks:
            ticks = 0

            def on_progress(self, job_id, progress):
                self.ticks += 1
                if self.ticks == 3:
                    action.kill(job_id)

        action.progress_reporter = KillAfterTicks()

        with pytest.raises(CancellationError):
            await action.start(Job(identifier="j1", src_path=src))

        worker = workers[0]
        assert worker.returncode is not None
        assert worker._stderr_task.done()
        assert not worker.options.output.exists()
