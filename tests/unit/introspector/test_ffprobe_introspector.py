"""Unit tests for FFprobeIntrospector."""

import json
import subprocess
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from hbjob.exceptions import ProbeError, ToolNotFoundError
from hbjob.introspector.ffprobe import FFprobeIntrospector

FFPROBE = Path("/usr/bin/ffprobe")


@pytest.fixture
def introspector():
    with patch("hbjob.introspector.ffprobe.require_tool", return_value=FFPROBE):
        yield FFprobeIntrospector()


@pytest.fixture
def media_file(temp_dir: Path) -> Path:
    path = temp_dir / "movie.mkv"
    path.touch()
    return path


def _completed(stdout: str) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=[], returncode=0, stdout=stdout, stderr="")


class TestFFprobeIntrospectorInit:
    """Tests for FFprobeIntrospector construction."""

    def test_missing_ffprobe(self) -> None:
        with patch(
            "hbjob.introspector.ffprobe.require_tool",
            side_effect=ToolNotFoundError("ffprobe"),
        ):
            with pytest.raises(ToolNotFoundError):
                FFprobeIntrospector()

    def test_configured_path_passed(self) -> None:
        configured = Path("/opt/ffmpeg/bin/ffprobe")
        with patch(
            "hbjob.introspector.ffprobe.require_tool", return_value=configured
        ) as mock_require:
            FFprobeIntrospector(configured)

        mock_require.assert_called_once_with("ffprobe", configured)


class TestGetFileInfo:
    """Tests for FFprobeIntrospector.get_file_info()."""

    @patch("hbjob.introspector.ffprobe.subprocess.run")
    def test_success(
        self, mock_run: MagicMock, introspector, media_file, ffprobe_output
    ) -> None:
        mock_run.return_value = _completed(json.dumps(ffprobe_output()))

        result = introspector.get_file_info(media_file)

        assert result.format_name == "matroska,webm"
        assert result.video.codec_name == "h264"
        args = mock_run.call_args[0][0]
        assert args[0] == str(FFPROBE)
        assert "-show_streams" in args
        assert "-show_format" in args
        assert args[-1] == str(media_file)

    def test_missing_file(self, introspector, temp_dir) -> None:
        with pytest.raises(ProbeError, match="File not found"):
            introspector.get_file_info(temp_dir / "missing.mkv")

    @patch("hbjob.introspector.ffprobe.subprocess.run")
    def test_nonzero_exit(self, mock_run: MagicMock, introspector, media_file) -> None:
        mock_run.side_effect = subprocess.CalledProcessError(
            1, "ffprobe", stderr="Invalid data found when processing input"
        )

        with pytest.raises(ProbeError, match="Invalid data found"):
            introspector.get_file_info(media_file)

    @patch("hbjob.introspector.ffprobe.subprocess.run")
    def test_timeout(self, mock_run: MagicMock, introspector, media_file) -> None:
        mock_run.side_effect = subprocess.TimeoutExpired("ffprobe", 60)

        with pytest.raises(ProbeError, match="timed out"):
            introspector.get_file_info(media_file)

    @patch("hbjob.introspector.ffprobe.subprocess.run")
    def test_malformed_json(
        self, mock_run: MagicMock, introspector, media_file
    ) -> None:
        mock_run.return_value = _completed("not json")

        with pytest.raises(ProbeError, match="Invalid ffprobe output"):
            introspector.get_file_info(media_file)

    @patch("hbjob.introspector.ffprobe.subprocess.run")
    def test_missing_streams_key(
        self, mock_run: MagicMock, introspector, media_file
    ) -> None:
        mock_run.return_value = _completed(json.dumps({"format": {}}))

        with pytest.raises(ProbeError, match="Missing 'streams'"):
            introspector.get_file_info(media_file)


class TestProbe:
    """Tests for the async probe() entry point."""

    @pytest.mark.asyncio
    @patch("hbjob.introspector.ffprobe.subprocess.run")
    async def test_probe_runs_in_thread(
        self, mock_run: MagicMock, introspector, media_file, ffprobe_output
    ) -> None:
        mock_run.return_value = _completed(json.dumps(ffprobe_output()))

        result = await introspector.probe(media_file)

        assert result.path == media_file
        assert result.has_video is True
