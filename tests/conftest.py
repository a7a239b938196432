"""Shared test fixtures for hbjob."""

import shutil
import tempfile
from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from hbjob.config.loader import clear_config_cache
from hbjob.introspector.models import ProbeResult, VideoStream
from hbjob.logging.context import clear_job_context


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test isolation."""
    dir_path = tempfile.mkdtemp()
    yield Path(dir_path)
    shutil.rmtree(dir_path, ignore_errors=True)


@pytest.fixture(autouse=True)
def _reset_module_state():
    """Reset config cache and job log context between tests."""
    clear_config_cache()
    clear_job_context()
    yield
    clear_config_cache()
    clear_job_context()


def _video_stream_json(
    codec_name: str = "h264",
    profile: str | None = "High",
    height: int = 1080,
    width: int = 1920,
    index: int = 0,
    attached_pic: bool = False,
) -> dict[str, Any]:
    stream: dict[str, Any] = {
        "index": index,
        "codec_name": codec_name,
        "codec_type": "video",
        "height": height,
        "width": width,
        "disposition": {"default": 1, "attached_pic": int(attached_pic)},
    }
    if profile is not None:
        stream["profile"] = profile
    return stream


def _audio_stream_json(index: int = 1, codec_name: str = "aac") -> dict[str, Any]:
    return {
        "index": index,
        "codec_name": codec_name,
        "codec_type": "audio",
        "channels": 2,
        "disposition": {"default": 1},
    }


@pytest.fixture
def video_stream_json() -> Callable[..., dict[str, Any]]:
    """Factory for an ffprobe video stream dict."""
    return _video_stream_json


@pytest.fixture
def audio_stream_json() -> Callable[..., dict[str, Any]]:
    """Factory for an ffprobe audio stream dict."""
    return _audio_stream_json


@pytest.fixture
def ffprobe_output() -> Callable[..., dict[str, Any]]:
    """Factory for a full ffprobe -show_format -show_streams document."""

    def _build(
        format_name: str = "matroska,webm",
        streams: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        if streams is None:
            streams = [_video_stream_json(), _audio_stream_json()]
        return {
            "streams": streams,
            "format": {
                "filename": "/media/movie.mkv",
                "format_name": format_name,
                "duration": "5400.000000",
            },
        }

    return _build


@pytest.fixture
def make_probe() -> Callable[..., ProbeResult]:
    """Factory for ProbeResult objects.

    Pass video=None for a file without any video stream.
    """
    _default = object()

    def _build(
        format_name: str = "matroska,webm",
        video: Any = _default,
        path: Path = Path("/media/movie.mkv"),
    ) -> ProbeResult:
        if video is _default:
            video = VideoStream(
                index=0, codec_name="h264", profile="High", height=1080, width=1920
            )
        return ProbeResult(path=path, format_name=format_name, video=video)

    return _build
