"""FFprobe-based implementation of MediaIntrospector protocol."""

from __future__ import annotations

import asyncio
import json
import subprocess  # nosec B404 - subprocess is required for ffprobe invocation
from pathlib import Path

from hbjob.exceptions import ProbeError
from hbjob.introspector.models import ProbeResult
from hbjob.introspector.parsers import parse_ffprobe_output
from hbjob.tools import FFPROBE, require_tool


class FFprobeIntrospector:
    """ffprobe-based implementation of MediaIntrospector protocol.

    ffprobe runs in a worker thread so concurrent jobs are not blocked
    while a file is being probed.
    """

    TIMEOUT = 60

    def __init__(self, ffprobe_path: Path | None = None) -> None:
        """Initialize the introspector.

        Args:
            ffprobe_path: Optional explicit path to ffprobe. PATH is
                searched if not provided or missing.

        Raises:
            ToolNotFoundError: If ffprobe is not available.
        """
        self._ffprobe_path = require_tool(FFPROBE, ffprobe_path)

    async def probe(self, path: Path) -> ProbeResult:
        """Probe a media file without blocking the event loop."""
        return await asyncio.to_thread(self.get_file_info, path)

    def get_file_info(self, path: Path) -> ProbeResult:
        """Probe a media file synchronously.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        try:
            ffprobe_output = self._run_ffprobe(path)
        except subprocess.TimeoutExpired as e:
            raise ProbeError(f"ffprobe timed out for {path} after {e.timeout}s") from e
        except subprocess.CalledProcessError as e:
            raise ProbeError(f"ffprobe failed for {path}: {e.stderr or e}") from e
        except json.JSONDecodeError as e:
            raise ProbeError(f"Invalid ffprobe output for {path}: {e}") from e

        return parse_ffprobe_output(path, ffprobe_output)

    def _run_ffprobe(self, path: Path) -> dict:
        """Run ffprobe and return parsed JSON output.

        Raises:
            subprocess.CalledProcessError: If ffprobe returns non-zero.
            json.JSONDecodeError: If output is not valid JSON.
            ProbeError: If output is missing required keys.
        """
        result = subprocess.run(  # nosec B603 - ffprobe path is validated
            [
                str(self._ffprobe_path),
                "-v",
                "error",
                "-print_format",
                "json",
                "-show_streams",
                "-show_format",
                str(path),
            ],
            capture_output=True,
            text=True,
            errors="replace",
            check=True,
            timeout=self.TIMEOUT,
        )
        data = json.loads(result.stdout)

        if "streams" not in data:
            raise ProbeError(
                f"Missing 'streams' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )
        if "format" not in data:
            raise ProbeError(
                f"Missing 'format' in ffprobe output for {path}. "
                "File may be corrupted or not a valid media file."
            )

        return data
