"""MediaIntrospector interface for media probing."""

from pathlib import Path
from typing import Protocol

from hbjob.introspector.models import ProbeResult


class MediaIntrospector(Protocol):
    """Protocol for media probing implementations."""

    async def probe(self, path: Path) -> ProbeResult:
        """Probe a media file.

        Args:
            path: Path to the media file.

        Returns:
            ProbeResult describing the container and primary video stream.

        Raises:
            ProbeError: If the file cannot be probed.
        """
        ...
