"""Job data model."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TypeAlias

JobIdentifier: TypeAlias = str


@dataclass
class Job:
    """One transcode job as handed over by the host job system.

    dest_path stays None until the encoder completes, so a returned job
    without a destination means "skipped, no new file".
    """

    identifier: JobIdentifier
    src_path: Path
    dest_path: Path | None = None
    output_dir: Path | None = None

    def build_dest_path(self, extension: str) -> Path:
        """Plan the destination path for a given container extension.

        The file is placed in output_dir (or next to the source) with the
        source stem; if that would overwrite the source, ".transcoded" is
        appended to the stem.
        """
        directory = self.output_dir or self.src_path.parent
        extension = extension.lstrip(".")
        dest = directory / f"{self.src_path.stem}.{extension}"
        if dest == self.src_path:
            dest = directory / f"{self.src_path.stem}.transcoded.{extension}"
        return dest
