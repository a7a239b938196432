"""HandBrakeCLI progress parsing.

HandBrakeCLI reports progress on stdout, rewriting one line in place
with carriage returns:

    Encoding: task 1 of 1, 45.12 % (97.31 fps, avg 101.02 fps, ETA 00h12m03s)

The rate and ETA part is absent for the first few updates.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

PROGRESS_PATTERN = re.compile(
    r"(?P<task>[A-Za-z]+): task (?P<task_number>\d+) of (?P<task_count>\d+), "
    r"(?P<percent>\d+(?:\.\d+)?) %"
    r"(?: \((?P<fps>\d+(?:\.\d+)?) fps, avg (?P<avg_fps>\d+(?:\.\d+)?) fps, "
    r"ETA (?P<eta>\d+h\d+m\d+s)\))?"
)

ETA_PATTERN = re.compile(r"(\d+)h(\d+)m(\d+)s")


@dataclass(frozen=True)
class HandBrakeProgress:
    """One progress update from HandBrakeCLI."""

    task: str
    task_number: int
    task_count: int
    percent_complete: float
    fps: float | None = None
    avg_fps: float | None = None
    eta: str | None = None

    @property
    def eta_seconds(self) -> int | None:
        """ETA converted to seconds, or None if unknown."""
        if self.eta is None:
            return None
        match = ETA_PATTERN.fullmatch(self.eta)
        if match is None:
            return None
        hours, minutes, seconds = (int(g) for g in match.groups())
        return hours * 3600 + minutes * 60 + seconds


def parse_progress_line(line: str) -> HandBrakeProgress | None:
    """Parse a HandBrakeCLI stdout line.

    Args:
        line: One line of stdout (carriage returns already split off).

    Returns:
        HandBrakeProgress, or None if the line is not a progress line.
    """
    match = PROGRESS_PATTERN.search(line)
    if match is None:
        return None

    fps = match.group("fps")
    avg_fps = match.group("avg_fps")
    return HandBrakeProgress(
        task=match.group("task"),
        task_number=int(match.group("task_number")),
        task_count=int(match.group("task_count")),
        percent_complete=float(match.group("percent")),
        fps=float(fps) if fps is not None else None,
        avg_fps=float(avg_fps) if avg_fps is not None else None,
        eta=match.group("eta"),
    )
