"""Encoder worker protocol and event types.

A worker is started once, then yields a stream of events ending with
exactly one terminal event (complete or error).
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from hbjob.executor.options import EncodeOptions
from hbjob.executor.progress import HandBrakeProgress


class WorkerEventKind(Enum):
    """Kind of worker event."""

    PROGRESS = "progress"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not WorkerEventKind.PROGRESS


@dataclass(frozen=True)
class WorkerEvent:
    """Tagged worker outcome."""

    kind: WorkerEventKind
    progress: HandBrakeProgress | None = None
    error: str | None = None

    @classmethod
    def progressed(cls, progress: HandBrakeProgress) -> WorkerEvent:
        return cls(kind=WorkerEventKind.PROGRESS, progress=progress)

    @classmethod
    def completed(cls) -> WorkerEvent:
        return cls(kind=WorkerEventKind.COMPLETE)

    @classmethod
    def failed(cls, error: str) -> WorkerEvent:
        return cls(kind=WorkerEventKind.ERROR, error=error)


class EncoderWorker(Protocol):
    """Protocol for encoder worker implementations."""

    options: EncodeOptions

    async def start(self) -> None:
        """Spawn the encoder process.

        Raises:
            WorkerError: If the process cannot be started.
        """
        ...

    def events(self) -> AsyncGenerator[WorkerEvent, None]:
        """Yield events in emission order, ending with a terminal event."""
        ...

    def cancel(self) -> None:
        """Request early termination of the encoder process."""
        ...

    async def aclose(self, discard_output: bool = False) -> None:
        """Wait for the encoder process to exit, stopping it if needed.

        Args:
            discard_output: Remove the output file afterwards.
        """
        ...
