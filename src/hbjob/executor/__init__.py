"""Encoder worker supervision.

- EncodeOptions: parameters for one HandBrakeCLI run
- HandBrakeWorker: asyncio supervision of a HandBrakeCLI process
- WorkerEvent: tagged progress/complete/error outcome
"""

from hbjob.executor.handbrake import HandBrakeWorker
from hbjob.executor.interface import EncoderWorker, WorkerEvent, WorkerEventKind
from hbjob.executor.options import EncodeOptions, build_encode_options
from hbjob.executor.progress import HandBrakeProgress, parse_progress_line

__all__ = [
    "EncodeOptions",
    "EncoderWorker",
    "HandBrakeProgress",
    "HandBrakeWorker",
    "WorkerEvent",
    "WorkerEventKind",
    "build_encode_options",
    "parse_progress_line",
]
