"""Introspector module for hbjob.

- MediaIntrospector: Protocol defining the probing interface
- FFprobeIntrospector: Production implementation using ffprobe
- ProbeResult / VideoStream: probed container and primary video stream
"""

from hbjob.introspector.ffprobe import FFprobeIntrospector
from hbjob.introspector.interface import MediaIntrospector
from hbjob.introspector.models import ProbeResult, VideoStream
from hbjob.introspector.parsers import parse_ffprobe_output

__all__ = [
    "FFprobeIntrospector",
    "MediaIntrospector",
    "ProbeResult",
    "VideoStream",
    "parse_ffprobe_output",
]
