"""JSON log output for hbjob.

Each record becomes one JSON object per line, e.g.::

    {"timestamp": "...", "level": "INFO", "logger": "hbjob.jobs.action",
     "message": "Completed job job-1",
     "job": {"id": "job-1", "source": "/media/movie.mkv"},
     "context": {"dest_path": "/media/movie.m4v"}}

"job" is present only for records logged inside a job context;
"context" holds the caller's extra={...} fields.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from typing import Any

# Attributes every LogRecord has, plus those added by JobContextFilter
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", None, None))
) | {"message", "asctime", "taskName", "job_id", "file_path", "job_label"}


class JSONFormatter(logging.Formatter):
    """Format log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        record_time = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "timestamp": record_time.isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
        }
        if record.name and record.name != "root":
            entry["logger"] = record.name

        job_id = getattr(record, "job_id", None)
        if job_id:
            entry["job"] = {"id": job_id}
            source = getattr(record, "file_path", None)
            if source:
                entry["job"]["source"] = source

        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }
        if context:
            entry["context"] = context

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)
