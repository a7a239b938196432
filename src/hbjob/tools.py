"""External tool resolution.

Resolves HandBrakeCLI and ffprobe from a configured path, falling back to
the system PATH.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from hbjob.exceptions import ToolNotFoundError

logger = logging.getLogger(__name__)

HANDBRAKE_CLI = "HandBrakeCLI"
FFPROBE = "ffprobe"


def get_tool_path(tool_name: str, configured: Path | None = None) -> Path | None:
    """Get path to a tool, or None if not available.

    Args:
        tool_name: Executable name looked up on PATH.
        configured: Explicitly configured path, preferred when it exists.

    Returns:
        Path to the tool, or None.
    """
    if configured is not None:
        if configured.exists():
            return configured
        logger.warning(
            "Configured %s path does not exist: %s, falling back to PATH",
            tool_name,
            configured,
        )

    found = shutil.which(tool_name)
    return Path(found) if found else None


def require_tool(tool_name: str, configured: Path | None = None) -> Path:
    """Get path to a required tool.

    Raises:
        ToolNotFoundError: If the tool is not available.
    """
    path = get_tool_path(tool_name, configured)
    if path is None:
        raise ToolNotFoundError(tool_name)
    return path
