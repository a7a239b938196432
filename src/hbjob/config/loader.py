"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (HBJOB_*)
3. Config file (~/.hbjob/config.toml)
4. Default values

Environment variables:
- HBJOB_CONFIG_PATH: Path to config file (overrides default location)
- HBJOB_HANDBRAKE_PATH: Path to HandBrakeCLI executable
- HBJOB_FFPROBE_PATH: Path to ffprobe executable
- HBJOB_LOG_LEVEL: Log level (debug, info, warning, error)
- HBJOB_LOG_FILE: Log file path
"""

from __future__ import annotations

import logging
import os
import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from hbjob.config.env import EnvReader
from hbjob.config.models import (
    HBJobConfig,
    JobActionConfig,
    LoggingConfig,
    ToolPathsConfig,
)
from hbjob.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".hbjob"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

# path -> (parsed dict, mtime)
_config_cache: dict[Path, tuple[dict[str, Any], float]] = {}
_config_cache_lock = threading.Lock()


def get_default_config_path() -> Path:
    """Get the default config file path.

    Can be overridden by HBJOB_CONFIG_PATH environment variable.
    """
    env_path = os.environ.get("HBJOB_CONFIG_PATH")
    if env_path:
        return Path(env_path).expanduser()
    return DEFAULT_CONFIG_FILE


def load_config_file(path: Path | None = None) -> dict[str, Any]:
    """Load configuration from a TOML file.

    Results are cached with mtime-based invalidation, so an edited file is
    re-read on the next call.

    Args:
        path: Path to config file. If None, uses default location.

    Returns:
        Parsed configuration dict. Empty dict if the file doesn't exist.

    Raises:
        ConfigurationError: If the file exists but cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    try:
        current_mtime = path.stat().st_mtime
    except FileNotFoundError:
        return {}

    with _config_cache_lock:
        cached = _config_cache.get(path)
        if cached is not None and cached[1] == current_mtime:
            return cached[0]

        try:
            with path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {path}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

        _config_cache[path] = (data, current_mtime)
        return data


def clear_config_cache() -> None:
    """Clear the config file cache. Primarily useful for testing."""
    with _config_cache_lock:
        _config_cache.clear()


def _optional_path(value: Any) -> Path | None:
    if value is None or value == "":
        return None
    return Path(str(value)).expanduser()


def _section(data: dict[str, Any], name: str, config_path: Path) -> dict[str, Any]:
    section = data.get(name, {})
    if not isinstance(section, dict):
        raise ConfigurationError(f"[{name}] in {config_path} must be a table")
    return section


def _build_tools(section: dict[str, Any], reader: EnvReader) -> ToolPathsConfig:
    return ToolPathsConfig(
        handbrake=reader.get_path("HBJOB_HANDBRAKE_PATH")
        or _optional_path(section.get("handbrake")),
        ffprobe=reader.get_path("HBJOB_FFPROBE_PATH")
        or _optional_path(section.get("ffprobe")),
    )


def _build_logging(
    section: dict[str, Any], reader: EnvReader, config_path: Path
) -> LoggingConfig:
    base = LoggingConfig()
    env_file = reader.get_str("HBJOB_LOG_FILE")
    try:
        return LoggingConfig(
            level=reader.get_str("HBJOB_LOG_LEVEL") or section.get("level", base.level),
            file=_optional_path(env_file) or _optional_path(section.get("file")),
            format=section.get("format", base.format),
            include_stderr=section.get("include_stderr", base.include_stderr),
            max_bytes=section.get("max_bytes", base.max_bytes),
            backup_count=section.get("backup_count", base.backup_count),
        )
    except ValueError as e:
        raise ConfigurationError(f"Invalid [logging] in {config_path}: {e}") from e


def _build_job_action(section: dict[str, Any], config_path: Path) -> JobActionConfig:
    try:
        return JobActionConfig.model_validate(section)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid [job_action] in {config_path}: {e}") from e


def get_config(
    config_path: Path | None = None,
    *,
    handbrake_path: Path | None = None,
    ffprobe_path: Path | None = None,
    env_reader: EnvReader | None = None,
) -> HBJobConfig:
    """Get configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides HBJOB_CONFIG_PATH).
        handbrake_path: CLI override for HandBrakeCLI path.
        ffprobe_path: CLI override for ffprobe path.
        env_reader: Optional EnvReader for testing (uses os.environ if None).

    Returns:
        HBJobConfig with merged configuration.

    Raises:
        ConfigurationError: If the config file is unparseable or invalid.
    """
    reader = env_reader or EnvReader()
    if config_path is None:
        config_path = get_default_config_path()

    file_config = load_config_file(config_path)

    tools = _build_tools(_section(file_config, "tools", config_path), reader)
    if handbrake_path is not None:
        tools.handbrake = handbrake_path
    if ffprobe_path is not None:
        tools.ffprobe = ffprobe_path

    config = HBJobConfig(
        tools=tools,
        logging=_build_logging(
            _section(file_config, "logging", config_path), reader, config_path
        ),
        job_action=_build_job_action(
            _section(file_config, "job_action", config_path), config_path
        ),
    )
    logger.debug(
        "Loaded configuration from %s",
        config_path,
        extra={"config_path": str(config_path), "preset": config.job_action.preset},
    )
    return config
