"""Configuration management for hbjob.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (HBJOB_*)
3. Config file (~/.hbjob/config.toml)
4. Default values (lowest priority)
"""

from hbjob.config.env import EnvReader
from hbjob.config.loader import (
    clear_config_cache,
    get_config,
    get_default_config_path,
    load_config_file,
)
from hbjob.config.logging_factory import build_logging_config
from hbjob.config.models import (
    HBJobConfig,
    JobActionConfig,
    LoggingConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "HBJobConfig",
    "JobActionConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    # Loader
    "EnvReader",
    "clear_config_cache",
    "get_config",
    "get_default_config_path",
    "load_config_file",
    "build_logging_config",
]
