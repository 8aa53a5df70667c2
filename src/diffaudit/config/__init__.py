"""Configuration loading, schema, and defaults."""

from diffaudit.config.loader import ConfigError, load_config
from diffaudit.config.schema import (
    AuditConfig,
    GeneratorConfig,
    GitHubConfig,
    OutputConfig,
    StreamConfig,
)

__all__ = [
    "AuditConfig",
    "ConfigError",
    "GeneratorConfig",
    "GitHubConfig",
    "OutputConfig",
    "StreamConfig",
    "load_config",
]
