"""Load and merge configuration from .diffaudit.toml and env vars."""

from __future__ import annotations

import dataclasses
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from diffaudit.config.schema import (
    AuditConfig,
    GeneratorConfig,
    GitHubConfig,
    OutputConfig,
    StreamConfig,
)

CONFIG_FILENAME = ".diffaudit.toml"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


class ConfigError(Exception):
    """Raised when config is malformed or unreadable."""


def find_config_file(root: Path, override: Optional[str] = None) -> Optional[Path]:
    """Locate the config file. *override* takes precedence."""
    if override:
        p = Path(override)
        if not p.is_file():
            raise ConfigError(f"Config file not found: {override}")
        return p
    candidate = root / CONFIG_FILENAME
    return candidate if candidate.is_file() else None


def _parse_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ConfigError(f"Failed to parse {path}: {exc}") from exc


def _build_section(data: Dict[str, Any], cls: type, section: str):
    """Build a dataclass from a TOML section dict, ignoring unknown keys."""
    raw = data.get(section, {})
    if not isinstance(raw, dict):
        raise ConfigError(f"[{section}] must be a table")
    valid_fields = {f.name for f in dataclasses.fields(cls)}
    filtered = {k: v for k, v in raw.items() if k in valid_fields}
    return cls(**filtered)


def _env_bool(name: str) -> Optional[bool]:
    val = os.environ.get(name, "").strip().lower()
    if val in _TRUE:
        return True
    if val in _FALSE:
        return False
    return None


def _merge_env_overrides(cfg: AuditConfig) -> None:
    """Apply DIFFAUDIT_* environment variable overrides."""
    if val := os.environ.get("DIFFAUDIT_GENERATOR_URL"):
        cfg.generator.endpoint = val
    if val := os.environ.get("DIFFAUDIT_GENERATOR_KEY") or os.environ.get("GEMINI_KEY"):
        cfg.generator.api_key = val
    if val := os.environ.get("DIFFAUDIT_MODEL"):
        cfg.generator.model = val
    if val := os.environ.get("DIFFAUDIT_MAX_DIFF_CHARS"):
        try:
            cfg.generator.max_diff_chars = int(val)
        except ValueError:
            pass
    if val := os.environ.get("DIFFAUDIT_GITHUB_TOKEN") or os.environ.get("GITHUB_KEY"):
        cfg.github.token = val
    if val := os.environ.get("DIFFAUDIT_FORMAT"):
        if val in ("terminal", "json"):
            cfg.output.format = val  # type: ignore[assignment]
    repair = _env_bool("DIFFAUDIT_REPAIR_PARTIAL")
    if repair is not None:
        cfg.stream.repair_partial = repair


def load_config(
    root: Path,
    config_override: Optional[str] = None,
) -> AuditConfig:
    """Load, validate, and return an AuditConfig."""
    config_path = find_config_file(root, config_override)

    if config_path is None:
        cfg = AuditConfig()
    else:
        raw = _parse_toml(config_path)
        try:
            cfg = AuditConfig(
                version=str(raw.get("version", "1.0")),
                generator=_build_section(raw, GeneratorConfig, "generator"),
                github=_build_section(raw, GitHubConfig, "github"),
                stream=_build_section(raw, StreamConfig, "stream"),
                output=_build_section(raw, OutputConfig, "output"),
            )
        except TypeError as exc:
            raise ConfigError(f"Invalid config in {config_path}: {exc}") from exc

    if cfg.output.format not in ("terminal", "json"):
        raise ConfigError(f"Invalid output format: {cfg.output.format}")
    if not isinstance(cfg.stream.chunk_size, int) or cfg.stream.chunk_size <= 0:
        raise ConfigError("stream.chunk_size must be positive")

    _merge_env_overrides(cfg)
    return cfg
