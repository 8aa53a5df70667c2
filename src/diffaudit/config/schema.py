"""Configuration schema — dataclasses for every config section.

Secrets live on these values, not in module globals: callers build an
AuditConfig per invocation and pass the relevant section to whatever
performs the external call.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

OutputFormat = Literal["terminal", "json"]


@dataclass
class GeneratorConfig:
    endpoint: str = ""  # text-stream completion endpoint
    api_key: str = ""
    model: str = "gemini-1.5-flash-8b"
    max_diff_chars: int = 30000  # diff is truncated before it is sent
    timeout: float = 120.0

    @property
    def is_configured(self) -> bool:
        return bool(self.endpoint)


@dataclass
class GitHubConfig:
    token: str = ""
    api_base: str = "https://api.github.com"
    web_base: str = "https://github.com"
    timeout: float = 30.0


@dataclass
class StreamConfig:
    chunk_size: int = 256  # replay chunk size in bytes
    repair_partial: bool = False  # close unfinished objects for early previews


@dataclass
class OutputConfig:
    format: OutputFormat = "terminal"
    show_added: bool = True
    show_removed: bool = True
    show_context: bool = True
    live: bool = True


@dataclass
class AuditConfig:
    version: str = "1.0"
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    github: GitHubConfig = field(default_factory=GitHubConfig)
    stream: StreamConfig = field(default_factory=StreamConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
