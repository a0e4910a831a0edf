"""
Configuration settings for the comment synchroniser.
Loads values from .env file automatically; an optional TOML file
(autodocs.toml) overrides the defaults per project.
"""

import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from core.exceptions import ConfigError

# Load .env from project root
_project_root = Path(__file__).resolve().parent.parent
load_dotenv(_project_root / ".env")

DEFAULT_CONFIG_FILE = "autodocs.toml"

DEFAULT_PROMPT = """\
Generate TSDoc for the following code as raw content - no block decoration * using this template (do not include types):
{summary}
@returns {returns}
@throws {throws}
@description {description}
"""

DEFAULT_INCLUDES = ("src/**/*.{ts,tsx}",)


@dataclass
class LLMConfig:
    """LLM provider configuration."""
    model: str = os.environ.get("CEREBRAS_MODEL", "llama-3.3-70b")
    api_key: Optional[str] = None
    temperature: float = 0.3
    max_tokens: int = 4000
    timeout: float = 60.0
    max_retries: int = 3
    prompt: str = DEFAULT_PROMPT

    def __post_init__(self):
        if self.api_key is None:
            self.api_key = os.environ.get("CEREBRAS_API_KEY", "")


@dataclass
class SyncConfig:
    """Which files to scan and how to regenerate their comments."""
    includes: tuple = DEFAULT_INCLUDES
    excludes: tuple = ()
    # Block tag marking a managed comment
    tag: str = "@autodocs"
    # Upper bound on concurrent generation calls per file
    concurrency: int = 4

    def __post_init__(self):
        self.includes = tuple(self.includes)
        self.excludes = tuple(self.excludes)
        if not self.includes:
            raise ConfigError("You must provide at least one include pattern")
        if self.concurrency < 1:
            raise ConfigError(f"concurrency must be at least 1, got {self.concurrency}")
        if not self.tag.startswith("@") or len(self.tag) < 2:
            raise ConfigError(f"tag must look like '@name', got {self.tag!r}")

    @property
    def uses_default_includes(self) -> bool:
        return self.includes == DEFAULT_INCLUDES


@dataclass
class AppConfig:
    """Top-level application configuration."""
    llm: LLMConfig = field(default_factory=LLMConfig)
    sync: SyncConfig = field(default_factory=SyncConfig)
    verbose: bool = True


def _build_section(cls, table: dict, section: str):
    known = {f.name for f in fields(cls)}
    unknown = sorted(set(table) - known)
    if unknown:
        raise ConfigError(f"Unknown key(s) in [{section}]: {', '.join(unknown)}")
    return cls(**table)


def load_config(path: str | None = DEFAULT_CONFIG_FILE) -> AppConfig:
    """
    Build the application configuration.

    ``path=None`` skips the config file entirely. The default file is optional;
    an explicitly named file that does not exist is an error.
    """
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.is_file():
        if path == DEFAULT_CONFIG_FILE:
            return AppConfig()
        raise ConfigError(f"Config file not found: {path}")

    try:
        with open(config_path, "rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    unknown = sorted(set(data) - {"llm", "sync"})
    if unknown:
        raise ConfigError(f"Unknown section(s) in {path}: {', '.join(unknown)}")

    try:
        llm = _build_section(LLMConfig, data.get("llm", {}), "llm")
        sync = _build_section(SyncConfig, data.get("sync", {}), "sync")
    except TypeError as e:
        raise ConfigError(f"Invalid value in {path}: {e}") from e

    return AppConfig(llm=llm, sync=sync)
