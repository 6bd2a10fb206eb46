"""Configuration management for versechat.

Parses versechat.toml files with support for:
- Chat defaults (provider, model, limits, system prompt)
- Per-provider connection overrides

Example versechat.toml structure:

    [chat]
    provider = "anthropic"
    model = "claude-3-5-haiku-latest"
    max_tokens = 512
    max_history = 16

    [llm.openai]
    api_base = "https://api.openai.com/v1"
    api_key_env = "OPENAI_API_KEY"
    timeout_sec = 60

Credentials are never stored here; each provider names the environment
variable that holds its key. A .env file next to versechat.toml (or in a
parent directory) is loaded first without overriding the environment.
"""

from __future__ import annotations

import logging
import os
import re
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigurationError
from .llm.config import PRESETS, LLMConfig

if sys.version_info >= (3, 11):
    import tomllib as toml  # type: ignore
else:
    import tomli as toml  # type: ignore

CONFIG_FILENAME = "versechat.toml"

DEFAULT_SYSTEM_PROMPT = (
    "You are a thoughtful Bible assistant. Use the passage context in the conversation. "
    "Format your responses with markdown when helpful."
)


_ENV_REF = re.compile(r"\$\{(\w+)\}")
_ENV_LINE = re.compile(r"^(?:export\s+)?([A-Za-z_]\w*)\s*=\s*(.*)$")
_PROVIDER_KEYS = (
    "api_base",
    "api_key_env",
    "model",
    "default_max_tokens",
    "version",
    "timeout_sec",
)


def _parents(start: Path) -> list[Path]:
    """``start`` and each directory above it, nearest first."""
    start = start.resolve()
    return [start, *start.parents]


def read_env_file(env_path: Path) -> dict[str, str]:
    """Parse the KEY=VALUE lines of a .env file, dropping surrounding quotes."""
    values = {}
    for line in env_path.read_text(encoding="utf-8").splitlines():
        match = _ENV_LINE.match(line.strip())
        if match is None:
            continue
        key, value = match.group(1), match.group(2).strip()
        if len(value) >= 2 and value[0] in "\"'" and value[-1] == value[0]:
            value = value[1:-1]
        values[key] = value
    return values


def _apply_env_file(config_dir: Path) -> Optional[Path]:
    """Load the nearest .env above ``config_dir`` (else the cwd's) into os.environ.

    Variables that are already set keep their value.
    """
    candidates = [d / ".env" for d in _parents(config_dir)] + [Path.cwd() / ".env"]
    env_path = next((p for p in candidates if p.is_file()), None)
    if env_path is None:
        return None
    try:
        values = read_env_file(env_path)
    except OSError as e:
        logging.warning("[versechat.config] Could not read %s: %s", env_path, e)
        return None
    for key, value in values.items():
        os.environ.setdefault(key, value)
    return env_path


def _expand(value: Any) -> Any:
    """Substitute ${VAR} in string values; unset variables stay as written."""
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {k: _expand(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_expand(v) for v in value]
    return value


@dataclass
class ChatConfig:
    """Chat session defaults."""

    provider: str = "openai"
    model: Optional[str] = None  # None = provider preset's model
    max_tokens: Optional[int] = 256
    temperature: Optional[float] = 0.7
    max_history: int = 16
    timeout_sec: Optional[float] = None  # per-turn limit, None = transport timeout only
    system_prompt: str = DEFAULT_SYSTEM_PROMPT

    def resolved_model(self) -> str:
        """The configured model, or the provider preset's default."""
        if self.model:
            return self.model
        preset = PRESETS.get(self.provider.lower())
        return preset.model if preset else PRESETS["openai"].model

    def validate(self) -> None:
        """Reject limits no request could be built with.

        Raises:
            ConfigurationError: A numeric setting is out of range
        """
        if self.max_tokens is not None and self.max_tokens < 0:
            raise ConfigurationError(f"max_tokens must not be negative: {self.max_tokens}")
        if self.max_history < 1:
            raise ConfigurationError(f"max_history must be at least 1: {self.max_history}")
        if self.timeout_sec is not None and self.timeout_sec <= 0:
            raise ConfigurationError(f"timeout_sec must be positive: {self.timeout_sec}")


@dataclass
class LLMProviderConfig:
    """Per-provider connection overrides from [llm.<name>]."""

    name: str
    api_base: Optional[str] = None
    api_key_env: Optional[str] = None
    model: Optional[str] = None
    default_max_tokens: Optional[int] = None
    version: Optional[str] = None
    timeout_sec: Optional[float] = None


@dataclass
class ProjectConfig:
    """Complete versechat configuration."""

    chat: ChatConfig = field(default_factory=ChatConfig)
    llm_providers: dict[str, LLMProviderConfig] = field(default_factory=dict)
    path: Optional[Path] = None

    @classmethod
    def load(cls, path: Path = Path(CONFIG_FILENAME)) -> ProjectConfig:
        """Load configuration from a versechat.toml file.

        The nearest .env file at or above the config directory (or in the
        working directory) is applied first, then ${VAR} references in the
        config are expanded.

        Raises:
            ConfigurationError: The file exists but cannot be parsed
        """
        if not path.exists():
            return cls()

        _apply_env_file(path.parent)
        try:
            data = _expand(toml.loads(path.read_text(encoding="utf-8")))
        except (OSError, toml.TOMLDecodeError) as e:
            raise ConfigurationError(f"Failed to parse {path}: {e}") from e

        chat_table = data.get("chat", {})
        llm_tables = data.get("llm", {})
        if not isinstance(chat_table, dict) or not isinstance(llm_tables, dict):
            raise ConfigurationError(f"Failed to parse {path}: [chat] and [llm] must be tables")

        chat_keys = {f.name for f in fields(ChatConfig)}
        config = cls(
            chat=ChatConfig(**{k: v for k, v in chat_table.items() if k in chat_keys}),
            path=path,
        )
        try:
            config.chat.validate()
        except ConfigurationError as e:
            raise ConfigurationError(f"Invalid [chat] in {path}: {e}") from e

        # Non-table entries under [llm] are ignored
        for name, table in llm_tables.items():
            if isinstance(table, dict):
                key = name.lower()
                config.llm_providers[key] = LLMProviderConfig(
                    name=key, **{k: table[k] for k in _PROVIDER_KEYS if k in table}
                )

        return config

    def llm_config(self, provider_name: str) -> Optional[LLMConfig]:
        """Preset for ``provider_name`` with [llm.<name>] overrides applied.

        Returns None for providers without a built-in preset.
        """
        key = provider_name.strip().lower()
        preset = PRESETS.get(key)
        if preset is None:
            return None

        overrides = self.llm_providers.get(key)
        if overrides is None:
            return preset

        return preset.with_overrides(
            base_url=overrides.api_base,
            api_key_env=overrides.api_key_env,
            model=overrides.model,
            default_max_tokens=overrides.default_max_tokens,
            version=overrides.version,
            timeout_ms=int(overrides.timeout_sec * 1000) if overrides.timeout_sec else None,
        )


def load_project_config(start_dir: Path = Path(".")) -> ProjectConfig:
    """Load the nearest versechat.toml at or above start_dir, else defaults."""
    for directory in _parents(start_dir):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            return ProjectConfig.load(candidate)
    return ProjectConfig()


__all__ = [
    "CONFIG_FILENAME",
    "DEFAULT_SYSTEM_PROMPT",
    "ChatConfig",
    "LLMProviderConfig",
    "ProjectConfig",
    "load_project_config",
    "read_env_file",
]
