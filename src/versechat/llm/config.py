"""LLM Configuration - Settings for LLM providers.

This module defines connection settings for each supported provider and
the built-in presets used when versechat.toml does not override them.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional


@dataclass
class LLMConfig:
    """Configuration for an LLM provider.

    Attributes:
        name: Provider name ("openai", "anthropic")
        base_url: API base URL (e.g., "https://api.openai.com/v1")
        api_key_env: Environment variable holding the credential
        model: Default model name
        default_max_tokens: Token limit applied when a request sets none
        version: Provider API version header value, if the provider needs one
        timeout_ms: Request timeout in milliseconds
    """

    name: str
    base_url: str
    api_key_env: str
    model: str
    default_max_tokens: Optional[int] = None
    version: Optional[str] = None
    timeout_ms: int = 60000

    def with_overrides(
        self,
        *,
        base_url: Optional[str] = None,
        api_key_env: Optional[str] = None,
        model: Optional[str] = None,
        default_max_tokens: Optional[int] = None,
        version: Optional[str] = None,
        timeout_ms: Optional[int] = None,
    ) -> LLMConfig:
        """Return a copy with every non-None argument applied."""
        changes = {
            "base_url": base_url,
            "api_key_env": api_key_env,
            "model": model,
            "default_max_tokens": default_max_tokens,
            "version": version,
            "timeout_ms": timeout_ms,
        }
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


OPENAI = LLMConfig(
    name="openai",
    base_url="https://api.openai.com/v1",
    api_key_env="OPENAI_API_KEY",
    model="gpt-4o-mini",
)

ANTHROPIC = LLMConfig(
    name="anthropic",
    base_url="https://api.anthropic.com/v1",
    api_key_env="ANTHROPIC_API_KEY",
    model="claude-3-5-haiku-latest",
    default_max_tokens=256,
    version="2023-06-01",
)

PRESETS: dict[str, LLMConfig] = {
    "openai": OPENAI,
    "anthropic": ANTHROPIC,
}


__all__ = ["LLMConfig", "OPENAI", "ANTHROPIC", "PRESETS"]
