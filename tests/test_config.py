"""Tests for configuration management."""

import os
from pathlib import Path

import pytest

from versechat.config import (
    DEFAULT_SYSTEM_PROMPT,
    ChatConfig,
    LLMProviderConfig,
    ProjectConfig,
    load_project_config,
    read_env_file,
)
from versechat.errors import ConfigurationError
from versechat.llm.config import ANTHROPIC, OPENAI


def test_chat_config_defaults():
    """Test ChatConfig defaults."""
    config = ChatConfig()
    assert config.provider == "openai"
    assert config.max_tokens == 256
    assert config.temperature == 0.7
    assert config.max_history == 16
    assert config.timeout_sec is None
    assert config.system_prompt == DEFAULT_SYSTEM_PROMPT


def test_resolved_model_falls_back_to_preset():
    assert ChatConfig().resolved_model() == OPENAI.model
    assert ChatConfig(provider="anthropic").resolved_model() == ANTHROPIC.model
    assert ChatConfig(provider="anthropic", model="custom").resolved_model() == "custom"


def test_project_config_defaults():
    """Test ProjectConfig defaults."""
    config = ProjectConfig()
    assert config.chat == ChatConfig()
    assert len(config.llm_providers) == 0
    assert config.llm_config("openai") == OPENAI
    assert config.llm_config("bogus") is None


def test_project_config_load(tmp_path, monkeypatch):
    """Test loading a full configuration."""
    monkeypatch.setenv("VERSECHAT_TEST_MODEL", "claude-test")
    config_file = tmp_path / "versechat.toml"
    config_file.write_text(
        """
[chat]
provider = "anthropic"
model = "${VERSECHAT_TEST_MODEL}"
max_tokens = 512
temperature = 0.3
max_history = 8
timeout_sec = 45
system_prompt = "Answer plainly."

[llm.anthropic]
api_base = "https://proxy.example.com/v1"
api_key_env = "PROXY_KEY"
default_max_tokens = 1024
timeout_sec = 90

[llm.OpenAI]
model = "gpt-4o"

[llm]
stray = "ignored"
"""
    )

    config = ProjectConfig.load(config_file)

    assert config.path == config_file
    assert config.chat.provider == "anthropic"
    assert config.chat.model == "claude-test"
    assert config.chat.max_tokens == 512
    assert config.chat.temperature == 0.3
    assert config.chat.max_history == 8
    assert config.chat.timeout_sec == 45
    assert config.chat.system_prompt == "Answer plainly."

    assert set(config.llm_providers) == {"anthropic", "openai"}
    anthropic = config.llm_config("anthropic")
    assert anthropic.base_url == "https://proxy.example.com/v1"
    assert anthropic.api_key_env == "PROXY_KEY"
    assert anthropic.default_max_tokens == 1024
    assert anthropic.timeout_ms == 90000
    assert anthropic.version == ANTHROPIC.version
    assert config.llm_config("openai").model == "gpt-4o"
    assert config.llm_config("OPENAI").base_url == OPENAI.base_url


def test_load_missing_file_returns_defaults(tmp_path):
    config = ProjectConfig.load(tmp_path / "versechat.toml")

    assert config == ProjectConfig()


def test_load_invalid_toml_raises(tmp_path):
    config_file = tmp_path / "versechat.toml"
    config_file.write_text("[chat\nprovider = ")

    with pytest.raises(ConfigurationError, match="Failed to parse"):
        ProjectConfig.load(config_file)


def test_env_file_loaded_without_override(tmp_path, monkeypatch):
    """.env values fill gaps but never replace the environment."""
    monkeypatch.setenv("VERSECHAT_EXISTING", "from-env")
    monkeypatch.delenv("VERSECHAT_FROM_DOTENV", raising=False)
    monkeypatch.delenv("VERSECHAT_QUOTED", raising=False)
    (tmp_path / ".env").write_text(
        "# comment\n"
        "VERSECHAT_EXISTING=from-file\n"
        "VERSECHAT_FROM_DOTENV=loaded\n"
        "export VERSECHAT_QUOTED='quoted value'\n"
    )
    (tmp_path / "versechat.toml").write_text('[chat]\nprovider = "openai"\n')

    try:
        ProjectConfig.load(tmp_path / "versechat.toml")

        assert os.environ["VERSECHAT_EXISTING"] == "from-env"
        assert os.environ["VERSECHAT_FROM_DOTENV"] == "loaded"
        assert os.environ["VERSECHAT_QUOTED"] == "quoted value"
    finally:
        os.environ.pop("VERSECHAT_FROM_DOTENV", None)
        os.environ.pop("VERSECHAT_QUOTED", None)


def test_load_project_config_searches_upward(tmp_path):
    (tmp_path / "versechat.toml").write_text('[chat]\nprovider = "anthropic"\n')
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)

    config = load_project_config(nested)

    assert config.chat.provider == "anthropic"
    assert Path(config.path).parent == tmp_path.resolve()


def test_llm_provider_config():
    """Test LLMProviderConfig."""
    config = LLMProviderConfig(name="openai", api_base="http://localhost:8000/v1")
    assert config.name == "openai"
    assert config.api_key_env is None
    assert config.timeout_sec is None


def test_read_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# keys\n"
        "OPENAI_API_KEY = sk-test\n"
        'export ANTHROPIC_API_KEY="sk-ant"\n'
        "not a pair\n"
        "EMPTY=\n"
    )

    assert read_env_file(env_file) == {
        "OPENAI_API_KEY": "sk-test",
        "ANTHROPIC_API_KEY": "sk-ant",
        "EMPTY": "",
    }


def test_llm_must_be_a_table(tmp_path):
    config_file = tmp_path / "versechat.toml"
    config_file.write_text('llm = "openai"\n')

    with pytest.raises(ConfigurationError, match="must be tables"):
        ProjectConfig.load(config_file)


@pytest.mark.parametrize(
    "line, setting",
    [
        ("max_tokens = -1", "max_tokens"),
        ("max_history = 0", "max_history"),
        ("timeout_sec = -5", "timeout_sec"),
    ],
)
def test_out_of_range_chat_settings_raise(tmp_path, line, setting):
    """Limits are checked when the file is loaded, not at the first turn."""
    config_file = tmp_path / "versechat.toml"
    config_file.write_text(f"[chat]\n{line}\n")

    with pytest.raises(ConfigurationError, match=f"Invalid \\[chat\\].*{setting}"):
        ProjectConfig.load(config_file)


def test_chat_config_validate_accepts_defaults():
    ChatConfig().validate()
    ChatConfig(max_tokens=0, max_history=1, timeout_sec=0.5).validate()
