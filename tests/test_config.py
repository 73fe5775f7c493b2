"""
Tests for configuration loading and validation.
"""

import pytest

from commandless import config as config_module
from commandless.config import CommandlessConfig, get_default_config
from commandless.metrics import EngineMetrics
from commandless.runtime.engine import CommandEngine


class TestDefaults:
    """Default values match the documented behaviour"""

    def test_thresholds(self):
        config = CommandlessConfig()
        assert config.natural_language_threshold == 0.15
        assert config.default_threshold == 0.25
        assert config.fuzzy_word_threshold == 0.8

    def test_conversation_settings(self):
        config = CommandlessConfig()
        assert config.conversation_ttl_seconds == 7200
        assert config.conversation_max_entries == 10000
        assert config.context_buffer_size == 10

    def test_ai_disabled_by_default(self):
        config = CommandlessConfig()
        assert config.enable_ai_analysis is False
        assert config.ai_min_confidence == 0.6

    def test_defaults_validate(self):
        CommandlessConfig().validate()


class TestFromEnv:
    """Environment variable loading"""

    def test_reads_thresholds(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_NL_THRESHOLD", "0.2")
        monkeypatch.setenv("COMMANDLESS_DEFAULT_THRESHOLD", "0.4")
        config = CommandlessConfig.from_env()
        assert config.natural_language_threshold == 0.2
        assert config.default_threshold == 0.4

    def test_reads_ai_settings(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_ENABLE_AI", "TRUE")
        monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
        monkeypatch.setenv("OPENAI_LLM_MODEL", "gpt-4o")
        monkeypatch.setenv("COMMANDLESS_AI_TIMEOUT", "2.5")
        config = CommandlessConfig.from_env()
        assert config.enable_ai_analysis is True
        assert config.openai_api_key == "sk-test"
        assert config.openai_llm_model == "gpt-4o"
        assert config.ai_timeout_seconds == 2.5

    def test_missing_variables_use_defaults(self, monkeypatch):
        for name in ("COMMANDLESS_NL_THRESHOLD", "COMMANDLESS_ENABLE_AI", "COMMANDLESS_CONVERSATION_TTL"):
            monkeypatch.delenv(name, raising=False)
        config = CommandlessConfig.from_env()
        assert config.natural_language_threshold == 0.15
        assert config.enable_ai_analysis is False
        assert config.conversation_ttl_seconds == 7200


class TestValidate:
    """Validation errors"""

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError, match="default_threshold"):
            CommandlessConfig(default_threshold=1.5).validate()

    def test_non_positive_ttl(self):
        with pytest.raises(ValueError, match="conversation_ttl_seconds"):
            CommandlessConfig(conversation_ttl_seconds=0).validate()

    def test_ai_requires_api_key(self):
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            CommandlessConfig(enable_ai_analysis=True, openai_api_key=None).validate()

    def test_ai_with_key_is_valid(self):
        CommandlessConfig(enable_ai_analysis=True, openai_api_key="sk-test").validate()


def test_summary_mentions_ai_state():
    summary = CommandlessConfig().get_summary()
    assert "Natural-language threshold: 0.15" in summary
    assert "Enabled: False" in summary


class TestDefaultConfig:
    """Shared configuration loaded from the environment"""

    @pytest.fixture(autouse=True)
    def fresh_default(self, monkeypatch):
        monkeypatch.setattr(config_module, "_default_config", None)
        monkeypatch.delenv("COMMANDLESS_ENABLE_AI", raising=False)

    def test_loaded_once(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_DEFAULT_THRESHOLD", "0.3")
        first = get_default_config()
        monkeypatch.setenv("COMMANDLESS_DEFAULT_THRESHOLD", "0.5")
        assert get_default_config() is first
        assert first.default_threshold == 0.3

    def test_invalid_environment_raises(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_DEFAULT_THRESHOLD", "1.5")
        with pytest.raises(ValueError, match="default_threshold"):
            get_default_config()

    def test_engine_uses_default(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_NL_THRESHOLD", "0.2")
        engine = CommandEngine(metrics=EngineMetrics())
        assert engine.config is get_default_config()
        assert engine.selector.natural_language_threshold == 0.2

    def test_engine_rejects_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("COMMANDLESS_DEFAULT_THRESHOLD", "1.5")
        with pytest.raises(ValueError, match="default_threshold"):
            CommandEngine(metrics=EngineMetrics())


def test_engine_validates_explicit_config():
    with pytest.raises(ValueError, match="conversation_ttl_seconds"):
        CommandEngine(config=CommandlessConfig(conversation_ttl_seconds=0), metrics=EngineMetrics())
