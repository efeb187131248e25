"""Tests for configuration and chat model construction."""

import logging

import pytest
from langchain_anthropic import ChatAnthropic

from llm_proxy_agent.api.agent_card import build_agent_card
from llm_proxy_agent.config import LLMConfig, ServerConfig
from llm_proxy_agent.services.llm import create_chat_model
from llm_proxy_agent.utils.logging import LogConfig, get_logger, setup_logging


class TestLLMConfig:
    """Tests for LLMConfig."""

    def test_defaults(self, monkeypatch):
        """Test defaults when nothing is set."""
        for name in ("LLM_MODEL", "LLM_TEMPERATURE", "LLM_MAX_TOKENS", "ANTHROPIC_API_KEY"):
            monkeypatch.delenv(name, raising=False)

        config = LLMConfig.from_env()

        assert config.model == "claude-3-5-sonnet-20241022"
        assert config.temperature == 0.7
        assert config.max_tokens == 2000
        assert config.api_key is None

    def test_from_env(self, monkeypatch):
        """Test reading overrides from the environment."""
        monkeypatch.setenv("LLM_MODEL", "claude-3-5-haiku-20241022")
        monkeypatch.setenv("LLM_TEMPERATURE", "0.1")
        monkeypatch.setenv("LLM_MAX_TOKENS", "512")
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-test")

        config = LLMConfig.from_env()

        assert config.model == "claude-3-5-haiku-20241022"
        assert config.temperature == 0.1
        assert config.max_tokens == 512
        assert config.api_key == "sk-test"


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_url_defaults_to_localhost(self):
        """Test the advertised URL without a public URL."""
        assert ServerConfig(port=9000).url == "http://localhost:9000/"

    def test_public_url(self, monkeypatch):
        """Test that PUBLIC_URL is advertised on the agent card."""
        monkeypatch.setenv("PUBLIC_URL", "https://agent.example.com/")
        monkeypatch.setenv("PORT", "8080")

        config = ServerConfig.from_env()

        assert config.port == 8080
        assert build_agent_card(config).url == "https://agent.example.com/"


class TestCreateChatModel:
    """Tests for create_chat_model."""

    def test_missing_api_key(self):
        """Test that a missing API key is rejected."""
        with pytest.raises(ValueError, match="ANTHROPIC_API_KEY"):
            create_chat_model(LLMConfig(api_key=None))

    def test_configured_model(self):
        """Test that the configuration is passed to ChatAnthropic."""
        model = create_chat_model(LLMConfig(model="claude-3-5-haiku-20241022", max_tokens=256, api_key="sk-test"))

        assert isinstance(model, ChatAnthropic)
        assert model.model == "claude-3-5-haiku-20241022"
        assert model.max_tokens == 256


class TestLogging:
    """Tests for the logging helpers."""

    def test_log_config_from_env(self, monkeypatch):
        """Test that LOG_LEVEL sets the configured level."""
        monkeypatch.setenv("LOG_LEVEL", "debug")

        assert LogConfig.from_env().level == "DEBUG"

    def test_setup_logging_quiets_provider_loggers(self):
        """Test that request logs of provider SDKs are raised to WARNING."""
        setup_logging(LogConfig(level="DEBUG"))

        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
        assert logging.getLogger("anthropic").level == logging.WARNING

    def test_get_logger_explicit_level(self, monkeypatch):
        """Test that an explicit level overrides LOG_LEVEL."""
        monkeypatch.setenv("LOG_LEVEL", "ERROR")

        assert get_logger("llm_proxy_agent.test", level="debug").level == logging.DEBUG
        assert get_logger("llm_proxy_agent.test").level == logging.ERROR
