"""Tests for settings and logging configuration."""

import logging

import pytest
from pydantic import ValidationError

from agent_coordinator.config import Settings
from agent_coordinator.logging import get_logger, setup_logging


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "ANTHROPIC_API_KEY",
        "OPENAI_API_KEY",
        "LLM_PROVIDER",
        "LLM_MODEL",
        "AGENT_COORDINATOR_LOG_LEVEL",
        "AGENT_COORDINATOR_MAX_ITERATIONS",
        "AGENT_COORDINATOR_STRATEGY",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self, clean_env):
        settings = Settings(_env_file=None)
        assert settings.max_iterations == 10
        assert settings.max_tool_retries == 3
        assert settings.routing_strategy == "skill-based"
        assert settings.log_level == "WARNING"
        assert settings.detect_provider() is None

    def test_env_aliases(self, clean_env):
        clean_env.setenv("AGENT_COORDINATOR_MAX_ITERATIONS", "4")
        clean_env.setenv("AGENT_COORDINATOR_STRATEGY", "round-robin")
        settings = Settings(_env_file=None)
        assert settings.max_iterations == 4
        assert settings.routing_strategy == "round-robin"

    def test_invalid_max_iterations(self, clean_env):
        clean_env.setenv("AGENT_COORDINATOR_MAX_ITERATIONS", "0")
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_detect_provider_prefers_anthropic(self, clean_env):
        clean_env.setenv("OPENAI_API_KEY", "sk-o")
        clean_env.setenv("ANTHROPIC_API_KEY", "sk-a")
        settings = Settings(_env_file=None)
        assert settings.detect_provider() == "anthropic"
        assert settings.get_api_key_for_provider("openai") == "sk-o"

    def test_explicit_provider(self, clean_env):
        clean_env.setenv("LLM_PROVIDER", "openai")
        assert Settings(_env_file=None).detect_provider() == "openai"


class TestLogging:
    """Tests for logging setup."""

    def test_level_from_argument(self):
        logger = setup_logging("DEBUG")
        assert logger.name == "agent_coordinator"
        assert logger.level == logging.DEBUG

    def test_invalid_level_falls_back(self):
        assert setup_logging("LOUD").level == logging.WARNING

    def test_module_loggers_inherit_level(self):
        setup_logging("INFO")
        logger = get_logger("agent_coordinator.multi_agent.routing")
        assert logger.getEffectiveLevel() == logging.INFO
