"""environment-driven settings for the coordinator.

values come from process environment variables first, then from a .env file
in the working directory. yaml files passed to the cli override these per run.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROVIDER_PREFERENCE = ("anthropic", "openai")


class Settings(BaseSettings):
    """coordinator settings.

    provider keys use their usual variable names (ANTHROPIC_API_KEY,
    OPENAI_API_KEY). coordination knobs live under the AGENT_COORDINATOR_
    prefix, e.g. AGENT_COORDINATOR_MAX_ITERATIONS=4.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    # explicit provider wins over key-based detection
    llm_provider: str | None = Field(default=None, alias="LLM_PROVIDER")
    llm_model: str | None = Field(default=None, alias="LLM_MODEL")

    log_level: str = Field(default="WARNING", alias="AGENT_COORDINATOR_LOG_LEVEL")
    max_iterations: int = Field(default=10, ge=1, alias="AGENT_COORDINATOR_MAX_ITERATIONS")
    max_tool_retries: int = Field(default=3, ge=1, alias="AGENT_COORDINATOR_MAX_TOOL_RETRIES")
    routing_strategy: str = Field(default="skill-based", alias="AGENT_COORDINATOR_STRATEGY")
    default_priority: int = Field(
        default=5, ge=1, le=10, alias="AGENT_COORDINATOR_DEFAULT_PRIORITY"
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    def get_api_key_for_provider(self, provider: str) -> str | None:
        """api key configured for ``provider``, or None."""
        return getattr(self, f"{provider}_api_key", None)

    def detect_provider(self) -> str | None:
        """pick a provider: LLM_PROVIDER if set, else the first one with a key.

        anthropic is checked before openai.
        """
        if self.llm_provider:
            return self.llm_provider
        return next(
            (name for name in _PROVIDER_PREFERENCE if self.get_api_key_for_provider(name)),
            None,
        )


@lru_cache
def get_settings() -> Settings:
    """process-wide settings, read once.

    tests and long-running callers can refresh with get_settings.cache_clear().
    """
    return Settings()
