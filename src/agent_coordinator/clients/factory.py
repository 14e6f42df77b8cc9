"""Provider lookup and client construction.

Each provider is described by a ProviderSpec. The client class is imported
only when ``create_client`` is called for that provider, so an installation
can run with just one SDK importable.
"""

import importlib
import os
from typing import NamedTuple

from .base import BaseLLMClient


class ProviderSpec(NamedTuple):
    module: str
    class_name: str
    key_env: str
    default_model: str


_PROVIDERS: dict[str, ProviderSpec] = {
    "anthropic": ProviderSpec(
        module="agent_coordinator.clients.anthropic",
        class_name="AnthropicClient",
        key_env="ANTHROPIC_API_KEY",
        default_model="claude-sonnet-4-5-20250929",
    ),
    "openai": ProviderSpec(
        module="agent_coordinator.clients.openai",
        class_name="OpenAIClient",
        key_env="OPENAI_API_KEY",
        default_model="gpt-4o",
    ),
}


def get_available_providers() -> list[str]:
    """Names accepted by ``create_client``."""
    return sorted(_PROVIDERS)


def _lookup(provider: str) -> ProviderSpec:
    spec = _PROVIDERS.get(provider)
    if spec is None:
        raise ValueError(f"Unknown provider: {provider}. Available: {get_available_providers()}")
    return spec


def get_default_model(provider: str) -> str:
    """Model used when ``create_client`` gets no explicit model.

    Raises:
        ValueError: If provider is unknown.
    """
    return _lookup(provider).default_model


def create_client(
    provider: str,
    model: str | None = None,
    client_config: dict | None = None,
    api_key: str | None = None,
) -> BaseLLMClient:
    """Build a reasoning-service client.

    Args:
        provider: One of ``get_available_providers()``.
        model: Model id; the provider default when omitted.
        client_config: Request parameters passed through to the client.
        api_key: Explicit key. When omitted the provider's environment
            variable (e.g. OPENAI_API_KEY) must be set.

    Raises:
        ValueError: If the provider is unknown or no API key can be found.
    """
    spec = _lookup(provider)

    key = api_key or os.getenv(spec.key_env)
    if not key:
        raise ValueError(f"No API key for {provider}: set {spec.key_env} or pass api_key")

    client_cls: type[BaseLLMClient] = getattr(importlib.import_module(spec.module), spec.class_name)
    return client_cls(api_key=key, model=model or spec.default_model, client_config=client_config)
