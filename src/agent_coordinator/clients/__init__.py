"""Reasoning-service client implementations.

All clients implement the BaseLLMClient interface and normalize
provider-specific responses to unified types. Provider clients are
imported lazily through the factory so that an SDK is only needed when its
provider is used.
"""

from .base import BaseLLMClient, with_retry
from .factory import create_client, get_available_providers, get_default_model

__all__ = [
    "BaseLLMClient",
    "create_client",
    "get_available_providers",
    "get_default_model",
    "with_retry",
]
