"""Reasoning-service client contract and retry policy.

Routing, llm-backed workers and the aggregator only see BaseLLMClient and the
unified types. A provider client owns its SDK, the format conversion in both
directions, and the mapping of SDK errors onto the client error taxonomy.
"""

import functools
import random
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, TypeVar

from ..exceptions import ProviderUnavailableError, RateLimitError
from ..logging import get_logger
from ..tools.base import BaseTool
from ..types import UnifiedMessage, UnifiedResponse

logger = get_logger(__name__)

T = TypeVar("T")

RETRYABLE_ERRORS = (RateLimitError, ProviderUnavailableError)


def _backoff_delay(
    attempt: int,
    error: Exception,
    initial_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    delay = initial_delay * exponential_base ** attempt
    # a server-provided retry-after wins over the computed backoff
    retry_after = getattr(error, "retry_after", None)
    if retry_after:
        return min(float(retry_after), max_delay)

    delay = min(delay, max_delay)
    if jitter:
        delay *= 0.5 + random.random()
    return delay


def with_retry(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Retry a provider call on rate limits and outages.

    Only RateLimitError and ProviderUnavailableError are retried; anything
    else propagates on the first failure. A RateLimitError carrying
    ``retry_after`` waits that long instead of the exponential delay.

    Args:
        max_retries: Retries after the first attempt.
        initial_delay: Delay before the first retry, in seconds.
        max_delay: Upper bound for any single delay.
        exponential_base: Growth factor between retries.
        jitter: Scale each computed delay by a random factor in [0.5, 1.5).

    Example:
        ```python
        @with_retry(max_retries=5, initial_delay=0.5)
        def _create_completion(self, api_args):
            ...
        ```
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        name = getattr(func, "__name__", "call")

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except RETRYABLE_ERRORS as e:
                    if attempt >= max_retries:
                        logger.warning("giving up on %s after %d retries: %s", name, max_retries, e)
                        raise

                    delay = _backoff_delay(
                        attempt, e, initial_delay, max_delay, exponential_base, jitter
                    )
                    attempt += 1
                    logger.info(
                        "%s failed (%s), retry %d/%d in %.1fs", name, e, attempt, max_retries, delay
                    )
                    time.sleep(delay)

        return wrapper
    return decorator


class BaseLLMClient(ABC):
    """A reasoning service reachable through ``generate``.

    Subclasses convert unified messages and tools into their provider's
    request format, call the provider, and convert the reply back into a
    UnifiedResponse.
    """

    model: str = ""

    def __init__(self, client_config: dict | None = None):
        """Initialize the client.

        Args:
            client_config: Provider request parameters such as temperature
                or max_tokens.
        """
        self.client_config = client_config or {}

    @abstractmethod
    def generate(
        self,
        messages: list[UnifiedMessage],
        tools: list[BaseTool] | None = None,
    ) -> UnifiedResponse:
        """Run one completion over a transcript.

        Args:
            messages: The transcript, oldest message first.
            tools: Tools the model may request calls for.

        Returns:
            The assistant reply, possibly carrying tool calls.
        """

    @abstractmethod
    def _convert_messages(self, messages: list[UnifiedMessage]) -> Any:
        """Convert the transcript to the provider's message format."""

    @abstractmethod
    def _convert_tools(self, tools: list[BaseTool]) -> list[dict[str, Any]]:
        """Convert tool definitions to the provider's schema format."""

    @abstractmethod
    def _parse_response(self, response: Any) -> UnifiedResponse:
        """Convert a raw provider reply into a UnifiedResponse."""

    def describe(self) -> str:
        """Short label for logs, e.g. ``OpenAIClient(gpt-4o)``."""
        return f"{type(self).__name__}({self.model or 'default'})"
