"""Retry with exponential backoff."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from knowledge_hub.errors import BACKEND_ERROR_CODES, DocumentationClientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(error: BaseException) -> bool:
    """Backend errors are retryable, everything else is a bug."""
    return isinstance(error, DocumentationClientError) and error.code in BACKEND_ERROR_CODES


@dataclass
class RetryPolicy:
    """Retries an async operation with exponential backoff.

    The delay before retry ``n`` (zero based) is ``base_delay * 2**n``,
    capped at ``max_delay``.
    """

    max_attempts: int = 3
    base_delay: float = 0.5
    max_delay: float = 8.0
    retry_on: Callable[[BaseException], bool] = field(default=is_retryable)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def delay_for(self, attempt: int) -> float:
        return min(self.base_delay * (2**attempt), self.max_delay)

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        description: str = "operation",
    ) -> T:
        """Run an operation until it succeeds or attempts are exhausted.

        Args:
            operation: Zero-argument coroutine factory, called once per attempt
            sleep: Sleep function used between attempts
            description: Label used in log messages

        Returns:
            The operation's result

        Raises:
            The last error once attempts are exhausted, or the first
            non-retryable error immediately.
        """
        for attempt in range(self.max_attempts):
            try:
                return await operation()
            except Exception as e:
                if not self.retry_on(e) or attempt == self.max_attempts - 1:
                    raise
                delay = self.delay_for(attempt)
                logger.warning(
                    f"{description} failed (attempt {attempt + 1}/{self.max_attempts}): {e}. "
                    f"Retrying in {delay:.2f}s"
                )
                await sleep(delay)

        raise AssertionError("unreachable")
