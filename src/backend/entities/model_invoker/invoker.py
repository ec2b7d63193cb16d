"""Model invoker: one provider, one attempt, bounded in time."""

from __future__ import annotations

import asyncio
import logging

from entities.shared.errors import ModelInvocationError
from entities.shared.protocols import ModelProvider

logger = logging.getLogger(__name__)


class ModelInvoker:
    """Calls the configured provider and normalizes its failures.

    Every call is attempted exactly once. Timeouts and provider errors
    surface as ``ModelInvocationError``; nothing is retried.

    Args:
        provider: The provider resolved at startup.
        timeout_seconds: Upper bound on a single call.
    """

    def __init__(self, provider: ModelProvider, timeout_seconds: float = 30.0) -> None:
        self._provider = provider
        self._timeout_seconds = timeout_seconds

    @property
    def name(self) -> str:
        """Name of the underlying provider."""
        return self._provider.name

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send the prompt pair and return the raw reply text."""
        return await self._call("complete", self._provider.complete(system_prompt, user_prompt))

    async def narrate(self, prompt: str) -> str:
        """Send a narration prompt and return the raw reply text."""
        return await self._call("narrate", self._provider.narrate(prompt))

    async def _call(self, operation: str, coro) -> str:
        try:
            async with asyncio.timeout(self._timeout_seconds):
                return await coro
        except TimeoutError as exc:
            logger.warning(
                "Model %s timed out after %.1fs (provider=%s)",
                operation,
                self._timeout_seconds,
                self.name,
            )
            raise ModelInvocationError(
                self.name, f"timed out after {self._timeout_seconds:.1f}s"
            ) from exc
        except ModelInvocationError:
            raise
        except Exception as exc:
            logger.error("Model %s failed (provider=%s): %s", operation, self.name, exc, exc_info=True)
            raise ModelInvocationError(self.name, str(exc)) from exc
