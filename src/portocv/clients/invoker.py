"""Retry / backoff engine around every Gemini call.

Failures are classified and handled as follows:

* quota (429): rotate to the next key and retry at once, without spending
  the retry budget; when no key is left raise ``AllKeysExhausted``.
* invalid credential (400): raise ``InvalidCredential``, never retried.
* transient (500/503, network): sleep ``d, 2d, 4d, ...`` between attempts;
  once the budget is spent the original exception is re-raised.
* anything else propagates unchanged.

There is no jitter, circuit breaker or per-key cooldown.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from portocv.clients.key_pool import KeyPool
from portocv.clients.llm_client import LLMClient
from portocv.errors import (
    AllKeysExhausted,
    ErrorKind,
    InvalidCredential,
    PortoCVError,
    classify_error,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_MAX_RETRIES = 2
DEFAULT_INITIAL_DELAY = 1.0


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, PortoCVError):
        return False
    return classify_error(exc) is ErrorKind.TRANSIENT


class ResilientInvoker:
    """Runs operations against the client bound to the pool's active key."""

    def __init__(
        self,
        pool: KeyPool,
        client_factory: Callable[[str], LLMClient] | None = None,
        *,
        max_retries: int = DEFAULT_MAX_RETRIES,
        initial_delay: float = DEFAULT_INITIAL_DELAY,
        timeout: float | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.pool = pool
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self._client_factory = client_factory or (
            lambda key: LLMClient(api_key=key, timeout=timeout)
        )
        self._clients: dict[str, LLMClient] = {}
        self._loop: asyncio.AbstractEventLoop | None = None
        self._sleep = sleep

    def client_for(self, key: str) -> LLMClient:
        """Client for ``key``, cached for the lifetime of the running event loop."""
        loop = asyncio.get_running_loop()
        if loop is not self._loop:
            # async HTTP pools are bound to the loop that opened them
            self._clients.clear()
            self._loop = loop
        if key not in self._clients:
            self._clients[key] = self._client_factory(key)
        return self._clients[key]

    async def invoke(
        self,
        operation: Callable[[LLMClient], Awaitable[T]],
        max_retries: int | None = None,
        initial_delay: float | None = None,
    ) -> T:
        """Execute ``operation`` with rotation and exponential backoff."""
        retries = self.max_retries if max_retries is None else max_retries
        delay = self.initial_delay if initial_delay is None else initial_delay
        retrying = AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(retries + 1),
            wait=wait_exponential(multiplier=delay, exp_base=2, min=0),
            sleep=self._sleep,
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                return await self._call_with_rotation(operation)
        raise AssertionError("unreachable")

    async def _call_with_rotation(self, operation: Callable[[LLMClient], Awaitable[T]]) -> T:
        while True:
            key = self.pool.resolve_current()
            try:
                return await operation(self.client_for(key))
            except PortoCVError:
                raise
            except Exception as exc:
                kind = classify_error(exc)
                if kind is ErrorKind.QUOTA:
                    logger.warning("Quota exhausted on key %d: %s", self.pool.index + 1, exc)
                    if self.pool.rotate():
                        continue
                    raise AllKeysExhausted() from exc
                if kind is ErrorKind.INVALID_CREDENTIAL:
                    raise InvalidCredential() from exc
                raise
