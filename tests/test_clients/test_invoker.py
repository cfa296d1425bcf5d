"""Tests for ResilientInvoker: key rotation and exponential backoff."""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import MagicMock

import pytest

from portocv.clients.invoker import ResilientInvoker
from portocv.clients.key_pool import KeyPool
from portocv.errors import AllKeysExhausted, InvalidCredential, NoKeyAvailable

KEYS = ["AIzaSyA-first-key-000", "AIzaSyB-second-key-000", "AIzaSyC-third-key-000"]


class FakeAPIError(Exception):
    def __init__(self, code, message=""):
        self.code = code
        super().__init__(f"{code} {message}".strip())


class ScriptedOperation:
    """Operation that plays back a script of outcomes, recording the key used."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.keys_used: list[str] = []

    async def __call__(self, client):
        self.keys_used.append(client.api_key)
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def _factory(key: str):
    client = MagicMock()
    client.api_key = key
    return client


def _invoker(keys, sleep, **kwargs) -> ResilientInvoker:
    return ResilientInvoker(KeyPool(keys), client_factory=_factory, sleep=sleep, **kwargs)


class TestRotation:
    async def test_success_on_first_key(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation("ok")
        assert await invoker.invoke(op) == "ok"
        assert op.keys_used == [KEYS[0]]
        assert invoker.pool.index == 0

    async def test_quota_then_quota_then_success_lands_on_third_key(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(FakeAPIError(429), FakeAPIError(429), "ok")

        assert await invoker.invoke(op) == "ok"
        assert op.keys_used == KEYS
        assert invoker.pool.index == 2
        assert no_sleep.delays == []

    async def test_quota_on_every_key_raises_exhausted(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(*(FakeAPIError(429) for _ in KEYS))

        with pytest.raises(AllKeysExhausted):
            await invoker.invoke(op)
        assert len(op.keys_used) == len(KEYS)

    async def test_exhausted_pool_makes_no_further_calls(self, no_sleep):
        invoker = _invoker(KEYS[:1], no_sleep)
        with pytest.raises(AllKeysExhausted):
            await invoker.invoke(ScriptedOperation(FakeAPIError(429)))

        op = ScriptedOperation("ok")
        with pytest.raises(AllKeysExhausted):
            await invoker.invoke(op)
        assert op.keys_used == []

    async def test_rotation_does_not_spend_retry_budget(self, no_sleep):
        invoker = _invoker(KEYS[:2], no_sleep, max_retries=0)
        op = ScriptedOperation(FakeAPIError(429), "ok")
        assert await invoker.invoke(op) == "ok"

    async def test_rotated_key_is_kept_for_next_call(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        await invoker.invoke(ScriptedOperation(FakeAPIError(429), "first"))

        op = ScriptedOperation("second")
        await invoker.invoke(op)
        assert op.keys_used == [KEYS[1]]

    async def test_empty_pool_raises_no_key(self, no_sleep):
        invoker = _invoker([], no_sleep)
        op = ScriptedOperation("ok")
        with pytest.raises(NoKeyAvailable):
            await invoker.invoke(op)
        assert op.keys_used == []

    async def test_rotation_is_logged(self, no_sleep, caplog):
        invoker = _invoker(KEYS, no_sleep)
        with caplog.at_level(logging.WARNING):
            await invoker.invoke(ScriptedOperation(FakeAPIError(429), "ok"))
        assert "Quota exhausted on key 1" in caplog.text


class TestInvalidCredential:
    async def test_400_is_neither_retried_nor_rotated(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(FakeAPIError(400, "API key not valid"), "ok")

        with pytest.raises(InvalidCredential) as exc_info:
            await invoker.invoke(op)
        assert len(op.keys_used) == 1
        assert invoker.pool.index == 0
        assert no_sleep.delays == []
        assert isinstance(exc_info.value.__cause__, FakeAPIError)


class TestBackoff:
    async def test_transient_then_success(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep, initial_delay=1.0)
        op = ScriptedOperation(FakeAPIError(503), "ok")

        assert await invoker.invoke(op) == "ok"
        assert no_sleep.delays == [1.0]
        assert op.keys_used == [KEYS[0], KEYS[0]]

    async def test_delays_double_each_attempt(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep, max_retries=3, initial_delay=0.5)
        op = ScriptedOperation(FakeAPIError(500), FakeAPIError(503), FakeAPIError(500), "ok")

        assert await invoker.invoke(op) == "ok"
        assert no_sleep.delays == [0.5, 1.0, 2.0]

    async def test_budget_spent_reraises_original_error(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep, max_retries=2, initial_delay=1.0)
        last = FakeAPIError(503, "still unavailable")
        op = ScriptedOperation(FakeAPIError(503), FakeAPIError(503), last)

        with pytest.raises(FakeAPIError) as exc_info:
            await invoker.invoke(op)
        assert exc_info.value is last
        assert len(op.keys_used) == 3
        assert no_sleep.delays == [1.0, 2.0]

    async def test_zero_retries_means_single_attempt(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(FakeAPIError(500), "ok")

        with pytest.raises(FakeAPIError):
            await invoker.invoke(op, max_retries=0)
        assert len(op.keys_used) == 1
        assert no_sleep.delays == []

    async def test_per_call_overrides(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep, max_retries=0, initial_delay=5.0)
        op = ScriptedOperation(FakeAPIError(503), "ok")

        assert await invoker.invoke(op, max_retries=1, initial_delay=0.25) == "ok"
        assert no_sleep.delays == [0.25]

    async def test_quota_after_transient_rotates(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(FakeAPIError(503), FakeAPIError(429), "ok")

        assert await invoker.invoke(op) == "ok"
        assert op.keys_used == [KEYS[0], KEYS[0], KEYS[1]]
        assert no_sleep.delays == [1.0]


class TestOtherErrors:
    async def test_unclassified_error_propagates_immediately(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        op = ScriptedOperation(ValueError("bad schema"), "ok")

        with pytest.raises(ValueError, match="bad schema"):
            await invoker.invoke(op)
        assert len(op.keys_used) == 1
        assert no_sleep.delays == []


class LoopBoundClient:
    """Fails like an async HTTP pool when used from a loop other than its own."""

    def __init__(self, api_key):
        self.api_key = api_key
        self.loop = asyncio.get_running_loop()

    async def ping(self):
        if asyncio.get_running_loop() is not self.loop:
            raise RuntimeError("Event loop is closed")
        return self.api_key


class TestClientCache:
    async def test_one_client_per_key(self, no_sleep):
        invoker = _invoker(KEYS, no_sleep)
        assert invoker.client_for(KEYS[0]) is invoker.client_for(KEYS[0])
        assert invoker.client_for(KEYS[0]) is not invoker.client_for(KEYS[1])

    def test_consecutive_event_loops_get_fresh_clients(self, no_sleep):
        factory = MagicMock(side_effect=LoopBoundClient)
        invoker = ResilientInvoker(KeyPool(KEYS), client_factory=factory, sleep=no_sleep)

        first = asyncio.run(invoker.invoke(lambda client: client.ping()))
        second = asyncio.run(invoker.invoke(lambda client: client.ping()))

        assert first == second == KEYS[0]
        assert factory.call_count == 2

    def test_client_reused_within_one_loop(self, no_sleep):
        factory = MagicMock(side_effect=LoopBoundClient)
        invoker = ResilientInvoker(KeyPool(KEYS), client_factory=factory, sleep=no_sleep)

        async def twice():
            await invoker.invoke(lambda client: client.ping())
            return await invoker.invoke(lambda client: client.ping())

        assert asyncio.run(twice()) == KEYS[0]
        assert factory.call_count == 1
