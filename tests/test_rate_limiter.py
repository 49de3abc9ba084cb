"""Tests for the rate-limited dispatcher."""

import asyncio
import time

import pytest

from errkit import (
    OperationCancelledError,
    RateLimitConfig,
    RateLimiter,
    rate_limit,
    rate_limited,
)


class Recorder:
    """Producer recording when each call was invoked."""

    def __init__(self, delay=0.0, fail_on=()):
        self.delay = delay
        self.fail_on = set(fail_on)
        self.invoked = []
        self.start = time.monotonic()

    async def __call__(self, key):
        self.invoked.append((key, time.monotonic() - self.start))
        await asyncio.sleep(self.delay)
        if key in self.fail_on:
            raise ValueError(f"failed {key}")
        return key * 10

    @property
    def keys(self):
        return [key for key, _ in self.invoked]


class TestRateLimitConfig:
    """Tests for RateLimitConfig."""

    def test_rejects_zero_calls(self):
        with pytest.raises(ValueError):
            RateLimitConfig(max_calls=0, per_interval=1.0)

    def test_rejects_empty_interval(self):
        with pytest.raises(ValueError):
            RateLimitConfig(max_calls=1, per_interval=0)


class TestRateLimiter:
    """Tests for RateLimiter admission behaviour."""

    @pytest.mark.asyncio
    async def test_window_admits_max_calls(self):
        producer = Recorder()
        limiter = rate_limit(producer, max_calls=2, per_interval=0.2)
        try:
            calls = [asyncio.ensure_future(limiter(i)) for i in range(5)]

            await asyncio.sleep(0.05)
            assert producer.keys == [0, 1]
            assert limiter.pending == 3

            await asyncio.sleep(0.2)
            assert producer.keys == [0, 1, 2, 3]

            results = await asyncio.gather(*calls)
        finally:
            limiter.close()

        assert results == [0, 10, 20, 30, 40]
        assert producer.keys == [0, 1, 2, 3, 4]
        late = [elapsed for key, elapsed in producer.invoked if key >= 2]
        assert all(elapsed >= 0.19 for elapsed in late)
        assert producer.invoked[4][1] >= 0.39

    @pytest.mark.asyncio
    async def test_fifo_order_across_windows(self):
        producer = Recorder()
        limiter = RateLimiter(producer, RateLimitConfig(max_calls=1, per_interval=0.03))
        try:
            results = await asyncio.gather(*(limiter(i) for i in range(6)))
        finally:
            limiter.close()

        assert producer.keys == list(range(6))
        assert results == [i * 10 for i in range(6)]

    @pytest.mark.asyncio
    async def test_admission_is_not_bounded_by_completion(self):
        producer = Recorder(delay=0.3)
        limiter = rate_limit(producer, max_calls=2, per_interval=0.05)
        try:
            calls = [asyncio.ensure_future(limiter(i)) for i in range(4)]
            await asyncio.sleep(0.01)
            assert producer.keys == [0, 1]
            assert not any(call.done() for call in calls)

            # Next window opens while the first two are still running
            await asyncio.sleep(0.07)
            assert producer.keys == [0, 1, 2, 3]
            assert not any(call.done() for call in calls)

            await asyncio.gather(*calls)
        finally:
            limiter.close()

    @pytest.mark.asyncio
    async def test_failure_only_affects_its_caller(self):
        producer = Recorder(fail_on={1})
        limiter = rate_limit(producer, max_calls=5, per_interval=1.0)
        try:
            results = await asyncio.gather(*(limiter(i) for i in range(3)), return_exceptions=True)
        finally:
            limiter.close()

        assert results[0] == 0
        assert isinstance(results[1], ValueError)
        assert results[2] == 20

    @pytest.mark.asyncio
    async def test_synchronous_producer_error(self):
        def producer(key):
            if key == "bad":
                raise TypeError("bad key")
            return key.upper()

        limiter = rate_limit(producer, max_calls=5, per_interval=1.0)
        try:
            assert await limiter("ok") == "OK"
            with pytest.raises(TypeError):
                await limiter("bad")
        finally:
            limiter.close()

    @pytest.mark.asyncio
    async def test_counter_never_exceeds_max_calls(self):
        producer = Recorder()
        limiter = rate_limit(producer, max_calls=3, per_interval=0.5)
        try:
            calls = [asyncio.ensure_future(limiter(i)) for i in range(10)]
            await asyncio.sleep(0.01)
            state = limiter.get_state()
            assert state["calls_in_window"] == 3
            assert state["pending"] == 7
            assert state["window_timer_active"] is True
        finally:
            limiter.close()

        results = await asyncio.gather(*calls, return_exceptions=True)
        assert results[:3] == [0, 10, 20]
        assert all(isinstance(r, OperationCancelledError) for r in results[3:])

    @pytest.mark.asyncio
    async def test_window_timer_created_lazily(self):
        limiter = rate_limit(Recorder(), max_calls=1, per_interval=1.0)
        assert limiter.window_timer_active is False
        try:
            await limiter(1)
            assert limiter.window_timer_active is True
        finally:
            limiter.close()
        assert limiter.window_timer_active is False

    @pytest.mark.asyncio
    async def test_abandoned_call_frees_its_slot(self):
        producer = Recorder()
        limiter = rate_limit(producer, max_calls=1, per_interval=0.05)
        try:
            first = asyncio.ensure_future(limiter(0))
            abandoned = asyncio.ensure_future(limiter(1))
            third = asyncio.ensure_future(limiter(2))
            await asyncio.sleep(0.01)

            abandoned.cancel()
            assert await first == 0
            assert await third == 20
        finally:
            limiter.close()

        assert producer.keys == [0, 2]

    @pytest.mark.asyncio
    async def test_reset_admits_queued_calls(self):
        producer = Recorder()
        limiter = rate_limit(producer, max_calls=1, per_interval=10.0)
        try:
            calls = [asyncio.ensure_future(limiter(i)) for i in range(2)]
            await asyncio.sleep(0.01)
            assert producer.keys == [0]

            limiter.reset()
            assert await asyncio.gather(*calls) == [0, 10]
        finally:
            limiter.close()

    @pytest.mark.asyncio
    async def test_closed_limiter_rejects_calls(self):
        limiter = rate_limit(Recorder(), max_calls=1, per_interval=1.0)
        limiter.close()
        with pytest.raises(OperationCancelledError):
            await limiter(1)

    def test_callable_object_attributes_stay_on_producer(self):
        producer = Recorder(delay=0.5)
        limiter = rate_limit(producer, max_calls=1, per_interval=1.0)

        assert limiter.__wrapped__ is producer
        assert not hasattr(limiter, "delay")
        assert not hasattr(limiter, "invoked")
        assert limiter.get_state()["pending"] == 0


class TestRateLimitedDecorator:
    """Tests for the rate_limited decorator."""

    @pytest.mark.asyncio
    async def test_decorator(self):
        @rate_limited(max_calls=2, per_interval=1.0)
        async def lookup(key):
            return key * 2

        try:
            assert isinstance(lookup, RateLimiter)
            assert lookup.__name__ == "lookup"
            assert await lookup(21) == 42
        finally:
            lookup.close()
