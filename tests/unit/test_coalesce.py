"""Unit tests — landlord_client.coalesce.InflightRegistry"""

from __future__ import annotations

import asyncio

import pytest

from landlord_client.coalesce import InflightRegistry

pytestmark = pytest.mark.unit


class Work:
    """Coroutine factory that counts invocations and waits on a gate."""

    def __init__(self, result: str = "done", error: Exception | None = None) -> None:
        self.calls = 0
        self.gate = asyncio.Event()
        self.result = result
        self.error = error

    async def __call__(self) -> str:
        self.calls += 1
        await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def registry() -> InflightRegistry[str]:
    return InflightRegistry("test")


class TestRun:
    async def test_single_caller(self, registry):
        work = Work()
        work.gate.set()
        assert await registry.run("k", work) == "done"
        assert work.calls == 1

    async def test_concurrent_callers_share_work(self, registry):
        work = Work()
        callers = [asyncio.create_task(registry.run("k", work)) for _ in range(5)]
        await asyncio.sleep(0)
        assert "k" in registry
        work.gate.set()
        assert await asyncio.gather(*callers) == ["done"] * 5
        assert work.calls == 1

    async def test_distinct_keys_do_not_share(self, registry):
        a, b = Work("a"), Work("b")
        ta = asyncio.create_task(registry.run("a", a))
        tb = asyncio.create_task(registry.run("b", b))
        await asyncio.sleep(0)
        assert len(registry) == 2
        b.gate.set()
        assert await tb == "b"
        assert not ta.done()
        a.gate.set()
        assert await ta == "a"

    async def test_failure_shared_by_all_callers(self, registry):
        work = Work(error=RuntimeError("boom"))
        callers = [asyncio.create_task(registry.run("k", work)) for _ in range(3)]
        await asyncio.sleep(0)
        work.gate.set()
        results = await asyncio.gather(*callers, return_exceptions=True)
        assert all(isinstance(r, RuntimeError) for r in results)
        assert work.calls == 1


class TestSettlement:
    async def test_entry_removed_on_success(self, registry):
        work = Work()
        work.gate.set()
        await registry.run("k", work)
        assert "k" not in registry
        assert len(registry) == 0

    async def test_entry_removed_on_failure(self, registry):
        work = Work(error=RuntimeError("boom"))
        work.gate.set()
        with pytest.raises(RuntimeError):
            await registry.run("k", work)
        assert "k" not in registry

    async def test_call_after_settlement_starts_fresh(self, registry):
        work = Work()
        work.gate.set()
        await registry.run("k", work)
        await registry.run("k", work)
        assert work.calls == 2


requires_eager = pytest.mark.skipif(
    not hasattr(asyncio, "eager_task_factory"), reason="needs asyncio.eager_task_factory"
)


@requires_eager
class TestEagerTaskFactory:
    async def test_synchronous_work_is_not_registered(self, registry, eager_loop):
        async def immediate() -> str:
            return "hit"

        assert await registry.run("k", immediate) == "hit"
        assert len(registry) == 0
        assert await registry.run("k", immediate) == "hit"

    async def test_synchronous_failure_is_not_registered(self, registry, eager_loop):
        async def broken() -> str:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await registry.run("k", broken)
        assert "k" not in registry

    async def test_suspending_work_still_shared(self, registry, eager_loop):
        work = Work()
        callers = [asyncio.create_task(registry.run("k", work)) for _ in range(3)]
        assert "k" in registry
        work.gate.set()
        assert await asyncio.gather(*callers) == ["done"] * 3
        assert work.calls == 1
        assert "k" not in registry


class TestStart:
    async def test_returns_same_task_while_pending(self, registry):
        work = Work()
        first = registry.start("k", work)
        second = registry.start("k", work)
        assert first is second
        work.gate.set()
        assert await first == "done"

    async def test_waiter_cancellation_leaves_work_running(self, registry):
        work = Work()
        task = registry.start("k", work)
        waiter = asyncio.create_task(registry.run("k", work))
        await asyncio.sleep(0)
        waiter.cancel()
        with pytest.raises(asyncio.CancelledError):
            await waiter
        assert not task.cancelled()
        work.gate.set()
        assert await task == "done"
