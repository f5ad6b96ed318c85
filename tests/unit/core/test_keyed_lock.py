"""Unit tests for KeyedLock."""

import asyncio

import pytest

from schemaproxy.core.keyed_lock import KeyedLock


class TestKeyedLock:
    """Tests for per-key serialization."""

    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self):
        locks = KeyedLock()
        events: list[str] = []

        async def worker(name: str) -> None:
            async with locks.hold("companies"):
                events.append(f"{name}:start")
                await asyncio.sleep(0.01)
                events.append(f"{name}:end")

        await asyncio.gather(worker("a"), worker("b"))

        assert events == ["a:start", "a:end", "b:start", "b:end"]

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self):
        locks = KeyedLock()
        inside = asyncio.Event()
        released = asyncio.Event()

        async def first() -> None:
            async with locks.hold("companies"):
                inside.set()
                await released.wait()

        task = asyncio.create_task(first())
        await inside.wait()
        async with locks.hold("people"):
            assert locks.is_locked("companies")
            assert locks.is_locked("people")
        released.set()
        await task

    @pytest.mark.asyncio
    async def test_locks_are_discarded_when_idle(self):
        locks = KeyedLock()

        async with locks.hold("companies"):
            assert len(locks) == 1

        assert len(locks) == 0
        assert not locks.is_locked("companies")

    @pytest.mark.asyncio
    async def test_lock_released_on_error(self):
        locks = KeyedLock()

        with pytest.raises(RuntimeError):
            async with locks.hold("companies"):
                raise RuntimeError("boom")

        assert len(locks) == 0

    @pytest.mark.asyncio
    async def test_disabled_does_not_serialize(self):
        locks = KeyedLock(enabled=False)

        async with locks.hold("companies"):
            async with locks.hold("companies"):
                assert not locks.is_locked("companies")

        assert len(locks) == 0
