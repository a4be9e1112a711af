"""Tests for the generic poll and purge loops in syndesis_qe/polling.py."""

import time

import pytest

from syndesis_qe.core.exceptions import CleanupError
from syndesis_qe.polling import poll_until, purge_matching


class TestPollUntil:
    @pytest.mark.asyncio
    async def test_returns_true_when_predicate_satisfied(self) -> None:
        values = iter([1, 2, 3])

        ok = await poll_until(lambda v: v == 3, lambda: next(values), timeout=1.0, interval=0.01)

        assert ok is True

    @pytest.mark.asyncio
    async def test_accepts_async_supplier(self) -> None:
        async def supplier() -> str:
            return "ready"

        assert await poll_until(lambda v: v == "ready", supplier, timeout=0.5, interval=0.01)

    @pytest.mark.asyncio
    async def test_returns_false_on_timeout(self) -> None:
        started = time.monotonic()

        ok = await poll_until(lambda v: False, lambda: None, timeout=0.1, interval=0.02)

        assert ok is False
        assert time.monotonic() - started < 0.3

    @pytest.mark.asyncio
    async def test_supplier_errors_are_retried(self) -> None:
        attempts = {"n": 0}

        def supplier() -> int:
            attempts["n"] += 1
            if attempts["n"] < 3:
                raise ConnectionError("not yet")
            return attempts["n"]

        assert await poll_until(lambda v: v == 3, supplier, timeout=1.0, interval=0.01)
        assert attempts["n"] == 3


class TestPurgeMatching:
    @pytest.mark.asyncio
    async def test_deletes_until_nothing_matches(self) -> None:
        store = ["conn-1", "conn-2", "conn-3"]

        count = await purge_matching(lambda: list(store), store.remove, what="connections")

        assert count == 3
        assert store == []

    @pytest.mark.asyncio
    async def test_records_reappearing_are_purged_in_next_round(self) -> None:
        """Items created while a round is running are picked up by the next one."""
        store = ["a"]
        late = ["b"]

        def delete(item: str) -> None:
            store.remove(item)
            if late:
                store.append(late.pop())

        count = await purge_matching(lambda: list(store), delete)

        assert count == 2
        assert store == []

    @pytest.mark.asyncio
    async def test_async_callables(self) -> None:
        store = {"x", "y"}

        async def find() -> list[str]:
            return sorted(store)

        async def delete(item: str) -> None:
            store.discard(item)

        assert await purge_matching(find, delete) == 2

    @pytest.mark.asyncio
    async def test_nothing_to_delete(self) -> None:
        assert await purge_matching(lambda: [], lambda item: None) == 0

    @pytest.mark.asyncio
    async def test_raises_when_records_never_go_away(self) -> None:
        with pytest.raises(CleanupError) as exc_info:
            await purge_matching(
                lambda: ["stuck"], lambda item: None, what="integrations", max_rounds=3
            )

        assert exc_info.value.rounds == 3
        assert exc_info.value.remaining == 1
        assert exc_info.value.what == "integrations"
