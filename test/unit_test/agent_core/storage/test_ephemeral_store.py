from __future__ import annotations

import asyncio
import threading
from typing import List, Optional

import pytest

from toolforge_ai.agent_core.errors import InvalidInputError
from toolforge_ai.agent_core.repos import InMemoryExpirableStore
from toolforge_ai.agent_core.storage import ScopedEphemeralStore
from toolforge_ai.agent_core.storage.ephemeral import DEFAULT_TTL_SECONDS, sanitize_suffix


class TestKeyNormalization:
    def test_bare_key_gets_owner_prefix(self, ephemeral: ScopedEphemeralStore) -> None:
        assert ephemeral.normalize_key("7", "draft") == "ai_agent_tmp_7:draft"

    def test_own_namespaced_key_is_kept(self, ephemeral: ScopedEphemeralStore) -> None:
        assert ephemeral.normalize_key("7", "ai_agent_tmp_7:draft") == "ai_agent_tmp_7:draft"

    def test_path_like_key_is_sanitized(self, ephemeral: ScopedEphemeralStore) -> None:
        assert ephemeral.normalize_key("1", "../etc/passwd") == "ai_agent_tmp_1:___etc_passwd"

    @pytest.mark.parametrize(
        "suffix,expected",
        [
            ("a b", "a_b"),
            ("v1.2-final", "v1.2-final"),
            ("a...b", "a___b"),
            ("ünï", "_n_"),
        ],
    )
    def test_sanitize_suffix(self, suffix: str, expected: str) -> None:
        assert sanitize_suffix(suffix) == expected

    @pytest.mark.parametrize("key", ["", "   "])
    def test_empty_key_is_rejected(self, ephemeral: ScopedEphemeralStore, key: str) -> None:
        with pytest.raises(InvalidInputError):
            ephemeral.normalize_key("7", key)

    def test_other_owner_key_is_rejected(self, ephemeral: ScopedEphemeralStore) -> None:
        with pytest.raises(InvalidInputError, match="does not belong"):
            ephemeral.normalize_key("8", "ai_agent_tmp_7:draft")

    def test_empty_suffix_is_rejected(self, ephemeral: ScopedEphemeralStore) -> None:
        with pytest.raises(InvalidInputError):
            ephemeral.normalize_key("7", "ai_agent_tmp_7:")


class TestSaveLoadConsume:
    @pytest.mark.asyncio
    async def test_round_trip(self, ephemeral: ScopedEphemeralStore) -> None:
        key = await ephemeral.save("7", "draft", "payload")
        assert key == "ai_agent_tmp_7:draft"
        assert await ephemeral.load("7", "draft") == "payload"
        assert await ephemeral.load("7", key) == "payload"

    @pytest.mark.asyncio
    async def test_bare_key_is_per_owner(self, ephemeral: ScopedEphemeralStore) -> None:
        await ephemeral.save("7", "draft", "mine")
        assert await ephemeral.load("8", "draft") is None

    @pytest.mark.asyncio
    async def test_namespaced_key_of_other_owner_is_rejected(self, ephemeral: ScopedEphemeralStore) -> None:
        key = await ephemeral.save("7", "draft", "mine")
        with pytest.raises(InvalidInputError):
            await ephemeral.load("8", key)

    @pytest.mark.asyncio
    async def test_entry_expires_after_ttl(self, ephemeral: ScopedEphemeralStore, clock) -> None:
        await ephemeral.save("7", "draft", "payload")
        clock.advance(DEFAULT_TTL_SECONDS - 1)
        assert await ephemeral.load("7", "draft") == "payload"
        clock.advance(1)
        assert await ephemeral.load("7", "draft") is None

    @pytest.mark.asyncio
    async def test_reads_do_not_extend_ttl(
        self, ephemeral: ScopedEphemeralStore, backend: InMemoryExpirableStore, clock
    ) -> None:
        key = await ephemeral.save("7", "draft", "payload")
        expires_at = backend.expires_at(key)
        clock.advance(10)
        await ephemeral.load("7", "draft")
        assert backend.expires_at(key) == expires_at

    @pytest.mark.asyncio
    async def test_save_overwrites_and_resets_ttl(
        self, ephemeral: ScopedEphemeralStore, backend: InMemoryExpirableStore, clock
    ) -> None:
        key = await ephemeral.save("7", "draft", "one")
        first = backend.expires_at(key)
        clock.advance(60)
        await ephemeral.save("7", "draft", "two")
        assert await ephemeral.load("7", "draft") == "two"
        assert backend.expires_at(key) > first

    @pytest.mark.asyncio
    async def test_consume_removes_entry(self, ephemeral: ScopedEphemeralStore) -> None:
        await ephemeral.save("7", "draft", "payload")
        assert await ephemeral.consume("7", "draft") == "payload"
        assert await ephemeral.consume("7", "draft") is None
        assert await ephemeral.load("7", "draft") is None

    @pytest.mark.asyncio
    async def test_concurrent_consumers_get_payload_once(self, ephemeral: ScopedEphemeralStore) -> None:
        await ephemeral.save("7", "draft", "payload")
        results = await asyncio.gather(*(ephemeral.consume("7", "draft") for _ in range(10)))
        assert results.count("payload") == 1
        assert results.count(None) == 9

    @pytest.mark.asyncio
    async def test_save_racing_a_consume_is_kept(self, clock) -> None:
        class _InterleavedWriter(InMemoryExpirableStore):
            """Another writer saves a newer payload right after each read or pop."""

            async def get(self, key: str) -> Optional[str]:
                value = await super().get(key)
                await self.set_with_expire(key, "newer", 60)
                return value

            async def pop(self, key: str) -> Optional[str]:
                value = await super().pop(key)
                await self.set_with_expire(key, "newer", 60)
                return value

        backend = _InterleavedWriter(clock=clock)
        store = ScopedEphemeralStore(backend)
        key = await store.save("7", "draft", "payload")

        assert await store.consume("7", "draft") == "payload"
        assert backend.expires_at(key) is not None
        assert await backend.pop(key) == "newer"

    def test_consumers_on_threads_get_payload_once(self) -> None:
        store = ScopedEphemeralStore(InMemoryExpirableStore())
        asyncio.run(store.save("7", "draft", "payload"))
        results: List[Optional[str]] = []
        lock = threading.Lock()
        barrier = threading.Barrier(8)

        def worker() -> None:
            barrier.wait()
            value = asyncio.run(store.consume("7", "draft"))
            with lock:
                results.append(value)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count("payload") == 1
        assert len(results) == 8

    @pytest.mark.asyncio
    async def test_custom_prefix_and_ttl(self, backend: InMemoryExpirableStore, clock) -> None:
        store = ScopedEphemeralStore(backend, prefix="tmp_", ttl_seconds=5)
        key = await store.save("7", "draft", "payload")
        assert key == "tmp_7:draft"
        clock.advance(5)
        assert await store.load("7", "draft") is None
