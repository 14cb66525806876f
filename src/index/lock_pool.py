# src/index/lock_pool.py — v1
"""Fixed-size pool of asyncio locks addressed by key.

A key always hashes to the same shard, so operations on one key are
serialized. Distinct keys may share a shard; that only costs parallelism.
Memory stays bounded by the shard count regardless of how many keys exist.
"""

from __future__ import annotations

import asyncio
import hashlib
from contextlib import asynccontextmanager
from typing import AsyncIterator


class KeyedLockPool:
    """Sharded mutex keyed by a stable hash of a string."""

    def __init__(self, shards: int = 64) -> None:
        if shards < 1:
            raise ValueError("shards must be >= 1")
        self._locks = [asyncio.Lock() for _ in range(shards)]

    @property
    def shards(self) -> int:
        return len(self._locks)

    def shard_for(self, key: str) -> int:
        # blake2b rather than hash(): str hashing is salted per process.
        digest = hashlib.blake2b(key.encode("utf-8"), digest_size=8).digest()
        return int.from_bytes(digest, "big") % len(self._locks)

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        """Hold the lock guarding ``key`` for the duration of the block."""
        async with self._locks[self.shard_for(key)]:
            yield
