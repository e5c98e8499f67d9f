"""Key-value store capability shared by throttling and caching helpers.

Two implementations are provided: a process-local dictionary guarded by a
mutex, and a thin adapter over the shared Redis client. Callers receive a
store instance instead of reaching for a module-level map.
"""

from __future__ import annotations

import threading
import time
from typing import Callable, Optional, Protocol

from twinen.infra.redis import RedisProxy, redis_client


class KeyValueStore(Protocol):
	async def get(self, key: str) -> Optional[str]: ...

	async def set(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None: ...

	async def delete(self, key: str) -> bool: ...

	async def expire(self, key: str, ttl_seconds: int) -> bool: ...

	async def incr(self, key: str, *, ttl_seconds: int) -> int: ...

	async def purge_expired(self) -> int: ...


class InMemoryKeyValueStore:
	"""Dictionary-backed store with per-key expiry.

	Every read-modify-write happens under one lock so concurrent callers on
	different threads never lose an increment.
	"""

	def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
		self._clock = clock
		self._lock = threading.Lock()
		self._values: dict[str, str] = {}
		self._expires_at: dict[str, float] = {}

	def _alive(self, key: str, now: float) -> bool:
		if key not in self._values:
			return False
		deadline = self._expires_at.get(key)
		if deadline is not None and deadline <= now:
			self._values.pop(key, None)
			self._expires_at.pop(key, None)
			return False
		return True

	async def get(self, key: str) -> Optional[str]:
		with self._lock:
			if not self._alive(key, self._clock()):
				return None
			return self._values[key]

	async def set(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None:
		with self._lock:
			self._values[key] = str(value)
			if ttl_seconds is None:
				self._expires_at.pop(key, None)
			else:
				self._expires_at[key] = self._clock() + ttl_seconds

	async def delete(self, key: str) -> bool:
		with self._lock:
			existed = self._alive(key, self._clock())
			self._values.pop(key, None)
			self._expires_at.pop(key, None)
			return existed

	async def expire(self, key: str, ttl_seconds: int) -> bool:
		with self._lock:
			now = self._clock()
			if not self._alive(key, now):
				return False
			self._expires_at[key] = now + ttl_seconds
			return True

	async def incr(self, key: str, *, ttl_seconds: int) -> int:
		with self._lock:
			now = self._clock()
			if self._alive(key, now):
				count = int(self._values[key]) + 1
			else:
				count = 1
				self._expires_at[key] = now + ttl_seconds
			self._values[key] = str(count)
			return count

	async def purge_expired(self) -> int:
		with self._lock:
			now = self._clock()
			stale = [key for key, deadline in self._expires_at.items() if deadline <= now]
			for key in stale:
				self._values.pop(key, None)
				self._expires_at.pop(key, None)
			return len(stale)

	def __len__(self) -> int:
		with self._lock:
			return len(self._values)


class RedisKeyValueStore:
	"""Adapter over the shared async Redis client."""

	def __init__(self, client: RedisProxy | None = None) -> None:
		self._redis = client or redis_client

	async def get(self, key: str) -> Optional[str]:
		return await self._redis.get(key)

	async def set(self, key: str, value: str, *, ttl_seconds: Optional[int] = None) -> None:
		await self._redis.set(key, value, ex=ttl_seconds)

	async def delete(self, key: str) -> bool:
		return bool(await self._redis.delete(key))

	async def expire(self, key: str, ttl_seconds: int) -> bool:
		return bool(await self._redis.expire(key, ttl_seconds))

	async def incr(self, key: str, *, ttl_seconds: int) -> int:
		async with self._redis.pipeline(transaction=True) as pipe:
			pipe.incr(key)
			pipe.expire(key, ttl_seconds)
			count, _ = await pipe.execute()
		return int(count)

	async def purge_expired(self) -> int:
		# Redis evicts expired keys on its own
		return 0


__all__ = ["KeyValueStore", "InMemoryKeyValueStore", "RedisKeyValueStore"]
