"""Fixed-window rate limiting keyed by action and client identity."""

from __future__ import annotations

import base64
import math
import time
from dataclasses import dataclass
from typing import Mapping, Optional

from twinen.infra.kv import KeyValueStore
from twinen.obs import logging as obs_logging
from twinen.obs import metrics as obs_metrics

log = obs_logging.get_logger(__name__)

_HOUR = 3600
_DEFAULT_LIMIT = 100
_DEFAULT_WINDOW = _HOUR


@dataclass(frozen=True, slots=True)
class RateLimitConfig:
	max_requests: int
	window_seconds: int = _HOUR


DEFAULT_LIMITS: dict[str, RateLimitConfig] = {
	"phone_signup": RateLimitConfig(5),
	"phone_verify": RateLimitConfig(10),
	"account_recovery": RateLimitConfig(3),
	"block_user": RateLimitConfig(10),
	"mute_user": RateLimitConfig(20),
	"create_report": RateLimitConfig(5),
	"follow_action": RateLimitConfig(50),
	"post_interaction": RateLimitConfig(100),
	"create_comment": RateLimitConfig(20),
	"media_upload": RateLimitConfig(10),
	"update_post": RateLimitConfig(20),
	"create_post": RateLimitConfig(30),
	"feed_read": RateLimitConfig(600),
}


@dataclass(frozen=True, slots=True)
class RateLimitResult:
	allowed: bool
	remaining: int
	reset_at: float
	limit: int

	def retry_after(self, now: Optional[float] = None) -> int:
		"""Whole seconds until the current window closes."""
		current = time.time() if now is None else now
		return max(0, int(math.ceil(self.reset_at - current)))

	def headers(self) -> dict[str, str]:
		return {
			"X-RateLimit-Limit": str(self.limit),
			"X-RateLimit-Remaining": str(self.remaining),
			"X-RateLimit-Reset": str(int(self.reset_at)),
		}


class RateLimitExceeded(Exception):
	"""Raised when the rate limit has been hit."""

	def __init__(self, action: str, result: RateLimitResult) -> None:
		super().__init__(f"rate limit exceeded for {action}")
		self.action = action
		self.result = result


class RateLimiter:
	"""Counts requests per (action, client) inside aligned fixed windows.

	Counters live in the injected store; increments are atomic there, so the
	budget holds even when several workers share one store.
	"""

	def __init__(
		self,
		store: KeyValueStore,
		*,
		limits: Optional[Mapping[str, RateLimitConfig]] = None,
	) -> None:
		self._store = store
		self._limits: dict[str, RateLimitConfig] = dict(DEFAULT_LIMITS)
		if limits:
			self._limits.update(limits)

	@property
	def store(self) -> KeyValueStore:
		return self._store

	def config_for(self, action: str) -> RateLimitConfig:
		return self._limits.get(action, RateLimitConfig(_DEFAULT_LIMIT, _DEFAULT_WINDOW))

	async def check(
		self,
		action: str,
		client_id: str,
		*,
		limit: Optional[int] = None,
		window_seconds: Optional[int] = None,
		now: Optional[float] = None,
	) -> RateLimitResult:
		config = self.config_for(action)
		budget = config.max_requests if limit is None else limit
		window = max(1, int(window_seconds or config.window_seconds))
		now = time.time() if now is None else now
		slot = int(math.floor(now / window))
		reset_at = float((slot + 1) * window)
		if budget <= 0:
			obs_metrics.inc_rate_limit(action, False)
			return RateLimitResult(allowed=False, remaining=0, reset_at=reset_at, limit=max(budget, 0))

		key = f"rl:{action}:{client_id}:{slot}"
		count = await self._store.incr(key, ttl_seconds=window)
		allowed = count <= budget
		obs_metrics.inc_rate_limit(action, allowed)
		if not allowed:
			log.warning("rate_limited", extra={"action": action, "count": count, "limit": budget})
		return RateLimitResult(
			allowed=allowed,
			remaining=max(0, budget - count),
			reset_at=reset_at,
			limit=budget,
		)

	async def enforce(self, action: str, client_id: str, **kwargs) -> RateLimitResult:
		result = await self.check(action, client_id, **kwargs)
		if not result.allowed:
			raise RateLimitExceeded(action, result)
		return result

	async def cleanup(self) -> int:
		"""Drop expired counters from stores that do not expire keys themselves."""
		return await self._store.purge_expired()


def client_ip_from_headers(headers: Mapping[str, str], fallback_ip: Optional[str] = None) -> str:
	forwarded = headers.get("x-forwarded-for")
	if forwarded:
		first = forwarded.split(",")[0].strip()
		if first:
			return first
	real_ip = headers.get("x-real-ip")
	if real_ip:
		return real_ip.strip()
	return fallback_ip or "127.0.0.1"


def client_id_from_headers(headers: Mapping[str, str], fallback_ip: Optional[str] = None) -> str:
	"""Identify a client by IP and user agent."""
	ip = client_ip_from_headers(headers, fallback_ip)
	user_agent = headers.get("user-agent") or "unknown"
	return base64.urlsafe_b64encode(f"{ip}:{user_agent}".encode("utf-8")).decode("ascii")


__all__ = [
	"DEFAULT_LIMITS",
	"RateLimitConfig",
	"RateLimitExceeded",
	"RateLimitResult",
	"RateLimiter",
	"client_id_from_headers",
	"client_ip_from_headers",
]
