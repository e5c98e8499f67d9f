"""Process-wide wiring of stores and services used by the API routers."""

from __future__ import annotations

from typing import Optional

from twinen.feed.candidates import InMemoryPostStore
from twinen.feed.profiles import InMemorySocialGraph
from twinen.feed.service import FeedService
from twinen.infra.kv import InMemoryKeyValueStore, KeyValueStore, RedisKeyValueStore
from twinen.infra.rate_limit import RateLimiter
from twinen.settings import settings


def build_kv_store(backend: Optional[str] = None) -> KeyValueStore:
	choice = (backend or settings.rate_limit_backend).lower()
	if choice == "redis":
		return RedisKeyValueStore()
	return InMemoryKeyValueStore()


class Container:
	def __init__(
		self,
		*,
		posts: Optional[InMemoryPostStore] = None,
		graph: Optional[InMemorySocialGraph] = None,
		limiter: Optional[RateLimiter] = None,
	) -> None:
		self.posts = posts or InMemoryPostStore()
		self.graph = graph or InMemorySocialGraph()
		self.limiter = limiter or RateLimiter(build_kv_store())
		self.feed = FeedService(
			self.posts,
			self.graph,
			candidate_limit=settings.feed_candidate_limit,
		)


_container: Optional[Container] = None


def get_container() -> Container:
	global _container
	if _container is None:
		_container = Container()
	return _container


def set_container(container: Optional[Container]) -> None:
	global _container
	_container = container


__all__ = ["Container", "build_kv_store", "get_container", "set_container"]
