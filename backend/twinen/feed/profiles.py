"""Viewer profiles built from an in-process social graph."""

from __future__ import annotations

import enum
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Iterable, Optional, Protocol

from twinen.feed.exceptions import BlockedRelationship, SelfActionError
from twinen.feed.models import ViewerProfile


class FollowDirection(str, enum.Enum):
	FOLLOWERS = "followers"
	FOLLOWING = "following"


@dataclass(frozen=True, slots=True)
class FollowEdge:
	follower_id: str
	following_id: str
	created_at: datetime


class ViewerProfileProvider(Protocol):
	async def get_profile(self, user_id: str) -> ViewerProfile: ...


class InMemorySocialGraph:
	"""Follows, blocks, mutes, and declared interests per user."""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self._following: dict[str, dict[str, datetime]] = {}
		self._blocked: dict[str, set[str]] = {}
		self._muted: dict[str, set[str]] = {}
		self._interests: dict[str, frozenset[str]] = {}

	async def get_profile(self, user_id: str) -> ViewerProfile:
		with self._lock:
			return ViewerProfile(
				interests=self._interests.get(user_id, frozenset()),
				following_user_ids=frozenset(self._following.get(user_id, ())),
				blocked_user_ids=frozenset(self._blocked.get(user_id, ())),
				muted_user_ids=frozenset(self._muted.get(user_id, ())),
			)

	def _is_blocked_either_way(self, user_id: str, target_id: str) -> bool:
		return target_id in self._blocked.get(user_id, ()) or user_id in self._blocked.get(target_id, ())

	async def follow(self, user_id: str, target_id: str, *, now: Optional[datetime] = None) -> bool:
		"""Return True when a new follow edge was created."""
		if user_id == target_id:
			raise SelfActionError("cannot_follow_self")
		with self._lock:
			if self._is_blocked_either_way(user_id, target_id):
				raise BlockedRelationship()
			following = self._following.setdefault(user_id, {})
			if target_id in following:
				return False
			following[target_id] = now or datetime.now(timezone.utc)
			return True

	async def unfollow(self, user_id: str, target_id: str) -> bool:
		with self._lock:
			following = self._following.get(user_id)
			if not following or target_id not in following:
				return False
			del following[target_id]
			return True

	async def list_follows(self, user_id: str, direction: FollowDirection | str = FollowDirection.FOLLOWERS) -> list[FollowEdge]:
		"""Edges pointing at ``user_id`` (followers) or out of it (following), newest first."""
		with self._lock:
			if FollowDirection(direction) is FollowDirection.FOLLOWING:
				edges = [
					FollowEdge(user_id, target_id, created_at)
					for target_id, created_at in self._following.get(user_id, {}).items()
				]
			else:
				edges = [
					FollowEdge(follower_id, user_id, targets[user_id])
					for follower_id, targets in self._following.items()
					if user_id in targets
				]
		edges.sort(key=lambda edge: edge.created_at)
		edges.reverse()
		return edges

	async def block(self, user_id: str, target_id: str) -> bool:
		"""Block a user and drop follow edges in both directions."""
		if user_id == target_id:
			raise SelfActionError("cannot_block_self")
		with self._lock:
			self._following.get(user_id, {}).pop(target_id, None)
			self._following.get(target_id, {}).pop(user_id, None)
			blocked = self._blocked.setdefault(user_id, set())
			if target_id in blocked:
				return False
			blocked.add(target_id)
			return True

	async def unblock(self, user_id: str, target_id: str) -> bool:
		with self._lock:
			blocked = self._blocked.get(user_id)
			if not blocked or target_id not in blocked:
				return False
			blocked.discard(target_id)
			return True

	async def mute(self, user_id: str, target_id: str) -> bool:
		if user_id == target_id:
			raise SelfActionError("cannot_mute_self")
		with self._lock:
			muted = self._muted.setdefault(user_id, set())
			if target_id in muted:
				return False
			muted.add(target_id)
			return True

	async def unmute(self, user_id: str, target_id: str) -> bool:
		with self._lock:
			muted = self._muted.get(user_id)
			if not muted or target_id not in muted:
				return False
			muted.discard(target_id)
			return True

	async def set_interests(self, user_id: str, interests: Iterable[str]) -> frozenset[str]:
		normalised = frozenset(item.strip().lower() for item in interests if item and item.strip())
		with self._lock:
			self._interests[user_id] = normalised
		return normalised


__all__ = ["FollowDirection", "FollowEdge", "InMemorySocialGraph", "ViewerProfileProvider"]
