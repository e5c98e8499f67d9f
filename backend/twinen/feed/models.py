"""Data contracts consumed and produced by the feed ranking engine."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Optional, Union


class PostType(str, enum.Enum):
	TEXT = "text"
	IMAGE = "image"
	VIDEO = "video"
	AUDIO = "audio"


class Visibility(str, enum.Enum):
	PUBLIC = "public"
	FRIENDS = "friends"
	PRIVATE = "private"


class RankingMode(str, enum.Enum):
	FOLLOWING = "following"
	LATEST = "latest"
	TRENDING = "trending"
	AI_CURATED = "ai_curated"

	@classmethod
	def parse(cls, value: Union["RankingMode", str, None]) -> "RankingMode":
		"""Resolve a mode, falling back to ``FOLLOWING`` for anything unknown."""
		if isinstance(value, cls):
			return value
		if isinstance(value, str):
			try:
				return cls(value.strip().lower())
			except ValueError:
				pass
		return cls.FOLLOWING


def _lowered(values: Iterable[str]) -> frozenset[str]:
	return frozenset(str(value).strip().lower() for value in values if str(value).strip())


def _utc(value: datetime) -> datetime:
	if value.tzinfo is None:
		return value.replace(tzinfo=timezone.utc)
	return value.astimezone(timezone.utc)


@dataclass(frozen=True, slots=True)
class Post:
	"""Read-only snapshot of a post at ranking time."""

	id: str
	author_id: str
	created_at: datetime
	likes_count: int = 0
	comments_count: int = 0
	shares_count: int = 0
	tags: frozenset[str] = field(default_factory=frozenset)
	is_pinned: bool = False
	ai_generated: bool = False
	type: PostType = PostType.TEXT
	content: str = ""
	visibility: Visibility = Visibility.PUBLIC
	updated_at: Optional[datetime] = None
	is_deleted: bool = False

	def __post_init__(self) -> None:
		for name in ("likes_count", "comments_count", "shares_count"):
			if getattr(self, name) < 0:
				raise ValueError(f"{name} must be >= 0")
		object.__setattr__(self, "created_at", _utc(self.created_at))
		if self.updated_at is not None:
			object.__setattr__(self, "updated_at", _utc(self.updated_at))
		object.__setattr__(self, "tags", _lowered(self.tags))
		object.__setattr__(self, "type", PostType(self.type))
		object.__setattr__(self, "visibility", Visibility(self.visibility))


@dataclass(frozen=True, slots=True)
class ViewerProfile:
	"""Ranking-time preferences of the requesting user."""

	interests: frozenset[str] = field(default_factory=frozenset)
	following_user_ids: frozenset[str] = field(default_factory=frozenset)
	blocked_user_ids: frozenset[str] = field(default_factory=frozenset)
	muted_user_ids: frozenset[str] = field(default_factory=frozenset)

	def __post_init__(self) -> None:
		object.__setattr__(self, "interests", _lowered(self.interests))
		object.__setattr__(self, "following_user_ids", frozenset(self.following_user_ids))
		object.__setattr__(self, "blocked_user_ids", frozenset(self.blocked_user_ids))
		object.__setattr__(self, "muted_user_ids", frozenset(self.muted_user_ids))

	@classmethod
	def empty(cls) -> "ViewerProfile":
		return cls()


@dataclass(frozen=True, slots=True)
class RankedPost:
	post: Post
	score: float


@dataclass(frozen=True, slots=True)
class FeedPage:
	items: list[Post]
	page: int
	page_size: int
	total: int
	total_pages: int
	has_next: bool
	has_prev: bool
	mode: Optional[RankingMode] = None


__all__ = [
	"FeedPage",
	"Post",
	"PostType",
	"RankedPost",
	"RankingMode",
	"ViewerProfile",
	"Visibility",
]
