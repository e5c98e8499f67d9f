"""Candidate posts for ranking, backed by an in-process post store."""

from __future__ import annotations

import enum
import threading
import uuid
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import AbstractSet, Iterable, Optional, Protocol

from twinen.feed.exceptions import NotPostAuthor, PostNotFound, PostPrivate
from twinen.feed.models import Post, PostType, Visibility

DEFAULT_CANDIDATE_LIMIT = 1000


class TimeRange(str, enum.Enum):
	ALL = "all"
	TODAY = "today"
	WEEK = "week"
	MONTH = "month"

	def cutoff(self, now: datetime) -> Optional[datetime]:
		"""Oldest admissible ``created_at`` for this window, ``None`` for no bound."""
		span = _TIME_RANGE_SPANS.get(self)
		if span is None:
			return None
		return now - span


_TIME_RANGE_SPANS = {
	TimeRange.TODAY: timedelta(days=1),
	TimeRange.WEEK: timedelta(days=7),
	TimeRange.MONTH: timedelta(days=30),
}


class CommentSort(str, enum.Enum):
	NEWEST = "newest"
	OLDEST = "oldest"


class InteractionType(str, enum.Enum):
	LIKE = "like"
	UNLIKE = "unlike"
	REPOST = "repost"
	UNREPOST = "unrepost"
	BOOKMARK = "bookmark"
	UNBOOKMARK = "unbookmark"


@dataclass(frozen=True, slots=True)
class InteractionResult:
	post_id: str
	liked: bool
	reposted: bool
	bookmarked: bool
	likes_count: int
	shares_count: int


@dataclass(frozen=True, slots=True)
class Comment:
	id: str
	post_id: str
	author_id: str
	body: str
	created_at: datetime


def ensure_visible(post: Post, viewer_id: Optional[str]) -> Post:
	"""Private posts are readable by their author only; ``None`` skips the check."""
	if viewer_id is not None and post.visibility is Visibility.PRIVATE and post.author_id != viewer_id:
		raise PostPrivate()
	return post


class CandidateSource(Protocol):
	async def fetch_candidates(
		self,
		*,
		time_range: TimeRange,
		now: datetime,
		author_ids: Optional[AbstractSet[str]] = None,
		limit: int = DEFAULT_CANDIDATE_LIMIT,
	) -> list[Post]: ...


class InMemoryPostStore:
	"""Posts, comments, and per-user interaction state held in process memory."""

	def __init__(self, posts: Iterable[Post] = ()) -> None:
		self._lock = threading.Lock()
		self._posts: dict[str, Post] = {post.id: post for post in posts}
		self._comments: dict[str, list[Comment]] = {}
		self._likes: dict[str, set[str]] = {}
		self._reposts: dict[str, set[str]] = {}
		self._bookmarks: dict[str, set[str]] = {}

	def __len__(self) -> int:
		with self._lock:
			return len(self._posts)

	async def create_post(
		self,
		*,
		author_id: str,
		content: str,
		tags: Iterable[str] = (),
		post_type: PostType = PostType.TEXT,
		visibility: Visibility = Visibility.PUBLIC,
		ai_generated: bool = False,
		is_pinned: bool = False,
		created_at: Optional[datetime] = None,
	) -> Post:
		post = Post(
			id=str(uuid.uuid4()),
			author_id=author_id,
			created_at=created_at or datetime.now(timezone.utc),
			tags=frozenset(tags),
			is_pinned=is_pinned,
			ai_generated=ai_generated,
			type=post_type,
			content=content,
			visibility=visibility,
		)
		with self._lock:
			self._posts[post.id] = post
		return post

	async def add_post(self, post: Post) -> Post:
		with self._lock:
			self._posts[post.id] = post
		return post

	def _live(self, post_id: str) -> Post:
		# Caller holds the lock; soft-deleted posts read as missing.
		post = self._posts.get(post_id)
		if post is None or post.is_deleted:
			raise PostNotFound()
		return post

	async def get_post(self, post_id: str, *, viewer_id: Optional[str] = None) -> Post:
		with self._lock:
			post = self._live(post_id)
		return ensure_visible(post, viewer_id)

	async def update_post(
		self,
		post_id: str,
		editor_id: str,
		*,
		content: Optional[str] = None,
		tags: Optional[Iterable[str]] = None,
		visibility: Optional[Visibility] = None,
		post_type: Optional[PostType] = None,
		now: Optional[datetime] = None,
	) -> Post:
		"""Apply an author edit; fields left as ``None`` keep their value."""
		changes: dict[str, object] = {}
		if content is not None:
			changes["content"] = content
		if tags is not None:
			changes["tags"] = frozenset(tags)
		if visibility is not None:
			changes["visibility"] = Visibility(visibility)
		if post_type is not None:
			changes["type"] = PostType(post_type)
		with self._lock:
			post = self._live(post_id)
			if post.author_id != editor_id:
				raise NotPostAuthor()
			post = replace(post, updated_at=now or datetime.now(timezone.utc), **changes)
			self._posts[post_id] = post
		return post

	async def delete_post(self, post_id: str, user_id: str) -> Post:
		"""Soft delete; the post leaves every feed but can be restored."""
		return self._set_deleted(post_id, user_id, True)

	async def restore_post(self, post_id: str, user_id: str) -> Post:
		return self._set_deleted(post_id, user_id, False)

	def _set_deleted(self, post_id: str, user_id: str, deleted: bool) -> Post:
		with self._lock:
			post = self._posts.get(post_id)
			if post is None:
				raise PostNotFound()
			if post.author_id != user_id:
				raise NotPostAuthor()
			if post.is_deleted != deleted:
				post = replace(post, is_deleted=deleted)
				self._posts[post_id] = post
		return post

	async def fetch_candidates(
		self,
		*,
		time_range: TimeRange,
		now: datetime,
		author_ids: Optional[AbstractSet[str]] = None,
		limit: int = DEFAULT_CANDIDATE_LIMIT,
	) -> list[Post]:
		"""Newest-first batch of live public and friends-visible posts inside the window."""
		cutoff = TimeRange(time_range).cutoff(now)
		with self._lock:
			posts = list(self._posts.values())
		selected = [
			post
			for post in posts
			if not post.is_deleted
			and post.visibility is not Visibility.PRIVATE
			and (cutoff is None or post.created_at >= cutoff)
			and (author_ids is None or post.author_id in author_ids)
		]
		selected.sort(key=lambda post: (post.created_at, post.id), reverse=True)
		return selected[: max(0, limit)]

	async def apply_interaction(self, post_id: str, user_id: str, kind: InteractionType | str) -> InteractionResult:
		"""Toggle one interaction; repeating the same action is a no-op."""
		interaction = InteractionType(kind)
		with self._lock:
			post = ensure_visible(self._live(post_id), user_id)
			likes = self._likes.setdefault(post_id, set())
			reposts = self._reposts.setdefault(post_id, set())
			bookmarks = self._bookmarks.setdefault(post_id, set())
			likes_count = post.likes_count
			shares_count = post.shares_count
			if interaction is InteractionType.LIKE and user_id not in likes:
				likes.add(user_id)
				likes_count += 1
			elif interaction is InteractionType.UNLIKE and user_id in likes:
				likes.discard(user_id)
				likes_count = max(0, likes_count - 1)
			elif interaction is InteractionType.REPOST and user_id not in reposts:
				reposts.add(user_id)
				shares_count += 1
			elif interaction is InteractionType.UNREPOST and user_id in reposts:
				reposts.discard(user_id)
				shares_count = max(0, shares_count - 1)
			elif interaction is InteractionType.BOOKMARK:
				bookmarks.add(user_id)
			elif interaction is InteractionType.UNBOOKMARK:
				bookmarks.discard(user_id)
			if likes_count != post.likes_count or shares_count != post.shares_count:
				post = replace(post, likes_count=likes_count, shares_count=shares_count)
				self._posts[post_id] = post
			return InteractionResult(
				post_id=post_id,
				liked=user_id in likes,
				reposted=user_id in reposts,
				bookmarked=user_id in bookmarks,
				likes_count=post.likes_count,
				shares_count=post.shares_count,
			)

	async def add_comment(self, post_id: str, author_id: str, body: str) -> Comment:
		with self._lock:
			post = ensure_visible(self._live(post_id), author_id)
			comment = Comment(
				id=str(uuid.uuid4()),
				post_id=post_id,
				author_id=author_id,
				body=body,
				created_at=datetime.now(timezone.utc),
			)
			self._comments.setdefault(post_id, []).append(comment)
			self._posts[post_id] = replace(post, comments_count=post.comments_count + 1)
		return comment

	async def list_comments(
		self,
		post_id: str,
		*,
		viewer_id: Optional[str] = None,
		sort: CommentSort | str = CommentSort.NEWEST,
	) -> list[Comment]:
		order = CommentSort(sort)
		with self._lock:
			ensure_visible(self._live(post_id), viewer_id)
			comments = list(self._comments.get(post_id, ()))
		# Stable sort keeps insertion order for equal timestamps
		comments.sort(key=lambda comment: comment.created_at)
		if order is CommentSort.NEWEST:
			comments.reverse()
		return comments


__all__ = [
	"CandidateSource",
	"Comment",
	"CommentSort",
	"InMemoryPostStore",
	"InteractionResult",
	"InteractionType",
	"TimeRange",
	"ensure_visible",
]
