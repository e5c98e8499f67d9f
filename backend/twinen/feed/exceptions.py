"""Domain-level exceptions for posts and the social graph."""

from __future__ import annotations


class FeedError(Exception):
	"""Base class for feed feature errors."""

	reason: str = "unknown"
	status_code: int = 400

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class PostNotFound(FeedError):
	reason = "post_not_found"
	status_code = 404


class SelfActionError(FeedError):
	reason = "self_action"


class BlockedRelationship(FeedError):
	reason = "blocked"
	status_code = 403


class PostPrivate(FeedError):
	reason = "post_private"
	status_code = 403


class NotPostAuthor(FeedError):
	reason = "not_post_author"
	status_code = 403
