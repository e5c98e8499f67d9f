"""Pydantic schemas for the posts and users APIs."""

from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl

from twinen.feed.models import Post
from twinen.feed.service import FeedType

MediaType = Literal["image", "video", "audio"]
FeedTypeParam = FeedType
TimeRangeParam = Literal["all", "today", "week", "month"]


class CamelModel(BaseModel):
	model_config = ConfigDict(populate_by_name=True)


class MediaItem(BaseModel):
	url: HttpUrl
	type: MediaType
	alt: Optional[str] = Field(default=None, max_length=500)


class PostCreateRequest(CamelModel):
	content: str = Field(..., min_length=1, max_length=2000)
	media: List[MediaItem] = Field(default_factory=list, max_length=10)
	visibility: Literal["public", "friends", "private"]
	tags: List[str] = Field(default_factory=list, max_length=20)
	ai_generated: bool = Field(default=False, alias="aiGenerated")


class PostOut(CamelModel):
	id: str
	author_id: str = Field(serialization_alias="authorId")
	content: str
	type: str
	visibility: str
	created_at: datetime = Field(serialization_alias="createdAt")
	likes_count: int = Field(serialization_alias="likesCount")
	comments_count: int = Field(serialization_alias="commentsCount")
	shares_count: int = Field(serialization_alias="sharesCount")
	tags: List[str]
	is_pinned: bool = Field(serialization_alias="isPinned")
	ai_generated: bool = Field(serialization_alias="aiGenerated")
	updated_at: Optional[datetime] = Field(default=None, serialization_alias="updatedAt")

	@classmethod
	def from_post(cls, post: Post) -> "PostOut":
		return cls(
			id=post.id,
			author_id=post.author_id,
			content=post.content,
			type=post.type.value,
			visibility=post.visibility.value,
			created_at=post.created_at,
			likes_count=post.likes_count,
			comments_count=post.comments_count,
			shares_count=post.shares_count,
			tags=sorted(post.tags),
			is_pinned=post.is_pinned,
			ai_generated=post.ai_generated,
			updated_at=post.updated_at,
		)


class PostUpdateRequest(CamelModel):
	content: Optional[str] = Field(default=None, min_length=1, max_length=2000)
	media: Optional[List[MediaItem]] = Field(default=None, max_length=10)
	visibility: Optional[Literal["public", "friends", "private"]] = None
	tags: Optional[List[str]] = Field(default=None, max_length=20)


class PostDeleteRequest(BaseModel):
	action: Literal["delete", "restore"] = "delete"
	reason: Optional[str] = Field(default=None, max_length=500)


class MessageResponse(BaseModel):
	success: bool = True
	message: str


class PaginationOut(CamelModel):
	page: int
	limit: int
	total: int
	total_pages: int = Field(serialization_alias="totalPages")
	has_next: bool = Field(serialization_alias="hasNext")
	has_prev: bool = Field(serialization_alias="hasPrev")


class FeedResponse(BaseModel):
	success: bool = True
	data: List[PostOut]
	pagination: PaginationOut


class PostResponse(BaseModel):
	success: bool = True
	data: PostOut


class InteractionRequest(BaseModel):
	type: Literal["like", "unlike", "repost", "unrepost", "bookmark", "unbookmark"]


class InteractionOut(CamelModel):
	post_id: str = Field(serialization_alias="postId")
	liked: bool
	reposted: bool
	bookmarked: bool
	likes_count: int = Field(serialization_alias="likesCount")
	reposts_count: int = Field(serialization_alias="repostsCount")


class InteractionResponse(BaseModel):
	success: bool = True
	data: InteractionOut


class CommentCreateRequest(BaseModel):
	content: str = Field(..., min_length=1, max_length=500)


class CommentOut(CamelModel):
	id: str
	post_id: str = Field(serialization_alias="postId")
	author_id: str = Field(serialization_alias="authorId")
	content: str
	created_at: datetime = Field(serialization_alias="createdAt")


class CommentResponse(BaseModel):
	success: bool = True
	data: CommentOut


class TargetUserRequest(CamelModel):
	target_user_id: str = Field(..., min_length=1, alias="targetUserId")


class BlockUserRequest(TargetUserRequest):
	reason: Optional[Literal["harassment", "spam", "inappropriate_content", "other"]] = None
	custom_reason: Optional[str] = Field(default=None, max_length=500, alias="customReason")


class RelationshipOut(CamelModel):
	target_user_id: str = Field(serialization_alias="targetUserId")
	active: bool
	changed: bool
	at: datetime


class RelationshipResponse(BaseModel):
	success: bool = True
	data: RelationshipOut


class InterestsRequest(BaseModel):
	interests: List[str] = Field(default_factory=list, max_length=50)


class InterestsResponse(BaseModel):
	success: bool = True
	data: List[str]


class CommentListOut(CamelModel):
	comments: List[CommentOut]
	pagination: PaginationOut
	sort_by: str = Field(serialization_alias="sortBy")


class CommentListResponse(BaseModel):
	success: bool = True
	data: CommentListOut


class FollowOut(CamelModel):
	follower_id: str = Field(serialization_alias="followerId")
	following_id: str = Field(serialization_alias="followingId")
	created_at: datetime = Field(serialization_alias="createdAt")


class FollowListOut(BaseModel):
	follows: List[FollowOut]
	type: str
	pagination: PaginationOut


class FollowListResponse(BaseModel):
	success: bool = True
	data: FollowListOut
