"""Posts endpoints: ranked feed, post lifecycle, interactions, and comments."""

from __future__ import annotations

from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query, status

from twinen.api import schemas
from twinen.api.deps import container_dep, rate_limited
from twinen.container import Container
from twinen.feed import pagination
from twinen.feed.candidates import Comment, CommentSort, TimeRange
from twinen.feed.models import PostType, Visibility
from twinen.infra.auth import AuthenticatedUser, get_current_user
from twinen.obs import logging as obs_logging
from twinen.obs import metrics as obs_metrics
from twinen.settings import settings

router = APIRouter(prefix="/posts", tags=["posts"])
log = obs_logging.get_logger(__name__)


@router.get("", response_model=schemas.FeedResponse)
async def get_feed_endpoint(
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=settings.feed_default_limit, ge=1, le=settings.feed_max_limit),
	feed_type: schemas.FeedTypeParam = Query(default="all", alias="type"),
	time_range: schemas.TimeRangeParam = Query(default="all", alias="timeRange"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("feed_read")),
) -> schemas.FeedResponse:
	result = await container.feed.get_feed(
		auth_user.id,
		feed_type=feed_type,
		time_range=TimeRange(time_range),
		page=page,
		limit=limit,
	)
	return schemas.FeedResponse(
		data=[schemas.PostOut.from_post(post) for post in result.items],
		pagination=schemas.PaginationOut(
			page=result.page,
			limit=result.page_size,
			total=result.total,
			total_pages=result.total_pages,
			has_next=result.has_next,
			has_prev=result.has_prev,
		),
	)


@router.post("", response_model=schemas.PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post_endpoint(
	payload: schemas.PostCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("create_post")),
) -> schemas.PostResponse:
	post_type = PostType(payload.media[0].type) if payload.media else PostType.TEXT
	post = await container.posts.create_post(
		author_id=auth_user.id,
		content=payload.content,
		tags=payload.tags,
		post_type=post_type,
		visibility=Visibility(payload.visibility),
		ai_generated=payload.ai_generated,
	)
	log.info("post_created", extra={"post_id": post.id, "post_type": post.type.value})
	return schemas.PostResponse(data=schemas.PostOut.from_post(post))


@router.get("/{post_id}", response_model=schemas.PostResponse)
async def get_post_endpoint(
	post_id: str,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
) -> schemas.PostResponse:
	post = await container.posts.get_post(post_id, viewer_id=auth_user.id)
	return schemas.PostResponse(data=schemas.PostOut.from_post(post))


@router.put("/{post_id}", response_model=schemas.PostResponse)
async def update_post_endpoint(
	post_id: str,
	payload: schemas.PostUpdateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("update_post")),
) -> schemas.PostResponse:
	post_type = None
	if payload.media is not None:
		post_type = PostType(payload.media[0].type) if payload.media else PostType.TEXT
	post = await container.posts.update_post(
		post_id,
		auth_user.id,
		content=payload.content,
		tags=payload.tags,
		visibility=Visibility(payload.visibility) if payload.visibility else None,
		post_type=post_type,
	)
	obs_metrics.inc_post_lifecycle("update")
	log.info("post_updated", extra={"post_id": post.id})
	return schemas.PostResponse(data=schemas.PostOut.from_post(post))


@router.delete("/{post_id}", response_model=schemas.MessageResponse)
async def delete_post_endpoint(
	post_id: str,
	payload: Optional[schemas.PostDeleteRequest] = None,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
) -> schemas.MessageResponse:
	action = payload.action if payload else "delete"
	if action == "restore":
		await container.posts.restore_post(post_id, auth_user.id)
		message = "Post restored successfully"
	else:
		await container.posts.delete_post(post_id, auth_user.id)
		message = "Post deleted successfully"
	obs_metrics.inc_post_lifecycle(action)
	log.info(
		"post_deleted" if action == "delete" else "post_restored",
		extra={"post_id": post_id, "delete_reason": payload.reason if payload else None},
	)
	return schemas.MessageResponse(message=message)


@router.post("/{post_id}/interactions", response_model=schemas.InteractionResponse)
async def post_interaction_endpoint(
	post_id: str,
	payload: schemas.InteractionRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("post_interaction")),
) -> schemas.InteractionResponse:
	result = await container.posts.apply_interaction(post_id, auth_user.id, payload.type)
	obs_metrics.inc_interaction(payload.type)
	log.info("post_interaction", extra={"post_id": post_id, "interaction": payload.type})
	return schemas.InteractionResponse(
		data=schemas.InteractionOut(
			post_id=result.post_id,
			liked=result.liked,
			reposted=result.reposted,
			bookmarked=result.bookmarked,
			likes_count=result.likes_count,
			reposts_count=result.shares_count,
		)
	)


@router.post(
	"/{post_id}/comments",
	response_model=schemas.CommentResponse,
	status_code=status.HTTP_201_CREATED,
)
async def create_comment_endpoint(
	post_id: str,
	payload: schemas.CommentCreateRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("create_comment")),
) -> schemas.CommentResponse:
	comment = await container.posts.add_comment(post_id, auth_user.id, payload.content)
	log.info("comment_created", extra={"post_id": post_id, "comment_id": comment.id})
	return schemas.CommentResponse(data=_comment_out(comment))


@router.get("/{post_id}/comments", response_model=schemas.CommentListResponse)
async def list_comments_endpoint(
	post_id: str,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=100),
	sort: Literal["newest", "oldest"] = Query(default="newest"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
) -> schemas.CommentListResponse:
	comments = await container.posts.list_comments(post_id, viewer_id=auth_user.id, sort=CommentSort(sort))
	total_pages, has_next, has_prev = pagination.page_meta(len(comments), page, limit)
	return schemas.CommentListResponse(
		data=schemas.CommentListOut(
			comments=[_comment_out(comment) for comment in pagination.slice_page(comments, page, limit)],
			pagination=schemas.PaginationOut(
				page=page,
				limit=limit,
				total=len(comments),
				total_pages=total_pages,
				has_next=has_next,
				has_prev=has_prev,
			),
			sort_by=sort,
		)
	)


def _comment_out(comment: Comment) -> schemas.CommentOut:
	return schemas.CommentOut(
		id=comment.id,
		post_id=comment.post_id,
		author_id=comment.author_id,
		content=comment.body,
		created_at=comment.created_at,
	)


__all__ = ["router"]
