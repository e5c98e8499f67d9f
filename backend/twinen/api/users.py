"""Social graph endpoints: follow, block, mute, and interests."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from fastapi import APIRouter, Depends, Query

from twinen.api import schemas
from twinen.api.deps import container_dep, rate_limited
from twinen.container import Container
from twinen.feed import pagination
from twinen.feed.profiles import FollowDirection
from twinen.infra.auth import AuthenticatedUser, get_current_user
from twinen.obs import logging as obs_logging
from twinen.obs import metrics as obs_metrics

router = APIRouter(prefix="/users", tags=["users"])
log = obs_logging.get_logger(__name__)


def _relationship(target_user_id: str, *, active: bool, changed: bool) -> schemas.RelationshipResponse:
	return schemas.RelationshipResponse(
		data=schemas.RelationshipOut(
			target_user_id=target_user_id,
			active=active,
			changed=changed,
			at=datetime.now(timezone.utc),
		)
	)


@router.post("/follow", response_model=schemas.RelationshipResponse)
async def follow_endpoint(
	payload: schemas.TargetUserRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("follow_action")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.follow(auth_user.id, payload.target_user_id)
	obs_metrics.inc_social("follow")
	log.info("user_followed", extra={"target_id": payload.target_user_id, "changed": changed})
	return _relationship(payload.target_user_id, active=True, changed=changed)


@router.delete("/follow", response_model=schemas.RelationshipResponse)
async def unfollow_endpoint(
	user_id: str = Query(..., min_length=1, alias="userId"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("follow_action")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.unfollow(auth_user.id, user_id)
	obs_metrics.inc_social("unfollow")
	return _relationship(user_id, active=False, changed=changed)


@router.get("/follow", response_model=schemas.FollowListResponse)
async def list_follows_endpoint(
	user_id: str = Query(..., min_length=1, alias="userId"),
	direction: Literal["followers", "following"] = Query(default="followers", alias="type"),
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=20, ge=1, le=100),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
) -> schemas.FollowListResponse:
	edges = await container.graph.list_follows(user_id, FollowDirection(direction))
	total_pages, has_next, has_prev = pagination.page_meta(len(edges), page, limit)
	return schemas.FollowListResponse(
		data=schemas.FollowListOut(
			follows=[
				schemas.FollowOut(
					follower_id=edge.follower_id,
					following_id=edge.following_id,
					created_at=edge.created_at,
				)
				for edge in pagination.slice_page(edges, page, limit)
			],
			type=direction,
			pagination=schemas.PaginationOut(
				page=page,
				limit=limit,
				total=len(edges),
				total_pages=total_pages,
				has_next=has_next,
				has_prev=has_prev,
			),
		)
	)


@router.post("/block", response_model=schemas.RelationshipResponse)
async def block_endpoint(
	payload: schemas.BlockUserRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("block_user")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.block(auth_user.id, payload.target_user_id)
	obs_metrics.inc_social("block")
	log.info(
		"user_blocked",
		extra={
			"target_id": payload.target_user_id,
			"block_reason": payload.reason,
			"custom_reason": payload.custom_reason[:100] if payload.custom_reason else None,
		},
	)
	return _relationship(payload.target_user_id, active=True, changed=changed)


@router.delete("/block", response_model=schemas.RelationshipResponse)
async def unblock_endpoint(
	user_id: str = Query(..., min_length=1, alias="userId"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("block_user")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.unblock(auth_user.id, user_id)
	obs_metrics.inc_social("unblock")
	return _relationship(user_id, active=False, changed=changed)


@router.post("/mute", response_model=schemas.RelationshipResponse)
async def mute_endpoint(
	payload: schemas.TargetUserRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("mute_user")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.mute(auth_user.id, payload.target_user_id)
	obs_metrics.inc_social("mute")
	log.info("user_muted", extra={"target_id": payload.target_user_id, "changed": changed})
	return _relationship(payload.target_user_id, active=True, changed=changed)


@router.delete("/mute", response_model=schemas.RelationshipResponse)
async def unmute_endpoint(
	user_id: str = Query(..., min_length=1, alias="userId"),
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
	_limit=Depends(rate_limited("mute_user")),
) -> schemas.RelationshipResponse:
	changed = await container.graph.unmute(auth_user.id, user_id)
	obs_metrics.inc_social("unmute")
	return _relationship(user_id, active=False, changed=changed)


@router.put("/me/interests", response_model=schemas.InterestsResponse)
async def set_interests_endpoint(
	payload: schemas.InterestsRequest,
	auth_user: AuthenticatedUser = Depends(get_current_user),
	container: Container = Depends(container_dep),
) -> schemas.InterestsResponse:
	interests = await container.graph.set_interests(auth_user.id, payload.interests)
	return schemas.InterestsResponse(data=sorted(interests))


__all__ = ["router"]
