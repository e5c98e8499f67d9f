from __future__ import annotations

from datetime import timedelta

import pytest

from twinen.feed.exceptions import BlockedRelationship, SelfActionError
from twinen.feed.profiles import FollowDirection, InMemorySocialGraph


@pytest.mark.asyncio
async def test_follow_and_profile_snapshot():
	graph = InMemorySocialGraph()
	assert await graph.follow("me", "u1") is True
	assert await graph.follow("me", "u1") is False
	await graph.mute("me", "u2")
	await graph.set_interests("me", ["Gaming", "", "ai"])

	profile = await graph.get_profile("me")
	assert profile.following_user_ids == {"u1"}
	assert profile.muted_user_ids == {"u2"}
	assert profile.interests == {"gaming", "ai"}


@pytest.mark.asyncio
async def test_block_removes_follow_edges_both_ways():
	graph = InMemorySocialGraph()
	await graph.follow("me", "u1")
	await graph.follow("u1", "me")
	await graph.block("me", "u1")

	assert (await graph.get_profile("me")).following_user_ids == frozenset()
	assert (await graph.get_profile("u1")).following_user_ids == frozenset()
	with pytest.raises(BlockedRelationship):
		await graph.follow("u1", "me")

	assert await graph.unblock("me", "u1") is True
	assert await graph.follow("u1", "me") is True


@pytest.mark.asyncio
async def test_self_actions_rejected():
	graph = InMemorySocialGraph()
	with pytest.raises(SelfActionError):
		await graph.follow("me", "me")
	with pytest.raises(SelfActionError):
		await graph.block("me", "me")
	with pytest.raises(SelfActionError):
		await graph.mute("me", "me")


@pytest.mark.asyncio
async def test_undo_missing_edges_is_noop():
	graph = InMemorySocialGraph()
	assert await graph.unfollow("me", "u1") is False
	assert await graph.unmute("me", "u1") is False
	assert await graph.unblock("me", "u1") is False


@pytest.mark.asyncio
async def test_list_follows_both_directions_newest_first(now):
	graph = InMemorySocialGraph()
	await graph.follow("a", "star", now=now - timedelta(hours=2))
	await graph.follow("b", "star", now=now - timedelta(hours=1))
	await graph.follow("star", "a", now=now)

	followers = await graph.list_follows("star", FollowDirection.FOLLOWERS)
	assert [edge.follower_id for edge in followers] == ["b", "a"]
	assert followers[0].created_at == now - timedelta(hours=1)

	following = await graph.list_follows("star", "following")
	assert [(edge.follower_id, edge.following_id) for edge in following] == [("star", "a")]

	await graph.block("star", "b")
	assert [edge.follower_id for edge in await graph.list_follows("star")] == ["a"]
