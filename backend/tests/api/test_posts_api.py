from datetime import datetime, timedelta, timezone

import pytest
from httpx import AsyncClient

from twinen.feed.models import Post
from twinen.infra.rate_limit import RateLimitConfig

ME = {"X-User-Id": "me"}


async def _seed(container):
	now = datetime.now(timezone.utc)
	await container.posts.add_post(
		Post(id="a", author_id="u1", created_at=now - timedelta(hours=1), likes_count=10, comments_count=2, shares_count=1, tags={"ai"})
	)
	await container.posts.add_post(
		Post(id="b", author_id="u2", created_at=now - timedelta(minutes=30), likes_count=5, is_pinned=True)
	)
	await container.graph.follow("me", "u1")
	await container.graph.follow("me", "u2")


@pytest.mark.asyncio
async def test_feed_requires_user(api_client: AsyncClient):
	resp = await api_client.get("/posts")
	assert resp.status_code == 401
	assert resp.json()["success"] is False
	assert resp.json()["error"] == "missing_user"


@pytest.mark.asyncio
async def test_feed_defaults_to_latest(api_client: AsyncClient, container):
	await _seed(container)
	resp = await api_client.get("/posts", headers=ME)
	assert resp.status_code == 200
	body = resp.json()
	assert body["success"] is True
	assert [item["id"] for item in body["data"]] == ["b", "a"]
	assert body["data"][0]["authorId"] == "u2"
	assert body["data"][0]["isPinned"] is True
	assert body["pagination"] == {
		"page": 1,
		"limit": 10,
		"total": 2,
		"totalPages": 1,
		"hasNext": False,
		"hasPrev": False,
	}
	assert resp.headers["X-RateLimit-Limit"] == "600"
	assert "X-Request-Id" in resp.headers


@pytest.mark.asyncio
async def test_feed_modes_and_paging(api_client: AsyncClient, container):
	await _seed(container)
	resp = await api_client.get("/posts", params={"type": "trending", "limit": 1, "page": 2}, headers=ME)
	body = resp.json()
	assert [item["id"] for item in body["data"]] == ["b"]
	assert body["pagination"]["hasPrev"] is True
	assert body["pagination"]["totalPages"] == 2


@pytest.mark.asyncio
async def test_feed_rejects_bad_params(api_client: AsyncClient):
	assert (await api_client.get("/posts", params={"limit": 500}, headers=ME)).status_code == 422
	assert (await api_client.get("/posts", params={"type": "hot"}, headers=ME)).status_code == 422
	assert (await api_client.get("/posts", params={"page": 0}, headers=ME)).status_code == 422
	resp = await api_client.get("/posts", params={"timeRange": "year"}, headers=ME)
	assert resp.status_code == 422
	assert resp.json()["success"] is False


@pytest.mark.asyncio
async def test_create_post_then_visible_in_feed(api_client: AsyncClient):
	resp = await api_client.post(
		"/posts",
		json={
			"content": "neon skyline",
			"visibility": "public",
			"tags": ["Cyberpunk"],
			"media": [{"url": "https://cdn.example.com/a.png", "type": "image"}],
		},
		headers={"X-User-Id": "u7"},
	)
	assert resp.status_code == 201
	created = resp.json()["data"]
	assert created["type"] == "image"
	assert created["tags"] == ["cyberpunk"]
	assert created["aiGenerated"] is False

	feed = await api_client.get("/posts", headers=ME)
	assert [item["id"] for item in feed.json()["data"]] == [created["id"]]


@pytest.mark.asyncio
async def test_create_post_validates_content(api_client: AsyncClient):
	resp = await api_client.post("/posts", json={"content": "", "visibility": "public"}, headers=ME)
	assert resp.status_code == 422


@pytest.mark.asyncio
async def test_interactions_update_counts(api_client: AsyncClient, container):
	await _seed(container)
	resp = await api_client.post("/posts/b/interactions", json={"type": "like"}, headers=ME)
	assert resp.status_code == 200
	assert resp.json()["data"] == {
		"postId": "b",
		"liked": True,
		"reposted": False,
		"bookmarked": False,
		"likesCount": 6,
		"repostsCount": 0,
	}
	resp = await api_client.post("/posts/b/interactions", json={"type": "repost"}, headers=ME)
	assert resp.json()["data"]["repostsCount"] == 1


@pytest.mark.asyncio
async def test_interaction_on_missing_post(api_client: AsyncClient):
	resp = await api_client.post("/posts/nope/interactions", json={"type": "like"}, headers=ME)
	assert resp.status_code == 404
	assert resp.json()["error"] == "post_not_found"


@pytest.mark.asyncio
async def test_interactions_rate_limited(api_client: AsyncClient, container):
	await _seed(container)
	container.limiter._limits["post_interaction"] = RateLimitConfig(2)
	for _ in range(2):
		assert (await api_client.post("/posts/a/interactions", json={"type": "bookmark"}, headers=ME)).status_code == 200
	resp = await api_client.post("/posts/a/interactions", json={"type": "bookmark"}, headers=ME)
	assert resp.status_code == 429
	assert resp.json()["error"] == "Too many interactions. Please try again later."
	assert resp.headers["X-RateLimit-Remaining"] == "0"
	assert int(resp.headers["Retry-After"]) >= 0


@pytest.mark.asyncio
async def test_comment_increments_count(api_client: AsyncClient, container):
	await _seed(container)
	resp = await api_client.post("/posts/a/comments", json={"content": "great shot"}, headers=ME)
	assert resp.status_code == 201
	assert resp.json()["data"]["authorId"] == "me"
	post = await api_client.get("/posts/a", headers=ME)
	assert post.json()["data"]["commentsCount"] == 3


@pytest.mark.asyncio
async def test_private_post_readable_by_author_only(api_client: AsyncClient):
	created = await api_client.post(
		"/posts",
		json={"content": "secret", "visibility": "private"},
		headers={"X-User-Id": "owner"},
	)
	post_id = created.json()["data"]["id"]

	resp = await api_client.get(f"/posts/{post_id}", headers={"X-User-Id": "stranger"})
	assert resp.status_code == 403
	assert resp.json()["success"] is False
	assert resp.json()["error"] == "post_private"

	resp = await api_client.post(f"/posts/{post_id}/interactions", json={"type": "like"}, headers={"X-User-Id": "stranger"})
	assert resp.status_code == 403
	resp = await api_client.get(f"/posts/{post_id}/comments", headers={"X-User-Id": "stranger"})
	assert resp.status_code == 403

	resp = await api_client.get(f"/posts/{post_id}", headers={"X-User-Id": "owner"})
	assert resp.status_code == 200
	assert resp.json()["data"]["content"] == "secret"


@pytest.mark.asyncio
async def test_update_post_is_author_only(api_client: AsyncClient):
	created = await api_client.post("/posts", json={"content": "draft", "visibility": "public"}, headers={"X-User-Id": "u7"})
	post_id = created.json()["data"]["id"]
	assert created.json()["data"]["updatedAt"] is None

	resp = await api_client.put(f"/posts/{post_id}", json={"content": "hijacked"}, headers=ME)
	assert resp.status_code == 403
	assert resp.json()["error"] == "not_post_author"

	resp = await api_client.put(
		f"/posts/{post_id}",
		json={"content": "final cut", "visibility": "friends", "tags": ["Synthwave"]},
		headers={"X-User-Id": "u7"},
	)
	assert resp.status_code == 200
	data = resp.json()["data"]
	assert data["content"] == "final cut"
	assert data["visibility"] == "friends"
	assert data["tags"] == ["synthwave"]
	assert data["updatedAt"] is not None
	assert resp.headers["X-RateLimit-Limit"] == "20"

	assert (await api_client.put("/posts/nope", json={"content": "x"}, headers=ME)).status_code == 404


@pytest.mark.asyncio
async def test_update_post_rate_limited(api_client: AsyncClient, container):
	await _seed(container)
	container.limiter._limits["update_post"] = RateLimitConfig(1)
	headers = {"X-User-Id": "u1"}
	assert (await api_client.put("/posts/a", json={"content": "v2"}, headers=headers)).status_code == 200
	resp = await api_client.put("/posts/a", json={"content": "v3"}, headers=headers)
	assert resp.status_code == 429
	assert resp.json()["error"] == "Too many post updates. Please try again later."


@pytest.mark.asyncio
async def test_deleted_post_leaves_every_feed_mode(api_client: AsyncClient, container):
	await _seed(container)
	resp = await api_client.delete("/posts/a", headers=ME)
	assert resp.status_code == 403

	resp = await api_client.request("DELETE", "/posts/a", json={"reason": "typo"}, headers={"X-User-Id": "u1"})
	assert resp.status_code == 200
	assert resp.json() == {"success": True, "message": "Post deleted successfully"}

	for feed_type in ("all", "following", "trending", "ai_curated"):
		feed = await api_client.get("/posts", params={"type": feed_type}, headers=ME)
		assert [item["id"] for item in feed.json()["data"]] == ["b"], feed_type
	assert (await api_client.get("/posts/a", headers=ME)).status_code == 404
	assert (await api_client.post("/posts/a/comments", json={"content": "?"}, headers=ME)).status_code == 404

	resp = await api_client.request("DELETE", "/posts/a", json={"action": "restore"}, headers={"X-User-Id": "u1"})
	assert resp.json()["message"] == "Post restored successfully"
	feed = await api_client.get("/posts", headers=ME)
	assert [item["id"] for item in feed.json()["data"]] == ["b", "a"]


@pytest.mark.asyncio
async def test_list_comments_sorted_and_paged(api_client: AsyncClient, container):
	await _seed(container)
	for text in ("first", "second", "third"):
		assert (await api_client.post("/posts/a/comments", json={"content": text}, headers=ME)).status_code == 201

	resp = await api_client.get("/posts/a/comments", params={"limit": 2}, headers=ME)
	assert resp.status_code == 200
	data = resp.json()["data"]
	assert [comment["content"] for comment in data["comments"]] == ["third", "second"]
	assert data["sortBy"] == "newest"
	assert data["pagination"] == {
		"page": 1,
		"limit": 2,
		"total": 3,
		"totalPages": 2,
		"hasNext": True,
		"hasPrev": False,
	}

	resp = await api_client.get("/posts/a/comments", params={"sort": "oldest", "page": 2, "limit": 2}, headers=ME)
	assert [comment["content"] for comment in resp.json()["data"]["comments"]] == ["third"]

	assert (await api_client.get("/posts/a/comments", params={"limit": 101}, headers=ME)).status_code == 422
	assert (await api_client.get("/posts/nope/comments", headers=ME)).status_code == 404
