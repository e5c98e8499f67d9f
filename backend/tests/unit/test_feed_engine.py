from __future__ import annotations

from datetime import timedelta

import pytest

from twinen.feed.engine import FeedRankingEngine
from twinen.feed.models import Post, RankingMode, ViewerProfile

engine = FeedRankingEngine()


@pytest.fixture
def candidates(now):
	return [
		Post(
			id="a",
			author_id="u1",
			created_at=now - timedelta(hours=1),
			likes_count=10,
			comments_count=2,
			shares_count=1,
			tags={"ai"},
		),
		Post(
			id="b",
			author_id="u2",
			created_at=now - timedelta(minutes=30),
			likes_count=5,
			is_pinned=True,
		),
	]


@pytest.fixture
def profile():
	return ViewerProfile(interests={"ai"}, following_user_ids={"u1", "u2"})


@pytest.mark.parametrize("mode", ["following", "ai_curated", "trending"])
def test_example_orderings(candidates, profile, now, mode):
	ranked = engine.rank(candidates, profile, mode, 1, 10, now=now)
	assert [post.id for post in ranked] == ["a", "b"]


def test_example_scores(candidates, profile, now):
	following = {item.post.id: item.score for item in engine.score(candidates, profile, "following", now=now)}
	assert following["a"] == pytest.approx(21.45)
	# 5 likes plus the pin bonus
	assert following["b"] == pytest.approx(15.475)

	curated = {item.post.id: item.score for item in engine.score(candidates, profile, "ai_curated", now=now)}
	assert curated == {"a": pytest.approx(23), "b": pytest.approx(5)}

	trending = {item.post.id: item.score for item in engine.score(candidates, profile, "trending", now=now)}
	assert trending == {"a": pytest.approx(13), "b": pytest.approx(10)}


@pytest.mark.parametrize("mode", list(RankingMode))
def test_blocked_author_never_returned(candidates, now, mode):
	profile = ViewerProfile(interests={"ai"}, following_user_ids={"u1", "u2"}, blocked_user_ids={"u2"})
	ranked = engine.rank(candidates, profile, mode, 1, 10, now=now)
	assert [post.id for post in ranked] == ["a"]


def test_muted_author_still_ranked(candidates, now):
	profile = ViewerProfile(following_user_ids={"u1", "u2"}, muted_user_ids={"u2"})
	ranked = engine.rank(candidates, profile, "following", 1, 10, now=now)
	assert {post.id for post in ranked} == {"a", "b"}


def test_following_mode_restricts_authors(candidates, now):
	profile = ViewerProfile(following_user_ids={"u2"})
	ranked = engine.rank(candidates, profile, "following", 1, 10, now=now)
	assert [post.author_id for post in ranked] == ["u2"]


def test_missing_profile_yields_empty_following_feed(candidates, now):
	assert engine.rank(candidates, None, "following", 1, 10, now=now) == []
	assert len(engine.rank(candidates, None, "latest", 1, 10, now=now)) == 2


def test_unknown_mode_falls_back_to_following(candidates, now):
	profile = ViewerProfile(following_user_ids={"u2"})
	unknown = engine.rank_page(candidates, profile, "hot", 1, 10, now=now)
	assert unknown.mode is RankingMode.FOLLOWING
	assert [post.id for post in unknown.items] == ["b"]


def test_latest_orders_by_creation_time(candidates, profile, now):
	ranked = engine.rank(candidates, profile, "latest", 1, 10, now=now)
	assert [post.id for post in ranked] == ["b", "a"]


def test_ties_break_by_recency_then_id(now):
	created = now - timedelta(hours=20)
	posts = [
		Post(id="c", author_id="u1", created_at=created, likes_count=3),
		Post(id="a", author_id="u1", created_at=created, likes_count=3),
		Post(id="b", author_id="u1", created_at=created + timedelta(minutes=5), likes_count=3),
	]
	profile = ViewerProfile(following_user_ids={"u1"})
	ranked = engine.rank(posts, profile, "following", 1, 10, now=now)
	assert [post.id for post in ranked] == ["b", "a", "c"]


def test_deterministic_and_inputs_untouched(candidates, profile, now):
	snapshot = list(candidates)
	first = engine.rank(candidates, profile, "trending", 1, 10, now=now)
	second = engine.rank(candidates, profile, "trending", 1, 10, now=now)
	assert first == second
	assert candidates == snapshot


def test_pagination_covers_every_post_once(now):
	posts = [
		Post(id=f"p{idx:02d}", author_id=f"u{idx % 3}", created_at=now - timedelta(minutes=idx), likes_count=idx % 4)
		for idx in range(23)
	]
	profile = ViewerProfile(following_user_ids={"u0", "u1", "u2"})
	seen: list[str] = []
	page = 1
	while True:
		chunk = engine.rank(posts, profile, "following", page, 5, now=now)
		if not chunk:
			break
		seen.extend(post.id for post in chunk)
		page += 1
	assert page == 6
	assert sorted(seen) == sorted(post.id for post in posts)
	assert seen == [item.post.id for item in engine.score(posts, profile, "following", now=now)]


def test_bad_page_arguments_are_clamped(candidates, profile, now):
	clamped = engine.rank(candidates, profile, "following", -5, 0, now=now)
	assert clamped == engine.rank(candidates, profile, "following", 1, 1, now=now)
	assert [post.id for post in clamped] == ["a"]


def test_page_metadata_counts_filtered_set(candidates, now):
	profile = ViewerProfile(following_user_ids={"u1", "u2"}, blocked_user_ids={"u2"})
	page = engine.rank_page(candidates, profile, "latest", 1, 1, now=now)
	assert page.total == 1
	assert page.total_pages == 1
	assert page.has_next is False
	assert page.has_prev is False


def test_out_of_range_page_is_empty(candidates, profile, now):
	page = engine.rank_page(candidates, profile, "trending", 9, 10, now=now)
	assert page.items == []
	assert page.total == 2
	assert page.has_prev is True


def test_empty_candidates():
	assert engine.rank([], ViewerProfile.empty(), "trending", 1, 10) == []
