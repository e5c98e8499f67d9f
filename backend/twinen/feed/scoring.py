"""Scoring strategies for the ranked feed.

Every strategy has the signature ``(post, profile, now) -> float`` so the
engine can swap them per ranking mode. Scores are only comparable within a
single mode.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from twinen.feed.models import Post, RankingMode, ViewerProfile

LIKE_WEIGHT = 1
COMMENT_WEIGHT = 3
SHARE_WEIGHT = 5
PIN_BONUS = 10
AI_GENERATED_FACTOR = 0.8
RECENCY_WEIGHT = 0.5
TIME_DECAY_PER_HOUR = 0.1
INTEREST_MATCH_BONUS = 2

ScoringStrategy = Callable[[Post, ViewerProfile, datetime], float]


def age_in_hours(post: Post, now: datetime) -> float:
	"""Hours since the post was created; future-dated posts count as brand new."""
	return max(0.0, (now - post.created_at).total_seconds() / 3600.0)


def weighted_engagement(post: Post) -> float:
	return float(
		post.likes_count * LIKE_WEIGHT
		+ post.comments_count * COMMENT_WEIGHT
		+ post.shares_count * SHARE_WEIGHT
	)


def engagement_subtotal(post: Post) -> float:
	"""Weighted engagement with the pin bonus, discounted for AI-generated posts."""
	subtotal = weighted_engagement(post)
	if post.is_pinned:
		subtotal += PIN_BONUS
	if post.ai_generated:
		subtotal *= AI_GENERATED_FACTOR
	return subtotal


def recency_bonus(post: Post, now: datetime) -> float:
	# linear decay, nothing left after 10 hours
	freshness = max(0.0, 1.0 - age_in_hours(post, now) * TIME_DECAY_PER_HOUR)
	return freshness * RECENCY_WEIGHT


def engagement_score(post: Post, profile: ViewerProfile, now: datetime) -> float:
	return engagement_subtotal(post) + recency_bonus(post, now)


def latest_score(post: Post, profile: ViewerProfile, now: datetime) -> float:
	return post.created_at.timestamp()


def velocity_score(post: Post, profile: ViewerProfile, now: datetime) -> float:
	"""Unweighted engagement per hour of age."""
	total = float(post.likes_count + post.comments_count + post.shares_count)
	age = age_in_hours(post, now)
	if age <= 0:
		return total
	return total / age


def interest_score(post: Post, profile: ViewerProfile, now: datetime) -> float:
	matches = len(post.tags & profile.interests)
	return matches * INTEREST_MATCH_BONUS + weighted_engagement(post)


_STRATEGIES: dict[RankingMode, ScoringStrategy] = {
	RankingMode.FOLLOWING: engagement_score,
	RankingMode.LATEST: latest_score,
	RankingMode.TRENDING: velocity_score,
	RankingMode.AI_CURATED: interest_score,
}


def strategy_for(mode: RankingMode | str | None) -> ScoringStrategy:
	return _STRATEGIES[RankingMode.parse(mode)]


__all__ = [
	"ScoringStrategy",
	"age_in_hours",
	"engagement_score",
	"engagement_subtotal",
	"interest_score",
	"latest_score",
	"recency_bonus",
	"strategy_for",
	"velocity_score",
	"weighted_engagement",
]
