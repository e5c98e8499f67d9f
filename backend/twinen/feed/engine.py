"""Feed ranking engine.

Filters a candidate batch for one viewer, scores it with the strategy for the
requested mode, orders it, and cuts one page. The engine keeps no state and
performs no I/O, so one instance can serve concurrent callers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from twinen.feed import pagination
from twinen.feed.models import FeedPage, Post, RankedPost, RankingMode, ViewerProfile
from twinen.feed.scoring import strategy_for


def _order_key(item: RankedPost) -> tuple[float, float, str]:
	# score desc, then newest first, then id asc for a stable total order
	return (-item.score, -item.post.created_at.timestamp(), item.post.id)


class FeedRankingEngine:
	"""Ranks candidate posts into pages."""

	def eligible(
		self,
		candidates: Iterable[Post],
		profile: ViewerProfile,
		mode: RankingMode,
	) -> list[Post]:
		"""Drop blocked authors, and non-followed authors in following mode.

		Muted authors stay eligible; muting only affects notification surfaces.
		"""
		blocked = profile.blocked_user_ids
		posts = [post for post in candidates if post.author_id not in blocked]
		if mode is RankingMode.FOLLOWING:
			following = profile.following_user_ids
			posts = [post for post in posts if post.author_id in following]
		return posts

	def score(
		self,
		candidates: Iterable[Post],
		profile: Optional[ViewerProfile],
		mode: RankingMode | str | None,
		*,
		now: Optional[datetime] = None,
	) -> list[RankedPost]:
		"""Return every eligible candidate with its score, best first."""
		resolved_mode = RankingMode.parse(mode)
		viewer = profile or ViewerProfile.empty()
		current = now or datetime.now(timezone.utc)
		if current.tzinfo is None:
			current = current.replace(tzinfo=timezone.utc)
		strategy = strategy_for(resolved_mode)
		ranked = [
			RankedPost(post=post, score=strategy(post, viewer, current))
			for post in self.eligible(candidates, viewer, resolved_mode)
		]
		ranked.sort(key=_order_key)
		return ranked

	def rank_page(
		self,
		candidates: Iterable[Post],
		profile: Optional[ViewerProfile],
		mode: RankingMode | str | None,
		page: int = 1,
		page_size: int = 10,
		*,
		now: Optional[datetime] = None,
	) -> FeedPage:
		resolved_mode = RankingMode.parse(mode)
		page_num = pagination.clamp_page(page)
		size = pagination.clamp_page_size(page_size)
		ranked = self.score(candidates, profile, resolved_mode, now=now)
		window = pagination.slice_page(ranked, page_num, size)
		total_pages, has_next, has_prev = pagination.page_meta(len(ranked), page_num, size)
		return FeedPage(
			items=[item.post for item in window],
			page=page_num,
			page_size=size,
			total=len(ranked),
			total_pages=total_pages,
			has_next=has_next,
			has_prev=has_prev,
			mode=resolved_mode,
		)

	def rank(
		self,
		candidates: Iterable[Post],
		profile: Optional[ViewerProfile],
		mode: RankingMode | str | None,
		page: int = 1,
		page_size: int = 10,
		*,
		now: Optional[datetime] = None,
	) -> list[Post]:
		return self.rank_page(candidates, profile, mode, page, page_size, now=now).items


__all__ = ["FeedRankingEngine"]
