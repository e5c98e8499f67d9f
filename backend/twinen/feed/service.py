"""Feed orchestration: profile lookup, candidate fetch, ranking, telemetry."""

from __future__ import annotations

from datetime import datetime, timezone
from time import perf_counter
from typing import Literal, Optional

from twinen.feed.candidates import DEFAULT_CANDIDATE_LIMIT, CandidateSource, TimeRange
from twinen.feed.engine import FeedRankingEngine
from twinen.feed.models import FeedPage, RankingMode
from twinen.feed.profiles import ViewerProfileProvider
from twinen.obs import logging as obs_logging
from twinen.obs import metrics as obs_metrics

log = obs_logging.get_logger(__name__)

FeedType = Literal["all", "following", "trending", "ai_curated"]

_FEED_TYPE_MODES: dict[str, RankingMode] = {
	"all": RankingMode.LATEST,
	"following": RankingMode.FOLLOWING,
	"trending": RankingMode.TRENDING,
	"ai_curated": RankingMode.AI_CURATED,
}


def mode_for_feed_type(feed_type: str) -> RankingMode:
	"""Map the public feed type onto a ranking mode ("all" means latest)."""
	return _FEED_TYPE_MODES.get(feed_type, RankingMode.parse(feed_type))


class FeedService:
	"""Builds one ranked feed page for a viewer."""

	def __init__(
		self,
		posts: CandidateSource,
		profiles: ViewerProfileProvider,
		*,
		engine: FeedRankingEngine | None = None,
		candidate_limit: int = DEFAULT_CANDIDATE_LIMIT,
	) -> None:
		self.posts = posts
		self.profiles = profiles
		self.engine = engine or FeedRankingEngine()
		self.candidate_limit = candidate_limit

	async def get_feed(
		self,
		user_id: str,
		*,
		feed_type: FeedType = "all",
		time_range: TimeRange | str = TimeRange.ALL,
		page: int = 1,
		limit: int = 10,
		now: Optional[datetime] = None,
	) -> FeedPage:
		mode = mode_for_feed_type(feed_type)
		window = TimeRange(time_range)
		current = now or datetime.now(timezone.utc)
		profile = await self.profiles.get_profile(user_id)
		author_ids = profile.following_user_ids if mode is RankingMode.FOLLOWING else None
		candidates = await self.posts.fetch_candidates(
			time_range=window,
			now=current,
			author_ids=author_ids,
			limit=self.candidate_limit,
		)

		start = perf_counter()
		result = self.engine.rank_page(candidates, profile, mode, page, limit, now=current)
		elapsed_ms = (perf_counter() - start) * 1000.0

		obs_metrics.observe_feed_rank(mode.value, len(candidates), len(result.items), elapsed_ms)
		log.info(
			"feed_ranked",
			extra={
				"mode": mode.value,
				"time_range": window.value,
				"candidates": len(candidates),
				"eligible": result.total,
				"page": result.page,
				"returned": len(result.items),
				"rank_ms": round(elapsed_ms, 3),
			},
		)
		return result


__all__ = ["FeedService", "FeedType", "mode_for_feed_type"]
