"""Central registry for Prometheus metrics used across the backend."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"twinen_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"twinen_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

FEED_RANK_CANDIDATES = Counter(
	"twinen_feed_rank_candidates_total",
	"Candidates considered by the ranking engine",
	["mode"],
)

FEED_RANK_DURATION = Histogram(
	"twinen_feed_rank_duration_ms",
	"Feed rank duration",
	["mode"],
	buckets=[1, 5, 10, 20, 40, 80, 160, 320],
)

FEED_PAGE_SIZE = Histogram(
	"twinen_feed_page_items",
	"Posts returned per feed page",
	["mode"],
	buckets=[0, 1, 5, 10, 20, 50, 100],
)

RATE_LIMIT_DECISIONS = Counter(
	"twinen_rate_limit_decisions_total",
	"Rate limiter decisions",
	["action", "outcome"],
)

POST_INTERACTIONS = Counter(
	"twinen_post_interactions_total",
	"Post interactions applied",
	["type"],
)

POST_LIFECYCLE = Counter(
	"twinen_post_lifecycle_total",
	"Post lifecycle changes by action",
	["action"],
)

SOCIAL_GRAPH_CHANGES = Counter(
	"twinen_social_graph_changes_total",
	"Follow, block, and mute changes",
	["action"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def observe_feed_rank(mode: str, candidates: int, returned: int, elapsed_ms: float) -> None:
	FEED_RANK_CANDIDATES.labels(mode=mode).inc(candidates)
	FEED_RANK_DURATION.labels(mode=mode).observe(elapsed_ms)
	FEED_PAGE_SIZE.labels(mode=mode).observe(returned)


def inc_rate_limit(action: str, allowed: bool) -> None:
	RATE_LIMIT_DECISIONS.labels(action=action, outcome="allowed" if allowed else "denied").inc()


def inc_interaction(kind: str) -> None:
	POST_INTERACTIONS.labels(type=kind).inc()


def inc_social(action: str) -> None:
	SOCIAL_GRAPH_CHANGES.labels(action=action).inc()


def inc_post_lifecycle(action: str) -> None:
	POST_LIFECYCLE.labels(action=action).inc()
