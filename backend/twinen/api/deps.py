"""Shared FastAPI dependencies for the routers."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Depends, Request, Response

from twinen.container import Container, get_container
from twinen.infra.rate_limit import RateLimitResult, client_id_from_headers


def container_dep() -> Container:
	return get_container()


def rate_limited(action: str) -> Callable[..., Awaitable[RateLimitResult]]:
	"""Return a dependency that spends one unit of ``action`` budget per request.

	Denied requests raise ``RateLimitExceeded``; allowed ones get the
	``X-RateLimit-*`` headers on the response.
	"""

	async def _dependency(
		request: Request,
		response: Response,
		container: Container = Depends(container_dep),
	) -> RateLimitResult:
		peer = request.client.host if request.client else None
		client_id = client_id_from_headers(request.headers, peer)
		result = await container.limiter.enforce(action, client_id)
		for key, value in result.headers().items():
			response.headers[key] = value
		return result

	return _dependency


__all__ = ["container_dep", "rate_limited"]
