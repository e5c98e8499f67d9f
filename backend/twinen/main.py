"""FastAPI application entrypoint."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from twinen import __version__
from twinen.api import ops, posts, users
from twinen.api.errors import install_error_handlers
from twinen.api.middleware_request_id import RequestIdMiddleware
from twinen.container import get_container
from twinen.obs import init as obs_init
from twinen.obs import logging as obs_logging
from twinen.settings import settings

log = obs_logging.get_logger(__name__)


async def run_rate_limit_cleanup(interval_seconds: float) -> None:
	"""Periodically drop expired rate limit counters."""
	while True:
		await asyncio.sleep(interval_seconds)
		try:
			purged = await get_container().limiter.cleanup()
		except Exception:
			log.exception("rate_limit_cleanup_failed")
			continue
		if purged:
			log.debug("rate_limit_cleanup", extra={"purged": purged})


@asynccontextmanager
async def lifespan(app: FastAPI):
	cleanup_task = asyncio.create_task(
		run_rate_limit_cleanup(settings.rate_limit_cleanup_seconds),
		name="rate-limit-cleanup",
	)
	log.info("startup", extra={"rate_limit_backend": settings.rate_limit_backend})
	try:
		yield
	finally:
		cleanup_task.cancel()
		await asyncio.gather(cleanup_task, return_exceptions=True)


app = FastAPI(title="Twinen Feed API", version=__version__, lifespan=lifespan)
install_error_handlers(app)

allow_origins = list(settings.cors_allow_origins or ())
if not allow_origins:
	allow_origins = ["http://localhost:3000"] if settings.is_dev() else []

app.add_middleware(
	CORSMiddleware,
	allow_origins=allow_origins,
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)
obs_init(app)

# Outermost, so the observability middleware already sees the request id
app.add_middleware(RequestIdMiddleware)

app.include_router(posts.router)
app.include_router(users.router)
app.include_router(ops.router)
