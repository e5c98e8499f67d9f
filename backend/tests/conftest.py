import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Ensure backend package is importable when tests run from repo root
BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
	sys.path.insert(0, str(BACKEND_ROOT))

from twinen.container import Container, set_container
from twinen.feed.candidates import InMemoryPostStore
from twinen.feed.profiles import InMemorySocialGraph
from twinen.infra.kv import InMemoryKeyValueStore
from twinen.infra.rate_limit import RateLimiter
from twinen.main import app


NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
	return NOW


@pytest.fixture
def hours_ago(now):
	def _at(hours: float) -> datetime:
		return now - timedelta(hours=hours)

	return _at


@pytest_asyncio.fixture(autouse=True)
async def fake_redis():
	from twinen.infra.redis import redis_client, set_redis_client

	original = redis_client.client
	client = FakeRedis(decode_responses=True)
	set_redis_client(client)
	try:
		yield client
	finally:
		set_redis_client(original)
		await client.flushall()


@pytest.fixture
def container():
	"""Fresh in-memory stores for every test."""
	built = Container(
		posts=InMemoryPostStore(),
		graph=InMemorySocialGraph(),
		limiter=RateLimiter(InMemoryKeyValueStore()),
	)
	set_container(built)
	try:
		yield built
	finally:
		set_container(None)


@pytest_asyncio.fixture
async def api_client(container):
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client
