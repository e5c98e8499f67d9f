"""Operational endpoints: liveness and Prometheus scrape."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Response, status
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from twinen import __version__
from twinen.settings import settings

router = APIRouter(tags=["ops"])


@router.get("/health/live")
async def liveness() -> dict:
	return {"status": "ok", "service": settings.service_name, "version": __version__}


@router.get("/metrics")
async def metrics() -> Response:
	if not settings.obs_metrics_public:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not_found")
	return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


__all__ = ["router"]
