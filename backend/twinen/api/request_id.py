"""Request ID helpers shared by middleware and error handlers."""

from __future__ import annotations

from fastapi import Request

REQUEST_ID_ATTR = "request_id"


def get_request_id(request: Request, default: str = "unknown") -> str:
	rid = getattr(request.state, REQUEST_ID_ATTR, None)
	return rid or request.headers.get("X-Request-Id") or default
