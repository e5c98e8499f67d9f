"""Global error handlers producing the ``{"success": false, ...}`` envelope."""

from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from twinen.api.request_id import get_request_id
from twinen.feed.exceptions import FeedError
from twinen.infra.rate_limit import RateLimitExceeded
from twinen.obs import logging as obs_logging

log = obs_logging.get_logger(__name__)

_RATE_LIMIT_MESSAGES = {
	"post_interaction": "Too many interactions. Please try again later.",
	"block_user": "Too many block attempts. Please try again later.",
	"mute_user": "Too many mute attempts. Please try again later.",
	"follow_action": "Too many follow actions. Please try again later.",
	"create_comment": "Too many comments. Please try again later.",
	"create_post": "Too many posts. Please try again later.",
	"update_post": "Too many post updates. Please try again later.",
}


def _envelope(request: Request, error: str, **extra) -> dict:
	payload = {"success": False, "error": error, "request_id": get_request_id(request)}
	payload.update(extra)
	return payload


def install_error_handlers(app: FastAPI) -> None:
	@app.exception_handler(StarletteHTTPException)
	async def http_exc_handler(request: Request, exc: StarletteHTTPException):  # type: ignore[override]
		return JSONResponse(
			status_code=exc.status_code,
			content=_envelope(request, str(exc.detail)),
			headers=getattr(exc, "headers", None),
		)

	@app.exception_handler(RequestValidationError)
	async def validation_exc_handler(request: Request, exc: RequestValidationError):  # type: ignore[override]
		errors = exc.errors()
		message = errors[0].get("msg", "validation_error") if errors else "validation_error"
		return JSONResponse(
			status_code=422,
			content=_envelope(request, message, errors=jsonable_errors(errors)),
		)

	@app.exception_handler(FeedError)
	async def feed_exc_handler(request: Request, exc: FeedError):  # type: ignore[override]
		return JSONResponse(status_code=exc.status_code, content=_envelope(request, exc.reason))

	@app.exception_handler(RateLimitExceeded)
	async def rate_limit_handler(request: Request, exc: RateLimitExceeded):  # type: ignore[override]
		result = exc.result
		headers = result.headers()
		headers["Retry-After"] = str(result.retry_after())
		message = _RATE_LIMIT_MESSAGES.get(exc.action, "Too many requests. Please try again later.")
		log.info("rate_limit_rejected", extra={"action": exc.action})
		return JSONResponse(status_code=429, content=_envelope(request, message), headers=headers)


def jsonable_errors(errors) -> list[dict]:
	"""Strip non-serialisable context (e.g. exception objects) from pydantic errors."""
	cleaned: list[dict] = []
	for error in errors:
		cleaned.append({"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")})
	return cleaned
