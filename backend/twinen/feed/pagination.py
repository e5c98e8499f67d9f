"""Offset pagination over an already ordered result."""

from __future__ import annotations

import math
from typing import Sequence, TypeVar

T = TypeVar("T")


def _clamp(value: object) -> int:
	try:
		number = int(value)  # type: ignore[call-overload]
	except (TypeError, ValueError):
		return 1
	return max(1, number)


def clamp_page(page: object) -> int:
	return _clamp(page)


def clamp_page_size(page_size: object) -> int:
	return _clamp(page_size)


def page_window(page: object, page_size: object) -> tuple[int, int]:
	page_num = clamp_page(page)
	size = clamp_page_size(page_size)
	start = (page_num - 1) * size
	return start, start + size


def slice_page(items: Sequence[T], page: object, page_size: object) -> list[T]:
	"""Return one page; pages past the end are empty rather than an error."""
	start, stop = page_window(page, page_size)
	if start >= len(items):
		return []
	return list(items[start:stop])


def page_meta(total: int, page: object, page_size: object) -> tuple[int, bool, bool]:
	"""Return ``(total_pages, has_next, has_prev)`` for a result of ``total`` items."""
	page_num = clamp_page(page)
	size = clamp_page_size(page_size)
	start, stop = page_window(page_num, size)
	total_pages = math.ceil(total / size) if total > 0 else 0
	return total_pages, stop < total, page_num > 1


__all__ = ["clamp_page", "clamp_page_size", "page_meta", "page_window", "slice_page"]
