"""Page/limit helpers shared by recommendations and likes listings."""

from __future__ import annotations

from typing import Sequence, TypeVar

from matchmaker.utils.errors import InvalidInputError

T = TypeVar("T")


def validate_pagination(page: int, page_size: int, max_page_size: int = 100) -> None:
    """Reject page < 1 and page sizes outside [1, max_page_size]."""

    if not isinstance(page, int) or page < 1:
        raise InvalidInputError(f"page must be an integer >= 1, got {page!r}")
    if not isinstance(page_size, int) or not 1 <= page_size <= max_page_size:
        raise InvalidInputError(
            f"page_size must be between 1 and {max_page_size}, got {page_size!r}"
        )


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return the [start, end) slice for a 1-based page."""

    start = (page - 1) * page_size
    return start, start + page_size


def paginate(items: Sequence[T], page: int, page_size: int) -> tuple[list[T], int]:
    """Slice an already ordered sequence and report the full size."""

    start, end = page_bounds(page, page_size)
    return list(items[start:end]), len(items)
