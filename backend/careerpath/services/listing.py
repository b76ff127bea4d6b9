from __future__ import annotations

from typing import Iterable, Sequence, TypeVar

from careerpath.core.offer_lifecycle import ALL_OFFER_STATUSES, INITIAL_OFFER_STATUS, normalize_offer_status
from careerpath.core.status_lifecycle import status_rank

ALL_FILTER = "all"
HIGH_RATING_THRESHOLD = 5


T = TypeVar("T")


def _matches(row, needle: str, include_position: bool) -> bool:
    haystack = [row.name or "", row.email or ""]
    if include_position:
        haystack.append(getattr(row, "process_position", None) or "")
    return any(needle in value.lower() for value in haystack)


def search_candidates(rows: Iterable[T], query: str | None, include_position: bool = False) -> list[T]:
    needle = (query or "").strip().lower()
    if not needle:
        return list(rows)
    return [row for row in rows if _matches(row, needle, include_position)]


def filter_by_offer_status(rows: Iterable[T], status: str | None) -> list[T]:
    wanted = normalize_offer_status(status)
    if wanted is None or wanted == ALL_FILTER:
        return list(rows)
    return [row for row in rows if (getattr(row, "offer_status", None) or INITIAL_OFFER_STATUS) == wanted]


def offer_status_counts(rows: Sequence) -> dict[str, int]:
    counts = {ALL_FILTER: len(rows)}
    counts.update({status: 0 for status in ALL_OFFER_STATUSES})
    for row in rows:
        status = getattr(row, "offer_status", None) or INITIAL_OFFER_STATUS
        if status in counts:
            counts[status] += 1
    return counts


def sort_by_status_order(rows: Iterable[T]) -> list[T]:
    # Pipeline order first; newest first inside a stage.
    newest_first = sorted(rows, key=lambda row: row.created_at, reverse=True)
    return sorted(newest_first, key=lambda row: status_rank(row.status))


def sort_by_rating(rows: Iterable[T]) -> list[T]:
    items = list(rows)
    rated = [row for row in items if getattr(row, "rating", None) is not None]
    unrated = [row for row in items if getattr(row, "rating", None) is None]
    return sorted(rated, key=lambda row: row.rating, reverse=True) + unrated


def is_high_rated(rating: int | None) -> bool:
    return rating is not None and rating > HIGH_RATING_THRESHOLD
