from __future__ import annotations

from typing import Iterable


PENDING = "pending"
SENT = "sent"
ACCEPTED = "accepted"
REJECTED = "rejected"


ALL_OFFER_STATUSES: tuple[str, ...] = (PENDING, SENT, ACCEPTED, REJECTED)

INITIAL_OFFER_STATUS = PENDING
TERMINAL_OFFER_STATUSES: frozenset[str] = frozenset({ACCEPTED, REJECTED})
OPEN_OFFER_STATUSES: frozenset[str] = frozenset({PENDING, SENT})

OFFER_STATUS_LABELS: dict[str, str] = {
    PENDING: "Pending",
    SENT: "Sent",
    ACCEPTED: "Accepted",
    REJECTED: "Rejected",
}


OFFER_GRAPH: dict[str, frozenset[str]] = {
    PENDING: frozenset({SENT}),
    SENT: frozenset({ACCEPTED, REJECTED}),
    ACCEPTED: frozenset(),
    REJECTED: frozenset(),
}


def normalize_offer_status(raw: str | None) -> str | None:
    if raw is None:
        return None
    normalized = raw.strip().lower()
    return normalized or None


def is_known_offer_status(status: str | None) -> bool:
    return normalize_offer_status(status) in OFFER_GRAPH


def is_terminal_offer_status(status: str | None) -> bool:
    return normalize_offer_status(status) in TERMINAL_OFFER_STATUSES


def allowed_next_offer_statuses(status: str | None) -> frozenset[str]:
    normalized = normalize_offer_status(status)
    if normalized is None:
        return frozenset()
    return OFFER_GRAPH.get(normalized, frozenset())


def can_transition_offer(from_status: str | None, to_status: str | None) -> bool:
    to_normalized = normalize_offer_status(to_status)
    from_normalized = normalize_offer_status(from_status)

    if to_normalized is None or to_normalized not in OFFER_GRAPH:
        return False

    # An offer only comes into existence as pending.
    if from_normalized is None:
        return to_normalized == INITIAL_OFFER_STATUS

    if from_normalized not in OFFER_GRAPH:
        return False

    return to_normalized in OFFER_GRAPH[from_normalized]


def offer_path_is_valid(path: Iterable[str]) -> bool:
    items = [normalize_offer_status(item) for item in path]
    if len(items) < 2:
        return False
    for index in range(len(items) - 1):
        if not can_transition_offer(items[index], items[index + 1]):
            return False
    return True
