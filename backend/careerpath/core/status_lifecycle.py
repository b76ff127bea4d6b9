from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


# Canonical candidate status identifiers, in pipeline order.
INITIAL = "initial"
HR_THOUGHTS = "hr_thoughts"
TECHNICAL_FIRST = "technical_first"
TECHNICAL_SECOND = "technical_second"
FINAL_DECISION = "final_decision"


ALL_STATUSES: tuple[str, ...] = (
    INITIAL,
    HR_THOUGHTS,
    TECHNICAL_FIRST,
    TECHNICAL_SECOND,
    FINAL_DECISION,
)

START_STATUS = INITIAL
TERMINAL_STATUS = FINAL_DECISION

STATUS_LABELS: dict[str, str] = {
    INITIAL: "Initial",
    HR_THOUGHTS: "HR Thoughts",
    TECHNICAL_FIRST: "Technical Round 1",
    TECHNICAL_SECOND: "Technical Round 2",
    FINAL_DECISION: "Final Decision",
}

STATUS_ORDER: dict[str, int] = {name: index for index, name in enumerate(ALL_STATUSES)}


# Values written by the first schema revision, before "hr_started" was split.
LEGACY_STATUS_MAP: dict[str, str] = {
    "hr_started": INITIAL,
}


PASS = "pass"
FAIL = "fail"
DECISIONS: frozenset[str] = frozenset({PASS, FAIL})


def normalize_status_name(raw: str | None) -> str | None:
    if raw is None:
        return None
    normalized = raw.strip().lower().replace(" ", "_")
    if not normalized:
        return None
    return LEGACY_STATUS_MAP.get(normalized, normalized)


def is_known_status(status: str | None) -> bool:
    return normalize_status_name(status) in STATUS_ORDER


def normalize_decision(raw: str | None) -> str | None:
    if raw is None:
        return None
    normalized = raw.strip().lower()
    return normalized or None


def is_known_decision(decision: str | None) -> bool:
    normalized = normalize_decision(decision)
    return normalized is None or normalized in DECISIONS


def status_rank(status: str | None) -> int:
    # Unknown statuses sort after the pipeline.
    normalized = normalize_status_name(status)
    return STATUS_ORDER.get(normalized or "", len(ALL_STATUSES))


def current_status(history: Iterable[str], default: str = START_STATUS) -> str:
    """Status implied by a chronological history: the last entry, or the start state."""
    latest = default
    for item in history:
        latest = normalize_status_name(item) or latest
    return latest


@dataclass(frozen=True)
class DecisionOutcome:
    final_decision: str | None
    sets_final_decision: bool
    opens_offer: bool
    notify_hr: bool


def evaluate_decision(
    *,
    new_status: str,
    decision: str | None,
    existing_final_decision: str | None,
) -> DecisionOutcome:
    """
    Derives the candidate-level effects of a status update.

    A fail at any status, or a pass at the final stage, settles the final
    decision. The first settled value is kept; later decisions only live on
    their own status update rows.
    """
    normalized = normalize_decision(decision)
    unchanged = DecisionOutcome(
        final_decision=existing_final_decision,
        sets_final_decision=False,
        opens_offer=False,
        notify_hr=False,
    )
    if existing_final_decision is not None:
        return unchanged
    if normalized == FAIL:
        return DecisionOutcome(final_decision=FAIL, sets_final_decision=True, opens_offer=False, notify_hr=False)
    if normalized == PASS and normalize_status_name(new_status) == TERMINAL_STATUS:
        return DecisionOutcome(final_decision=PASS, sets_final_decision=True, opens_offer=True, notify_hr=True)
    return unchanged
