from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.config import settings
from careerpath.core.datetime_utils import utcnow_naive
from careerpath.core.errors import NotFoundError, TransitionError, ValidationError
from careerpath.core.offer_lifecycle import (
    ACCEPTED,
    INITIAL_OFFER_STATUS,
    OPEN_OFFER_STATUSES,
    REJECTED,
    can_transition_offer,
    is_known_offer_status,
    normalize_offer_status,
)
from careerpath.core.status_lifecycle import PASS
from careerpath.db.transactions import commit_or_raise
from careerpath.models.candidate import Candidate
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.offer import OfferCandidateOut
from careerpath.services.joins import UNKNOWN_PROCESS_LABEL, fetch_process_map

logger = logging.getLogger("cpm.offers")


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def offer_candidate_out(candidate: Candidate, process: InterviewProcess | None) -> OfferCandidateOut:
    return OfferCandidateOut(
        id=candidate.id,
        name=candidate.name,
        email=candidate.email,
        process_id=candidate.process_id,
        process_position=process.position if process else UNKNOWN_PROCESS_LABEL,
        process_role=process.role if process else UNKNOWN_PROCESS_LABEL,
        final_decision_date=candidate.final_decision_date,
        offer_status=candidate.offer_status or INITIAL_OFFER_STATUS,
        offer_description=candidate.offer_description,
        offer_start_date=candidate.offer_start_date,
        offer_rejection_reason=candidate.offer_rejection_reason,
        offer_decision_date=candidate.offer_decision_date,
    )


async def _offer_rows(
    session: AsyncSession,
    candidates: list[Candidate],
) -> list[OfferCandidateOut]:
    process_map = await fetch_process_map(session, {c.process_id for c in candidates})
    return [offer_candidate_out(c, process_map.get(c.process_id)) for c in candidates]


async def list_candidates_for_offer(
    session: AsyncSession, process_ids: set[int] | None = None
) -> list[OfferCandidateOut]:
    query = (
        select(Candidate)
        .where(Candidate.final_decision == PASS)
        .order_by(Candidate.final_decision_date.desc(), Candidate.id.desc())
    )
    if process_ids is not None:
        if not process_ids:
            return []
        query = query.where(Candidate.process_id.in_(process_ids))
    candidates = (await session.execute(query)).scalars().all()
    ready = [c for c in candidates if (c.offer_status or INITIAL_OFFER_STATUS) in OPEN_OFFER_STATUSES]
    return await _offer_rows(session, ready)


async def list_offer_history(
    session: AsyncSession, process_ids: set[int] | None = None
) -> list[OfferCandidateOut]:
    query = (
        select(Candidate)
        .where(Candidate.final_decision == PASS)
        .order_by(Candidate.final_decision_date.desc(), Candidate.id.desc())
    )
    if process_ids is not None:
        if not process_ids:
            return []
        query = query.where(Candidate.process_id.in_(process_ids))
    candidates = list((await session.execute(query)).scalars().all())
    return await _offer_rows(session, candidates)


async def update_offer_status(
    session: AsyncSession,
    *,
    candidate_id: int,
    new_offer_status: str,
    description: str | None = None,
    start_date: date | None = None,
    rejection_reason: str | None = None,
    enforce_transitions: bool | None = None,
) -> Candidate:
    """
    Moves a candidate's offer along pending -> sent -> accepted|rejected.

    With enforcement off the store accepts any known target status for any
    candidate and only records the fields that were supplied.
    """
    if enforce_transitions is None:
        enforce_transitions = settings.enforce_offer_transitions
    if not is_known_offer_status(new_offer_status):
        raise ValidationError(f"Unknown offer status '{new_offer_status}'.")
    target = normalize_offer_status(new_offer_status)

    candidate = await session.get(Candidate, candidate_id)
    if not candidate:
        raise NotFoundError("Candidate not found")

    description = _clean(description)
    rejection_reason = _clean(rejection_reason)

    if enforce_transitions:
        if candidate.final_decision != PASS:
            raise TransitionError("Offers can only be managed for candidates who passed.")
        current = candidate.offer_status or INITIAL_OFFER_STATUS
        if not can_transition_offer(current, target):
            raise TransitionError(f"Cannot move offer from '{current}' to '{target}'.")
        if target == ACCEPTED and (not description or start_date is None):
            raise ValidationError("Accepted offers need a description and a start date.")
        if target == REJECTED and not rejection_reason:
            raise ValidationError("Please add a rejection reason.")

    now = utcnow_naive()
    previous = candidate.offer_status
    candidate.offer_status = target
    if target == ACCEPTED:
        candidate.offer_description = description
        candidate.offer_start_date = start_date
        candidate.offer_decision_date = now
    elif target == REJECTED:
        candidate.offer_rejection_reason = rejection_reason
        candidate.offer_decision_date = now
    candidate.updated_at = now

    await commit_or_raise(session, action="Offer")
    logger.info(
        "offer_status_updated",
        extra={"candidate_id": candidate.id, "from_status": previous, "to_status": target},
    )
    return candidate
