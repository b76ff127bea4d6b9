from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.datetime_utils import utcnow_naive
from careerpath.core.errors import NotFoundError, ValidationError
from careerpath.core.offer_lifecycle import INITIAL_OFFER_STATUS
from careerpath.core.status_lifecycle import (
    START_STATUS,
    evaluate_decision,
    is_known_decision,
    is_known_status,
    normalize_decision,
    normalize_status_name,
)
from careerpath.db.transactions import commit_or_raise
from careerpath.models.candidate import Candidate
from careerpath.models.interview_process import InterviewProcess
from careerpath.models.status_update import StatusUpdate
from careerpath.schemas.candidate import CandidateOut
from careerpath.services.joins import candidate_out, fetch_process_map, fetch_status_history, join_candidates
from careerpath.services.notifications import CandidatePassedFacts, HrNotifier, dispatch_candidate_passed

logger = logging.getLogger("cpm.candidates")

MIN_RATING = 1
MAX_RATING = 10


@dataclass(frozen=True)
class StatusUpdateResult:
    candidate_id: int
    status_update_id: int
    status: str
    final_decision: str | None
    final_decision_changed: bool
    offer_status: str | None
    notification: asyncio.Task | None = None


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_rating(rating: int | None) -> int | None:
    if rating is None:
        return None
    if not MIN_RATING <= int(rating) <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
    return int(rating)


async def get_candidate_row(session: AsyncSession, candidate_id: int) -> Candidate | None:
    return await session.get(Candidate, candidate_id)


async def list_candidates(session: AsyncSession, process_id: int) -> list[CandidateOut]:
    candidates = (
        await session.execute(
            select(Candidate)
            .where(Candidate.process_id == process_id)
            .order_by(Candidate.created_at.desc(), Candidate.id.desc())
        )
    ).scalars().all()
    updates = await fetch_status_history(session, [c.id for c in candidates])
    return join_candidates(candidates, updates)


async def list_all_candidates(session: AsyncSession, process_ids: set[int] | None = None) -> list[CandidateOut]:
    query = select(Candidate).order_by(Candidate.created_at.desc(), Candidate.id.desc())
    if process_ids is not None:
        if not process_ids:
            return []
        query = query.where(Candidate.process_id.in_(process_ids))
    candidates = (await session.execute(query)).scalars().all()
    process_map = await fetch_process_map(session, {c.process_id for c in candidates})
    updates = await fetch_status_history(session, [c.id for c in candidates])
    return join_candidates(candidates, updates, process_map)


async def get_candidate(session: AsyncSession, candidate_id: int) -> CandidateOut | None:
    candidate = await get_candidate_row(session, candidate_id)
    if not candidate:
        return None
    history = await fetch_status_history(session, [candidate.id])
    process = await session.get(InterviewProcess, candidate.process_id)
    return candidate_out(candidate, history, process, include_process=True)


async def add_candidate(
    session: AsyncSession,
    *,
    process_id: int,
    name: str | None,
    email: str | None,
    linkedin_url: str | None = None,
    desired_price_range: str | None = None,
    rating: int | None = None,
    status_description: str | None = None,
    updated_by: str | None = None,
) -> Candidate:
    name = _clean(name)
    email = _clean(email)
    if not name or not email:
        raise ValidationError("Candidate name and email are required.")
    rating = _validate_rating(rating)
    if not await session.get(InterviewProcess, process_id):
        raise NotFoundError("Interview process not found")

    candidate = Candidate(
        process_id=process_id,
        name=name,
        email=email,
        linkedin_url=_clean(linkedin_url),
        desired_price_range=_clean(desired_price_range),
        rating=rating,
        status=START_STATUS,
    )
    session.add(candidate)
    await session.flush()

    description = _clean(status_description)
    if description:
        session.add(
            StatusUpdate(
                candidate_id=candidate.id,
                status=START_STATUS,
                description=description,
                updated_by=_clean(updated_by),
            )
        )
    await commit_or_raise(session, action="Candidate")
    logger.info("candidate_added", extra={"candidate_id": candidate.id, "process_id": process_id})
    return candidate


async def update_candidate_status(
    session: AsyncSession,
    *,
    candidate_id: int,
    new_status: str,
    description: str | None,
    decision: str | None = None,
    github_task_url: str | None = None,
    updated_by: str | None = None,
    process: InterviewProcess | None = None,
    notifier: HrNotifier | None = None,
) -> StatusUpdateResult:
    """
    Appends a status update and applies its candidate-level effects.

    The status itself is not order-checked: history doubles as the comment log,
    so any known status may follow any other. Final decisions are first-write-wins.
    A pass at the final stage opens the offer at pending and, once committed,
    dispatches the HR notification as a background task.
    """
    description = _clean(description)
    if not description:
        raise ValidationError("Please add a description for this status update.")
    if not is_known_status(new_status):
        raise ValidationError(f"Unknown candidate status '{new_status}'.")
    if not is_known_decision(decision):
        raise ValidationError(f"Unknown decision '{decision}'.")
    status = normalize_status_name(new_status)
    normalized_decision = normalize_decision(decision)

    candidate = await get_candidate_row(session, candidate_id)
    if not candidate:
        raise NotFoundError("Candidate not found")

    outcome = evaluate_decision(
        new_status=status,
        decision=normalized_decision,
        existing_final_decision=candidate.final_decision,
    )

    now = utcnow_naive()
    update = StatusUpdate(
        candidate_id=candidate.id,
        status=status,
        description=description,
        decision=normalized_decision,
        updated_by=_clean(updated_by),
        created_at=now,
    )
    session.add(update)

    candidate.status = status
    candidate.updated_at = now
    if outcome.sets_final_decision:
        candidate.final_decision = outcome.final_decision
        candidate.final_decision_date = now
    if outcome.opens_offer:
        candidate.offer_status = INITIAL_OFFER_STATUS
    task_url = _clean(github_task_url)
    if task_url:
        candidate.github_task_url = task_url

    await commit_or_raise(session, action="Status update")
    logger.info(
        "candidate_status_updated",
        extra={
            "candidate_id": candidate.id,
            "status": status,
            "decision": normalized_decision,
            "final_decision": candidate.final_decision,
        },
    )

    notification = None
    if outcome.notify_hr and notifier is None:
        logger.warning(
            "hr_notification_skipped",
            extra={"reason": "no_notifier", "candidate_id": candidate.id, "process_id": candidate.process_id},
        )
    elif outcome.notify_hr:
        if process is None or process.id != candidate.process_id:
            process = await session.get(InterviewProcess, candidate.process_id)
        facts = CandidatePassedFacts(
            candidate_id=candidate.id,
            candidate_name=candidate.name,
            candidate_email=candidate.email,
            process_id=candidate.process_id,
            process_position=process.position if process else "Unknown",
            process_role=process.role if process else "Unknown",
        )
        notification = dispatch_candidate_passed(notifier, facts)

    return StatusUpdateResult(
        candidate_id=candidate.id,
        status_update_id=update.id,
        status=candidate.status,
        final_decision=candidate.final_decision,
        final_decision_changed=outcome.sets_final_decision,
        offer_status=candidate.offer_status,
        notification=notification,
    )
