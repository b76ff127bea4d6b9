from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.api import deps
from careerpath.core.auth import require_permission
from careerpath.core.roles import is_hr_office
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.offer import OfferCandidateOut, OfferHistoryOut, OfferStatusIn
from careerpath.schemas.user import UserContext
from careerpath.services.access import ensure_can_read_candidate_process, visible_process_ids
from careerpath.services.candidates import get_candidate_row
from careerpath.services.listing import filter_by_offer_status, offer_status_counts, search_candidates
from careerpath.services.offers import (
    list_candidates_for_offer,
    list_offer_history,
    offer_candidate_out,
    update_offer_status,
)

router = APIRouter(prefix="/cpm/offers", tags=["offers"])


@router.get("/ready", response_model=list[OfferCandidateOut])
async def ready_for_offer(
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    return await list_candidates_for_offer(session, await visible_process_ids(session, user))


@router.get("/history", response_model=OfferHistoryOut)
async def offer_history(
    q: str | None = Query(default=None),
    status_filter: str = Query(default="all", alias="status"),
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    rows = await list_offer_history(session, await visible_process_ids(session, user))
    rows = search_candidates(rows, q, include_position=True)
    # Counts describe the searched set so the filter tabs stay stable.
    return OfferHistoryOut(counts=offer_status_counts(rows), items=filter_by_offer_status(rows, status_filter))


@router.post("/{candidate_id}", response_model=OfferCandidateOut)
async def update_offer_route(
    candidate_id: int,
    payload: OfferStatusIn,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(is_hr_office)),
):
    candidate = await get_candidate_row(session, candidate_id)
    if not candidate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    process = await session.get(InterviewProcess, candidate.process_id)
    await ensure_can_read_candidate_process(session, user, process)
    candidate = await update_offer_status(
        session,
        candidate_id=candidate.id,
        new_offer_status=payload.offer_status,
        description=payload.description,
        start_date=payload.start_date,
        rejection_reason=payload.rejection_reason,
    )
    return offer_candidate_out(candidate, process)
