from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.api import deps
from careerpath.core.auth import require_permission
from careerpath.core.roles import can_manage_candidates
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.candidate import CandidateOut, CandidateStatusIn
from careerpath.schemas.user import UserContext
from careerpath.services.access import (
    ensure_can_edit_candidates,
    ensure_can_read_candidate_process,
    visible_process_ids,
)
from careerpath.services.candidates import get_candidate, get_candidate_row, list_all_candidates, update_candidate_status
from careerpath.services.listing import search_candidates, sort_by_rating, sort_by_status_order
from careerpath.services.notifications import HrNotifier

router = APIRouter(prefix="/cpm/candidates", tags=["candidates"])


@router.get("", response_model=list[CandidateOut])
async def list_all_candidates_route(
    q: str | None = Query(default=None),
    sort: Literal["recent", "status", "rating"] = Query(default="recent"),
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    rows = await list_all_candidates(session, await visible_process_ids(session, user))
    rows = search_candidates(rows, q, include_position=True)
    if sort == "status":
        return sort_by_status_order(rows)
    if sort == "rating":
        return sort_by_rating(rows)
    return rows


@router.get("/{candidate_id}", response_model=CandidateOut)
async def get_candidate_route(
    candidate_id: int,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    candidate = await get_candidate_row(session, candidate_id)
    if not candidate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    process = await session.get(InterviewProcess, candidate.process_id)
    await ensure_can_read_candidate_process(session, user, process)
    return await get_candidate(session, candidate.id)


@router.post("/{candidate_id}/status", response_model=CandidateOut)
async def update_candidate_status_route(
    candidate_id: int,
    payload: CandidateStatusIn,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_candidates)),
    notifier: HrNotifier = Depends(deps.get_notifier),
):
    candidate = await get_candidate_row(session, candidate_id)
    if not candidate:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Candidate not found")
    process = await session.get(InterviewProcess, candidate.process_id)
    if process is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview process not found")
    await ensure_can_edit_candidates(session, user, process)
    await update_candidate_status(
        session,
        candidate_id=candidate.id,
        new_status=payload.status,
        description=payload.description,
        decision=payload.decision,
        github_task_url=payload.github_task_url,
        updated_by=user.display_name,
        process=process,
        notifier=notifier,
    )
    return await get_candidate(session, candidate.id)
