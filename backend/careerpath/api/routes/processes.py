from __future__ import annotations

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.api import deps
from careerpath.core.auth import require_permission
from careerpath.core.roles import can_manage_candidates, can_manage_processes
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.candidate import CandidateCreate, CandidateOut
from careerpath.schemas.process import ProcessAccessIn, ProcessAccessOut, ProcessCreate, ProcessOut, ProcessUpdate
from careerpath.schemas.user import UserContext
from careerpath.services.access import (
    ensure_can_edit_candidates,
    ensure_can_edit_process,
    ensure_can_read,
    list_access,
    set_access,
)
from careerpath.services.candidates import add_candidate, get_candidate, list_candidates
from careerpath.services.processes import (
    count_candidates,
    create_process,
    list_visible_processes,
    update_process,
)

router = APIRouter(prefix="/cpm/processes", tags=["processes"])


def _process_out(process: InterviewProcess, candidate_count: int | None = None) -> ProcessOut:
    return ProcessOut.model_validate(process).model_copy(update={"candidate_count": candidate_count})


@router.get("", response_model=list[ProcessOut])
async def list_processes_route(
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    processes = await list_visible_processes(session, user)
    counts = await count_candidates(session, [p.id for p in processes])
    return [_process_out(p, counts.get(p.id, 0)) for p in processes]


@router.get("/candidate-counts", response_model=dict[int, int])
async def candidate_counts(
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    processes = await list_visible_processes(session, user)
    return await count_candidates(session, [p.id for p in processes])


@router.post("", response_model=ProcessOut, status_code=status.HTTP_201_CREATED)
async def create_process_route(
    payload: ProcessCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_processes)),
):
    process = await create_process(
        session,
        position=payload.position,
        role=payload.role,
        start_date=payload.start_date,
        end_date=payload.end_date,
        creator_id=user.user_id,
        access_user_ids=payload.access_user_ids,
    )
    return _process_out(process, 0)


@router.get("/{process_id}", response_model=ProcessOut)
async def get_process_route(
    process_id: int,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_read(session, user, process)
    counts = await count_candidates(session, [process.id])
    return _process_out(process, counts[process.id])


@router.patch("/{process_id}", response_model=ProcessOut)
async def update_process_route(
    process_id: int,
    payload: ProcessUpdate,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_processes)),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_edit_process(session, user, process)
    updates = payload.model_dump(exclude_unset=True)
    process = await update_process(
        session,
        process_id,
        position=updates.get("position", process.position),
        role=updates.get("role", process.role),
        start_date=updates.get("start_date", process.start_date),
        end_date=updates.get("end_date", process.end_date),
    )
    counts = await count_candidates(session, [process.id])
    return _process_out(process, counts[process.id])


@router.get("/{process_id}/access", response_model=ProcessAccessOut)
async def get_process_access(
    process_id: int,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_read(session, user, process)
    return ProcessAccessOut(process_id=process.id, user_ids=await list_access(session, process.id))


@router.put("/{process_id}/access", response_model=ProcessAccessOut)
async def put_process_access(
    process_id: int,
    payload: ProcessAccessIn,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_processes)),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_edit_process(session, user, process)
    user_ids = await set_access(session, process_id=process.id, user_ids=payload.user_ids)
    return ProcessAccessOut(process_id=process.id, user_ids=user_ids)


@router.get("/{process_id}/candidates", response_model=list[CandidateOut])
async def list_process_candidates(
    process_id: int,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(deps.get_user),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_read(session, user, process)
    return await list_candidates(session, process.id)


@router.post("/{process_id}/candidates", response_model=CandidateOut, status_code=status.HTTP_201_CREATED)
async def add_process_candidate(
    process_id: int,
    payload: CandidateCreate,
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_candidates)),
):
    process = await deps.load_process(session, process_id)
    await ensure_can_edit_candidates(session, user, process)
    candidate = await add_candidate(
        session,
        process_id=process.id,
        name=payload.name,
        email=payload.email,
        linkedin_url=payload.linkedin_url,
        desired_price_range=payload.desired_price_range,
        rating=payload.rating,
        status_description=payload.status_description,
        updated_by=user.display_name,
    )
    return await get_candidate(session, candidate.id)
