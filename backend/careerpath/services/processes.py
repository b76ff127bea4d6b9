from __future__ import annotations

import logging
from datetime import date
from typing import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.errors import NotFoundError, ValidationError
from careerpath.db.transactions import commit_or_raise
from careerpath.models.candidate import Candidate
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.user import UserContext
from careerpath.services.access import grant_access, visible_process_ids

logger = logging.getLogger("cpm.processes")


def _require_text(value: str | None, field: str) -> str:
    cleaned = (value or "").strip()
    if not cleaned:
        raise ValidationError(f"{field} is required.")
    return cleaned


def _validate_fields(
    position: str | None,
    role: str | None,
    start_date: date | None,
    end_date: date | None,
) -> tuple[str, str, date, date]:
    position = _require_text(position, "Position")
    role = _require_text(role, "Role")
    if start_date is None:
        raise ValidationError("Start date is required.")
    if end_date is None:
        raise ValidationError("End date is required.")
    if end_date < start_date:
        raise ValidationError("End date must be after start date.")
    return position, role, start_date, end_date


async def list_processes(session: AsyncSession) -> list[InterviewProcess]:
    rows = (
        await session.execute(
            select(InterviewProcess).order_by(InterviewProcess.created_at.desc(), InterviewProcess.id.desc())
        )
    ).scalars().all()
    return list(rows)


async def list_visible_processes(session: AsyncSession, user: UserContext) -> list[InterviewProcess]:
    processes = await list_processes(session)
    visible = await visible_process_ids(session, user)
    if visible is None:
        return processes
    return [p for p in processes if p.id in visible]


async def get_process(session: AsyncSession, process_id: int) -> InterviewProcess | None:
    return await session.get(InterviewProcess, process_id)


async def create_process(
    session: AsyncSession,
    *,
    position: str | None,
    role: str | None,
    start_date: date | None,
    end_date: date | None,
    creator_id: str | None = None,
    access_user_ids: Iterable[str] = (),
) -> InterviewProcess:
    position, role, start_date, end_date = _validate_fields(position, role, start_date, end_date)
    process = InterviewProcess(
        position=position,
        role=role,
        start_date=start_date,
        end_date=end_date,
        created_by=(creator_id or "").strip() or None,
    )
    session.add(process)
    await commit_or_raise(session, action="Interview process")
    process_id = process.id
    logger.info("process_created", extra={"process_id": process_id, "created_by": process.created_by})

    for user_id in dict.fromkeys(access_user_ids):
        try:
            await grant_access(session, process_id=process_id, user_id=user_id)
        except Exception:
            logger.exception("process_access_grant_failed", extra={"process_id": process_id, "user_id": user_id})
    # A failed grant rolls back and expires the instance.
    await session.refresh(process)
    return process


async def update_process(
    session: AsyncSession,
    process_id: int,
    *,
    position: str | None,
    role: str | None,
    start_date: date | None,
    end_date: date | None,
) -> InterviewProcess:
    process = await get_process(session, process_id)
    if not process:
        raise NotFoundError("Interview process not found")
    position, role, start_date, end_date = _validate_fields(position, role, start_date, end_date)
    process.position = position
    process.role = role
    process.start_date = start_date
    process.end_date = end_date
    await commit_or_raise(session, action="Interview process")
    await session.refresh(process)
    return process


async def count_candidates(session: AsyncSession, process_ids: Iterable[int]) -> dict[int, int]:
    ids = list(dict.fromkeys(process_ids))
    counts = {pid: 0 for pid in ids}
    if not ids:
        return counts
    rows = (
        await session.execute(
            select(Candidate.process_id, func.count(Candidate.id))
            .where(Candidate.process_id.in_(ids))
            .group_by(Candidate.process_id)
        )
    ).all()
    for process_id, total in rows:
        counts[process_id] = int(total)
    return counts
