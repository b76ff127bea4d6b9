from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.errors import PermissionDeniedError, ValidationError
from careerpath.core.roles import Role, can_manage_candidates, can_manage_processes
from careerpath.db.transactions import commit_or_raise
from careerpath.models.interview_process import InterviewProcess
from careerpath.models.process_access import ProcessAccess
from careerpath.schemas.user import UserContext

logger = logging.getLogger("cpm.access")

# Roles that read every process regardless of ownership or grants.
_READ_ALL_ROLES = {Role.DIRECTOR_OF_ENGINEERING}


def reads_all_processes(user: UserContext) -> bool:
    return user.role in _READ_ALL_ROLES


def can_read_process(user: UserContext, process: InterviewProcess, granted_user_ids: Iterable[str] = ()) -> bool:
    if reads_all_processes(user):
        return True
    if process.created_by and process.created_by == user.user_id:
        return True
    return user.user_id in set(granted_user_ids)


def can_edit_process(user: UserContext, process: InterviewProcess, granted_user_ids: Iterable[str] = ()) -> bool:
    return can_manage_processes(user.role) and can_read_process(user, process, granted_user_ids)


def can_edit_candidates(user: UserContext, process: InterviewProcess, granted_user_ids: Iterable[str] = ()) -> bool:
    return can_manage_candidates(user.role) and can_read_process(user, process, granted_user_ids)


async def list_access(session: AsyncSession, process_id: int) -> list[str]:
    rows = (
        await session.execute(
            select(ProcessAccess.user_id)
            .where(ProcessAccess.process_id == process_id)
            .order_by(ProcessAccess.created_at.asc(), ProcessAccess.id.asc())
        )
    ).scalars().all()
    return list(rows)


async def granted_process_ids(session: AsyncSession, user_id: str) -> set[int]:
    rows = (
        await session.execute(select(ProcessAccess.process_id).where(ProcessAccess.user_id == user_id))
    ).scalars().all()
    return set(rows)


async def visible_process_ids(session: AsyncSession, user: UserContext) -> set[int] | None:
    """Ids the user may read, or None when every process is readable."""
    if reads_all_processes(user):
        return None
    owned = (
        await session.execute(select(InterviewProcess.id).where(InterviewProcess.created_by == user.user_id))
    ).scalars().all()
    return set(owned) | await granted_process_ids(session, user.user_id)


async def ensure_can_read(session: AsyncSession, user: UserContext, process: InterviewProcess) -> None:
    if reads_all_processes(user):
        return
    if not can_read_process(user, process, await list_access(session, process.id)):
        raise PermissionDeniedError("You do not have access to this interview process.")


async def ensure_can_read_candidate_process(
    session: AsyncSession, user: UserContext, process: InterviewProcess | None
) -> None:
    if process is None:
        # Orphaned candidates are only visible to roles that read everything.
        if not reads_all_processes(user):
            raise PermissionDeniedError("You do not have access to this interview process.")
        return
    await ensure_can_read(session, user, process)


async def ensure_can_edit_candidates(session: AsyncSession, user: UserContext, process: InterviewProcess) -> None:
    if not can_manage_candidates(user.role):
        raise PermissionDeniedError("Insufficient permissions")
    await ensure_can_read(session, user, process)


async def ensure_can_edit_process(session: AsyncSession, user: UserContext, process: InterviewProcess) -> None:
    if not can_manage_processes(user.role):
        raise PermissionDeniedError("Insufficient permissions")
    await ensure_can_read(session, user, process)


def _clean_user_id(raw: str | None) -> str:
    value = (raw or "").strip()
    if not value:
        raise ValidationError("User id is required.")
    return value


async def grant_access(session: AsyncSession, *, process_id: int, user_id: str) -> ProcessAccess:
    user_id = _clean_user_id(user_id)
    existing = (
        await session.execute(
            select(ProcessAccess)
            .where(ProcessAccess.process_id == process_id, ProcessAccess.user_id == user_id)
            .limit(1)
        )
    ).scalars().first()
    if existing:
        return existing
    grant = ProcessAccess(process_id=process_id, user_id=user_id)
    session.add(grant)
    await commit_or_raise(session, action="Access grant")
    return grant


async def revoke_access(session: AsyncSession, *, process_id: int, user_id: str) -> bool:
    user_id = _clean_user_id(user_id)
    result = await session.execute(
        delete(ProcessAccess).where(ProcessAccess.process_id == process_id, ProcessAccess.user_id == user_id)
    )
    await commit_or_raise(session, action="Access revoke")
    return bool(result.rowcount)


async def set_access(session: AsyncSession, *, process_id: int, user_ids: Iterable[str]) -> list[str]:
    """Make the grant set equal to user_ids, applying only the differences."""
    desired = {_clean_user_id(u) for u in user_ids}
    current = set(await list_access(session, process_id))
    for user_id in sorted(desired - current):
        await grant_access(session, process_id=process_id, user_id=user_id)
    for user_id in sorted(current - desired):
        await revoke_access(session, process_id=process_id, user_id=user_id)
    logger.info(
        "process_access_updated",
        extra={
            "process_id": process_id,
            "added": sorted(desired - current),
            "removed": sorted(current - desired),
        },
    )
    return await list_access(session, process_id)
