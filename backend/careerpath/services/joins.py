from __future__ import annotations

from collections import defaultdict
from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.models.candidate import Candidate
from careerpath.models.interview_process import InterviewProcess
from careerpath.models.status_update import StatusUpdate
from careerpath.schemas.candidate import CandidateOut, StatusUpdateOut

UNKNOWN_PROCESS_LABEL = "Unknown"


async def fetch_status_history(session: AsyncSession, candidate_ids: Iterable[int]) -> list[StatusUpdate]:
    ids = list(dict.fromkeys(candidate_ids))
    if not ids:
        return []
    return list(
        (
            await session.execute(
                select(StatusUpdate)
                .where(StatusUpdate.candidate_id.in_(ids))
                .order_by(StatusUpdate.created_at.asc(), StatusUpdate.id.asc())
            )
        ).scalars().all()
    )


async def fetch_process_map(
    session: AsyncSession, process_ids: Iterable[int] | None = None
) -> dict[int, InterviewProcess]:
    query = select(InterviewProcess)
    if process_ids is not None:
        ids = list(dict.fromkeys(process_ids))
        if not ids:
            return {}
        query = query.where(InterviewProcess.id.in_(ids))
    rows = (await session.execute(query)).scalars().all()
    return build_process_map(rows)


def build_process_map(processes: Iterable[InterviewProcess]) -> dict[int, InterviewProcess]:
    return {p.id: p for p in processes}


def group_history(updates: Iterable[StatusUpdate]) -> dict[int, list[StatusUpdate]]:
    # Input order is preserved inside each group, so chronological input stays chronological.
    grouped: dict[int, list[StatusUpdate]] = defaultdict(list)
    for update in updates:
        grouped[update.candidate_id].append(update)
    return dict(grouped)


def status_update_out(update: StatusUpdate) -> StatusUpdateOut:
    return StatusUpdateOut(
        id=update.id,
        status=update.status,
        description=update.description,
        decision=update.decision,
        updated_by=update.updated_by,
        timestamp=update.created_at,
    )


def candidate_out(
    candidate: Candidate,
    history: Sequence[StatusUpdate] = (),
    process: InterviewProcess | None = None,
    *,
    include_process: bool = False,
) -> CandidateOut:
    out = CandidateOut.model_validate(candidate)
    out.status_history = [status_update_out(u) for u in history]
    if include_process:
        out.process_position = process.position if process else UNKNOWN_PROCESS_LABEL
        out.process_role = process.role if process else UNKNOWN_PROCESS_LABEL
    return out


def join_candidates(
    candidates: Sequence[Candidate],
    updates: Iterable[StatusUpdate],
    process_map: dict[int, InterviewProcess] | None = None,
) -> list[CandidateOut]:
    """Attach history (and process labels when a process map is given) to each candidate, keeping candidate order."""
    history = group_history(updates)
    return [
        candidate_out(
            c,
            history.get(c.id, []),
            process_map.get(c.process_id) if process_map is not None else None,
            include_process=process_map is not None,
        )
        for c in candidates
    ]
