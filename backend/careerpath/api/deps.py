from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.auth import get_current_user
from careerpath.db.session import get_session
from careerpath.models.interview_process import InterviewProcess
from careerpath.schemas.user import UserContext
from careerpath.services.notifications import GmailHrNotifier, HrNotifier
from careerpath.services.processes import get_process


async def get_db_session() -> AsyncSession:
    async for session in get_session():
        yield session


async def get_user(user: UserContext = Depends(get_current_user)) -> UserContext:
    return user


def get_notifier(request: Request) -> HrNotifier:
    notifier = getattr(request.app.state, "notifier", None)
    if notifier is None:
        notifier = GmailHrNotifier()
        request.app.state.notifier = notifier
    return notifier


async def load_process(session: AsyncSession, process_id: int) -> InterviewProcess:
    process = await get_process(session, process_id)
    if not process:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Interview process not found")
    return process
