from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Callable, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.config import settings
from careerpath.core.errors import NotificationError
from careerpath.services.email import send_email
from careerpath.services.users import hr_recipient_emails

logger = logging.getLogger("cpm.notifications")

CANDIDATE_PASSED_TEMPLATE = "candidate_passed"


@dataclass(frozen=True)
class CandidatePassedFacts:
    candidate_id: int
    candidate_name: str
    candidate_email: str
    process_id: int
    process_position: str
    process_role: str


class HrNotifier(Protocol):
    async def notify_candidate_passed(self, facts: CandidatePassedFacts) -> None: ...


class GmailHrNotifier:
    """Emails every active HR office user when a candidate passes the final stage."""

    def __init__(self, session_factory: Callable[[], AsyncSession] | None = None) -> None:
        self._session_factory = session_factory

    def _open_session(self) -> AsyncSession:
        if self._session_factory is not None:
            return self._session_factory()
        from careerpath.db.session import SessionLocal

        return SessionLocal()

    async def notify_candidate_passed(self, facts: CandidatePassedFacts) -> None:
        async with self._open_session() as session:
            recipients = await hr_recipient_emails(session)
        if not recipients:
            logger.info("hr_notification_skipped", extra={"reason": "no_hr_recipients", **asdict(facts)})
            return

        meta = await send_email(
            to_emails=recipients,
            subject=f"Candidate Ready for Offer: {facts.candidate_name}",
            template_name=CANDIDATE_PASSED_TEMPLATE,
            context={**asdict(facts), "app_link": settings.public_app_origin or "#"},
            email_type="candidate_passed",
        )
        if meta.get("status") == "failed":
            raise NotificationError(meta.get("error") or "Email delivery failed")


# Strong references keep pending notification tasks from being garbage collected.
_pending_tasks: set[asyncio.Task] = set()


async def _run_notification(notifier: HrNotifier, facts: CandidatePassedFacts) -> bool:
    try:
        await notifier.notify_candidate_passed(facts)
    except Exception:
        logger.exception("hr_notification_failed", extra=asdict(facts))
        return False
    return True


def dispatch_candidate_passed(notifier: HrNotifier, facts: CandidatePassedFacts) -> asyncio.Task:
    """
    Schedules the HR notification without awaiting it.

    Call only after the triggering write has committed. The task never raises:
    it resolves to True on delivery and False on any failure, which is logged.
    """
    task = asyncio.create_task(_run_notification(notifier, facts))
    _pending_tasks.add(task)
    task.add_done_callback(_pending_tasks.discard)
    return task
