from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.errors import BackendError, ValidationError

logger = logging.getLogger("cpm.db")


async def commit_or_raise(session: AsyncSession, *, action: str) -> None:
    """Commit the unit of work; on any database failure roll back and raise a store error."""
    try:
        await session.flush()
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        logger.warning("commit_rejected", extra={"action": action, "error": str(exc.orig)})
        raise ValidationError(f"{action} could not be saved: {exc.orig}") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.exception("commit_failed", extra={"action": action})
        raise BackendError(f"{action} could not be saved.") from exc
