from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from careerpath.core.datetime_utils import utcnow_naive
from careerpath.db.base import Base


class ProcessAccess(Base):
    __tablename__ = "process_access"
    __table_args__ = (UniqueConstraint("process_id", "user_id", name="uq_process_access_process_user"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    process_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("interview_processes.id", ondelete="CASCADE"), index=True
    )
    user_id: Mapped[str] = mapped_column(String(64), index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive)
