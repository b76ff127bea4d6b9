from datetime import date, datetime

from sqlalchemy import Date, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from careerpath.core.datetime_utils import utcnow_naive
from careerpath.core.status_lifecycle import START_STATUS
from careerpath.db.base import Base


class Candidate(Base):
    __tablename__ = "candidates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    process_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("interview_processes.id", ondelete="CASCADE"), index=True
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    linkedin_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    desired_price_range: Mapped[str | None] = mapped_column(String(100), nullable=True)
    rating: Mapped[int | None] = mapped_column(Integer, nullable=True)
    github_task_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    status: Mapped[str] = mapped_column(String(50), default=START_STATUS, index=True)
    final_decision: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    final_decision_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    offer_status: Mapped[str | None] = mapped_column(String(20), nullable=True, index=True)
    offer_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    offer_start_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    offer_rejection_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    offer_decision_date: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, index=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)
