from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class StatusUpdateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    status: str
    description: str
    decision: Optional[str] = None
    updated_by: Optional[str] = None
    timestamp: datetime


class CandidateCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[str] = None
    linkedin_url: Optional[str] = None
    desired_price_range: Optional[str] = None
    rating: Optional[int] = None
    status_description: Optional[str] = None


class CandidateStatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    status: str
    description: Optional[str] = None
    decision: Optional[str] = None
    github_task_url: Optional[str] = None


class CandidateOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    process_id: int
    name: str
    email: str
    linkedin_url: Optional[str] = None
    desired_price_range: Optional[str] = None
    rating: Optional[int] = None
    github_task_url: Optional[str] = None
    status: str
    status_history: list[StatusUpdateOut] = []
    final_decision: Optional[str] = None
    final_decision_date: Optional[datetime] = None
    offer_status: Optional[str] = None
    offer_description: Optional[str] = None
    offer_start_date: Optional[date] = None
    offer_rejection_reason: Optional[str] = None
    offer_decision_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    process_position: Optional[str] = None
    process_role: Optional[str] = None
