from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ProcessCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: Optional[str] = None
    role: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    access_user_ids: list[str] = Field(default_factory=list)


class ProcessUpdate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    position: Optional[str] = None
    role: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class ProcessOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    position: str
    role: str
    start_date: date
    end_date: date
    created_by: Optional[str] = None
    created_at: datetime
    is_active: bool
    candidate_count: Optional[int] = None


class ProcessAccessIn(BaseModel):
    user_ids: list[str] = Field(default_factory=list)


class ProcessAccessOut(BaseModel):
    process_id: int
    user_ids: list[str]
