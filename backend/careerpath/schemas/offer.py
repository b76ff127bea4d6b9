from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict


class OfferStatusIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    offer_status: Literal["sent", "accepted", "rejected"]
    description: Optional[str] = None
    start_date: Optional[date] = None
    rejection_reason: Optional[str] = None


class OfferCandidateOut(BaseModel):
    id: int
    name: str
    email: str
    process_id: int
    process_position: str
    process_role: str
    final_decision_date: Optional[datetime] = None
    offer_status: str
    offer_description: Optional[str] = None
    offer_start_date: Optional[date] = None
    offer_rejection_reason: Optional[str] = None
    offer_decision_date: Optional[datetime] = None


class OfferHistoryOut(BaseModel):
    counts: dict[str, int]
    items: list[OfferCandidateOut]
