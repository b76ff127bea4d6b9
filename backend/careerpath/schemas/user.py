from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from careerpath.core.roles import Role


class UserContext(BaseModel):
    user_id: str
    email: EmailStr
    role: Optional[Role] = None
    full_name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or "Unknown"


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    email: str
    full_name: Optional[str] = None
    is_active: bool
    created_at: datetime
    role: Optional[Role] = None


class AvailableUserOut(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None


class UserActiveIn(BaseModel):
    is_active: bool


class UserRoleIn(BaseModel):
    # "none" removes the role
    role: Optional[str] = None


class MeOut(BaseModel):
    user_id: str
    email: str
    full_name: Optional[str] = None
    role: Optional[Role] = None
    role_label: Optional[str] = None
    can_manage_processes: bool
    can_manage_candidates: bool
    can_manage_users: bool
    is_view_only: bool
    is_hr_office: bool
