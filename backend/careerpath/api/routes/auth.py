from fastapi import APIRouter, Depends

from careerpath.api import deps
from careerpath.core.roles import (
    ROLE_LABELS,
    can_manage_candidates,
    can_manage_processes,
    can_manage_users,
    is_hr_office,
    is_view_only,
)
from careerpath.schemas.user import MeOut, UserContext

router = APIRouter(prefix="/cpm/auth", tags=["auth"])


@router.get("/me", response_model=MeOut)
async def me(user: UserContext = Depends(deps.get_user)):
    return MeOut(
        user_id=user.user_id,
        email=user.email,
        full_name=user.full_name,
        role=user.role,
        role_label=ROLE_LABELS.get(user.role) if user.role else None,
        can_manage_processes=can_manage_processes(user.role),
        can_manage_candidates=can_manage_candidates(user.role),
        can_manage_users=can_manage_users(user.role),
        is_view_only=is_view_only(user.role),
        is_hr_office=is_hr_office(user.role),
    )
