from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.api import deps
from careerpath.core.auth import require_permission
from careerpath.core.roles import can_manage_processes, can_manage_users
from careerpath.schemas.user import AvailableUserOut, UserActiveIn, UserContext, UserOut, UserRoleIn
from careerpath.services.users import assign_role, list_available_users, list_users, remove_role, set_user_active

router = APIRouter(prefix="/cpm/users", tags=["users"])

_NO_ROLE = {"", "none"}


async def _user_out(session: AsyncSession, user_id: str) -> UserOut:
    for row in await list_users(session):
        if row.user_id == user_id:
            return row
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")


@router.get("", response_model=list[UserOut])
async def list_users_route(
    session: AsyncSession = Depends(deps.get_db_session),
    _user: UserContext = Depends(require_permission(can_manage_users)),
):
    return await list_users(session)


@router.get("/available", response_model=list[AvailableUserOut])
async def available_users(
    session: AsyncSession = Depends(deps.get_db_session),
    user: UserContext = Depends(require_permission(can_manage_processes)),
):
    return await list_available_users(session, exclude_user_id=user.user_id)


@router.patch("/{user_id}/active", response_model=UserOut)
async def set_active(
    user_id: str,
    payload: UserActiveIn,
    session: AsyncSession = Depends(deps.get_db_session),
    _user: UserContext = Depends(require_permission(can_manage_users)),
):
    await set_user_active(session, user_id=user_id, is_active=payload.is_active)
    return await _user_out(session, user_id)


@router.put("/{user_id}/role", response_model=UserOut)
async def set_role(
    user_id: str,
    payload: UserRoleIn,
    session: AsyncSession = Depends(deps.get_db_session),
    _user: UserContext = Depends(require_permission(can_manage_users)),
):
    if (payload.role or "").strip().lower() in _NO_ROLE:
        await remove_role(session, user_id=user_id)
    else:
        await assign_role(session, user_id=user_id, role=payload.role)
    return await _user_out(session, user_id)
