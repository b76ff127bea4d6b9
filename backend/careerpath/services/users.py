from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from careerpath.core.errors import NotFoundError, ValidationError
from careerpath.core.roles import Role, parse_role
from careerpath.db.transactions import commit_or_raise
from careerpath.models.user import Profile, UserRole
from careerpath.schemas.user import AvailableUserOut, UserOut


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    full_name: str | None
    role: Role | None
    is_active: bool


async def _profile_for(session: AsyncSession, user_id: str) -> Profile | None:
    return (
        await session.execute(select(Profile).where(Profile.user_id == user_id).limit(1))
    ).scalars().first()


async def get_user_role(session: AsyncSession, user_id: str) -> Role | None:
    raw = (
        await session.execute(select(UserRole.role).where(UserRole.user_id == user_id).limit(1))
    ).scalars().first()
    return parse_role(raw)


async def resolve_identity(
    session: AsyncSession,
    *,
    user_id: str | None = None,
    email: str | None = None,
) -> Identity | None:
    query = select(Profile)
    if user_id:
        query = query.where(Profile.user_id == user_id)
    elif email:
        query = query.where(func.lower(Profile.email) == email.strip().lower())
    else:
        return None
    profile = (await session.execute(query.limit(1))).scalars().first()
    if not profile:
        return None
    return Identity(
        user_id=profile.user_id,
        email=profile.email,
        full_name=profile.full_name,
        role=await get_user_role(session, profile.user_id),
        is_active=bool(profile.is_active),
    )


async def list_users(session: AsyncSession) -> list[UserOut]:
    profiles = (
        await session.execute(select(Profile).order_by(Profile.created_at.desc(), Profile.id.desc()))
    ).scalars().all()
    roles = {
        row.user_id: parse_role(row.role)
        for row in (await session.execute(select(UserRole))).scalars().all()
    }
    return [
        UserOut(
            id=p.id,
            user_id=p.user_id,
            email=p.email,
            full_name=p.full_name,
            is_active=bool(p.is_active),
            created_at=p.created_at,
            role=roles.get(p.user_id),
        )
        for p in profiles
    ]


async def list_available_users(session: AsyncSession, *, exclude_user_id: str | None = None) -> list[AvailableUserOut]:
    query = select(Profile).where(Profile.is_active.is_(True)).order_by(Profile.email.asc())
    if exclude_user_id:
        query = query.where(Profile.user_id != exclude_user_id)
    return [
        AvailableUserOut(user_id=p.user_id, email=p.email, full_name=p.full_name)
        for p in (await session.execute(query)).scalars().all()
    ]


async def set_user_active(session: AsyncSession, *, user_id: str, is_active: bool) -> Profile:
    profile = await _profile_for(session, user_id)
    if not profile:
        raise NotFoundError("User not found")
    profile.is_active = is_active
    await commit_or_raise(session, action="User")
    return profile


async def assign_role(session: AsyncSession, *, user_id: str, role: Role | str) -> Role:
    parsed = parse_role(role)
    if parsed is None:
        raise ValidationError(f"Unknown role '{role}'.")
    if not await _profile_for(session, user_id):
        raise NotFoundError("User not found")
    existing = (
        await session.execute(select(UserRole).where(UserRole.user_id == user_id).limit(1))
    ).scalars().first()
    if existing:
        existing.role = parsed.value
    else:
        session.add(UserRole(user_id=user_id, role=parsed.value))
    await commit_or_raise(session, action="User role")
    return parsed


async def remove_role(session: AsyncSession, *, user_id: str) -> None:
    await session.execute(delete(UserRole).where(UserRole.user_id == user_id))
    await commit_or_raise(session, action="User role")


async def hr_recipient_emails(session: AsyncSession) -> list[str]:
    rows = (
        await session.execute(
            select(Profile.email)
            .join(UserRole, UserRole.user_id == Profile.user_id)
            .where(UserRole.role == Role.HR_OFFICE.value, Profile.is_active.is_(True))
            .order_by(Profile.email.asc())
        )
    ).scalars().all()
    return [email for email in dict.fromkeys(rows) if email]
