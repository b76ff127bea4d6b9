from __future__ import annotations

import json
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request, status
import urllib3
from google.auth.transport.urllib3 import Request as GoogleAuthRequest
from google.oauth2 import id_token as google_id_token
from sqlalchemy.exc import SQLAlchemyError

from careerpath.core.config import settings
from careerpath.core.paths import resolve_repo_path
from careerpath.core.roles import Role, RoleLike, parse_role
from careerpath.db.session import SessionLocal
from careerpath.schemas.user import UserContext
from careerpath.services.users import resolve_identity


async def get_current_user(request: Request) -> UserContext:
    # Prefer Google auth whenever a Bearer token is provided.
    bearer = _read_bearer_token(request)
    if bearer:
        token_info = _verify_google_id_token(bearer)
        email = str(token_info.get("email", "")).lower()
        if not email:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token (missing email)")

        if settings.google_workspace_domain:
            hosted_domain = token_info.get("hd")
            if hosted_domain != settings.google_workspace_domain:
                raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User not in allowed workspace domain")

        try:
            async with SessionLocal() as session:
                identity = await resolve_identity(session, email=email)
        except SQLAlchemyError as exc:
            detail = "Database error"
            if settings.environment != "production":
                detail = f"Database error: {exc}"
            raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)
        if not identity:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User has no profile")
        if not identity.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User is not active")

        return UserContext(
            user_id=identity.user_id,
            email=identity.email,
            role=identity.role,
            full_name=identity.full_name,
        )

    if settings.auth_mode == "google":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    # Dev-mode user context:
    # - X-User-Email: user@company.com
    # - X-User-Role: hr_office | team_lead | director_of_engineering | none
    email = request.headers.get("x-user-email") or "demo@example.com"
    user_id = request.headers.get("x-user-id") or email
    full_name = request.headers.get("x-user-name") or _derive_name_from_email(email)
    role = parse_role(request.headers.get("x-user-role") or Role.HR_OFFICE.value)

    return UserContext(user_id=user_id, email=email, role=role, full_name=full_name)


def _read_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    prefix = "bearer "
    if auth.lower().startswith(prefix):
        return auth[len(prefix) :].strip()
    return None


def _load_oauth_client_id() -> Optional[str]:
    if settings.google_client_id:
        return settings.google_client_id
    path = resolve_repo_path(settings.google_oauth_secrets_path)
    if not path.exists():
        return None
    data = json.loads(path.read_text(encoding="utf-8"))
    for key in ("web", "installed"):
        if isinstance(data, dict) and isinstance(data.get(key), dict):
            return data[key].get("client_id")
    return None


def _verify_google_id_token(token: str) -> dict:
    client_id = _load_oauth_client_id()
    if not client_id:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Missing Google OAuth client_id")
    try:
        req = GoogleAuthRequest(urllib3.PoolManager())
        return google_id_token.verify_oauth2_token(
            token,
            req,
            audience=client_id,
            clock_skew_in_seconds=int(settings.google_clock_skew_seconds),
        )
    except Exception as exc:
        detail = "Invalid Google token"
        if settings.environment != "production":
            detail = f"Invalid Google token: {exc}"
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _derive_name_from_email(email: str) -> str:
    local = email.split("@", 1)[0].strip()
    if not local:
        return email
    parts = [p for p in local.replace("_", ".").split(".") if p]
    if not parts:
        return local
    return " ".join(p[:1].upper() + p[1:] for p in parts)


def require_permission(predicate: Callable[[RoleLike], bool]):
    async def dependency(user: UserContext = Depends(get_current_user)) -> UserContext:
        if not predicate(user.role):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        return user

    return dependency
