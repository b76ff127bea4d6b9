from enum import Enum
from typing import Optional, Union


class Role(str, Enum):
    HR_OFFICE = "hr_office"
    TEAM_LEAD = "team_lead"
    DIRECTOR_OF_ENGINEERING = "director_of_engineering"


ROLE_LABELS = {
    Role.HR_OFFICE: "HR Office",
    Role.TEAM_LEAD: "Team Lead",
    Role.DIRECTOR_OF_ENGINEERING: "Director of Engineering",
}

RoleLike = Union[Role, str, None]


def parse_role(raw: RoleLike) -> Optional[Role]:
    """Lenient conversion; anything unrecognised (including "none") is no role."""
    if raw is None:
        return None
    if isinstance(raw, Role):
        return raw
    try:
        return Role(str(raw).strip().lower())
    except ValueError:
        return None


def can_manage_processes(role: RoleLike) -> bool:
    return parse_role(role) == Role.HR_OFFICE


def can_manage_candidates(role: RoleLike) -> bool:
    return parse_role(role) in {Role.HR_OFFICE, Role.TEAM_LEAD}


def is_view_only(role: RoleLike) -> bool:
    return parse_role(role) == Role.DIRECTOR_OF_ENGINEERING


def is_hr_office(role: RoleLike) -> bool:
    return parse_role(role) == Role.HR_OFFICE


def can_manage_users(role: RoleLike) -> bool:
    return parse_role(role) == Role.DIRECTOR_OF_ENGINEERING
