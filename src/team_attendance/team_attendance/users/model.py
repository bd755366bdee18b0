from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role, TeamRole


@dataclass(frozen=True)
class User:
    """Domain entity: a person who can log in.

    Plain data object (no DB access code).
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    is_active: bool = True


@dataclass(frozen=True)
class Team:
    team_id: int
    organization_id: int
    name: str
    season_id: Optional[int] = None
    season_year: Optional[int] = None


@dataclass(frozen=True)
class OrgMembership:
    user_id: int
    organization_id: int
    role: Role


@dataclass(frozen=True)
class TeamMembership:
    user_id: int
    team_id: int
    role: TeamRole
