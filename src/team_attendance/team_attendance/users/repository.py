from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import OrgMembership, Team, TeamMembership, User


class UserRepository(Protocol):
    """Repository interface for User.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError


class MembershipRepository(Protocol):
    """Read-only lookups over organizations, teams and guardianship."""

    def get_org_membership(self, *, user_id: int, organization_id: int) -> Optional[OrgMembership]:
        raise NotImplementedError

    def list_org_memberships(self, user_id: int) -> Sequence[OrgMembership]:
        raise NotImplementedError

    def get_team(self, team_id: int) -> Optional[Team]:
        raise NotImplementedError

    def get_team_membership(self, *, user_id: int, team_id: int) -> Optional[TeamMembership]:
        raise NotImplementedError

    def list_team_memberships(self, *, user_id: int, organization_id: int) -> Sequence[TeamMembership]:
        """Memberships of ``user_id`` on teams that belong to ``organization_id``."""

        raise NotImplementedError

    def is_guardian(self, *, guardian_id: int, athlete_id: int, organization_id: int) -> bool:
        raise NotImplementedError
