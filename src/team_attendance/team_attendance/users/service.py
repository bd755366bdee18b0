from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash

from ..common.logging import get_logger
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from .repository import MembershipRepository, UserRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class SessionUser:
    """What we store into the Flask session after login."""

    user_id: int
    full_name: str
    organizations: dict[int, str]


class AuthService:
    """Use case: authenticate user (login)."""

    def __init__(self, users: UserRepository, memberships: MembershipRepository):
        self._users = users
        self._memberships = memberships

    def authenticate(self, username: str, password: str) -> SessionUser:
        user = self._users.get_by_username((username or "").strip())
        if not user or not user.is_active:
            raise AuthenticationError("Invalid username or password")

        try:
            ok = check_password_hash(user.password_hash, password or "")
        except ValueError:
            # placeholder or corrupted hashes
            ok = False

        if not ok:
            log.info("login_failed", username=user.username)
            raise AuthenticationError("Invalid username or password")

        orgs = {m.organization_id: m.role.value for m in self._memberships.list_org_memberships(user.user_id)}
        log.info("login_succeeded", user_id=user.user_id)
        return SessionUser(user_id=user.user_id, full_name=user.full_name, organizations=orgs)


class MembershipService:
    """Resolves what a user may do inside an organization."""

    def __init__(self, memberships: MembershipRepository):
        self._memberships = memberships

    def role_in(self, *, user_id: int, organization_id: int) -> Role:
        membership = self._memberships.get_org_membership(user_id=int(user_id), organization_id=int(organization_id))
        if not membership:
            raise AuthorizationError("You are not a member of this organization")
        return membership.role
