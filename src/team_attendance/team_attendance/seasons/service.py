from __future__ import annotations

from datetime import date
from typing import Optional

from ..common.logging import get_logger
from ..common.validators import require_month, require_non_empty
from ..core.enums import TAG_ADMIN_ROLES, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from ..users.repository import MembershipRepository
from . import resolver
from .model import Season, SeasonWindow
from .repository import SeasonRepository

log = get_logger(__name__)


class SeasonService:
    def __init__(self, seasons: SeasonRepository, memberships: MembershipRepository):
        self._seasons = seasons
        self._memberships = memberships

    def get(self, season_id: int) -> Season:
        season = self._seasons.get_by_id(int(season_id))
        if not season:
            raise NotFoundError("Season not found")
        return season

    def list_for_organization(self, organization_id: int) -> list[Season]:
        return list(self._seasons.list_for_organization(int(organization_id)))

    def create(
        self,
        *,
        current_role: Role,
        organization_id: int,
        name: str,
        start_month: int,
        end_month: int,
    ) -> Season:
        if current_role not in TAG_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to manage seasons")

        name = require_non_empty(name, "Season name")
        start_month = require_month(start_month, "Start month")
        end_month = require_month(end_month, "End month")

        season_id = self._seasons.create(
            organization_id=int(organization_id),
            name=name,
            start_month=start_month,
            end_month=end_month,
        )
        log.info("season_created", season_id=season_id, organization_id=int(organization_id))
        return self.get(season_id)

    def update(self, *, current_role: Role, season_id: int, name: str, start_month: int, end_month: int) -> Season:
        if current_role not in TAG_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to manage seasons")

        name = require_non_empty(name, "Season name")
        start_month = require_month(start_month, "Start month")
        end_month = require_month(end_month, "End month")

        if not self._seasons.update(season_id=int(season_id), name=name, start_month=start_month, end_month=end_month):
            raise NotFoundError("Season not found")
        return self.get(season_id)

    def delete(self, *, current_role: Role, season_id: int) -> None:
        if current_role not in TAG_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to manage seasons")

        self.get(season_id)
        assigned = self._seasons.count_teams(season_id=int(season_id))
        if assigned:
            raise ConflictError(f"Cannot delete season: {assigned} team(s) are still assigned to it")

        self._seasons.delete(season_id=int(season_id))
        log.info("season_deleted", season_id=int(season_id))

    def window_for_team(self, team_id: int) -> Optional[SeasonWindow]:
        team = self._memberships.get_team(int(team_id))
        if not team:
            raise NotFoundError("Team not found")
        season = self._seasons.get_by_id(team.season_id) if team.season_id is not None else None
        return resolver.window_for(team, season)

    def is_team_active(self, team_id: int, *, today: date) -> bool:
        window = self.window_for_team(team_id)
        return window is None or resolver.is_within(today, window)

    def team_season_label(self, team_id: int) -> Optional[str]:
        team = self._memberships.get_team(int(team_id))
        if not team or team.season_id is None or team.season_year is None:
            return None
        return resolver.display_name(self.get(team.season_id).name, team.season_year)
