from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Season


class SeasonRepository(Protocol):
    def get_by_id(self, season_id: int) -> Optional[Season]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[Season]:
        raise NotImplementedError

    def create(self, *, organization_id: int, name: str, start_month: int, end_month: int) -> int:
        raise NotImplementedError

    def update(self, *, season_id: int, name: str, start_month: int, end_month: int) -> bool:
        raise NotImplementedError

    def delete(self, *, season_id: int) -> bool:
        raise NotImplementedError

    def count_teams(self, *, season_id: int) -> int:
        """Number of teams currently assigned to the season."""

        raise NotImplementedError
