from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Tag


class TagRepository(Protocol):
    def get_by_id(self, tag_id: int) -> Optional[Tag]:
        raise NotImplementedError

    def get_by_token(self, token: str) -> Optional[Tag]:
        raise NotImplementedError

    def create(self, *, token: str, name: str, organization_id: int, created_by: Optional[int]) -> int:
        """Raises ConflictError when the token is already registered."""

        raise NotImplementedError

    def set_active(self, *, tag_id: int, is_active: bool) -> bool:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int, *, active_only: bool = True) -> Sequence[Tag]:
        raise NotImplementedError
