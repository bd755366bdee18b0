from __future__ import annotations

import secrets
from typing import Optional

from ..common.logging import get_logger
from ..common.validators import require_non_empty
from ..core.enums import TAG_ADMIN_ROLES, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError
from .model import Tag
from .repository import TagRepository

log = get_logger(__name__)


class TagService:
    def __init__(self, tags: TagRepository):
        self._tags = tags

    def get(self, tag_id: int) -> Tag:
        tag = self._tags.get_by_id(int(tag_id))
        if not tag:
            raise NotFoundError("Tag not found")
        return tag

    def register(
        self,
        *,
        current_role: Role,
        created_by: int,
        organization_id: int,
        name: str,
        token: Optional[str] = None,
    ) -> Tag:
        """Register a tag; without a token (printed QR tags) one is generated."""
        if current_role not in TAG_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to manage tags")

        name = require_non_empty(name, "Tag name")
        token = (token or "").strip() or secrets.token_hex(16)

        if self._tags.get_by_token(token):
            raise ConflictError("A tag with this token is already registered")

        tag_id = self._tags.create(token=token, name=name, organization_id=int(organization_id), created_by=int(created_by))
        log.info("tag_registered", tag_id=tag_id, organization_id=int(organization_id))
        return self.get(tag_id)

    def deactivate(self, *, current_role: Role, tag_id: int) -> Tag:
        if current_role not in TAG_ADMIN_ROLES:
            raise AuthorizationError("You do not have permission to manage tags")

        self.get(tag_id)
        self._tags.set_active(tag_id=int(tag_id), is_active=False)
        log.info("tag_deactivated", tag_id=int(tag_id))
        return self.get(tag_id)

    def list_active(self, organization_id: int) -> list[Tag]:
        return list(self._tags.list_for_organization(int(organization_id), active_only=True))
