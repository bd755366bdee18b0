from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Tag:
    """A physical scan identifier (NFC sticker or printed QR) bound to one organization."""

    tag_id: int
    token: str
    name: str
    organization_id: int
    is_active: bool = True
    created_by: Optional[int] = None
