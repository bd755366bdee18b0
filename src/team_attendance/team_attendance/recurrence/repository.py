from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..occurrences.model import NewOccurrence
from .model import RecurrenceTemplate


class RecurrenceRepository(Protocol):
    """Templates and their expansions.

    Both write operations must be atomic: a partially expanded or partially
    deleted template is never visible.
    """

    def get_by_id(self, template_id: int) -> Optional[RecurrenceTemplate]:
        raise NotImplementedError

    def list_for_organization(self, organization_id: int) -> Sequence[RecurrenceTemplate]:
        raise NotImplementedError

    def create_with_occurrences(
        self,
        *,
        template: RecurrenceTemplate,
        occurrences: Sequence[NewOccurrence],
    ) -> int:
        """Insert the template (``template_id`` ignored) and its occurrences; returns the new id."""

        raise NotImplementedError

    def delete_template(self, *, template_id: int, keep_before: Optional[date]) -> int:
        """Delete a template with its occurrences and their attendance.

        Occurrences dated before ``keep_before`` are detached (template reference
        cleared) instead of deleted. Returns the number of deleted occurrences.
        """

        raise NotImplementedError
