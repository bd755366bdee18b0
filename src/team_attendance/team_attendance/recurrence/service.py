from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ..common.datetime_utils import DateLike
from ..common.logging import get_logger
from ..common.validators import optional_text, require_non_empty
from ..core.enums import STAFF_ROLES, RecurrenceFrequency, Role
from ..core.exceptions import AuthorizationError, NotFoundError
from ..occurrences.model import NewOccurrence
from ..occurrences.service import validate_time_range
from .expander import RecurrenceExpander, build_rule
from .model import RecurrenceTemplate
from .repository import RecurrenceRepository

log = get_logger(__name__)


@dataclass(frozen=True)
class CreatedTemplate:
    template: RecurrenceTemplate
    occurrence_dates: List[date]


class RecurrenceService:
    def __init__(self, templates: RecurrenceRepository, *, expander: Optional[RecurrenceExpander] = None):
        self._templates = templates
        self._expander = expander or RecurrenceExpander()

    def preview(
        self,
        *,
        start_date: DateLike,
        end_date: DateLike,
        frequency: RecurrenceFrequency | str,
        weekdays: Optional[Iterable[int]] = None,
    ) -> List[date]:
        """Dates a rule would produce, with the same checks as create_template."""
        return self._expander.expand_checked(build_rule(start_date, end_date, frequency, weekdays))

    def create_template(
        self,
        *,
        current_role: Role,
        created_by: int,
        organization_id: int,
        title: str,
        frequency: RecurrenceFrequency | str,
        start_date: DateLike,
        end_date: DateLike,
        start_time: str,
        end_time: str,
        weekdays: Optional[Iterable[int]] = None,
        team_id: Optional[int] = None,
        location: Optional[str] = None,
    ) -> CreatedTemplate:
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You do not have permission to create recurring events")

        title = require_non_empty(title, "Title")
        validate_time_range(start_time, end_time)

        rule = build_rule(start_date, end_date, frequency, weekdays)
        dates = self._expander.expand_checked(rule)

        template = RecurrenceTemplate(
            template_id=0,
            organization_id=int(organization_id),
            title=title,
            frequency=rule.frequency,
            weekdays=rule.weekdays,
            start_date=rule.start_date,
            end_date=rule.end_date,
            start_time=start_time.strip(),
            end_time=end_time.strip(),
            team_id=int(team_id) if team_id is not None else None,
            location=optional_text(location),
            created_by=int(created_by),
        )
        occurrences = [
            NewOccurrence(
                organization_id=template.organization_id,
                title=template.title,
                occurrence_date=d,
                start_time=template.start_time,
                end_time=template.end_time,
                team_id=template.team_id,
                location=template.location,
            )
            for d in dates
        ]

        template_id = self._templates.create_with_occurrences(template=template, occurrences=occurrences)
        log.info(
            "recurrence_template_created",
            template_id=template_id,
            frequency=rule.frequency.value,
            occurrences=len(dates),
        )

        saved = self._templates.get_by_id(template_id)
        if not saved:
            raise NotFoundError("Recurring event not found")
        return CreatedTemplate(template=saved, occurrence_dates=dates)

    def delete_template(self, *, current_role: Role, template_id: int, future_only: bool, today: date) -> int:
        """Delete a template and its occurrences.

        With ``future_only`` the occurrences dated before ``today`` stay, detached
        from the template, so their attendance history survives.
        """
        if current_role not in STAFF_ROLES:
            raise AuthorizationError("You do not have permission to delete recurring events")

        self.get(template_id)

        deleted = self._templates.delete_template(
            template_id=int(template_id),
            keep_before=today if future_only else None,
        )
        log.info("recurrence_template_deleted", template_id=int(template_id), future_only=future_only, deleted=deleted)
        return deleted

    def get(self, template_id: int) -> RecurrenceTemplate:
        template = self._templates.get_by_id(int(template_id))
        if not template:
            raise NotFoundError("Recurring event not found")
        return template

    def list_templates(self, organization_id: int) -> list[RecurrenceTemplate]:
        return list(self._templates.list_for_organization(int(organization_id)))
