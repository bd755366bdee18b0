from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Optional

from ..core.enums import RecurrenceFrequency


@dataclass(frozen=True)
class RecurrenceRule:
    """Dates part of a template: what the expander works on."""

    start_date: date
    end_date: date
    frequency: RecurrenceFrequency
    weekdays: FrozenSet[int] = field(default_factory=frozenset)


@dataclass(frozen=True)
class RecurrenceTemplate:
    """Domain entity: a recurring activity that expands into occurrences.

    Immutable once expanded; an edit is a new template plus a new expansion.
    """

    template_id: int
    organization_id: int
    title: str
    frequency: RecurrenceFrequency
    weekdays: FrozenSet[int]
    start_date: date
    end_date: date
    start_time: str
    end_time: str
    team_id: Optional[int] = None
    location: Optional[str] = None
    created_by: Optional[int] = None

    @property
    def rule(self) -> RecurrenceRule:
        return RecurrenceRule(
            start_date=self.start_date,
            end_date=self.end_date,
            frequency=self.frequency,
            weekdays=self.weekdays,
        )


def encode_weekdays(weekdays) -> str:
    """Stored as a comma separated list, e.g. "1,3,5"."""
    return ",".join(str(d) for d in sorted(weekdays))


def decode_weekdays(value: Optional[str]) -> FrozenSet[int]:
    if not value:
        return frozenset()
    return frozenset(int(part) for part in str(value).split(",") if part.strip())
