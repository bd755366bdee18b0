from __future__ import annotations

from datetime import date, datetime

import pytest

from src.team_attendance.team_attendance.core.enums import Role
from src.team_attendance.team_attendance.core.exceptions import AuthorizationError, NotFoundError, ValidationError

ORG = 1
TEAM = 10
ATHLETE = 3


def _schedule(world, **overrides):
    kwargs = dict(
        current_role=Role.COACH,
        organization_id=ORG,
        title="Film session",
        occurrence_date=date(2026, 3, 12),
        start_time=" 5:00 PM ",
        end_time="6:15 PM",
        team_id=TEAM,
        location="  ",
    )
    kwargs.update(overrides)
    return world.occurrence_service.schedule(**kwargs)


def test_schedule_one_off(world):
    occurrence = _schedule(world)
    assert occurrence.start_time == "5:00 PM"
    assert occurrence.location is None
    assert occurrence.template_id is None
    assert occurrence.starts_at() == datetime(2026, 3, 12, 17, 0)
    assert occurrence.ends_at() == datetime(2026, 3, 12, 18, 15)
    assert world.occurrence_service.get(occurrence.occurrence_id) == occurrence


@pytest.mark.parametrize("end_time", ["5:00 PM", "4:30 PM"])
def test_end_must_follow_start(world, end_time):
    with pytest.raises(ValidationError, match="End time must be after start time"):
        _schedule(world, end_time=end_time)


def test_blank_title_and_athlete_role_are_rejected(world):
    with pytest.raises(ValidationError):
        _schedule(world, title=" ")
    with pytest.raises(AuthorizationError):
        _schedule(world, current_role=Role.ATHLETE)


def test_delete_takes_attendance_with_it(world, at):
    practice = world.add_occurrence(start="18:00", end="19:30")
    world.attendance_service.check_in(actor_id=ATHLETE, user_id=ATHLETE, occurrence_id=practice.occurrence_id, now=at("17:55"))

    world.occurrence_service.delete(current_role=Role.OWNER, occurrence_id=practice.occurrence_id)

    assert world.attendance.rows == {}
    with pytest.raises(NotFoundError, match="Event not found"):
        world.occurrence_service.get(practice.occurrence_id)
    with pytest.raises(NotFoundError):
        world.occurrence_service.delete(current_role=Role.OWNER, occurrence_id=practice.occurrence_id)


def test_list_for_day_includes_organization_wide_events(world):
    team_event = world.add_occurrence(start="18:00", end="19:00")
    club_event = world.add_occurrence(start="12:00", end="13:00", team_id=None)
    world.add_occurrence(start="18:00", end="19:00", team_id=11)

    found = world.occurrences.list_for_day(organization_id=ORG, day=date(2026, 3, 10), team_ids=[TEAM])
    assert {o.occurrence_id for o in found} == {team_event.occurrence_id, club_event.occurrence_id}


def test_list_range_orders_by_date_then_start(world):
    evening = world.add_occurrence(start="6:00 PM", end="7:00 PM")
    morning = world.add_occurrence(start="9:00 AM", end="10:00 AM")
    earlier_day = world.add_occurrence(start="6:00 PM", end="7:00 PM", day=date(2026, 3, 3))

    listed = world.occurrence_service.list_range(organization_id=ORG, start=date(2026, 3, 1), end=date(2026, 3, 31))
    assert listed == [earlier_day, morning, evening]

    with pytest.raises(ValidationError):
        world.occurrence_service.list_range(organization_id=ORG, start=date(2026, 3, 31), end=date(2026, 3, 1))
