from __future__ import annotations

from decimal import Decimal

import pytest

from src.team_attendance.team_attendance.core.enums import AttendanceStatus, Role, ScanAction
from src.team_attendance.team_attendance.core.exceptions import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    TooEarlyError,
    ValidationError,
)

ORG = 1
TEAM = 10
OTHER_TEAM = 11
OWNER = 1
COACH = 2
ATHLETE = 3
PARENT = 4
TEAMMATE = 5
OUTSIDER = 6


def _scan(world, now, *, scanner=ATHLETE, token="front-door", **kwargs):
    return world.scan_resolver.resolve_scan(token=token, scanner_id=scanner, now=now, **kwargs)


@pytest.fixture
def tag(world):
    return world.add_tag("front-door")


def test_scan_toggles_check_in_then_check_out(world, tag, at):
    practice = world.add_occurrence(start="6:00 PM", end="7:30 PM")

    first = _scan(world, at("17:45"))
    assert first.action == ScanAction.CHECKED_IN
    assert first.occurrence == practice
    assert first.record.status == AttendanceStatus.ON_TIME

    second = _scan(world, at("19:00"))
    assert second.action == ScanAction.CHECKED_OUT
    assert second.record.hours == Decimal("1.00")

    with pytest.raises(ConflictError, match="Already checked out"):
        _scan(world, at("19:10"))


def test_scan_too_early_reports_the_next_occurrence(world, tag, at):
    practice = world.add_occurrence(start="18:00", end="19:30")

    with pytest.raises(TooEarlyError) as excinfo:
        _scan(world, at("17:00"))
    assert excinfo.value.occurrence_id == practice.occurrence_id
    assert excinfo.value.start_time == "6:00 PM"
    assert excinfo.value.starts_at == at("18:00")
    assert world.attendance.rows == {}


def test_window_opens_exactly_window_minutes_before_start(world, tag, at):
    world.add_occurrence(start="18:00", end="19:30")
    assert _scan(world, at("17:30")).action == ScanAction.CHECKED_IN


def test_bypassing_the_early_check_checks_in_on_time(world, tag, at):
    practice = world.add_occurrence(start="18:00", end="19:30")
    result = _scan(world, at("17:00"), bypass_early_check=True)
    assert result.occurrence == practice
    assert result.record.status == AttendanceStatus.ON_TIME


def test_overlapping_windows_prefer_the_earlier_start(world, tag, at):
    late = world.add_occurrence(start="18:00", end="20:00", title="Scrimmage")
    early = world.add_occurrence(start="17:00", end="19:00", title="Drills")

    assert _scan(world, at("17:45")).occurrence == early
    assert _scan(world, at("17:55")).action == ScanAction.CHECKED_OUT

    # the checked-out occurrence is skipped on the next scan
    result = _scan(world, at("18:05"))
    assert result.occurrence == late
    assert result.action == ScanAction.CHECKED_IN
    assert result.record.status == AttendanceStatus.LATE


def test_candidates_are_ordered_by_parsed_time_not_text(world, tag, at):
    world.add_occurrence(start="6:00 PM", end="7:00 PM", title="Evening")
    morning = world.add_occurrence(start="9:00 AM", end="10:00 AM", title="Morning")
    assert _scan(world, at("09:10")).occurrence == morning


def test_other_teams_occurrences_are_ignored(world, tag, at):
    world.add_occurrence(start="18:00", end="19:30", team_id=OTHER_TEAM)
    with pytest.raises(NotFoundError, match="No events today"):
        _scan(world, at("18:00"))


def test_organization_wide_occurrences_are_candidates(world, tag, at):
    meeting = world.add_occurrence(start="18:00", end="19:00", team_id=None, title="Club meeting")
    assert _scan(world, at("18:00")).occurrence == meeting


def test_every_occurrence_already_over(world, tag, at):
    world.add_occurrence(start="9:00", end="10:00")
    with pytest.raises(NotFoundError, match="No events today"):
        _scan(world, at("12:00"))


def test_unknown_and_deactivated_tags(world, at):
    world.add_occurrence(start="18:00", end="19:30")
    world.add_tag("old-sticker", active=False)

    with pytest.raises(NotFoundError, match="Unrecognized tag"):
        _scan(world, at("18:00"), token="nope")
    with pytest.raises(ConflictError, match="Tag deactivated"):
        _scan(world, at("18:00"), token="old-sticker")


def test_scanner_must_belong_to_the_tag_organization(world, tag, at):
    world.add_occurrence(start="18:00", end="19:30")
    with pytest.raises(AuthorizationError):
        _scan(world, at("18:00"), scanner=OUTSIDER)


def test_guardian_scans_for_their_athlete(world, tag, at):
    world.add_occurrence(start="18:00", end="19:30")
    result = _scan(world, at("17:55"), scanner=PARENT, on_behalf_of=ATHLETE)
    assert result.record.user_id == ATHLETE


def test_non_guardian_cannot_scan_for_someone_else(world, tag, at):
    world.add_occurrence(start="18:00", end="19:30")
    with pytest.raises(AuthorizationError):
        _scan(world, at("17:55"), scanner=TEAMMATE, on_behalf_of=ATHLETE)


def test_explicit_team_requires_membership_unless_staff(world, tag, at):
    other = world.add_occurrence(start="18:00", end="19:30", team_id=OTHER_TEAM)

    with pytest.raises(AuthorizationError, match="Not a member of this team"):
        _scan(world, at("18:00"), team_id=OTHER_TEAM)

    result = _scan(world, at("18:00"), scanner=COACH, team_id=OTHER_TEAM)
    assert result.occurrence == other


def test_explicit_team_from_another_organization(world, tag, at):
    world.add_team(30, "Elsewhere", org=2)
    with pytest.raises(NotFoundError, match="Team not found"):
        _scan(world, at("18:00"), team_id=30)


def test_select_occurrence_is_pure_over_candidates(world, at):
    first = world.add_occurrence(start="17:00", end="18:00")
    second = world.add_occurrence(start="19:00", end="20:00")
    resolver = world.scan_resolver

    assert resolver.select_occurrence([first, second], checked_out=set(), now=at("17:30")) == first
    with pytest.raises(TooEarlyError):
        resolver.select_occurrence([first, second], checked_out={first.occurrence_id}, now=at("17:30"))
    assert resolver.select_occurrence([first, second], checked_out={first.occurrence_id}, now=at("17:30"), bypass_early_check=True) == second
    with pytest.raises(ConflictError):
        resolver.select_occurrence([first], checked_out={first.occurrence_id}, now=at("17:30"))


def test_tag_registration_and_deactivation(world):
    tag = world.tag_service.register(current_role=Role.OWNER, created_by=OWNER, organization_id=ORG, name="Gym door")
    assert len(tag.token) == 32
    assert world.tag_service.list_active(ORG) == [tag]

    with pytest.raises(ConflictError):
        world.tag_service.register(current_role=Role.OWNER, created_by=OWNER, organization_id=ORG, name="Copy", token=tag.token)

    assert not world.tag_service.deactivate(current_role=Role.ADMIN, tag_id=tag.tag_id).is_active
    assert world.tag_service.list_active(ORG) == []


def test_tag_management_requires_admin_roles(world):
    with pytest.raises(AuthorizationError):
        world.tag_service.register(current_role=Role.COACH, created_by=COACH, organization_id=ORG, name="Gym door")
    with pytest.raises(ValidationError):
        world.tag_service.register(current_role=Role.OWNER, created_by=OWNER, organization_id=ORG, name="  ")


def test_too_early_carries_title_of_the_earliest_remaining_occurrence(world, tag, at):
    world.add_occurrence(start="20:00", end="21:00", title="Conditioning")
    world.add_occurrence(start="19:00", end="20:00", title="Team dinner")

    with pytest.raises(TooEarlyError) as excinfo:
        _scan(world, at("17:00"))
    assert excinfo.value.title == "Team dinner"
    assert "Team dinner" in str(excinfo.value)


def test_teammates_ad_hoc_occurrence_is_not_a_scan_candidate(world, tag, at):
    practice = world.add_occurrence(start="6:00 PM", end="7:30 PM")
    pending = world.adhoc_service.register(token="front-door", user_id=ATHLETE, team_id=TEAM, now=at("17:10"))

    result = _scan(world, at("17:45"), scanner=TEAMMATE)
    assert result.occurrence == practice
    assert result.record.status == AttendanceStatus.ON_TIME

    world.adhoc_service.deny(actor_id=OWNER, attendance_id=pending.record.attendance_id)
    assert world.attendance_service.get_record(user_id=TEAMMATE, occurrence_id=practice.occurrence_id) == result.record
