from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from src.ogs_backend.ogs_backend.active.model import AttendanceRecord, LiveGroupSession, Visit
from src.ogs_backend.ogs_backend.core.enums import LocationState
from src.ogs_backend.ogs_backend.groups.model import Room
from src.ogs_backend.ogs_backend.presence.model import LABEL_ABSENT, LABEL_PRESENT, LABEL_TRANSIT
from src.ogs_backend.ogs_backend.presence.state_machine import PresenceStateMachine, derive_presence

TODAY = date(2026, 2, 2)
NOW = datetime(2026, 2, 2, 10, 30)


class InMemoryAttendance:
    def __init__(self, records: Optional[dict[int, AttendanceRecord]] = None, *, fail: bool = False):
        self.records = records or {}
        self.fail = fail
        self.days: list[date] = []

    def get_latest_for_student(self, student_id: int, day: date):
        self.days.append(day)
        if self.fail:
            raise RuntimeError("attendance table unavailable")
        rec = self.records.get(student_id)
        return rec if rec is not None and rec.attendance_date == day else None


class InMemoryVisits:
    def __init__(self, visits: Optional[dict[int, Visit]] = None, *, fail: bool = False):
        self.visits = visits or {}
        self.fail = fail

    def get_current_for_student(self, student_id: int):
        if self.fail:
            raise RuntimeError("visits unavailable")
        return self.visits.get(student_id)


class InMemorySessions:
    def __init__(self, sessions: Optional[dict[int, LiveGroupSession]] = None):
        self.sessions = sessions or {}

    def get_by_id(self, active_group_id: int):
        return self.sessions.get(active_group_id)


class InMemoryRooms:
    def __init__(self, rooms: Optional[dict[int, Room]] = None, *, fail: bool = False):
        self.rooms = rooms or {}
        self.fail = fail

    def get_by_id(self, room_id: int):
        if self.fail:
            raise RuntimeError("rooms unavailable")
        return self.rooms.get(room_id)


def _checked_in(check_out: Optional[datetime] = None) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=1,
        student_id=1,
        attendance_date=TODAY,
        check_in_time=datetime(2026, 2, 2, 8, 0),
        check_out_time=check_out,
    )


def _machine(*, attendance=None, visits=None, sessions=None, rooms=None) -> PresenceStateMachine:
    return PresenceStateMachine(
        attendance or InMemoryAttendance(),
        visits or InMemoryVisits(),
        sessions or InMemorySessions(),
        rooms or InMemoryRooms(),
        clock=lambda: NOW,
    )


def _in_room_machine(**overrides) -> PresenceStateMachine:
    parts = dict(
        attendance=InMemoryAttendance({1: _checked_in()}),
        visits=InMemoryVisits({1: Visit(visit_id=5, student_id=1, active_group_id=3, entry_time=datetime(2026, 2, 2, 9, 0))}),
        sessions=InMemorySessions({3: LiveGroupSession(active_group_id=3, group_id=10, room_id=101, start_time=datetime(2026, 2, 2, 8, 30))}),
        rooms=InMemoryRooms({101: Room(room_id=101, name="Room 101")}),
    )
    parts.update(overrides)
    return _machine(**parts)


def test_no_attendance_today_is_absent():
    result = _machine().resolve_location(1, True)

    assert result.state == LocationState.ABSENT
    assert result.label == LABEL_ABSENT
    assert result.since is None


def test_yesterdays_open_record_does_not_count():
    stale = AttendanceRecord(attendance_id=1, student_id=1, attendance_date=date(2026, 2, 1), check_in_time=datetime(2026, 2, 1, 8, 0))
    attendance = InMemoryAttendance({1: stale})

    result = _machine(attendance=attendance).resolve_location(1, True)

    assert result.label == LABEL_ABSENT
    assert attendance.days == [TODAY]


def test_checked_out_is_absent_with_checkout_time_for_full_access():
    checkout = datetime(2026, 2, 2, 14, 0)
    machine = _machine(attendance=InMemoryAttendance({1: _checked_in(check_out=checkout)}))

    full = machine.resolve_location(1, True)
    limited = machine.resolve_location(1, False)

    assert full.label == LABEL_ABSENT and full.since == checkout
    assert limited.label == LABEL_ABSENT and limited.since is None


def test_checked_in_without_visit_is_transit_or_present():
    machine = _machine(attendance=InMemoryAttendance({1: _checked_in()}))

    assert machine.resolve_location(1, True).label == LABEL_TRANSIT
    assert machine.resolve_location(1, False).label == LABEL_PRESENT


def test_open_visit_in_named_room_shows_room_to_everyone():
    machine = _in_room_machine()

    full = machine.resolve_location(1, True)
    limited = machine.resolve_location(1, False)

    assert full.state == LocationState.PRESENT_IN_ROOM
    assert full.label == "Anwesend - Room 101"
    assert full.room_name == "Room 101"
    assert full.since == datetime(2026, 2, 2, 9, 0)
    assert limited.label == "Anwesend - Room 101"
    assert limited.since is None


def test_closed_visit_falls_back_to_transit():
    visits = InMemoryVisits(
        {1: Visit(visit_id=5, student_id=1, active_group_id=3, entry_time=datetime(2026, 2, 2, 9, 0), exit_time=datetime(2026, 2, 2, 9, 45))}
    )

    assert _in_room_machine(visits=visits).resolve_location(1, True).label == LABEL_TRANSIT


def test_missing_session_or_room_falls_back_to_checked_in_state():
    assert _in_room_machine(sessions=InMemorySessions()).resolve_location(1, True).label == LABEL_TRANSIT
    assert _in_room_machine(rooms=InMemoryRooms()).resolve_location(1, False).label == LABEL_PRESENT


def test_unnamed_room_is_not_shown():
    rooms = InMemoryRooms({101: Room(room_id=101, name="")})

    assert _in_room_machine(rooms=rooms).resolve_location(1, True).label == LABEL_TRANSIT


def test_lookup_failures_degrade_instead_of_raising():
    assert _machine(attendance=InMemoryAttendance(fail=True)).resolve_location(1, True).label == LABEL_ABSENT
    assert _in_room_machine(visits=InMemoryVisits(fail=True)).resolve_location(1, True).label == LABEL_TRANSIT
    assert _in_room_machine(rooms=InMemoryRooms(fail=True)).resolve_location(1, False).label == LABEL_PRESENT


def test_resolution_is_repeatable():
    machine = _in_room_machine()

    assert machine.resolve_location(1, True) == machine.resolve_location(1, True)


def test_visit_is_ignored_once_checked_out():
    checkout = datetime(2026, 2, 2, 14, 0)
    machine = _in_room_machine(attendance=InMemoryAttendance({1: _checked_in(check_out=checkout)}))

    result = machine.resolve_location(1, True)

    assert result.label == LABEL_ABSENT
    assert result.since == checkout


def test_derive_presence_rejects_session_of_another_visit():
    visit = Visit(visit_id=5, student_id=1, active_group_id=3, entry_time=datetime(2026, 2, 2, 9, 0))
    other = LiveGroupSession(active_group_id=4, group_id=10, room_id=101, start_time=datetime(2026, 2, 2, 8, 30))

    result = derive_presence(
        attendance=_checked_in(),
        visit=visit,
        session=other,
        room=Room(room_id=101, name="Room 101"),
        full_access=False,
    )

    assert result.label == LABEL_PRESENT


def test_visit_into_ended_session_is_not_in_room():
    ended = LiveGroupSession(active_group_id=3, group_id=10, room_id=101, start_time=datetime(2026, 2, 2, 8, 30), end_time=datetime(2026, 2, 2, 9, 20))

    machine = _in_room_machine(sessions=InMemorySessions({3: ended}))

    assert machine.resolve_location(1, True).label == LABEL_TRANSIT
    assert machine.resolve_location(1, False).label == LABEL_PRESENT
