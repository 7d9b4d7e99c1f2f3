from __future__ import annotations

from datetime import date, datetime

from src.ogs_backend.ogs_backend.active.model import AttendanceRecord, LiveGroupSession, Visit
from src.ogs_backend.ogs_backend.groups.model import Room
from src.ogs_backend.ogs_backend.presence.snapshot import LocationSnapshot, LocationSnapshotLoader

TODAY = date(2026, 2, 2)


class InMemoryAttendance:
    def __init__(self, records: dict[int, AttendanceRecord]):
        self.records = records

    def get_latest_for_students(self, student_ids, day):
        return {sid: r for sid, r in self.records.items() if sid in student_ids and r.attendance_date == day}


class InMemoryVisits:
    def __init__(self, visits: dict[int, Visit], *, fail: bool = False):
        self.visits = visits
        self.fail = fail
        self.requested: list[list[int]] = []

    def get_current_for_students(self, student_ids):
        self.requested.append(list(student_ids))
        if self.fail:
            raise RuntimeError("visits unavailable")
        return {sid: v for sid, v in self.visits.items() if sid in student_ids}


class InMemorySessions:
    def __init__(self, sessions: dict[int, LiveGroupSession]):
        self.sessions = sessions

    def get_many(self, ids):
        return {i: self.sessions[i] for i in ids if i in self.sessions}


class InMemoryRooms:
    def __init__(self, rooms: dict[int, Room]):
        self.rooms = rooms

    def get_many(self, ids):
        return {i: self.rooms[i] for i in ids if i in self.rooms}


def _loader(*, visits_fail: bool = False):
    attendance = InMemoryAttendance(
        {
            1: AttendanceRecord(1, 1, TODAY, datetime(2026, 2, 2, 8, 0)),
            2: AttendanceRecord(2, 2, TODAY, datetime(2026, 2, 2, 8, 0)),
            3: AttendanceRecord(3, 3, TODAY, datetime(2026, 2, 2, 8, 0), datetime(2026, 2, 2, 12, 0)),
        }
    )
    visits = InMemoryVisits(
        {
            1: Visit(11, 1, 5, datetime(2026, 2, 2, 9, 0)),
            3: Visit(13, 3, 5, datetime(2026, 2, 2, 9, 0)),
        },
        fail=visits_fail,
    )
    sessions = InMemorySessions({5: LiveGroupSession(5, 10, 101, datetime(2026, 2, 2, 8, 30))})
    rooms = InMemoryRooms({101: Room(101, "Room 101")})
    return LocationSnapshotLoader(attendance, visits, sessions, rooms), visits


def test_snapshot_resolves_every_state_for_a_page():
    loader, _ = _loader()

    snapshot = loader.load([1, 2, 3, 4], TODAY)

    assert snapshot.resolve(1, True).label == "Anwesend - Room 101"
    assert snapshot.resolve(2, True).label == "Unterwegs"
    assert snapshot.resolve(2, False).label == "Anwesend"
    assert snapshot.resolve(3, True).since == datetime(2026, 2, 2, 12, 0)
    assert snapshot.resolve(4, True).label == "Abwesend"


def test_visits_are_only_loaded_for_checked_in_students():
    loader, visits = _loader()

    loader.load([1, 2, 3], TODAY)

    assert visits.requested == [[1, 2]]


def test_batch_lookup_failure_degrades_to_checked_in_state():
    loader, _ = _loader(visits_fail=True)

    snapshot = loader.load([1], TODAY)

    assert snapshot.resolve(1, True).label == "Unterwegs"
    assert snapshot.resolve(1, False).label == "Anwesend"


def test_empty_page_loads_nothing():
    loader, visits = _loader()

    assert loader.load([], TODAY) == LocationSnapshot()
    assert visits.requested == []
