from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Sequence

from ..active.model import AttendanceRecord, LiveGroupSession, Visit
from ..active.repository import AttendanceRepository, LiveSessionRepository, VisitRepository
from ..groups.model import Room
from ..groups.repository import RoomRepository
from .model import PresenceResult
from .state_machine import derive_presence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationSnapshot:
    """Presence facts for a page of students, loaded with one query per ledger.

    Resolution runs the same transition function as the single-student path.
    """

    attendances: dict[int, AttendanceRecord] = field(default_factory=dict)
    visits: dict[int, Visit] = field(default_factory=dict)
    sessions: dict[int, LiveGroupSession] = field(default_factory=dict)
    rooms: dict[int, Room] = field(default_factory=dict)

    def resolve(self, student_id: int, full_access: bool) -> PresenceResult:
        attendance = self.attendances.get(student_id)
        visit = self.visits.get(student_id)
        session = self.sessions.get(visit.active_group_id) if visit else None
        room = self.rooms.get(session.room_id) if session and session.room_id is not None else None
        return derive_presence(attendance=attendance, visit=visit, session=session, room=room, full_access=full_access)


class LocationSnapshotLoader:
    def __init__(
        self,
        attendance: AttendanceRepository,
        visits: VisitRepository,
        sessions: LiveSessionRepository,
        rooms: RoomRepository,
    ):
        self._attendance = attendance
        self._visits = visits
        self._sessions = sessions
        self._rooms = rooms

    def load(self, student_ids: Sequence[int], day: date) -> LocationSnapshot:
        ids = sorted({int(s) for s in student_ids})
        if not ids:
            return LocationSnapshot()

        attendances = _safe_many(lambda: self._attendance.get_latest_for_students(ids, day), "attendance")
        # Visits only matter for students inside the building.
        open_ids = [sid for sid, rec in attendances.items() if rec.is_open]
        visits = _safe_many(lambda: self._visits.get_current_for_students(open_ids), "visit") if open_ids else {}

        session_ids = sorted({v.active_group_id for v in visits.values() if v.active_group_id > 0})
        sessions = _safe_many(lambda: self._sessions.get_many(session_ids), "live session") if session_ids else {}

        room_ids = sorted({s.room_id for s in sessions.values() if s.room_id is not None})
        rooms = _safe_many(lambda: self._rooms.get_many(room_ids), "room") if room_ids else {}

        return LocationSnapshot(attendances=attendances, visits=visits, sessions=sessions, rooms=rooms)


def _safe_many(fetch: Callable[[], dict], what: str) -> dict:
    try:
        return dict(fetch() or {})
    except Exception:
        logger.warning("batch %s lookup failed; degrading presence", what, exc_info=True)
        return {}
