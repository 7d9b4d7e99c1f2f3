from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Optional, TypeVar

from ..active.model import AttendanceRecord, LiveGroupSession, Visit
from ..active.repository import AttendanceRepository, LiveSessionRepository, VisitRepository
from ..common.datetime_utils import now_local
from ..core.enums import LocationState
from ..groups.model import Room
from ..groups.repository import RoomRepository
from .model import PresenceResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def derive_presence(
    *,
    attendance: Optional[AttendanceRecord],
    visit: Optional[Visit],
    session: Optional[LiveGroupSession],
    room: Optional[Room],
    full_access: bool,
) -> PresenceResult:
    """Pure transition function over already fetched facts.

    Evaluated in order, first match wins:

    1. no attendance record             -> ABSENT
    2. attendance closed                -> ABSENT (since = check-out, full access only)
    3. attendance open, no usable room  -> TRANSIT (full access) / PRESENT (limited)
    4. open visit in a named room       -> PRESENT_IN_ROOM (since = visit entry, full access only)

    A visit is only trusted while the attendance record is open, and the
    session/room must belong to that visit and the session must still be
    running; anything else folds into the less specific state.
    """

    if attendance is None:
        return PresenceResult.absent()

    if not attendance.is_open:
        return PresenceResult.absent(since=attendance.check_out_time if full_access else None)

    if (
        visit is not None
        and visit.is_open
        and session is not None
        and session.active_group_id == visit.active_group_id
        and session.end_time is None
        and room is not None
        and session.room_id == room.room_id
        and room.name
    ):
        return PresenceResult(
            state=LocationState.PRESENT_IN_ROOM,
            room_id=room.room_id,
            room_name=room.name,
            since=visit.entry_time if full_access else None,
        )

    if full_access:
        return PresenceResult(state=LocationState.TRANSIT)
    return PresenceResult(state=LocationState.PRESENT)


class PresenceStateMachine:
    """Resolves a single student's presence from the attendance/visit ledgers.

    Every lookup failure is treated as missing data; resolution never raises.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        visits: VisitRepository,
        sessions: LiveSessionRepository,
        rooms: RoomRepository,
        *,
        clock: Callable[[], datetime] = now_local,
    ):
        self._attendance = attendance
        self._visits = visits
        self._sessions = sessions
        self._rooms = rooms
        self._clock = clock

    def resolve_location(self, student_id: int, full_access: bool, *, now: Optional[datetime] = None) -> PresenceResult:
        now = now or self._clock()

        attendance = _safe(lambda: self._attendance.get_latest_for_student(student_id, now.date()), "attendance", student_id)
        if attendance is None or not attendance.is_open:
            return derive_presence(attendance=attendance, visit=None, session=None, room=None, full_access=full_access)

        visit = _safe(lambda: self._visits.get_current_for_student(student_id), "visit", student_id)
        session = None
        if visit is not None and visit.active_group_id > 0:
            session = _safe(lambda: self._sessions.get_by_id(visit.active_group_id), "live session", student_id)

        room = None
        if session is not None and session.room_id is not None:
            room = _safe(lambda: self._rooms.get_by_id(session.room_id), "room", student_id)

        return derive_presence(attendance=attendance, visit=visit, session=session, room=room, full_access=full_access)


def _safe(fetch: Callable[[], Optional[T]], what: str, student_id: int) -> Optional[T]:
    try:
        return fetch()
    except Exception:
        logger.warning("%s lookup failed for student_id=%s; degrading presence", what, student_id, exc_info=True)
        return None
