from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceRecord, LiveGroupSession, Visit


class AttendanceRepository(Protocol):
    def get_latest_for_student(self, student_id: int, day: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_latest_for_students(self, student_ids: Sequence[int], day: date) -> dict[int, AttendanceRecord]:
        raise NotImplementedError


class VisitRepository(Protocol):
    def get_current_for_student(self, student_id: int) -> Optional[Visit]:
        """Open visit (no exit time) of the student, if any."""

        raise NotImplementedError

    def get_current_for_students(self, student_ids: Sequence[int]) -> dict[int, Visit]:
        raise NotImplementedError


class LiveSessionRepository(Protocol):
    def get_by_id(self, active_group_id: int) -> Optional[LiveGroupSession]:
        raise NotImplementedError

    def get_many(self, active_group_ids: Sequence[int]) -> dict[int, LiveGroupSession]:
        raise NotImplementedError
