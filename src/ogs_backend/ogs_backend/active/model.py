from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one check-in of a student into the facility."""

    attendance_id: int
    student_id: int
    attendance_date: date
    check_in_time: datetime
    check_out_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.check_out_time is None


@dataclass(frozen=True)
class LiveGroupSession:
    """A cohort occupying a room for a supervised activity ("active group")."""

    active_group_id: int
    group_id: int
    room_id: Optional[int]
    start_time: datetime
    end_time: Optional[datetime] = None


@dataclass(frozen=True)
class Visit:
    """Student attached to a live group session."""

    visit_id: int
    student_id: int
    active_group_id: int
    entry_time: datetime
    exit_time: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.exit_time is None
