from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import AttendanceRecord
from .repository import AttendanceRepository


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        student_id=int(r["student_id"]),
        attendance_date=r["attendance_date"],
        check_in_time=r["check_in_time"],
        check_out_time=r.get("check_out_time"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_latest_for_student(self, student_id: int, day: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT attendance_id, student_id, attendance_date, check_in_time, check_out_time
                FROM attendance
                WHERE student_id=%s AND attendance_date=%s
                ORDER BY check_in_time DESC, attendance_id DESC
                LIMIT 1
                """,
                (student_id, day),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def get_latest_for_students(self, student_ids: Sequence[int], day: date) -> dict[int, AttendanceRecord]:
        ids = [int(s) for s in student_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT attendance_id, student_id, attendance_date, check_in_time, check_out_time
                FROM attendance
                WHERE attendance_date=%s AND student_id IN ({in_clause(ids)})
                ORDER BY check_in_time ASC, attendance_id ASC
                """,
                (day, *ids),
            )
            # Ascending order: the last row per student wins.
            return {int(r["student_id"]): _row_to_record(r) for r in fetchall(cur)}
