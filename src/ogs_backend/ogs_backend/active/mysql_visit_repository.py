from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Visit
from .repository import VisitRepository


def _row_to_visit(r: dict) -> Visit:
    return Visit(
        visit_id=int(r["visit_id"]),
        student_id=int(r["student_id"]),
        active_group_id=int(r["active_group_id"]),
        entry_time=r["entry_time"],
        exit_time=r.get("exit_time"),
    )


class MySQLVisitRepository(VisitRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_current_for_student(self, student_id: int) -> Optional[Visit]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT visit_id, student_id, active_group_id, entry_time, exit_time
                FROM visits
                WHERE student_id=%s AND exit_time IS NULL
                ORDER BY entry_time DESC
                LIMIT 1
                """,
                (student_id,),
            )
            r = fetchone(cur)
            return _row_to_visit(r) if r else None

    def get_current_for_students(self, student_ids: Sequence[int]) -> dict[int, Visit]:
        ids = [int(s) for s in student_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT visit_id, student_id, active_group_id, entry_time, exit_time
                FROM visits
                WHERE exit_time IS NULL AND student_id IN ({in_clause(ids)})
                ORDER BY entry_time ASC
                """,
                tuple(ids),
            )
            return {int(r["student_id"]): _row_to_visit(r) for r in fetchall(cur)}
