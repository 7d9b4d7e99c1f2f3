from __future__ import annotations

from typing import Any, Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_bool, db_cursor, fetchall, fetchone
from .model import Student, StudentFilter
from .repository import StudentRepository

_COLUMNS = """
    s.student_id, s.person_id, s.group_id, s.school_class,
    s.guardian_name, s.guardian_contact, s.guardian_email, s.guardian_phone,
    s.extra_info, s.health_info, s.supervisor_notes, s.pickup_status,
    s.bus, s.sick, s.sick_since, s.created_at, s.updated_at
"""


def _row_to_student(row: dict) -> Student:
    return Student(
        student_id=int(row["student_id"]),
        person_id=int(row["person_id"]),
        school_class=row["school_class"],
        group_id=int(row["group_id"]) if row.get("group_id") is not None else None,
        guardian_name=row.get("guardian_name"),
        guardian_contact=row.get("guardian_contact"),
        guardian_email=row.get("guardian_email"),
        guardian_phone=row.get("guardian_phone"),
        extra_info=row.get("extra_info"),
        health_info=row.get("health_info"),
        supervisor_notes=row.get("supervisor_notes"),
        pickup_status=row.get("pickup_status"),
        bus=as_bool(row.get("bus")),
        sick=as_bool(row.get("sick")),
        sick_since=row.get("sick_since"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


def _where(filters: StudentFilter) -> tuple[str, list[Any]]:
    clauses: list[str] = []
    params: list[Any] = []

    if filters.search:
        like = f"%{filters.search.strip()}%"
        clauses.append(
            "(p.first_name LIKE %s OR p.last_name LIKE %s"
            " OR CONCAT(p.first_name, ' ', p.last_name) LIKE %s"
            " OR CAST(s.student_id AS CHAR) LIKE %s)"
        )
        params.extend([like, like, like, like])
    if filters.first_name:
        clauses.append("p.first_name LIKE %s")
        params.append(f"%{filters.first_name.strip()}%")
    if filters.last_name:
        clauses.append("p.last_name LIKE %s")
        params.append(f"%{filters.last_name.strip()}%")
    if filters.school_class:
        clauses.append("s.school_class LIKE %s")
        params.append(f"%{filters.school_class.strip()}%")
    if filters.guardian_name:
        clauses.append("s.guardian_name LIKE %s")
        params.append(f"%{filters.guardian_name.strip()}%")
    if filters.group_id is not None:
        clauses.append("s.group_id=%s")
        params.append(int(filters.group_id))

    if not clauses:
        return "", params
    return "WHERE " + " AND ".join(clauses), params


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM students s WHERE s.student_id=%s", (student_id,))
            row = fetchone(cur)
            return _row_to_student(row) if row else None

    def list(self, *, filters: StudentFilter, limit: int, offset: int) -> Sequence[Student]:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM students s
                JOIN persons p ON p.person_id = s.person_id
                {where}
                ORDER BY p.last_name, p.first_name, s.student_id
                LIMIT %s OFFSET %s
                """,
                (*params, int(limit), int(offset)),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def count(self, *, filters: StudentFilter) -> int:
        where, params = _where(filters)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COUNT(*) AS total
                FROM students s
                JOIN persons p ON p.person_id = s.person_id
                {where}
                """,
                tuple(params),
            )
            row = fetchone(cur)
            return int(row["total"]) if row else 0

    def create(
        self,
        *,
        person_id: int,
        school_class: str,
        group_id: Optional[int] = None,
        guardian_name: Optional[str] = None,
        guardian_contact: Optional[str] = None,
        guardian_email: Optional[str] = None,
        guardian_phone: Optional[str] = None,
        extra_info: Optional[str] = None,
        health_info: Optional[str] = None,
        supervisor_notes: Optional[str] = None,
        pickup_status: Optional[str] = None,
        bus: bool = False,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO students(
                    person_id, group_id, school_class, guardian_name, guardian_contact,
                    guardian_email, guardian_phone, extra_info, health_info,
                    supervisor_notes, pickup_status, bus
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    person_id,
                    group_id,
                    school_class,
                    guardian_name,
                    guardian_contact,
                    guardian_email,
                    guardian_phone,
                    extra_info,
                    health_info,
                    supervisor_notes,
                    pickup_status,
                    1 if bus else 0,
                ),
            )
            return int(cur.lastrowid)

    def update(self, student: Student) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE students
                SET group_id=%s, school_class=%s, guardian_name=%s, guardian_contact=%s,
                    guardian_email=%s, guardian_phone=%s, extra_info=%s, health_info=%s,
                    supervisor_notes=%s, pickup_status=%s, bus=%s, sick=%s, sick_since=%s
                WHERE student_id=%s
                """,
                (
                    student.group_id,
                    student.school_class,
                    student.guardian_name,
                    student.guardian_contact,
                    student.guardian_email,
                    student.guardian_phone,
                    student.extra_info,
                    student.health_info,
                    student.supervisor_notes,
                    student.pickup_status,
                    1 if student.bus else 0,
                    1 if student.sick else 0,
                    student.sick_since,
                    student.student_id,
                ),
            )
            return cur.rowcount > 0

    def delete_by_id(self, student_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM students WHERE student_id=%s", (student_id,))
            return cur.rowcount > 0
