from __future__ import annotations

from typing import Optional, Sequence

from ..core.enums import SupervisorRole
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Group, Room, SupervisorContact
from .repository import GroupRepository

_SELECT_GROUP = """
    SELECT g.group_id, g.group_name, g.room_id, g.representative_id, r.room_name
    FROM education_groups g
    LEFT JOIN rooms r ON r.room_id = g.room_id
"""


def _row_to_group(row: dict) -> Group:
    room_id = row.get("room_id")
    room = None
    if room_id is not None and row.get("room_name") is not None:
        room = Room(room_id=int(room_id), name=row["room_name"])
    return Group(
        group_id=int(row["group_id"]),
        name=row["group_name"],
        room_id=int(room_id) if room_id is not None else None,
        representative_id=int(row["representative_id"]) if row.get("representative_id") is not None else None,
        room=room,
    )


class MySQLGroupRepository(GroupRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, group_id: int) -> Optional[Group]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_GROUP + " WHERE g.group_id=%s", (group_id,))
            row = fetchone(cur)
            return _row_to_group(row) if row else None

    def get_many(self, group_ids: Sequence[int]) -> dict[int, Group]:
        ids = [int(g) for g in group_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT_GROUP + f" WHERE g.group_id IN ({in_clause(ids)})", tuple(ids))
            return {int(r["group_id"]): _row_to_group(r) for r in fetchall(cur)}

    def list_supervisors(self, group_id: int) -> Sequence[SupervisorContact]:
        """Teachers of the group, then the representative specialist if not already listed."""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT st.staff_id, p.first_name, p.last_name, p.email, 'teacher' AS role
                FROM group_teachers gt
                JOIN staff st ON st.staff_id = gt.staff_id
                JOIN persons p ON p.person_id = st.person_id
                WHERE gt.group_id=%s
                UNION ALL
                SELECT st.staff_id, p.first_name, p.last_name, p.email, 'specialist' AS role
                FROM education_groups g
                JOIN staff st ON st.staff_id = g.representative_id
                JOIN persons p ON p.person_id = st.person_id
                WHERE g.group_id=%s
                """,
                (group_id, group_id),
            )
            rows = fetchall(cur)

        out: list[SupervisorContact] = []
        seen: set[int] = set()
        for r in rows:
            staff_id = int(r["staff_id"])
            if staff_id in seen:
                continue
            seen.add(staff_id)
            out.append(
                SupervisorContact(
                    staff_id=staff_id,
                    first_name=r["first_name"],
                    last_name=r["last_name"],
                    role=SupervisorRole(r["role"]),
                    email=r.get("email") or None,
                )
            )
        return out
