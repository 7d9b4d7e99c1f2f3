from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .repository import SupervisionRepository


class MySQLSupervisionRepository(SupervisionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_supervised_group_ids(self, staff_id: int) -> Sequence[int]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT gt.group_id FROM group_teachers gt WHERE gt.staff_id=%s
                UNION
                SELECT g.group_id FROM education_groups g WHERE g.representative_id=%s
                UNION
                SELECT ag.group_id
                FROM active_group_supervisors ags
                JOIN active_groups ag ON ag.active_group_id = ags.active_group_id
                WHERE ags.staff_id=%s AND ags.end_time IS NULL AND ag.end_time IS NULL
                """,
                (staff_id, staff_id, staff_id),
            )
            return [int(r["group_id"]) for r in fetchall(cur)]
