from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import LiveGroupSession
from .repository import LiveSessionRepository


def _row_to_session(r: dict) -> LiveGroupSession:
    return LiveGroupSession(
        active_group_id=int(r["active_group_id"]),
        group_id=int(r["group_id"]),
        room_id=int(r["room_id"]) if r.get("room_id") is not None else None,
        start_time=r["start_time"],
        end_time=r.get("end_time"),
    )


class MySQLLiveSessionRepository(LiveSessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, active_group_id: int) -> Optional[LiveGroupSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT active_group_id, group_id, room_id, start_time, end_time
                FROM active_groups
                WHERE active_group_id=%s
                """,
                (active_group_id,),
            )
            r = fetchone(cur)
            return _row_to_session(r) if r else None

    def get_many(self, active_group_ids: Sequence[int]) -> dict[int, LiveGroupSession]:
        ids = [int(a) for a in active_group_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT active_group_id, group_id, room_id, start_time, end_time
                FROM active_groups
                WHERE active_group_id IN ({in_clause(ids)})
                """,
                tuple(ids),
            )
            return {int(r["active_group_id"]): _row_to_session(r) for r in fetchall(cur)}
