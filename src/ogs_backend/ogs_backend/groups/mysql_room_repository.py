from __future__ import annotations

from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Room
from .repository import RoomRepository


class MySQLRoomRepository(RoomRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, room_id: int) -> Optional[Room]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT room_id, room_name FROM rooms WHERE room_id=%s", (room_id,))
            row = fetchone(cur)
            if not row:
                return None
            return Room(room_id=int(row["room_id"]), name=row["room_name"])

    def get_many(self, room_ids: Sequence[int]) -> dict[int, Room]:
        ids = [int(r) for r in room_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT room_id, room_name FROM rooms WHERE room_id IN ({in_clause(ids)})", tuple(ids))
            return {int(r["room_id"]): Room(room_id=int(r["room_id"]), name=r["room_name"]) for r in fetchall(cur)}
