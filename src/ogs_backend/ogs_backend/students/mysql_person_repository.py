from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_clause
from .model import Person
from .repository import PersonRepository


def _row_to_person(row: dict) -> Person:
    return Person(
        person_id=int(row["person_id"]),
        first_name=row["first_name"],
        last_name=row["last_name"],
        birthday=row.get("birthday"),
        tag_id=row.get("tag_id"),
    )


class MySQLPersonRepository(PersonRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, person_id: int) -> Optional[Person]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT person_id, first_name, last_name, birthday, tag_id
                FROM persons
                WHERE person_id=%s
                """,
                (person_id,),
            )
            row = fetchone(cur)
            return _row_to_person(row) if row else None

    def get_many(self, person_ids: Sequence[int]) -> dict[int, Person]:
        ids = [int(p) for p in person_ids]
        if not ids:
            return {}
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT person_id, first_name, last_name, birthday, tag_id
                FROM persons
                WHERE person_id IN ({in_clause(ids)})
                """,
                tuple(ids),
            )
            return {int(r["person_id"]): _row_to_person(r) for r in fetchall(cur)}

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        birthday: Optional[date] = None,
        tag_id: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO persons(first_name, last_name, birthday, tag_id)
                VALUES(%s,%s,%s,%s)
                """,
                (first_name, last_name, birthday, tag_id),
            )
            return int(cur.lastrowid)

    def update(self, person: Person) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE persons
                SET first_name=%s, last_name=%s, birthday=%s, tag_id=%s
                WHERE person_id=%s
                """,
                (person.first_name, person.last_name, person.birthday, person.tag_id, person.person_id),
            )
            return cur.rowcount > 0

    def delete_by_id(self, person_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM persons WHERE person_id=%s", (person_id,))
            return cur.rowcount > 0
