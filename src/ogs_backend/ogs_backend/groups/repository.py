from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Group, Room, SupervisorContact


class GroupRepository(Protocol):
    """Group directory: group → default room and supervising staff."""

    def get_by_id(self, group_id: int) -> Optional[Group]:
        raise NotImplementedError

    def get_many(self, group_ids: Sequence[int]) -> dict[int, Group]:
        raise NotImplementedError

    def list_supervisors(self, group_id: int) -> Sequence[SupervisorContact]:
        raise NotImplementedError


class RoomRepository(Protocol):
    def get_by_id(self, room_id: int) -> Optional[Room]:
        raise NotImplementedError

    def get_many(self, room_ids: Sequence[int]) -> dict[int, Room]:
        raise NotImplementedError


class SupervisionRepository(Protocol):
    def list_supervised_group_ids(self, staff_id: int) -> Sequence[int]:
        """Groups the staff member supervises right now.

        Covers educational groups (teacher or representative) and groups
        with a running live session the staff member supervises.
        """

        raise NotImplementedError
