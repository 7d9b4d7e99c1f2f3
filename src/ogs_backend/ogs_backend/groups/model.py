from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SupervisorRole


@dataclass(frozen=True)
class Room:
    room_id: int
    name: str


@dataclass(frozen=True)
class Group:
    """Educational group. ``room_id`` is its default room."""

    group_id: int
    name: str
    room_id: Optional[int] = None
    representative_id: Optional[int] = None
    room: Optional[Room] = None


@dataclass(frozen=True)
class SupervisorContact:
    """Staff member a limited-access caller can turn to."""

    staff_id: int
    first_name: str
    last_name: str
    role: SupervisorRole
    email: Optional[str] = None
