from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import LocationState

LABEL_ABSENT = "Abwesend"
LABEL_PRESENT = "Anwesend"
LABEL_TRANSIT = "Unterwegs"
ROOM_LABEL_PREFIX = "Anwesend - "


@dataclass(frozen=True)
class PresenceResult:
    """Where a student is right now, as far as the requester may know.

    ``room_name``/``room_id`` are only set for PRESENT_IN_ROOM. ``since`` is
    only set when the requester has full access.
    """

    state: LocationState
    room_id: Optional[int] = None
    room_name: Optional[str] = None
    since: Optional[datetime] = None

    @property
    def label(self) -> str:
        if self.state == LocationState.PRESENT_IN_ROOM:
            return f"{ROOM_LABEL_PREFIX}{self.room_name}"
        if self.state == LocationState.TRANSIT:
            return LABEL_TRANSIT
        if self.state == LocationState.PRESENT:
            return LABEL_PRESENT
        return LABEL_ABSENT

    @classmethod
    def absent(cls, *, since: Optional[datetime] = None) -> "PresenceResult":
        return cls(state=LocationState.ABSENT, since=since)
