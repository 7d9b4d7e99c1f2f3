from __future__ import annotations

from enum import Enum


class LocationState(str, Enum):
    """Closed set of presence states; serialized to a label only at the boundary."""

    ABSENT = "ABSENT"
    PRESENT = "PRESENT"
    TRANSIT = "TRANSIT"
    PRESENT_IN_ROOM = "PRESENT_IN_ROOM"


class AccessReason(str, Enum):
    """Why a grant was (or was not) given."""

    ADMINISTRATOR = "administrator"
    LOCATION_READ = "location_read"
    GROUP_SUPERVISOR = "group_supervisor"
    NO_GROUP = "no_group"
    NOT_STAFF = "not_staff"
    NOT_SUPERVISOR = "not_supervisor"
    LOOKUP_FAILED = "lookup_failed"


class SupervisorRole(str, Enum):
    TEACHER = "teacher"
    SPECIALIST = "specialist"
