from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional, Sequence

from ..access.model import AccessGrant
from ..common.datetime_utils import to_rfc3339
from ..groups.model import Group, SupervisorContact
from ..presence.model import PresenceResult
from ..students.model import Person, Student


@dataclass(frozen=True)
class StudentResponse:
    """Wire DTO for a student. ``None`` means "not visible or not set" and is omitted."""

    id: int
    person_id: int
    first_name: str
    last_name: str
    school_class: str
    current_location: str
    bus: bool
    group_id: Optional[int] = None
    group_name: Optional[str] = None
    guardian_name: Optional[str] = None
    pickup_status: Optional[str] = None
    location_since: Optional[datetime] = None
    current_room: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    # Full access only
    tag_id: Optional[str] = None
    guardian_contact: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    extra_info: Optional[str] = None
    health_info: Optional[str] = None
    supervisor_notes: Optional[str] = None
    sick: Optional[bool] = None
    sick_since: Optional[datetime] = None

    # Limited access only
    group_supervisors: Optional[Sequence[SupervisorContact]] = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "person_id": self.person_id,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "school_class": self.school_class,
            "current_location": self.current_location,
            "bus": self.bus,
        }
        optional = {
            "group_id": self.group_id,
            "group_name": self.group_name,
            "guardian_name": self.guardian_name,
            "pickup_status": self.pickup_status,
            "location_since": to_rfc3339(self.location_since),
            "current_room": self.current_room,
            "created_at": to_rfc3339(self.created_at),
            "updated_at": to_rfc3339(self.updated_at),
            "tag_id": self.tag_id,
            "guardian_contact": self.guardian_contact,
            "guardian_email": self.guardian_email,
            "guardian_phone": self.guardian_phone,
            "extra_info": self.extra_info,
            "health_info": self.health_info,
            "supervisor_notes": self.supervisor_notes,
            "sick": self.sick,
            "sick_since": to_rfc3339(self.sick_since),
        }
        out.update({k: v for k, v in optional.items() if v is not None})

        if self.group_supervisors is not None:
            out["group_supervisors"] = [_supervisor_to_dict(s) for s in self.group_supervisors]
        return out


def _supervisor_to_dict(contact: SupervisorContact) -> dict[str, Any]:
    out: dict[str, Any] = {
        "id": contact.staff_id,
        "first_name": contact.first_name,
        "last_name": contact.last_name,
        "role": contact.role.value,
    }
    if contact.email:
        out["email"] = contact.email
    return out


def _non_empty(value: Optional[str]) -> Optional[str]:
    return value if value else None


class VisibilityProjector:
    """Builds the subset of a student's record the requester may see.

    Sensitive fields are never copied into the DTO for limited access, so
    there is nothing to strip afterwards. Limited callers get the group's
    supervisors instead, so they know whom to ask.
    """

    def project(
        self,
        *,
        student: Student,
        person: Person,
        group: Optional[Group],
        grant: AccessGrant,
        presence: PresenceResult,
        supervisors: Optional[Sequence[SupervisorContact]] = None,
    ) -> StudentResponse:
        full = grant.full_access

        base = dict(
            id=student.student_id,
            person_id=student.person_id,
            first_name=person.first_name,
            last_name=person.last_name,
            school_class=student.school_class,
            current_location=presence.label,
            bus=bool(student.bus),
            group_id=student.group_id,
            group_name=group.name if group else None,
            guardian_name=_non_empty(student.guardian_name),
            pickup_status=_non_empty(student.pickup_status),
            created_at=student.created_at,
            updated_at=student.updated_at,
        )

        if not full:
            contacts = list(supervisors) if supervisors is not None else None
            return StudentResponse(**base, group_supervisors=contacts)

        return StudentResponse(
            **base,
            location_since=presence.since,
            current_room=presence.room_name,
            tag_id=_non_empty(person.tag_id),
            guardian_contact=_non_empty(student.guardian_contact),
            guardian_email=_non_empty(student.guardian_email),
            guardian_phone=_non_empty(student.guardian_phone),
            extra_info=_non_empty(student.extra_info),
            health_info=_non_empty(student.health_info),
            supervisor_notes=_non_empty(student.supervisor_notes),
            sick=bool(student.sick),
            sick_since=student.sick_since if student.sick else None,
        )
