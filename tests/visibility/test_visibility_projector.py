from __future__ import annotations

from datetime import datetime

from src.ogs_backend.ogs_backend.access.model import AccessGrant
from src.ogs_backend.ogs_backend.core.enums import AccessReason, LocationState, SupervisorRole
from src.ogs_backend.ogs_backend.groups.model import Group, SupervisorContact
from src.ogs_backend.ogs_backend.presence.model import PresenceResult
from src.ogs_backend.ogs_backend.students.model import Person, Student
from src.ogs_backend.ogs_backend.visibility.projector import VisibilityProjector

SENSITIVE = {
    "location_since",
    "current_room",
    "tag_id",
    "guardian_contact",
    "guardian_email",
    "guardian_phone",
    "extra_info",
    "health_info",
    "supervisor_notes",
    "sick",
    "sick_since",
}

PERSON = Person(person_id=2, first_name="Mia", last_name="Klein", tag_id="ABCDEF0123")
STUDENT = Student(
    student_id=1,
    person_id=2,
    school_class="3a",
    group_id=10,
    guardian_name="Eva Klein",
    guardian_contact="via school office",
    guardian_email="eva@example.org",
    guardian_phone="0123",
    extra_info="likes chess",
    health_info="nut allergy",
    supervisor_notes="quiet",
    bus=True,
    sick=False,
)
GROUP = Group(group_id=10, name="Sonnen")
IN_ROOM = PresenceResult(state=LocationState.PRESENT_IN_ROOM, room_id=101, room_name="Room 101", since=datetime(2026, 2, 2, 9, 0))


def test_full_access_exposes_everything_but_birthday():
    out = VisibilityProjector().project(
        student=STUDENT,
        person=PERSON,
        group=GROUP,
        grant=AccessGrant(full_access=True, reason=AccessReason.ADMINISTRATOR),
        presence=IN_ROOM,
    ).to_dict()

    assert out["current_location"] == "Anwesend - Room 101"
    assert out["location_since"] == "2026-02-02T09:00:00Z"
    assert out["current_room"] == "Room 101"
    assert out["tag_id"] == "ABCDEF0123"
    assert out["health_info"] == "nut allergy"
    assert out["group_name"] == "Sonnen"
    assert out["sick"] is False
    assert "sick_since" not in out
    assert "birthday" not in out
    assert "group_supervisors" not in out


def test_limited_access_never_carries_sensitive_fields():
    presence = PresenceResult(state=LocationState.PRESENT_IN_ROOM, room_id=101, room_name="Room 101")
    supervisors = [SupervisorContact(staff_id=7, first_name="Jonas", last_name="Berg", role=SupervisorRole.TEACHER, email="jb@example.org")]

    out = VisibilityProjector().project(
        student=STUDENT,
        person=PERSON,
        group=GROUP,
        grant=AccessGrant(full_access=False, reason=AccessReason.NOT_SUPERVISOR),
        presence=presence,
        supervisors=supervisors,
    ).to_dict()

    assert SENSITIVE.isdisjoint(out)
    assert out["current_location"] == "Anwesend - Room 101"
    assert out["guardian_name"] == "Eva Klein"
    assert out["bus"] is True
    assert out["group_supervisors"] == [
        {"id": 7, "first_name": "Jonas", "last_name": "Berg", "role": "teacher", "email": "jb@example.org"}
    ]


def test_sick_since_only_shown_while_sick():
    sick = Student(student_id=1, person_id=2, school_class="3a", sick=True, sick_since=datetime(2026, 2, 1, 7, 30))

    out = VisibilityProjector().project(
        student=sick,
        person=PERSON,
        group=None,
        grant=AccessGrant(full_access=True, reason=AccessReason.LOCATION_READ),
        presence=PresenceResult.absent(),
    ).to_dict()

    assert out["sick"] is True
    assert out["sick_since"] == "2026-02-01T07:30:00Z"
    assert "group_id" not in out
