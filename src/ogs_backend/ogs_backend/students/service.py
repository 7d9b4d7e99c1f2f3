from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Any, Callable, Optional, Sequence

from ..access.model import AccessGrant, RequesterClaims
from ..access.resolver import AccessLevelResolver
from ..common.datetime_utils import now_local, now_utc, parse_iso_date, to_naive_utc, to_rfc3339
from ..common.validators import optional_bool, parse_id, reject_empty, require_non_empty
from ..core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, RFID_TAG_MAX_LENGTH, RFID_TAG_MIN_LENGTH
from ..core.enums import AccessReason, LocationState
from ..core.exceptions import AuthorizationError, NotFoundError, ValidationError
from ..groups.model import Group, SupervisorContact
from ..groups.repository import GroupRepository
from ..presence.snapshot import LocationSnapshotLoader
from ..presence.state_machine import PresenceStateMachine
from ..visibility.projector import VisibilityProjector
from .model import Person, Student, StudentFilter
from .repository import PersonRepository, StudentRepository

logger = logging.getLogger(__name__)

# Labels that never narrow a list query.
_IGNORED_LOCATION_FILTERS = {"", "Unknown"}


@dataclass(frozen=True)
class StudentPage:
    items: list[dict]
    page: int
    page_size: int
    total_records: int

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0:
            return 0
        return math.ceil(self.total_records / self.page_size)

    def pagination(self) -> dict:
        return {
            "current_page": self.page,
            "page_size": self.page_size,
            "total_pages": self.total_pages,
            "total_records": self.total_records,
        }


class StudentService:
    """Use cases around a single student record, access-scoped per requester.

    Only the subject lookup (the student itself) may fail a request. Group,
    supervisor, visit and room lookups degrade to less detailed output.
    """

    def __init__(
        self,
        students: StudentRepository,
        persons: PersonRepository,
        groups: GroupRepository,
        *,
        access: AccessLevelResolver,
        presence: PresenceStateMachine,
        snapshots: LocationSnapshotLoader,
        projector: Optional[VisibilityProjector] = None,
        clock: Callable[[], datetime] = now_local,
        utc_clock: Callable[[], datetime] = now_utc,
        default_page_size: int = DEFAULT_PAGE_SIZE,
    ):
        self._students = students
        self._persons = persons
        self._groups = groups
        self._access = access
        self._presence = presence
        self._snapshots = snapshots
        self._projector = projector or VisibilityProjector()
        self._clock = clock
        self._utc_clock = utc_clock
        self._default_page_size = int(default_page_size)

    # --- reads -------------------------------------------------------------

    def get_student(self, claims: RequesterClaims, student_id: int) -> dict:
        student = self._load_student(student_id)
        person = self._load_person(student)
        group = self._group_for(student)

        grant = self._access.resolve(claims, student)
        presence = self._presence.resolve_location(student.student_id, grant.full_access)

        supervisors = None
        if not grant.full_access:
            supervisors = self._supervisors_for(group)

        response = self._projector.project(
            student=student,
            person=person,
            group=group,
            grant=grant,
            presence=presence,
            supervisors=supervisors,
        ).to_dict()
        response["has_full_access"] = grant.full_access
        return response

    def list_students(
        self,
        claims: RequesterClaims,
        *,
        filters: StudentFilter,
        location: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        page_size: Optional[int] = None,
    ) -> StudentPage:
        page = page if page and page > 0 else DEFAULT_PAGE
        page_size = page_size if page_size and page_size > 0 else self._default_page_size

        total = self._students.count(filters=filters)
        students = list(self._students.list(filters=filters, limit=page_size, offset=(page - 1) * page_size))

        persons = self._persons.get_many([s.person_id for s in students])
        groups = self._groups_for(students)

        supervised = None
        if claims.staff_id is not None and not (claims.is_admin or claims.can_read_locations):
            supervised = self._access.supervised_group_ids(claims) or frozenset()

        snapshot = self._snapshots.load([s.student_id for s in students], self._clock().date())
        location = (location or "").strip()

        items: list[dict] = []
        for student in students:
            person = persons.get(student.person_id)
            if person is None:
                logger.warning("student_id=%s has no person record; skipped", student.student_id)
                continue

            grant = self._access.resolve(claims, student, supervised=supervised)
            presence = snapshot.resolve(student.student_id, grant.full_access)
            if location not in _IGNORED_LOCATION_FILTERS and presence.label != location:
                continue

            group = groups.get(student.group_id) if student.group_id is not None else None
            items.append(
                self._projector.project(
                    student=student,
                    person=person,
                    group=group,
                    grant=grant,
                    presence=presence,
                ).to_dict()
            )

        return StudentPage(items=items, page=page, page_size=page_size, total_records=total)

    def get_current_location(self, claims: RequesterClaims, student_id: int) -> dict:
        student = self._load_student(student_id)
        grant = self._access.resolve(claims, student)
        presence = self._presence.resolve_location(student.student_id, grant.full_access)

        out: dict[str, Any] = {"current_location": presence.label}
        if grant.full_access:
            if presence.room_name:
                out["current_room"] = presence.room_name
            if presence.since is not None:
                out["location_since"] = to_rfc3339(presence.since)
        return out

    def get_in_group_room(self, claims: RequesterClaims, student_id: int) -> dict:
        """Whether the student currently sits in their educational group's own room.

        Goes through the same presence resolution as ``current-location``, so a
        visit left open after check-out never counts.
        """

        student = self._load_student(student_id)
        if student.group_id is None:
            return {"in_group_room": False, "reason": "no_group"}

        grant = self._access.resolve(claims, student)
        if not grant.full_access:
            if grant.reason == AccessReason.NOT_SUPERVISOR:
                raise AuthorizationError("you do not supervise this student's group")
            raise AuthorizationError("unauthorized to view student room status")

        group = self._group_for(student)
        if group is None:
            return {"in_group_room": False, "reason": "no_group"}
        if group.room_id is None:
            return {"in_group_room": False, "reason": "group_no_room"}

        presence = self._presence.resolve_location(student.student_id, True)
        if presence.state != LocationState.PRESENT_IN_ROOM:
            return {"in_group_room": False, "reason": "no_active_visit"}

        out: dict[str, Any] = {
            "in_group_room": presence.room_id == group.room_id,
            "group_room_id": group.room_id,
            "current_room_id": presence.room_id,
        }
        if group.room is not None:
            out["group_room_name"] = group.room.name
        return out

    # --- writes ------------------------------------------------------------

    def create_student(self, claims: RequesterClaims, payload: dict) -> dict:
        first_name = require_non_empty(payload.get("first_name"), "first name")
        last_name = require_non_empty(payload.get("last_name"), "last name")
        school_class = require_non_empty(payload.get("school_class"), "school class")
        tag_id = _parse_tag_id(payload.get("tag_id"))
        birthday = _parse_birthday(payload.get("birthday"))
        group_id = parse_id(payload["group_id"], "group ID") if payload.get("group_id") is not None else None
        bus = optional_bool(payload.get("bus"), "bus")

        grant = self._access.authorize_modification(claims, group_id, "create")

        if group_id is not None and self._groups.get_by_id(group_id) is None:
            raise ValidationError("group not found")

        person_id = self._persons.create(
            first_name=first_name,
            last_name=last_name,
            birthday=birthday,
            tag_id=tag_id,
        )
        try:
            student_id = self._students.create(
                person_id=person_id,
                school_class=school_class,
                group_id=group_id,
                guardian_name=_trimmed_or_none(payload.get("guardian_name")),
                guardian_contact=_trimmed_or_none(payload.get("guardian_contact")),
                guardian_email=_trimmed_or_none(payload.get("guardian_email")),
                guardian_phone=_trimmed_or_none(payload.get("guardian_phone")),
                extra_info=payload.get("extra_info"),
                health_info=payload.get("health_info"),
                supervisor_notes=payload.get("supervisor_notes"),
                pickup_status=payload.get("pickup_status"),
                bus=bool(bus),
            )
        except Exception:
            self._cleanup_person(person_id)
            raise

        logger.info("student_id=%s created by account_id=%s", student_id, claims.account_id)
        return self._render_after_write(student_id, grant)

    def update_student(self, claims: RequesterClaims, student_id: int, payload: dict) -> dict:
        first_name = reject_empty(payload.get("first_name"), "first name")
        last_name = reject_empty(payload.get("last_name"), "last name")
        school_class = reject_empty(payload.get("school_class"), "school class")
        bus = optional_bool(payload.get("bus"), "bus")
        sick = optional_bool(payload.get("sick"), "sick")
        group_id = parse_id(payload["group_id"], "group ID") if payload.get("group_id") is not None else None

        student = self._load_student(student_id)
        person = self._load_person(student)

        grant = self._access.authorize_modification(claims, student.group_id, "update")

        person_changes: dict[str, Any] = {}
        if first_name is not None:
            person_changes["first_name"] = first_name
        if last_name is not None:
            person_changes["last_name"] = last_name
        if "birthday" in payload and payload["birthday"] is not None:
            person_changes["birthday"] = _parse_birthday(payload["birthday"])
        if "tag_id" in payload and payload["tag_id"] is not None:
            # Empty string clears the tag.
            person_changes["tag_id"] = _parse_tag_id(payload["tag_id"])
        if person_changes:
            self._persons.update(replace(person, **person_changes))

        changes: dict[str, Any] = {}
        if school_class is not None:
            changes["school_class"] = school_class
        if group_id is not None:
            changes["group_id"] = group_id
        for key in ("guardian_name", "guardian_contact"):
            if payload.get(key) is not None:
                changes[key] = _trimmed_or_none(payload[key])
        for key in ("guardian_email", "guardian_phone", "extra_info", "health_info", "supervisor_notes", "pickup_status"):
            if payload.get(key) is not None:
                changes[key] = payload[key]
        if bus is not None:
            changes["bus"] = bus
        if sick is not None:
            changes.update(_sick_changes(student, sick, self._utc_clock()))

        self._students.update(replace(student, **changes))
        logger.info("student_id=%s updated by account_id=%s", student.student_id, claims.account_id)
        return self._render_after_write(student.student_id, grant)

    def delete_student(self, claims: RequesterClaims, student_id: int) -> None:
        student = self._load_student(student_id)
        self._access.authorize_modification(claims, student.group_id, "delete")

        if not self._students.delete_by_id(student.student_id):
            raise NotFoundError("student not found")
        logger.info("student_id=%s deleted by account_id=%s", student.student_id, claims.account_id)

        try:
            self._persons.delete_by_id(student.person_id)
        except Exception:
            logger.warning("failed to delete person_id=%s after student deletion", student.person_id, exc_info=True)

    # --- helpers -----------------------------------------------------------

    def _render_after_write(self, student_id: int, grant: AccessGrant) -> dict:
        student = self._load_student(student_id)
        person = self._load_person(student)
        group = self._group_for(student)
        presence = self._presence.resolve_location(student.student_id, grant.full_access)
        return self._projector.project(
            student=student,
            person=person,
            group=group,
            grant=grant,
            presence=presence,
        ).to_dict()

    def _load_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if student is None:
            raise NotFoundError("student not found")
        return student

    def _load_person(self, student: Student) -> Person:
        person = self._persons.get_by_id(student.person_id)
        if person is None:
            raise LookupError("failed to get person data for student")
        return person

    def _group_for(self, student: Student) -> Optional[Group]:
        if student.group_id is None:
            return None
        return self._try("group", lambda: self._groups.get_by_id(student.group_id))

    def _groups_for(self, students: Sequence[Student]) -> dict[int, Group]:
        group_ids = sorted({s.group_id for s in students if s.group_id is not None})
        if not group_ids:
            return {}
        return self._try("group", lambda: self._groups.get_many(group_ids)) or {}

    def _supervisors_for(self, group: Optional[Group]) -> list[SupervisorContact]:
        if group is None:
            return []
        return list(self._try("group supervisors", lambda: self._groups.list_supervisors(group.group_id)) or [])

    def _cleanup_person(self, person_id: int) -> None:
        try:
            self._persons.delete_by_id(person_id)
        except Exception:
            logger.warning("failed to clean up person_id=%s after student creation failure", person_id, exc_info=True)

    @staticmethod
    def _try(what: str, fetch):
        try:
            return fetch()
        except Exception:
            logger.warning("%s lookup failed; continuing without it", what, exc_info=True)
            return None


def _trimmed_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = str(value).strip()
    return trimmed or None


def _parse_birthday(value: Optional[str]) -> Optional[date]:
    v = (value or "").strip()
    if not v:
        return None
    try:
        return parse_iso_date(v)
    except ValueError:
        raise ValidationError("invalid birthday format, expected YYYY-MM-DD")


def _parse_tag_id(value: Optional[str]) -> Optional[str]:
    v = (value or "").strip()
    if not v:
        return None
    if len(v) < RFID_TAG_MIN_LENGTH:
        raise ValidationError(f"tag_id must be at least {RFID_TAG_MIN_LENGTH} characters")
    if len(v) > RFID_TAG_MAX_LENGTH:
        raise ValidationError(f"tag_id must be at most {RFID_TAG_MAX_LENGTH} characters")
    return v


def _sick_changes(student: Student, sick: bool, now: datetime) -> dict[str, Any]:
    """Marking sick stamps ``sick_since`` once; clearing it drops the stamp.

    Stored as naive UTC, like every DATETIME column.
    """

    if not sick:
        return {"sick": False, "sick_since": None}
    if student.sick_since is not None:
        return {"sick": True, "sick_since": student.sick_since}
    return {"sick": True, "sick_since": to_naive_utc(now)}
