from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional


@dataclass(frozen=True)
class Person:
    """Domain entity: the natural person behind a student (or staff member)."""

    person_id: int
    first_name: str
    last_name: str
    birthday: Optional[date] = None
    tag_id: Optional[str] = None


@dataclass(frozen=True)
class Student:
    """Domain entity: Student.

    References its Person by id; never owns the Person's lifecycle.
    """

    student_id: int
    person_id: int
    school_class: str
    group_id: Optional[int] = None
    guardian_name: Optional[str] = None
    guardian_contact: Optional[str] = None
    guardian_email: Optional[str] = None
    guardian_phone: Optional[str] = None
    extra_info: Optional[str] = None
    health_info: Optional[str] = None
    supervisor_notes: Optional[str] = None
    pickup_status: Optional[str] = None
    bus: bool = False
    sick: bool = False
    sick_since: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class StudentFilter:
    """Database-level list filters."""

    search: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    school_class: Optional[str] = None
    guardian_name: Optional[str] = None
    group_id: Optional[int] = None
