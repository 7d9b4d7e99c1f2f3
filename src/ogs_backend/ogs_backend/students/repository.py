from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Person, Student, StudentFilter


class StudentRepository(Protocol):
    """Repository interface for Student.

    Note (DIP): the service layer depends on this interface, never on a concrete DB.
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list(self, *, filters: StudentFilter, limit: int, offset: int) -> Sequence[Student]:
        raise NotImplementedError

    def count(self, *, filters: StudentFilter) -> int:
        raise NotImplementedError

    def create(
        self,
        *,
        person_id: int,
        school_class: str,
        group_id: Optional[int] = None,
        guardian_name: Optional[str] = None,
        guardian_contact: Optional[str] = None,
        guardian_email: Optional[str] = None,
        guardian_phone: Optional[str] = None,
        extra_info: Optional[str] = None,
        health_info: Optional[str] = None,
        supervisor_notes: Optional[str] = None,
        pickup_status: Optional[str] = None,
        bus: bool = False,
    ) -> int:
        raise NotImplementedError

    def update(self, student: Student) -> bool:
        raise NotImplementedError

    def delete_by_id(self, student_id: int) -> bool:
        raise NotImplementedError


class PersonRepository(Protocol):
    def get_by_id(self, person_id: int) -> Optional[Person]:
        raise NotImplementedError

    def get_many(self, person_ids: Sequence[int]) -> dict[int, Person]:
        raise NotImplementedError

    def create(
        self,
        *,
        first_name: str,
        last_name: str,
        birthday: Optional[date] = None,
        tag_id: Optional[str] = None,
    ) -> int:
        raise NotImplementedError

    def update(self, person: Person) -> bool:
        raise NotImplementedError

    def delete_by_id(self, person_id: int) -> bool:
        raise NotImplementedError
