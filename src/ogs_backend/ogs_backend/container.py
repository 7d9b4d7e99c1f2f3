from __future__ import annotations

from dataclasses import dataclass

from .access.resolver import AccessLevelResolver
from .active.mysql_attendance_repository import MySQLAttendanceRepository
from .active.mysql_session_repository import MySQLLiveSessionRepository
from .active.mysql_visit_repository import MySQLVisitRepository
from .core.constants import DEFAULT_PAGE_SIZE
from .database.connection import DBConfig, DatabaseConnection
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.mysql_room_repository import MySQLRoomRepository
from .groups.mysql_supervision_repository import MySQLSupervisionRepository
from .presence.snapshot import LocationSnapshotLoader
from .presence.state_machine import PresenceStateMachine
from .students.mysql_person_repository import MySQLPersonRepository
from .students.mysql_student_repository import MySQLStudentRepository
from .students.service import StudentService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    students_repo: MySQLStudentRepository
    persons_repo: MySQLPersonRepository
    groups_repo: MySQLGroupRepository
    rooms_repo: MySQLRoomRepository
    supervision_repo: MySQLSupervisionRepository
    attendance_repo: MySQLAttendanceRepository
    visits_repo: MySQLVisitRepository
    sessions_repo: MySQLLiveSessionRepository

    access_resolver: AccessLevelResolver
    presence: PresenceStateMachine
    student_service: StudentService


def build_container(*, db_config: dict, default_page_size: int = DEFAULT_PAGE_SIZE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    students_repo = MySQLStudentRepository(conn)
    persons_repo = MySQLPersonRepository(conn)
    groups_repo = MySQLGroupRepository(conn)
    rooms_repo = MySQLRoomRepository(conn)
    supervision_repo = MySQLSupervisionRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    visits_repo = MySQLVisitRepository(conn)
    sessions_repo = MySQLLiveSessionRepository(conn)

    access_resolver = AccessLevelResolver(supervision_repo)
    presence = PresenceStateMachine(attendance_repo, visits_repo, sessions_repo, rooms_repo)
    snapshots = LocationSnapshotLoader(attendance_repo, visits_repo, sessions_repo, rooms_repo)

    student_service = StudentService(
        students_repo,
        persons_repo,
        groups_repo,
        access=access_resolver,
        presence=presence,
        snapshots=snapshots,
        default_page_size=default_page_size,
    )

    return Container(
        conn=conn,
        students_repo=students_repo,
        persons_repo=persons_repo,
        groups_repo=groups_repo,
        rooms_repo=rooms_repo,
        supervision_repo=supervision_repo,
        attendance_repo=attendance_repo,
        visits_repo=visits_repo,
        sessions_repo=sessions_repo,
        access_resolver=access_resolver,
        presence=presence,
        student_service=student_service,
    )
