"""Example: calling the service layer directly, without Flask.

Controllers stay thin; access checks and presence resolution live in the services.
"""

import importlib

from config import get_settings_module

from src.ogs_backend.ogs_backend.access.model import RequesterClaims
from src.ogs_backend.ogs_backend.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    admin = RequesterClaims.from_session(account_id=1, permissions=["admin:*"])
    print(container.student_service.get_student(admin, 1))
    print(container.student_service.get_current_location(admin, 1))


if __name__ == "__main__":
    main()
