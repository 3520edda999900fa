"""Example: drive the service layer directly, without Flask.

Controllers are a thin layer; the reconciliation and reporting logic lives in services.
"""

import importlib
import json

from config import get_settings_module

from src.school_attendance.school_attendance.container import build_container
from src.school_attendance.school_attendance.core.enums import SubjectKind


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, timezone=settings.TIMEZONE)

    result = container.normalizer.submit(
        SubjectKind.TEACHER,
        [
            {"teacherId": "T1", "status": "present"},
            {"teacherId": "T2", "status": "absent", "reason": "Medical leave"},
        ],
    )
    print(json.dumps(result.to_dict(), indent=2))

    today = container.calendar.today().day
    print(json.dumps(container.report_service.daily_teacher_summary(today), indent=2))


if __name__ == "__main__":
    main()
