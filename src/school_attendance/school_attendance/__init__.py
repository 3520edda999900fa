"""School attendance package.

Organized by feature modules (attendance, teacher_attendance, reports,
roster, calendar_sync, ...) with a thin Flask controller layer over
service/repository layers.
"""
