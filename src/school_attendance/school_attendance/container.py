from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .core.constants import DEFAULT_MARK_RETRY_LIMIT, DEFAULT_PERIODS_PER_DAY, DEFAULT_TOKEN_MAX_AGE_SECONDS
from .database.connection import DBConfig, DatabaseConnection
from .notifications.gateway import HttpSmsGateway, LoggingSmsGateway, SmsGateway
from .notifications.service import NotificationService
from .reports.service import ReportService
from .students.mysql_student_repository import MySQLStudentRepository
from .students.repository import StudentRepository
from .students.service import StudentService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService
from .users.tokens import TokenService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    students_repo: StudentRepository
    attendance_repo: AttendanceRepository

    auth_service: AuthService
    user_service: UserService
    student_service: StudentService
    attendance_service: AttendanceService
    report_service: ReportService
    notification_service: NotificationService


def assemble(
    *,
    users_repo: UserRepository,
    students_repo: StudentRepository,
    attendance_repo: AttendanceRepository,
    sms_gateway: SmsGateway,
    secret_key: str,
    conn: Optional[DatabaseConnection] = None,
    periods_per_day: int = DEFAULT_PERIODS_PER_DAY,
    mark_retry_limit: int = DEFAULT_MARK_RETRY_LIMIT,
    token_max_age_seconds: int = DEFAULT_TOKEN_MAX_AGE_SECONDS,
) -> Container:
    """Wire services on top of already-built repositories."""

    tokens = TokenService(secret_key, max_age_seconds=token_max_age_seconds)

    return Container(
        conn=conn,
        users_repo=users_repo,
        students_repo=students_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo, tokens),
        user_service=UserService(users_repo),
        student_service=StudentService(students_repo),
        attendance_service=AttendanceService(
            attendance_repo,
            periods_per_day=periods_per_day,
            retry_limit=mark_retry_limit,
        ),
        report_service=ReportService(students_repo, attendance_repo),
        notification_service=NotificationService(students_repo, sms_gateway),
    )


def build_sms_gateway(settings: Any) -> SmsGateway:
    api_url = getattr(settings, "SMS_API_URL", "")
    if not api_url:
        return LoggingSmsGateway()
    return HttpSmsGateway(
        api_url,
        api_key=getattr(settings, "SMS_API_KEY", ""),
        sender=getattr(settings, "SMS_SENDER", ""),
        timeout=float(getattr(settings, "SMS_TIMEOUT", 10.0)),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))

    return assemble(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        sms_gateway=build_sms_gateway(settings),
        secret_key=str(getattr(settings, "SECRET_KEY")),
        periods_per_day=int(getattr(settings, "PERIODS_PER_DAY", DEFAULT_PERIODS_PER_DAY)),
        mark_retry_limit=int(getattr(settings, "MARK_RETRY_LIMIT", DEFAULT_MARK_RETRY_LIMIT)),
        token_max_age_seconds=int(getattr(settings, "TOKEN_MAX_AGE_SECONDS", DEFAULT_TOKEN_MAX_AGE_SECONDS)),
    )
