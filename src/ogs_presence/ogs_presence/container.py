from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .absences.mysql_absence_repository import MySQLAbsenceRepository
from .absences.service import AbsenceService
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .cleanup.factory import CloseStrategyFactory
from .cleanup.service import StaleSessionReconciler
from .database.connection import DBConfig, DatabaseConnection
from .staff.mysql_device_repository import MySQLDeviceRepository
from .staff.mysql_staff_repository import MySQLStaffRepository
from .staff.service import AuthService, DeviceAuthService
from .students.mysql_student_repository import MySQLStudentRepository
from .substitutions.mysql_substitution_repository import MySQLSubstitutionRepository
from .substitutions.service import SubstitutionService
from .time_tracking.calculator.standard_calculator import StandardSessionCalculator
from .time_tracking.export import SessionExporter
from .time_tracking.mysql_break_repository import MySQLWorkSessionBreakRepository
from .time_tracking.mysql_edit_repository import MySQLWorkSessionEditRepository
from .time_tracking.mysql_supervision_repository import MySQLSupervisionRepository
from .time_tracking.mysql_work_session_repository import MySQLWorkSessionRepository
from .time_tracking.service import WorkSessionService


@dataclass(frozen=True)
class Container:
    """Services used by the HTTP layer. Tests build one from in-memory fakes."""

    auth_service: AuthService
    device_auth_service: DeviceAuthService
    attendance_service: AttendanceService
    work_session_service: WorkSessionService
    reconciler: StaleSessionReconciler
    absence_service: AbsenceService
    substitution_service: SubstitutionService

    conn: Optional[DatabaseConnection] = None


def build_container(*, db_config: dict) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    staff_repo = MySQLStaffRepository(conn)
    device_repo = MySQLDeviceRepository(conn)
    students_repo = MySQLStudentRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    sessions_repo = MySQLWorkSessionRepository(conn)
    breaks_repo = MySQLWorkSessionBreakRepository(conn)
    edits_repo = MySQLWorkSessionEditRepository(conn)
    supervisions_repo = MySQLSupervisionRepository(conn)
    absences_repo = MySQLAbsenceRepository(conn)
    substitutions_repo = MySQLSubstitutionRepository(conn)

    reconciler = StaleSessionReconciler(
        attendance_repo,
        sessions_repo,
        breaks_repo,
        strategy_factory=CloseStrategyFactory(),
    )
    work_session_service = WorkSessionService(
        sessions_repo,
        breaks_repo,
        edits_repo,
        calculator=StandardSessionCalculator(),
        absences=absences_repo,
        supervisions=supervisions_repo,
        reconciler=reconciler,
        exporter=SessionExporter(),
    )

    return Container(
        auth_service=AuthService(staff_repo),
        device_auth_service=DeviceAuthService(device_repo, staff_repo),
        attendance_service=AttendanceService(attendance_repo, students_repo),
        work_session_service=work_session_service,
        reconciler=reconciler,
        absence_service=AbsenceService(absences_repo),
        substitution_service=SubstitutionService(substitutions_repo),
        conn=conn,
    )
