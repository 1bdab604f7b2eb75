from __future__ import annotations

import io
from datetime import date, datetime

import pandas as pd
import pytest

from src.ogs_presence.ogs_presence.core.enums import AbsenceType, WorkStatus
from src.ogs_presence.ogs_presence.core.exceptions import ValidationError
from src.ogs_presence.ogs_presence.time_tracking.export import EXPORT_COLUMNS

STAFF_ID = 2


@pytest.fixture
def seeded(sessions_repo, absences_repo):
    sessions_repo.add(
        staff_id=STAFF_ID,
        work_date=date(2026, 2, 2),
        status=WorkStatus.PRESENT,
        check_in_time=datetime(2026, 2, 2, 8, 0),
        check_out_time=datetime(2026, 2, 2, 16, 30),
        break_minutes=30,
        notes="Elterngespräch",
    )
    sessions_repo.add(
        staff_id=STAFF_ID,
        work_date=date(2026, 2, 5),
        status=WorkStatus.HOME_OFFICE,
        check_in_time=datetime(2026, 2, 5, 9, 0),
        check_out_time=datetime(2026, 2, 5, 13, 15),
    )
    absences_repo.create(
        staff_id=STAFF_ID,
        absence_type=AbsenceType.SICK,
        date_start=date(2026, 2, 3),
        date_end=date(2026, 2, 4),
        note="",
        created_by=STAFF_ID,
    )


def test_csv_has_bom_semicolons_and_merged_rows(work_sessions, seeded):
    file = work_sessions.export_sessions(
        STAFF_ID, date(2026, 2, 1), date(2026, 2, 28), "csv", now=datetime(2026, 3, 1, 9, 0)
    )

    assert file.filename == "zeiterfassung_2026-02-01_2026-02-28.csv"
    assert file.content.startswith(b"\xef\xbb\xbf")
    lines = file.content.decode("utf-8-sig").splitlines()
    assert lines[0] == ";".join(EXPORT_COLUMNS)
    assert lines[1] == "02.02.2026;Montag;08:00;16:30;30;8h 00min;In der OGS;Elterngespräch"
    assert lines[2].startswith("03.02.2026;Dienstag;--;--;--;--;Krank")
    assert lines[3].startswith("04.02.2026;Mittwoch;--")
    assert lines[4] == "05.02.2026;Donnerstag;09:00;13:15;0;4h 15min;Homeoffice;"
    assert len(lines) == 5


def test_absence_days_are_clipped_to_range(work_sessions, seeded):
    file = work_sessions.export_sessions(
        STAFF_ID, date(2026, 2, 4), date(2026, 2, 4), "csv", now=datetime(2026, 3, 1, 9, 0)
    )
    lines = file.content.decode("utf-8-sig").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("04.02.2026;Mittwoch")


def test_xlsx_export_is_readable(work_sessions, seeded):
    file = work_sessions.export_sessions(
        STAFF_ID, date(2026, 2, 1), date(2026, 2, 28), "xlsx", now=datetime(2026, 3, 1, 9, 0)
    )

    assert file.filename.endswith(".xlsx")
    df = pd.read_excel(io.BytesIO(file.content), sheet_name="Zeiterfassung", dtype=str)
    assert list(df.columns) == EXPORT_COLUMNS
    assert len(df) == 4
    assert df.iloc[-1]["Ort"] == "Homeoffice"


def test_unknown_format_is_invalid(work_sessions):
    with pytest.raises(ValidationError):
        work_sessions.export_sessions(STAFF_ID, date(2026, 2, 1), date(2026, 2, 2), "pdf")
