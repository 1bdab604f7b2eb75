from __future__ import annotations

import io
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Sequence

import pandas as pd

from ..absences.model import StaffAbsence
from ..core.enums import AbsenceType, WorkStatus
from ..core.exceptions import ValidationError
from .model import SessionResponse

EXPORT_COLUMNS = ["Datum", "Wochentag", "Start", "Ende", "Pause (Min)", "Netto (Std)", "Ort", "Bemerkungen"]

# date.weekday(): Monday == 0
GERMAN_WEEKDAYS = ["Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"]

ABSENCE_LABELS = {
    AbsenceType.SICK: "Krank",
    AbsenceType.VACATION: "Urlaub",
    AbsenceType.TRAINING: "Fortbildung",
    AbsenceType.OTHER: "Sonstige",
}

CSV_MIMETYPE = "text/csv; charset=utf-8"
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass(frozen=True)
class ExportFile:
    content: bytes
    filename: str
    mimetype: str


def _format_net(net_minutes: int) -> str:
    return f"{net_minutes // 60}h {net_minutes % 60:02d}min"


def session_row(item: SessionResponse) -> list[str]:
    s = item.session
    return [
        s.work_date.strftime("%d.%m.%Y"),
        GERMAN_WEEKDAYS[s.work_date.weekday()],
        s.check_in_time.strftime("%H:%M"),
        s.check_out_time.strftime("%H:%M") if s.check_out_time else "",
        str(s.break_minutes),
        _format_net(item.net_minutes),
        "Homeoffice" if s.status == WorkStatus.HOME_OFFICE else "In der OGS",
        s.notes or "",
    ]


def absence_rows(absence: StaffAbsence, date_from: date, date_to: date) -> list[tuple[date, list[str]]]:
    """One row per absence day, clipped to the export range."""
    label = ABSENCE_LABELS.get(absence.absence_type, str(absence.absence_type.value))
    day = max(absence.date_start, date_from)
    last = min(absence.date_end, date_to)
    rows = []
    while day <= last:
        rows.append(
            (
                day,
                [day.strftime("%d.%m.%Y"), GERMAN_WEEKDAYS[day.weekday()], "--", "--", "--", "--", label, absence.note],
            )
        )
        day += timedelta(days=1)
    return rows


def build_export_frame(
    sessions: Sequence[SessionResponse],
    absences: Sequence[StaffAbsence],
    date_from: date,
    date_to: date,
) -> pd.DataFrame:
    """Sessions and absence days merged and sorted by date."""
    rows: list[tuple[date, list[str]]] = [(item.session.work_date, session_row(item)) for item in sessions]
    for absence in absences:
        rows.extend(absence_rows(absence, date_from, date_to))
    # Stable sort keeps sessions of a day in their original order.
    rows.sort(key=lambda r: r[0])
    return pd.DataFrame([r for _, r in rows], columns=EXPORT_COLUMNS)


def render_csv(df: pd.DataFrame) -> bytes:
    """Semicolon separated, UTF-8 with BOM so Excel picks up the umlauts."""
    buf = io.StringIO()
    df.to_csv(buf, sep=";", index=False, lineterminator="\n")
    return buf.getvalue().encode("utf-8-sig")


def render_xlsx(df: pd.DataFrame) -> bytes:
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Zeiterfassung")
        sheet = writer.sheets["Zeiterfassung"]
        for column in sheet.columns:
            sheet.column_dimensions[column[0].column_letter].width = 16
    return output.getvalue()


class SessionExporter:
    def export(
        self,
        sessions: Sequence[SessionResponse],
        absences: Sequence[StaffAbsence],
        date_from: date,
        date_to: date,
        fmt: str = "csv",
    ) -> ExportFile:
        fmt = (fmt or "csv").strip().lower()
        if fmt not in ("csv", "xlsx"):
            raise ValidationError("format must be one of 'csv', 'xlsx'")

        df = build_export_frame(sessions, absences, date_from, date_to)
        stem = f"zeiterfassung_{date_from.isoformat()}_{date_to.isoformat()}"
        if fmt == "xlsx":
            return ExportFile(content=render_xlsx(df), filename=f"{stem}.xlsx", mimetype=XLSX_MIMETYPE)
        return ExportFile(content=render_csv(df), filename=f"{stem}.csv", mimetype=CSV_MIMETYPE)
