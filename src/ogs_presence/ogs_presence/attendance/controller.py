from __future__ import annotations

from flask import Flask, g, request

from ..common.datetime_utils import now_local, parse_date_param
from ..common.http import admin_required, device_auth_required, json_body, ok
from ..container import Container


def _student_json(student):
    if student is None:
        return None
    return {
        "id": student.student_id,
        "name": student.full_name,
        "group_id": student.group_id,
    }


def register(app: Flask, container: Container) -> None:
    device_required = device_auth_required(container.device_auth_service)

    @app.route("/attendance/status/<rfid>", methods=["GET"], endpoint="attendance_status")
    @device_required
    def attendance_status(rfid: str):
        student, view = container.attendance_service.get_status_by_rfid(rfid, now=now_local())
        data = {"student": _student_json(student)}
        data.update(
            {
                "status": view.status,
                "date": view.date,
                "check_in_time": view.check_in_time,
                "check_out_time": view.check_out_time,
                "checked_in_by": view.checked_in_by,
                "checked_out_by": view.checked_out_by,
            }
        )
        return ok(data)

    @app.route("/attendance/toggle", methods=["POST"], endpoint="attendance_toggle")
    @device_required
    def attendance_toggle():
        data = json_body()
        result = container.attendance_service.toggle_by_rfid(
            data.get("rfid", ""),
            staff_id=g.device.staff_id,
            device_id=g.device.device_id,
            action=data.get("action", "confirm"),
            now=now_local(),
        )
        return ok(
            {
                "action": result.action,
                "student": _student_json(result.student),
                "attendance": result.record,
            }
        )

    @app.route("/admin/attendance", methods=["GET"], endpoint="admin_attendance_for_date")
    @admin_required
    def attendance_for_date():
        day = parse_date_param(request.args.get("date") or now_local().date().isoformat(), "date")
        return ok(container.attendance_service.list_for_date(day))
