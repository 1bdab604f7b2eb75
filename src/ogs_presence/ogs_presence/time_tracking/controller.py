from __future__ import annotations

import io

from flask import Flask, request, send_file

from ..common.datetime_utils import now_local, parse_date_param, parse_rfc3339
from ..common.http import current_staff_id, json_body, login_required, ok
from ..common.validators import optional_non_negative, require_positive_id
from ..container import Container
from ..core.exceptions import ValidationError
from .model import BreakDurationUpdate, SessionUpdate


def _session_update_from(data: dict) -> SessionUpdate:
    breaks = data.get("breaks") or []
    if not isinstance(breaks, list):
        raise ValidationError("breaks must be a list")

    def as_int(key: str):
        value = data.get(key)
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValidationError(f"{key} must be a number")

    return SessionUpdate(
        check_in_time=parse_rfc3339(data["check_in_time"], "check_in_time") if data.get("check_in_time") else None,
        check_out_time=parse_rfc3339(data["check_out_time"], "check_out_time") if data.get("check_out_time") else None,
        break_minutes=as_int("break_minutes"),
        status=data.get("status"),
        notes=data.get("notes"),
        planned_duration_minutes=as_int("planned_duration_minutes"),
        breaks=tuple(
            BreakDurationUpdate(
                break_id=require_positive_id(b.get("id"), "break id"),
                duration_minutes=optional_non_negative(b.get("duration_minutes"), "duration_minutes") or 0,
            )
            for b in breaks
        ),
    )


def register(app: Flask, container: Container) -> None:
    service = container.work_session_service

    @app.route("/time-tracking/check-in", methods=["POST"], endpoint="tt_check_in")
    @login_required
    def check_in():
        data = json_body()
        session = service.check_in(current_staff_id(), data.get("status") or "present", now=now_local())
        return ok(session, 201)

    @app.route("/time-tracking/check-out", methods=["POST"], endpoint="tt_check_out")
    @login_required
    def check_out():
        return ok(service.check_out(current_staff_id(), now=now_local()))

    @app.route("/time-tracking/current", methods=["GET"], endpoint="tt_current")
    @login_required
    def current():
        return ok(service.get_current_session(current_staff_id()))

    @app.route("/time-tracking/history", methods=["GET"], endpoint="tt_history")
    @login_required
    def history():
        date_from = parse_date_param(request.args.get("from"), "from")
        date_to = parse_date_param(request.args.get("to"), "to")
        items = service.get_history(current_staff_id(), date_from, date_to, now=now_local())
        return ok(items)

    @app.route("/time-tracking/<int:session_id>", methods=["PUT"], endpoint="tt_update")
    @login_required
    def update(session_id: int):
        updates = _session_update_from(json_body())
        return ok(service.update_session(current_staff_id(), session_id, updates, now=now_local()))

    @app.route("/time-tracking/<int:session_id>/edits", methods=["GET"], endpoint="tt_edits")
    @login_required
    def edits(session_id: int):
        return ok(service.get_session_edits(session_id))

    @app.route("/time-tracking/break/start", methods=["POST"], endpoint="tt_break_start")
    @login_required
    def break_start():
        data = json_body()
        brk = service.start_break(
            current_staff_id(),
            data.get("planned_duration_minutes"),
            now=now_local(),
        )
        return ok(brk, 201)

    @app.route("/time-tracking/break/end", methods=["POST"], endpoint="tt_break_end")
    @login_required
    def break_end():
        return ok(service.end_break(current_staff_id(), now=now_local()))

    @app.route("/time-tracking/breaks/<int:session_id>", methods=["GET"], endpoint="tt_breaks")
    @login_required
    def breaks(session_id: int):
        return ok(service.get_session_breaks(session_id))

    @app.route("/time-tracking/presence-map", methods=["GET"], endpoint="tt_presence_map")
    @login_required
    def presence_map():
        return ok(service.get_today_presence_map(now=now_local()))

    @app.route("/time-tracking/export", methods=["GET"], endpoint="tt_export")
    @login_required
    def export():
        date_from = parse_date_param(request.args.get("from"), "from")
        date_to = parse_date_param(request.args.get("to"), "to")
        file = service.export_sessions(
            current_staff_id(),
            date_from,
            date_to,
            request.args.get("format", "csv"),
            now=now_local(),
        )
        return send_file(
            io.BytesIO(file.content),
            mimetype=file.mimetype,
            as_attachment=True,
            download_name=file.filename,
        )
