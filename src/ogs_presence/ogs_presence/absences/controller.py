from __future__ import annotations

from flask import Flask, request

from ..common.datetime_utils import parse_date_param
from ..common.http import current_staff_id, json_body, login_required, ok
from ..container import Container
from .model import AbsenceUpdate


def register(app: Flask, container: Container) -> None:
    service = container.absence_service

    @app.route("/time-tracking/absences", methods=["GET"], endpoint="absences_list")
    @login_required
    def list_absences():
        date_from = parse_date_param(request.args.get("from"), "from")
        date_to = parse_date_param(request.args.get("to"), "to")
        return ok(service.get_absences_for_range(current_staff_id(), date_from, date_to))

    @app.route("/time-tracking/absences", methods=["POST"], endpoint="absences_create")
    @login_required
    def create_absence():
        data = json_body()
        absence = service.create_absence(
            current_staff_id(),
            data.get("absence_type", ""),
            data.get("date_start", ""),
            data.get("date_end", ""),
            data.get("note", ""),
        )
        return ok(absence, 201)

    @app.route("/time-tracking/absences/<int:absence_id>", methods=["PUT"], endpoint="absences_update")
    @login_required
    def update_absence(absence_id: int):
        data = json_body()
        updates = AbsenceUpdate(
            absence_type=data.get("absence_type"),
            date_start=data.get("date_start"),
            date_end=data.get("date_end"),
            note=data.get("note"),
        )
        return ok(service.update_absence(current_staff_id(), absence_id, updates))

    @app.route("/time-tracking/absences/<int:absence_id>", methods=["DELETE"], endpoint="absences_delete")
    @login_required
    def delete_absence(absence_id: int):
        service.delete_absence(current_staff_id(), absence_id)
        return ok()
