from __future__ import annotations

from datetime import date
from typing import Optional

from flask import Flask, request

from ..common.datetime_utils import now_local, parse_date_param
from ..common.http import current_role, json_body, login_required, ok
from ..common.validators import require_positive_id
from ..container import Container
from ..core.constants import DEFAULT_PAGE_SIZE
from ..core.exceptions import ValidationError
from .model import GroupSubstitution, SubstitutionInput


def substitution_json(sub: GroupSubstitution, today: date) -> dict:
    return {
        "id": sub.substitution_id,
        "group_id": sub.group_id,
        "regular_staff_id": sub.regular_staff_id,
        "substitute_staff_id": sub.substitute_staff_id,
        "start_date": sub.start_date.isoformat(),
        "end_date": sub.end_date.isoformat(),
        "reason": sub.reason,
        "duration_days": sub.duration_days,
        "is_active": sub.is_active_on(today),
    }


def _optional_id(value, field_name: str) -> Optional[int]:
    if value in (None, "", 0):
        return None
    return require_positive_id(value, field_name)


def _input_from(data: dict) -> SubstitutionInput:
    if not data.get("group_id"):
        raise ValidationError("group_id is required")
    if not data.get("substitute_staff_id"):
        raise ValidationError("substitute_staff_id is required")
    return SubstitutionInput(
        group_id=require_positive_id(data.get("group_id"), "group_id"),
        regular_staff_id=_optional_id(data.get("regular_staff_id"), "regular_staff_id"),
        substitute_staff_id=require_positive_id(data.get("substitute_staff_id"), "substitute_staff_id"),
        start_date=parse_date_param(data.get("start_date"), "start_date"),
        end_date=parse_date_param(data.get("end_date"), "end_date"),
        reason=data.get("reason") or "",
    )


def register(app: Flask, container: Container) -> None:
    service = container.substitution_service

    @app.route("/substitutions", methods=["GET"], endpoint="substitutions_list")
    @login_required
    def list_substitutions():
        page = request.args.get("page", 1, type=int)
        page_size = request.args.get("page_size", DEFAULT_PAGE_SIZE, type=int)
        items, total = service.list_substitutions(page, page_size)
        today = now_local().date()
        return ok(
            {
                "items": [substitution_json(s, today) for s in items],
                "page": page,
                "page_size": page_size,
                "total": total,
            }
        )

    @app.route("/substitutions/active", methods=["GET"], endpoint="substitutions_active")
    @login_required
    def active_substitutions():
        raw = request.args.get("date")
        day = parse_date_param(raw, "date") if raw else now_local().date()
        return ok([substitution_json(s, day) for s in service.get_active_substitutions(day)])

    @app.route("/substitutions", methods=["POST"], endpoint="substitutions_create")
    @login_required
    def create_substitution():
        now = now_local()
        sub = service.create_substitution(_input_from(json_body()), current_role=current_role(), now=now)
        return ok(substitution_json(sub, now.date()), 201)

    @app.route("/substitutions/<int:substitution_id>", methods=["GET"], endpoint="substitutions_get")
    @login_required
    def get_substitution(substitution_id: int):
        return ok(substitution_json(service.get_substitution(substitution_id), now_local().date()))

    @app.route("/substitutions/<int:substitution_id>", methods=["PUT"], endpoint="substitutions_update")
    @login_required
    def update_substitution(substitution_id: int):
        now = now_local()
        sub = service.update_substitution(
            substitution_id, _input_from(json_body()), current_role=current_role(), now=now
        )
        return ok(substitution_json(sub, now.date()))

    @app.route("/substitutions/<int:substitution_id>", methods=["DELETE"], endpoint="substitutions_delete")
    @login_required
    def delete_substitution(substitution_id: int):
        service.delete_substitution(substitution_id, current_role=current_role())
        return ok()
