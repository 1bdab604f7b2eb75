from __future__ import annotations

from flask import Flask, session

from ..common.http import json_body, login_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    @app.route("/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        data = json_body()
        staff = container.auth_service.authenticate(data.get("username", ""), data.get("password", ""))
        session.clear()
        session["staff_id"] = staff.staff_id
        session["name"] = staff.full_name
        session["role"] = staff.role.value
        return ok(staff)

    @app.route("/auth/logout", methods=["POST"], endpoint="auth_logout")
    @login_required
    def logout():
        session.clear()
        return ok()
