from __future__ import annotations

from flask import Flask

from ..common.datetime_utils import now_local
from ..common.http import admin_required, ok
from ..container import Container


def register(app: Flask, container: Container) -> None:
    reconciler = container.reconciler

    @app.route("/admin/cleanup/attendance/preview", methods=["GET"], endpoint="cleanup_preview")
    @admin_required
    def preview():
        return ok(reconciler.preview_attendance_cleanup(now=now_local()))

    @app.route("/admin/cleanup/run", methods=["POST"], endpoint="cleanup_run")
    @admin_required
    def run():
        results = reconciler.run_all(now=now_local())
        return ok({name: dict(vars(r), success=r.success) for name, r in results.items()})
