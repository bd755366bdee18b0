from __future__ import annotations

from flask import Flask, jsonify

from ..attendance.controller import record_to_json
from ..common.http import current_user_id, json_body, login_required
from ..common.validators import optional_int
from ..container import Container
from ..core.exceptions import ValidationError
from ..tags.controller import scan_to_json
from .model import PendingAdHocCheckIn


def pending_to_json(p: PendingAdHocCheckIn) -> dict:
    return {
        "attendance_id": p.attendance_id,
        "user_id": p.user_id,
        "full_name": p.full_name,
        "occurrence_id": p.occurrence_id,
        "team_id": p.team_id,
        "team_name": p.team_name,
        "date": p.occurrence_date.isoformat(),
        "start_time": p.start_time,
        "end_time": p.end_time,
        "check_in_time": p.check_in_time.isoformat() if p.check_in_time else None,
        "note": p.note,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/scan/ad-hoc", methods=["POST"], endpoint="adhoc_register")
    @login_required
    def adhoc_register():
        data = json_body()
        team_id = optional_int(data.get("team_id"))
        if not data.get("token") or team_id is None:
            raise ValidationError("Tag token and team are required")

        result = container.adhoc_service.register(
            token=str(data["token"]),
            user_id=current_user_id(),
            team_id=team_id,
            start_time=data.get("start_time"),
            end_time=data.get("end_time"),
            note=data.get("note"),
        )
        return jsonify(scan_to_json(result)), 201

    @app.route("/api/organizations/<int:org_id>/ad-hoc/pending", methods=["GET"], endpoint="adhoc_pending")
    @login_required
    def adhoc_pending(org_id: int):
        rows = container.adhoc_service.list_pending(actor_id=current_user_id(), organization_id=org_id)
        return jsonify({"success": True, "pending": [pending_to_json(p) for p in rows]})

    @app.route("/api/ad-hoc/<int:attendance_id>/approve", methods=["POST"], endpoint="adhoc_approve")
    @login_required
    def adhoc_approve(attendance_id: int):
        record = container.adhoc_service.approve(actor_id=current_user_id(), attendance_id=attendance_id)
        return jsonify({"success": True, "record": record_to_json(record)})

    @app.route("/api/ad-hoc/<int:attendance_id>/deny", methods=["POST"], endpoint="adhoc_deny")
    @login_required
    def adhoc_deny(attendance_id: int):
        container.adhoc_service.deny(actor_id=current_user_id(), attendance_id=attendance_id)
        return jsonify({"success": True})
