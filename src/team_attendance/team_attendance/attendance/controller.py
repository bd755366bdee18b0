from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_datetime
from ..common.http import current_user_id, json_body, login_required
from ..common.validators import optional_int
from ..container import Container
from ..core.enums import USE_DEFAULT
from .model import AttendanceRecord


def record_to_json(r: AttendanceRecord) -> dict:
    return {
        "attendance_id": r.attendance_id,
        "user_id": r.user_id,
        "occurrence_id": r.occurrence_id,
        "status": r.status.value,
        "check_in_time": r.check_in_time.isoformat() if r.check_in_time else None,
        "check_out_time": r.check_out_time.isoformat() if r.check_out_time else None,
        "hours": float(r.hours),
        "note": r.note,
        "is_ad_hoc": r.is_ad_hoc,
        "approved": r.approved,
    }


def _timestamp_override(data: dict, key: str):
    # absent key: default; null: clear; string: explicit value
    if key not in data:
        return USE_DEFAULT
    if data[key] is None:
        return None
    return parse_iso_datetime(str(data[key]))


def register(app: Flask, container: Container) -> None:
    @app.route("/api/events/<int:occurrence_id>/check-in", methods=["POST"], endpoint="attendance_check_in")
    @login_required
    def attendance_check_in(occurrence_id: int):
        actor_id = current_user_id()
        data = json_body()
        record = container.attendance_service.check_in(
            actor_id=actor_id,
            user_id=optional_int(data.get("user_id")) or actor_id,
            occurrence_id=occurrence_id,
        )
        return jsonify({"success": True, "record": record_to_json(record)})

    @app.route("/api/events/<int:occurrence_id>/check-out", methods=["POST"], endpoint="attendance_check_out")
    @login_required
    def attendance_check_out(occurrence_id: int):
        actor_id = current_user_id()
        data = json_body()
        record = container.attendance_service.check_out(
            actor_id=actor_id,
            user_id=optional_int(data.get("user_id")) or actor_id,
            occurrence_id=occurrence_id,
        )
        return jsonify({"success": True, "record": record_to_json(record)})

    @app.route("/api/events/<int:occurrence_id>/attendance/<int:user_id>", methods=["PUT"], endpoint="attendance_mark")
    @login_required
    def attendance_mark(occurrence_id: int, user_id: int):
        occurrence = container.occurrence_service.get(occurrence_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=occurrence.organization_id)
        data = json_body()
        record = container.attendance_service.mark(
            current_role=role,
            user_id=user_id,
            occurrence_id=occurrence_id,
            status=data.get("status", ""),
            note=data.get("note"),
            check_in=_timestamp_override(data, "check_in_time"),
            check_out=_timestamp_override(data, "check_out_time"),
        )
        return jsonify({"success": True, "record": record_to_json(record)})

    @app.route("/api/events/<int:occurrence_id>/auto-checkout", methods=["POST"], endpoint="attendance_auto_checkout")
    @login_required
    def attendance_auto_checkout(occurrence_id: int):
        occurrence = container.occurrence_service.get(occurrence_id)
        container.membership_service.role_in(user_id=current_user_id(), organization_id=occurrence.organization_id)
        closed = container.attendance_service.auto_check_out(occurrence_id=occurrence_id)
        return jsonify({"success": True, "closed": closed})

    @app.route("/api/me/attendance", methods=["GET"], endpoint="attendance_history")
    @login_required
    def attendance_history():
        limit = request.args.get("limit", default=30, type=int)
        rows = container.attendance_service.history(current_user_id(), limit=limit)
        return jsonify({"success": True, "records": [record_to_json(r) for r in rows]})
