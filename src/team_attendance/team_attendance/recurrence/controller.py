from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import now_local, to_reference_datetime
from ..common.http import current_user_id, json_body, login_required
from ..common.validators import optional_int
from ..container import Container
from .model import RecurrenceTemplate


def template_to_json(t: RecurrenceTemplate) -> dict:
    return {
        "template_id": t.template_id,
        "organization_id": t.organization_id,
        "team_id": t.team_id,
        "title": t.title,
        "frequency": t.frequency.value,
        "weekdays": sorted(t.weekdays),
        "start_date": to_reference_datetime(t.start_date).isoformat(),
        "end_date": to_reference_datetime(t.end_date).isoformat(),
        "start_time": t.start_time,
        "end_time": t.end_time,
        "location": t.location,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/organizations/<int:org_id>/recurring-events", methods=["GET"], endpoint="recurring_list")
    @login_required
    def recurring_list(org_id: int):
        container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        rows = container.recurrence_service.list_templates(org_id)
        return jsonify({"success": True, "templates": [template_to_json(t) for t in rows]})

    @app.route("/api/recurring-events/preview", methods=["POST"], endpoint="recurring_preview")
    @login_required
    def recurring_preview():
        data = json_body()
        dates = container.recurrence_service.preview(
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            frequency=data.get("frequency", ""),
            weekdays=data.get("weekdays"),
        )
        return jsonify({"success": True, "count": len(dates), "dates": [to_reference_datetime(d).isoformat() for d in dates]})

    @app.route("/api/organizations/<int:org_id>/recurring-events", methods=["POST"], endpoint="recurring_create")
    @login_required
    def recurring_create(org_id: int):
        user_id = current_user_id()
        role = container.membership_service.role_in(user_id=user_id, organization_id=org_id)
        data = json_body()
        created = container.recurrence_service.create_template(
            current_role=role,
            created_by=user_id,
            organization_id=org_id,
            title=data.get("title", ""),
            frequency=data.get("frequency", ""),
            start_date=data.get("start_date", ""),
            end_date=data.get("end_date", ""),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            weekdays=data.get("weekdays"),
            team_id=optional_int(data.get("team_id")),
            location=data.get("location"),
        )
        return (
            jsonify(
                {
                    "success": True,
                    "template": template_to_json(created.template),
                    "occurrences": len(created.occurrence_dates),
                }
            ),
            201,
        )

    @app.route("/api/recurring-events/<int:template_id>", methods=["DELETE"], endpoint="recurring_delete")
    @login_required
    def recurring_delete(template_id: int):
        template = container.recurrence_service.get(template_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=template.organization_id)
        deleted = container.recurrence_service.delete_template(
            current_role=role,
            template_id=template_id,
            future_only=request.args.get("future_only", "0").lower() in {"1", "true", "yes"},
            today=now_local().date(),
        )
        return jsonify({"success": True, "deleted_occurrences": deleted})
