from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date, to_reference_datetime
from ..common.http import current_user_id, json_body, login_required
from ..common.validators import optional_int
from ..container import Container
from .model import Occurrence


def occurrence_to_json(o: Occurrence) -> dict:
    return {
        "occurrence_id": o.occurrence_id,
        "organization_id": o.organization_id,
        "team_id": o.team_id,
        "template_id": o.template_id,
        "title": o.title,
        # pinned to the reference hour so clients in any timezone read the same day
        "occurrence_date": to_reference_datetime(o.occurrence_date).isoformat(),
        "start_time": o.start_time,
        "end_time": o.end_time,
        "location": o.location,
        "is_ad_hoc": o.is_ad_hoc,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/organizations/<int:org_id>/events", methods=["GET"], endpoint="events_list")
    @login_required
    def events_list(org_id: int):
        container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        team_id = request.args.get("team_id", type=int)
        rows = container.occurrence_service.list_range(
            organization_id=org_id,
            start=parse_iso_date(request.args.get("start", "")),
            end=parse_iso_date(request.args.get("end", "")),
            team_id=team_id,
        )
        return jsonify({"success": True, "events": [occurrence_to_json(o) for o in rows]})

    @app.route("/api/organizations/<int:org_id>/events", methods=["POST"], endpoint="events_create")
    @login_required
    def events_create(org_id: int):
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        data = json_body()
        occurrence = container.occurrence_service.schedule(
            current_role=role,
            organization_id=org_id,
            title=data.get("title", ""),
            occurrence_date=parse_iso_date(data.get("date", "")),
            start_time=data.get("start_time", ""),
            end_time=data.get("end_time", ""),
            team_id=optional_int(data.get("team_id")),
            location=data.get("location"),
        )
        return jsonify({"success": True, "event": occurrence_to_json(occurrence)}), 201

    @app.route("/api/events/<int:occurrence_id>", methods=["DELETE"], endpoint="events_delete")
    @login_required
    def events_delete(occurrence_id: int):
        occurrence = container.occurrence_service.get(occurrence_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=occurrence.organization_id)
        container.occurrence_service.delete(current_role=role, occurrence_id=occurrence_id)
        return jsonify({"success": True})
