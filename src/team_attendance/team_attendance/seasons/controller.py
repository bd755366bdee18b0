from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import now_local
from ..common.http import current_user_id, json_body, login_required
from ..container import Container
from .model import Season


def season_to_json(s: Season) -> dict:
    return {
        "season_id": s.season_id,
        "organization_id": s.organization_id,
        "name": s.name,
        "start_month": s.start_month,
        "end_month": s.end_month,
        "crosses_year": s.crosses_year,
    }


def register(app: Flask, container: Container) -> None:
    @app.route("/api/organizations/<int:org_id>/seasons", methods=["GET"], endpoint="seasons_list")
    @login_required
    def seasons_list(org_id: int):
        container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        rows = container.season_service.list_for_organization(org_id)
        return jsonify({"success": True, "seasons": [season_to_json(s) for s in rows]})

    @app.route("/api/organizations/<int:org_id>/seasons", methods=["POST"], endpoint="seasons_create")
    @login_required
    def seasons_create(org_id: int):
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        data = json_body()
        season = container.season_service.create(
            current_role=role,
            organization_id=org_id,
            name=data.get("name", ""),
            start_month=data.get("start_month"),
            end_month=data.get("end_month"),
        )
        return jsonify({"success": True, "season": season_to_json(season)}), 201

    @app.route("/api/seasons/<int:season_id>", methods=["PUT"], endpoint="seasons_update")
    @login_required
    def seasons_update(season_id: int):
        existing = container.season_service.get(season_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=existing.organization_id)
        data = json_body()
        season = container.season_service.update(
            current_role=role,
            season_id=season_id,
            name=data.get("name", existing.name),
            start_month=data.get("start_month", existing.start_month),
            end_month=data.get("end_month", existing.end_month),
        )
        return jsonify({"success": True, "season": season_to_json(season)})

    @app.route("/api/seasons/<int:season_id>", methods=["DELETE"], endpoint="seasons_delete")
    @login_required
    def seasons_delete(season_id: int):
        existing = container.season_service.get(season_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=existing.organization_id)
        container.season_service.delete(current_role=role, season_id=season_id)
        return jsonify({"success": True})

    @app.route("/api/teams/<int:team_id>/season", methods=["GET"], endpoint="team_season")
    @login_required
    def team_season(team_id: int):
        window = container.season_service.window_for_team(team_id)
        return jsonify(
            {
                "success": True,
                "label": container.season_service.team_season_label(team_id),
                "window": {"start": window.start.isoformat(), "end": window.end.isoformat()} if window else None,
                "active": container.season_service.is_team_active(team_id, today=now_local().date()),
            }
        )
