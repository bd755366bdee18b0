from __future__ import annotations

import csv
import io

from flask import Flask, Response, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import current_user_id, login_required
from ..container import Container
from ..core.exceptions import NotFoundError


def register(app: Flask, container: Container) -> None:
    def _report(team_id: int):
        team = container.memberships_repo.get_team(team_id)
        if not team:
            raise NotFoundError("Team not found")
        container.membership_service.role_in(user_id=current_user_id(), organization_id=team.organization_id)

        start = request.args.get("start")
        end = request.args.get("end")
        return container.report_service.team_report(
            team_id=team_id,
            start=parse_iso_date(start) if start else None,
            end=parse_iso_date(end) if end else None,
        )

    @app.route("/api/teams/<int:team_id>/report", methods=["GET"], endpoint="team_report")
    @login_required
    def team_report(team_id: int):
        report = _report(team_id)
        window = report.window
        return jsonify(
            {
                "success": True,
                "window": {"start": window.start.isoformat(), "end": window.end.isoformat()} if window else None,
                "rows": report.rows,
                "summary": report.summary,
            }
        )

    @app.route("/api/teams/<int:team_id>/report.csv", methods=["GET"], endpoint="team_report_csv")
    @login_required
    def team_report_csv(team_id: int):
        report = _report(team_id)

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(["Date", "Event", "Name", "Status", "Check in", "Check out", "Hours", "Note"])
        for r in report.rows:
            writer.writerow([r["date"], r["title"], r["full_name"], r["status"], r["check_in"], r["check_out"], r["hours"], r["note"]])

        return Response(
            buf.getvalue(),
            mimetype="text/csv",
            headers={"Content-Disposition": f"attachment; filename=team_{team_id}_attendance.csv"},
        )
