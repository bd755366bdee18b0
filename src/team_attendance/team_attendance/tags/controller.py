from __future__ import annotations

import io

from flask import Flask, jsonify, request, send_file

from ..attendance.controller import record_to_json
from ..attendance.model import ScanResult
from ..common.http import current_user_id, json_body, login_required
from ..common.validators import optional_int
from ..container import Container
from ..core.exceptions import ValidationError
from ..occurrences.controller import occurrence_to_json
from .model import Tag
from .qr import decode_qr_image, render_qr_png


def tag_to_json(t: Tag) -> dict:
    return {
        "tag_id": t.tag_id,
        "token": t.token,
        "name": t.name,
        "organization_id": t.organization_id,
        "is_active": t.is_active,
    }


def scan_to_json(result: ScanResult) -> dict:
    return {
        "success": True,
        "action": result.action.value,
        "record": record_to_json(result.record),
        "event": occurrence_to_json(result.occurrence),
    }


def _flag(value) -> bool:
    return str(value).lower() in {"1", "true", "yes"}


def register(app: Flask, container: Container) -> None:
    @app.route("/api/organizations/<int:org_id>/tags", methods=["GET"], endpoint="tags_list")
    @login_required
    def tags_list(org_id: int):
        container.membership_service.role_in(user_id=current_user_id(), organization_id=org_id)
        return jsonify({"success": True, "tags": [tag_to_json(t) for t in container.tag_service.list_active(org_id)]})

    @app.route("/api/organizations/<int:org_id>/tags", methods=["POST"], endpoint="tags_register")
    @login_required
    def tags_register(org_id: int):
        user_id = current_user_id()
        role = container.membership_service.role_in(user_id=user_id, organization_id=org_id)
        data = json_body()
        tag = container.tag_service.register(
            current_role=role,
            created_by=user_id,
            organization_id=org_id,
            name=data.get("name", ""),
            token=data.get("token"),
        )
        return jsonify({"success": True, "tag": tag_to_json(tag)}), 201

    @app.route("/api/tags/<int:tag_id>/deactivate", methods=["POST"], endpoint="tags_deactivate")
    @login_required
    def tags_deactivate(tag_id: int):
        tag = container.tag_service.get(tag_id)
        role = container.membership_service.role_in(user_id=current_user_id(), organization_id=tag.organization_id)
        tag = container.tag_service.deactivate(current_role=role, tag_id=tag_id)
        return jsonify({"success": True, "tag": tag_to_json(tag)})

    @app.route("/api/tags/<int:tag_id>/qr", methods=["GET"], endpoint="tags_qr_image")
    @login_required
    def tags_qr_image(tag_id: int):
        tag = container.tag_service.get(tag_id)
        container.membership_service.role_in(user_id=current_user_id(), organization_id=tag.organization_id)
        return send_file(io.BytesIO(render_qr_png(tag.token)), mimetype="image/png")

    @app.route("/api/scan", methods=["POST"], endpoint="scan")
    @login_required
    def scan():
        data = json_body()
        token = (data.get("token") or "").strip()
        if not token:
            raise ValidationError("Tag token is required")

        result = container.scan_resolver.resolve_scan(
            token=token,
            scanner_id=current_user_id(),
            on_behalf_of=optional_int(data.get("for_user_id")),
            team_id=optional_int(data.get("team_id")),
            bypass_early_check=_flag(data.get("bypass_early_check", False)),
        )
        return jsonify(scan_to_json(result))

    @app.route("/api/scan/image", methods=["POST"], endpoint="scan_image")
    @login_required
    def scan_image():
        """Decode a QR tag from an uploaded photo, then resolve it like a tag scan."""
        if "image" not in request.files:
            raise ValidationError("Missing image file")

        token = decode_qr_image(request.files["image"].stream)
        result = container.scan_resolver.resolve_scan(
            token=token,
            scanner_id=current_user_id(),
            on_behalf_of=request.form.get("for_user_id", type=int),
            team_id=request.form.get("team_id", type=int),
            bypass_early_check=_flag(request.form.get("bypass_early_check", "0")),
        )
        return jsonify(scan_to_json(result))
