from __future__ import annotations

from flask import Blueprint, jsonify

from app.routevault.auth import request_payload
from app.routevault.modules.submissions.service import list_approved, submit_location, submit_route
from app.routevault.rbac import current_claims, require_auth
from app.routevault.store import get_store

bp = Blueprint("submissions", __name__)


@bp.get("/approved-data")
@require_auth
def approved_data():
    dataset = list_approved(get_store().read())
    return jsonify(dataset.to_dict())


@bp.post("/locations")
@require_auth
def locations_post():
    payload = request_payload()
    with get_store().transaction() as doc:
        submission = submit_location(doc, current_claims(), payload.get("name"))
    return jsonify({"message": "Location sent for moderation", "submissionId": submission.id}), 201


@bp.post("/routes")
@require_auth
def routes_post():
    payload = request_payload()
    with get_store().transaction() as doc:
        submission = submit_route(
            doc,
            current_claims(),
            payload.get("fromLocationId"),
            payload.get("toLocationId"),
            payload.get("videoUrl"),
        )
    return jsonify({"message": "Route sent for moderation", "submissionId": submission.id}), 201
