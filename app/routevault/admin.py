"""Developer-only moderation endpoints: review queue, approve/reject, audit log."""
from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from app.routevault.audit import list_events
from app.routevault.models import Role
from app.routevault.modules.submissions.service import approve_submission, list_pending, reject_submission
from app.routevault.rbac import current_claims, require_auth, require_role
from app.routevault.store import get_store

bp = Blueprint("admin", __name__)


@bp.get("/pending-submissions")
@require_auth
@require_role(Role.DEVELOPER)
def pending_submissions():
    pending = list_pending(get_store().read())
    return jsonify([s.to_dict() for s in pending])


@bp.post("/submissions/<int:submission_id>/approve")
@require_auth
@require_role(Role.DEVELOPER)
def submission_approve(submission_id: int):
    with get_store().transaction() as doc:
        submission = approve_submission(doc, current_claims(), submission_id)
    current_app.logger.info("Submission %s (%s) approved", submission.id, submission.type.value)
    return jsonify({"message": "Submission approved"})


@bp.post("/submissions/<int:submission_id>/reject")
@require_auth
@require_role(Role.DEVELOPER)
def submission_reject(submission_id: int):
    with get_store().transaction() as doc:
        submission = reject_submission(doc, current_claims(), submission_id)
    current_app.logger.info("Submission %s (%s) rejected", submission.id, submission.type.value)
    return jsonify({"message": "Submission rejected"})


@bp.get("/logs")
@require_auth
@require_role(Role.DEVELOPER)
def logs():
    events = list_events(get_store().read())
    return jsonify([e.to_dict() for e in events])
