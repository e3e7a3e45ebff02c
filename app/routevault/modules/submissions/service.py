from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any
from urllib.parse import urlsplit

from app.routevault.audit import record_event
from app.routevault.errors import Conflict, NotFound, ValidationError, field_error
from app.routevault.models import (
    Dataset,
    Location,
    RouteProposal,
    StoreDocument,
    Submission,
    SubmissionType,
    route_key,
    time_id,
    utcnow_iso,
)

if TYPE_CHECKING:
    from app.routevault.security import Claims


def parse_positive_int(value: Any) -> int | None:
    """Accept ints and digit strings ("7"); reject bools, floats, zero and negatives."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, str) and value.strip().isdecimal():
        n = int(value.strip())
        return n if n > 0 else None
    return None


_HOST_LABEL = re.compile(r"[a-z0-9](?:[a-z0-9-]{0,61}[a-z0-9])?", re.IGNORECASE)


def is_valid_url(value: Any) -> bool:
    """http(s) URL whose host is localhost or dotted hostname labels; scheme may be omitted."""
    if not isinstance(value, str):
        return False
    candidate = value.strip()
    if not candidate or any(c.isspace() for c in candidate):
        return False
    if "://" not in candidate:
        candidate = f"http://{candidate}"
    try:
        parts = urlsplit(candidate)
        _ = parts.port  # ValueError on an out-of-range port
    except ValueError:
        return False
    host = parts.hostname or ""
    if parts.scheme.lower() not in ("http", "https"):
        return False
    if host == "localhost":
        return True
    try:
        ascii_host = host.encode("idna").decode("ascii")
    except UnicodeError:
        return False
    labels = ascii_host.split(".")
    return len(labels) > 1 and all(_HOST_LABEL.fullmatch(label) for label in labels)


def validate_location_payload(payload: dict) -> list[dict[str, str]]:
    """Validate location proposal payload. Returns list of field errors."""
    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        return [field_error("name", "Location name is required.")]
    return []


def validate_route_payload(payload: dict) -> list[dict[str, str]]:
    """Validate route proposal payload. Returns list of field errors."""
    errors = []
    if parse_positive_int(payload.get("fromLocationId")) is None:
        errors.append(field_error("fromLocationId", "Start location id must be a positive integer."))
    if parse_positive_int(payload.get("toLocationId")) is None:
        errors.append(field_error("toLocationId", "End location id must be a positive integer."))
    if not is_valid_url(payload.get("videoUrl")):
        errors.append(field_error("videoUrl", "Video URL is required and must be a valid URL."))
    return errors


def _enqueue(doc: StoreDocument, actor: "Claims", kind: SubmissionType, data: Location | RouteProposal) -> Submission:
    submission = Submission(
        id=time_id(sub.id for sub in doc.pending_submissions),
        type=kind,
        data=data,
        submitted_by=actor.username,
        submitted_by_id=actor.id,
        timestamp=utcnow_iso(),
    )
    doc.pending_submissions.append(submission)
    return submission


def submit_location(doc: StoreDocument, actor: "Claims", name: Any) -> Submission:
    """
    Queue a new location for review. Only approved names count as duplicates;
    the same name may be pending more than once.
    """
    errors = validate_location_payload({"name": name})
    if errors:
        raise ValidationError(errors)
    if doc.approved_data.has_location_named(name):
        raise Conflict("A location with this name already exists")

    taken = [loc.id for loc in doc.approved_data.locations]
    taken += [sub.data.id for sub in doc.pending_submissions if sub.type is SubmissionType.LOCATION]
    location = Location(id=time_id(taken), name=name)
    submission = _enqueue(doc, actor, SubmissionType.LOCATION, location)
    record_event(doc, actor=actor, action="add_location_submission", details={"locationName": name})
    return submission


def submit_route(doc: StoreDocument, actor: "Claims", from_location_id: Any, to_location_id: Any, video_url: Any) -> Submission:
    """
    Queue a video route between two approved locations. Location names are copied
    into the submission now and are not refreshed later.
    """
    errors = validate_route_payload(
        {"fromLocationId": from_location_id, "toLocationId": to_location_id, "videoUrl": video_url}
    )
    if errors:
        raise ValidationError(errors)

    from_id = parse_positive_int(from_location_id)
    to_id = parse_positive_int(to_location_id)
    from_location = doc.approved_data.find_location(from_id)
    to_location = doc.approved_data.find_location(to_id)
    if not from_location or not to_location:
        raise NotFound("One of the locations was not found")
    if route_key(from_id, to_id) in doc.approved_data.routes:
        raise Conflict("Route already exists")

    proposal = RouteProposal(
        from_location_id=from_id,
        to_location_id=to_id,
        from_location_name=from_location.name,
        to_location_name=to_location.name,
        video_url=video_url.strip(),
    )
    submission = _enqueue(doc, actor, SubmissionType.ROUTE, proposal)
    record_event(
        doc,
        actor=actor,
        action="add_route_submission",
        details={"fromLocation": from_location.name, "toLocation": to_location.name},
    )
    return submission


def _take_pending(doc: StoreDocument, submission_id: int) -> Submission:
    submission = doc.find_pending(submission_id)
    if not submission:
        raise NotFound("Submission not found")
    doc.pending_submissions = [s for s in doc.pending_submissions if s.id != submission_id]
    return submission


def approve_submission(doc: StoreDocument, actor: "Claims", submission_id: int) -> Submission:
    """
    Merge a pending submission into the approved dataset.
    Uniqueness is not re-checked here: two pending proposals with the same name can
    both be approved, and an approved route key is overwritten.
    """
    submission = _take_pending(doc, submission_id)
    if submission.type is SubmissionType.LOCATION:
        doc.approved_data.locations.append(submission.data)
    elif submission.type is SubmissionType.ROUTE:
        doc.approved_data.routes[submission.data.key] = submission.data.video_url

    record_event(
        doc,
        actor=actor,
        action="approve_submission",
        details={"submissionId": submission.id, "type": submission.type.value, "data": submission.data.to_dict()},
    )
    return submission


def reject_submission(doc: StoreDocument, actor: "Claims", submission_id: int) -> Submission:
    submission = _take_pending(doc, submission_id)
    record_event(
        doc,
        actor=actor,
        action="reject_submission",
        details={"submissionId": submission.id, "type": submission.type.value},
    )
    return submission


def list_pending(doc: StoreDocument) -> list[Submission]:
    return list(doc.pending_submissions)


def list_approved(doc: StoreDocument) -> Dataset:
    return doc.approved_data
