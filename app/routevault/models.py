from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Role(str, Enum):
    USER = "user"
    DEVELOPER = "developer"


class SubmissionType(str, Enum):
    LOCATION = "location"
    ROUTE = "route"


class SubmissionStatus(str, Enum):
    """Only PENDING is ever persisted; approve/reject delete the record."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def time_id(taken: Iterable[int] = ()) -> int:
    """Epoch-millisecond id, bumped past any id already in `taken`."""
    now = int(time.time() * 1000)
    highest = max(taken, default=0)
    return now if now > highest else highest + 1


def route_key(from_location_id: int, to_location_id: int) -> str:
    return f"{from_location_id}|{to_location_id}"


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    role: Role = Role.USER

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "username": self.username, "passwordHash": self.password_hash, "role": self.role.value}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> User:
        return cls(
            id=int(raw["id"]),
            username=str(raw["username"]),
            password_hash=str(raw.get("passwordHash") or raw["password"]),
            role=Role(raw.get("role") or Role.USER.value),
        )


@dataclass
class Location:
    id: int
    name: str

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Location:
        return cls(id=int(raw["id"]), name=str(raw["name"]))


@dataclass
class RouteProposal:
    from_location_id: int
    to_location_id: int
    from_location_name: str
    to_location_name: str
    video_url: str

    @property
    def key(self) -> str:
        return route_key(self.from_location_id, self.to_location_id)

    def to_dict(self) -> dict[str, Any]:
        return {
            "fromLocationId": self.from_location_id,
            "toLocationId": self.to_location_id,
            "fromLocationName": self.from_location_name,
            "toLocationName": self.to_location_name,
            "videoUrl": self.video_url,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> RouteProposal:
        return cls(
            from_location_id=int(raw["fromLocationId"]),
            to_location_id=int(raw["toLocationId"]),
            from_location_name=str(raw.get("fromLocationName") or ""),
            to_location_name=str(raw.get("toLocationName") or ""),
            video_url=str(raw["videoUrl"]),
        )


@dataclass
class Submission:
    id: int
    type: SubmissionType
    data: Location | RouteProposal
    submitted_by: str
    submitted_by_id: int
    timestamp: str
    status: SubmissionStatus = SubmissionStatus.PENDING

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "data": self.data.to_dict(),
            "submittedBy": self.submitted_by,
            "submittedById": self.submitted_by_id,
            "timestamp": self.timestamp,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Submission:
        kind = SubmissionType(raw["type"])
        data: Location | RouteProposal
        if kind is SubmissionType.LOCATION:
            data = Location.from_dict(raw["data"])
        else:
            data = RouteProposal.from_dict(raw["data"])
        return cls(
            id=int(raw["id"]),
            type=kind,
            data=data,
            submitted_by=str(raw.get("submittedBy") or ""),
            submitted_by_id=int(raw.get("submittedById") or 0),
            timestamp=str(raw.get("timestamp") or ""),
            status=SubmissionStatus(raw.get("status") or SubmissionStatus.PENDING.value),
        )


@dataclass
class LogEntry:
    id: int
    timestamp: str
    action: str
    user: str | None
    user_id: int | None
    role: str | None
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "action": self.action,
            "user": self.user,
            "userId": self.user_id,
            "role": self.role,
            "details": self.details,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> LogEntry:
        return cls(
            id=int(raw["id"]),
            timestamp=str(raw.get("timestamp") or ""),
            action=str(raw["action"]),
            user=raw.get("user"),
            user_id=raw.get("userId"),
            role=raw.get("role"),
            details=dict(raw.get("details") or {}),
        )


@dataclass
class Dataset:
    """Approved data: the only part of the document non-developers can read."""

    locations: list[Location] = field(default_factory=list)
    routes: dict[str, str] = field(default_factory=dict)

    def find_location(self, location_id: int) -> Location | None:
        for loc in self.locations:
            if loc.id == location_id:
                return loc
        return None

    def has_location_named(self, name: str) -> bool:
        return any(loc.name == name for loc in self.locations)

    def to_dict(self) -> dict[str, Any]:
        return {"locations": [loc.to_dict() for loc in self.locations], "routes": dict(self.routes)}

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Dataset:
        return cls(
            locations=[Location.from_dict(x) for x in raw.get("locations") or []],
            routes={str(k): str(v) for k, v in (raw.get("routes") or {}).items()},
        )


@dataclass
class StoreDocument:
    users: list[User] = field(default_factory=list)
    pending_submissions: list[Submission] = field(default_factory=list)
    approved_data: Dataset = field(default_factory=Dataset)
    logs: list[LogEntry] = field(default_factory=list)

    def find_user(self, username: str) -> User | None:
        for u in self.users:
            if u.username == username:
                return u
        return None

    def find_pending(self, submission_id: int) -> Submission | None:
        for sub in self.pending_submissions:
            if sub.id == submission_id:
                return sub
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "users": [u.to_dict() for u in self.users],
            "pendingSubmissions": [sub.to_dict() for sub in self.pending_submissions],
            "approvedData": self.approved_data.to_dict(),
            "logs": [e.to_dict() for e in self.logs],
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> StoreDocument:
        if not isinstance(raw, dict):
            raise ValueError("store document must be a JSON object")
        return cls(
            users=[User.from_dict(x) for x in raw.get("users") or []],
            pending_submissions=[Submission.from_dict(x) for x in raw.get("pendingSubmissions") or []],
            approved_data=Dataset.from_dict(raw.get("approvedData") or {}),
            logs=[LogEntry.from_dict(x) for x in raw.get("logs") or []],
        )
