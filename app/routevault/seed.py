from __future__ import annotations

import logging
from collections.abc import Iterable

from app.routevault.models import Location, Role, StoreDocument, User, time_id
from app.routevault.security import hash_password

logger = logging.getLogger(__name__)


def seed_document(
    doc: StoreDocument,
    *,
    admin_username: str,
    admin_password: str,
    hash_method: str = "scrypt",
    location_names: Iterable[str] = (),
) -> StoreDocument:
    """
    Ensure the developer account and seed locations exist (idempotent).
    Does NOT overwrite an existing admin user's password.
    """
    if not doc.find_user(admin_username):
        admin_id = 1 if not any(u.id == 1 for u in doc.users) else time_id(u.id for u in doc.users)
        doc.users.append(
            User(
                id=admin_id,
                username=admin_username,
                password_hash=hash_password(admin_password, hash_method),
                role=Role.DEVELOPER,
            )
        )
        logger.info("Seeded developer account %r", admin_username)

    for name in location_names:
        if doc.approved_data.has_location_named(name):
            continue
        next_id = max((loc.id for loc in doc.approved_data.locations), default=0) + 1
        doc.approved_data.locations.append(Location(id=next_id, name=name))
        logger.info("Seeded location %r (id=%s)", name, next_id)
    return doc
