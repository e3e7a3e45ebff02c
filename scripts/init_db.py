"""Seed the store document with the developer account and seed locations.

Idempotent: never overwrites an existing admin user's password.

Usage:
  python scripts/init_db.py
"""

import sys
from pathlib import Path

from dotenv import load_dotenv

# Ensure repo root is on sys.path when running as a script (Windows-friendly).
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.routevault.config import load_config
from app.routevault.seed import seed_document
from app.routevault.store import DocumentStore
from app.routevault.storage import storage_from_config


def seed_only(config: dict | None = None) -> bool:
    cfg = config or load_config()
    store = DocumentStore(storage_from_config(cfg), key=cfg.get("DATA_FILE") or "data.json")
    try:
        current = store.read_strict()
    except Exception as e:
        # An existing but unreadable document must not be replaced by a fresh seed.
        print(f"Seed REFUSED: store document {store.key} exists but could not be read: {e}")
        return False
    doc = seed_document(
        current,
        admin_username=cfg["ADMIN_USERNAME"],
        admin_password=cfg["ADMIN_PASSWORD"],
        hash_method=cfg["PASSWORD_HASH_METHOD"],
        location_names=cfg["SEED_LOCATIONS"],
    )
    ok = store.write(doc)

    print("Initialized store (seed_only)." if ok else "Seed FAILED: could not write store document.")
    print(f"Store key: {store.key}")
    print(f"Developer username: {cfg['ADMIN_USERNAME']}")
    print("Developer password: (from ADMIN_PASSWORD)")
    return ok


def main() -> None:
    load_dotenv()
    if not seed_only():
        sys.exit(1)


if __name__ == "__main__":
    main()
