"""Seed the user directory from a JSON file."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session

from dao_notifications.database import SessionLocal, init_db
from dao_notifications.logging_config import configure_logging
from dao_notifications.models.database_models import UserAccount
from dao_notifications.services.email_sanitizer import is_valid_email, normalize_email


logger = logging.getLogger("scripts.seed_users")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create or update directory users",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Load users from a JSON list of {"id", "email", "name", "role", "is_active"}
  python scripts/seed_users.py users.json

  # Deactivate users missing from the file
  python scripts/seed_users.py users.json --deactivate-missing
        """
    )
    parser.add_argument("path", type=Path, help="JSON file containing a list of users")
    parser.add_argument(
        "--deactivate-missing",
        action="store_true",
        help="Mark users absent from the file as inactive"
    )
    return parser.parse_args()


def upsert_users(db: Session, entries: list[dict[str, Any]], deactivate_missing: bool = False) -> dict[str, int]:
    """Insert or update users; returns counts of created/updated/deactivated rows."""

    counts = {"created": 0, "updated": 0, "deactivated": 0}
    seen: set[str] = set()

    for entry in entries:
        user_id = str(entry.get("id") or "").strip()
        if not user_id:
            logger.warning("Skipping user entry without id: %s", entry)
            continue
        seen.add(user_id)

        account = db.get(UserAccount, user_id)
        if account is None:
            account = UserAccount(id=user_id)
            db.add(account)
            counts["created"] += 1
        else:
            counts["updated"] += 1

        email = normalize_email(entry.get("email"))
        if email and not is_valid_email(email):
            logger.warning("Dropping invalid email for user %s: %s", user_id, entry.get("email"))
            email = None

        account.name = entry.get("name")
        account.email = email
        account.role = entry.get("role") or "user"
        account.is_active = bool(entry.get("is_active", True))

    if deactivate_missing:
        for account in db.query(UserAccount).filter(UserAccount.is_active.is_(True)).all():
            if account.id not in seen:
                account.is_active = False
                counts["deactivated"] += 1

    db.commit()
    return counts


def main() -> int:
    args = parse_args()
    configure_logging()
    init_db()

    with args.path.open("r", encoding="utf-8") as fh:
        entries = json.load(fh)
    if not isinstance(entries, list):
        logger.error("Expected a JSON list of users in %s", args.path)
        return 1

    db = SessionLocal()
    try:
        counts = upsert_users(db, entries, deactivate_missing=args.deactivate_missing)
    finally:
        db.close()

    logger.info(
        "Users seeded: %d created, %d updated, %d deactivated",
        counts["created"],
        counts["updated"],
        counts["deactivated"],
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
