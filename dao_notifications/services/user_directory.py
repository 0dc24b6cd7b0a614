"""Read-only access to the user directory."""
from __future__ import annotations

import logging
from typing import Callable

from sqlalchemy.orm import Session

from dao_notifications.database import SessionLocal
from dao_notifications.models.database_models import UserAccount
from dao_notifications.models.schemas import User


logger = logging.getLogger(__name__)


class UserDirectory:
    """Thin query wrapper over the ``users`` table."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    async def get_all_users(self) -> list[User]:
        """Return every active user, ordered by id."""

        db = self._session_factory()
        try:
            rows = (
                db.query(UserAccount)
                .filter(UserAccount.is_active.is_(True))
                .order_by(UserAccount.id)
                .all()
            )
            logger.debug("Loaded %d active user(s) from directory", len(rows))
            return [User.model_validate(row) for row in rows]
        finally:
            db.close()
