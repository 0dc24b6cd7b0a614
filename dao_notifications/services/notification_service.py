"""Notification persistence: targeted notifications and broadcasts."""
from __future__ import annotations

import logging
from typing import Any, Callable

from sqlalchemy.orm import Session

from dao_notifications.database import SessionLocal
from dao_notifications.models.database_models import Notification
from dao_notifications.models.schemas import NotificationCreate, NotificationRecord


logger = logging.getLogger(__name__)


class NotificationService:
    """Stores notifications for the in-app feed."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self._session_factory = session_factory

    def _save(self, notification: Notification) -> NotificationRecord:
        db = self._session_factory()
        try:
            db.add(notification)
            db.commit()
            db.refresh(notification)
            return NotificationRecord.model_validate(notification)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def add(self, notification: NotificationCreate) -> NotificationRecord:
        """Persist a notification addressed to explicit recipients."""

        record = self._save(
            Notification(
                kind=notification.kind,
                title=notification.title,
                message=notification.message,
                data=notification.data,
                recipients=list(notification.recipients),
                is_broadcast=False,
            )
        )
        logger.info(
            "Notification %s (%s) stored for %d recipient(s)",
            record.id,
            record.kind,
            len(record.recipients),
        )
        return record

    def broadcast(
        self,
        kind: str,
        title: str,
        message: str,
        data: dict[str, Any] | None = None,
    ) -> NotificationRecord:
        """Persist a notification visible to every user."""

        record = self._save(
            Notification(
                kind=kind,
                title=title,
                message=message,
                data=data,
                recipients=[],
                is_broadcast=True,
            )
        )
        logger.info("Broadcast notification %s (%s) stored", record.id, record.kind)
        return record

    def list_recent(self, limit: int = 50) -> list[NotificationRecord]:
        """Return the newest notifications first."""

        db = self._session_factory()
        try:
            return query_recent(db, limit)
        finally:
            db.close()


def query_recent(db: Session, limit: int = 50) -> list[NotificationRecord]:
    """Newest notifications first, using the caller's session."""
    rows = (
        db.query(Notification)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )
    return [NotificationRecord.model_validate(row) for row in rows]
