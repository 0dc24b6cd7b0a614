"""Tests for the team notification dispatcher."""
from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import pytest

from dao_notifications.models.schemas import (
    NotificationCreate,
    NotificationPayload,
    NotificationRecord,
    NotifyOptions,
    User,
)
from dao_notifications.services.notification_dispatcher import notify_team
from dao_notifications.services.notification_service import NotificationService
from dao_notifications.services.user_directory import UserDirectory


PAYLOAD = NotificationPayload(
    kind="dao_updated",
    title="DAO mis à jour",
    message="Le DAO DAO-2025-001 a été modifié",
    data={"daoId": "dao-1"},
)


class FakeDirectory:
    def __init__(self, users: list[User] | None = None, error: Exception | None = None) -> None:
        self.users = users or []
        self.error = error

    async def get_all_users(self) -> list[User]:
        if self.error:
            raise self.error
        return self.users


class RecordingNotifications:
    def __init__(self) -> None:
        self.added: list[NotificationCreate] = []
        self.broadcasts: list[tuple[str, str, str, Any]] = []

    def _record(self, recipients: list[str], is_broadcast: bool) -> NotificationRecord:
        return NotificationRecord(
            id=len(self.added) + len(self.broadcasts),
            kind=PAYLOAD.kind,
            title=PAYLOAD.title,
            message=PAYLOAD.message,
            data=PAYLOAD.data,
            recipients=recipients,
            is_broadcast=is_broadcast,
            created_at=datetime.utcnow(),
        )

    def add(self, notification: NotificationCreate) -> NotificationRecord:
        self.added.append(notification)
        return self._record(notification.recipients, False)

    def broadcast(self, kind, title, message, data=None) -> NotificationRecord:
        self.broadcasts.append((kind, title, message, data))
        return self._record([], True)


@pytest.mark.asyncio
async def test_targeted_notification_for_resolved_team(roster, sample_project):
    notifications = RecordingNotifications()

    record = await notify_team(
        sample_project,
        PAYLOAD,
        NotifyOptions(actor_id="user-extra"),
        directory=FakeDirectory(roster),
        notifications=notifications,
    )

    assert record.is_broadcast is False
    assert notifications.broadcasts == []
    assert len(notifications.added) == 1
    sent = notifications.added[0]
    assert set(sent.recipients) == {"user-chef", "user-manual", "user-assigned", "user-extra"}
    assert sent.data == {"daoId": "dao-1"}


@pytest.mark.asyncio
async def test_configured_admin_is_added(monkeypatch, roster, sample_project):
    monkeypatch.setenv("ADMIN_EMAIL", "admin@example.com")
    notifications = RecordingNotifications()

    await notify_team(sample_project, PAYLOAD, directory=FakeDirectory(roster), notifications=notifications)

    assert "user-admin" in notifications.added[0].recipients


@pytest.mark.asyncio
@pytest.mark.parametrize("fallback_to_all", [True, False])
async def test_empty_resolution_broadcasts_regardless_of_flag(roster, fallback_to_all):
    notifications = RecordingNotifications()

    record = await notify_team(
        None,
        PAYLOAD,
        NotifyOptions(fallback_to_all=fallback_to_all),
        directory=FakeDirectory(roster),
        notifications=notifications,
    )

    assert record.is_broadcast is True
    assert notifications.added == []
    assert notifications.broadcasts == [
        (PAYLOAD.kind, PAYLOAD.title, PAYLOAD.message, PAYLOAD.data)
    ]


@pytest.mark.asyncio
async def test_directory_failure_logs_and_broadcasts(caplog, sample_project):
    notifications = RecordingNotifications()

    with caplog.at_level(logging.WARNING):
        record = await notify_team(
            sample_project,
            PAYLOAD,
            directory=FakeDirectory(error=RuntimeError("directory down")),
            notifications=notifications,
        )

    assert record.is_broadcast is True
    assert len(notifications.broadcasts) == 1
    assert notifications.added == []

    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "[NOTIF]" in warnings[0].getMessage()
    assert "directory down" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_resolver_failure_broadcasts(monkeypatch, roster, sample_project):
    def boom(*args, **kwargs):
        raise ValueError("bad project")

    monkeypatch.setattr(
        "dao_notifications.services.notification_dispatcher.resolve_project_recipients",
        boom,
    )
    notifications = RecordingNotifications()

    record = await notify_team(sample_project, PAYLOAD, directory=FakeDirectory(roster), notifications=notifications)

    assert record.is_broadcast is True
    assert len(notifications.broadcasts) == 1


class FailingAddNotifications(RecordingNotifications):
    def add(self, notification: NotificationCreate) -> NotificationRecord:
        self.added.append(notification)
        raise RuntimeError("store down")


@pytest.mark.asyncio
async def test_targeted_store_failure_logs_and_broadcasts(caplog, roster, sample_project):
    notifications = FailingAddNotifications()

    with caplog.at_level(logging.WARNING):
        record = await notify_team(
            sample_project,
            PAYLOAD,
            directory=FakeDirectory(roster),
            notifications=notifications,
        )

    assert record.is_broadcast is True
    assert len(notifications.added) == 1
    assert notifications.broadcasts == [
        (PAYLOAD.kind, PAYLOAD.title, PAYLOAD.message, PAYLOAD.data)
    ]
    warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "store down" in warnings[0].getMessage()


@pytest.mark.asyncio
async def test_default_collaborators_use_database(db_session, sample_project):
    from dao_notifications.models.database_models import UserAccount

    db_session.add_all(
        [
            UserAccount(id="user-chef", email="chef@test.com"),
            UserAccount(id="user-assigned", email="assigned@test.com"),
            UserAccount(id="user-inactive", email="manual@test.com", is_active=False),
        ]
    )
    db_session.commit()

    record = await notify_team(sample_project, PAYLOAD)

    assert record.is_broadcast is False
    assert set(record.recipients) == {"user-chef", "user-assigned"}

    stored = NotificationService().list_recent()
    assert [n.id for n in stored] == [record.id]


@pytest.mark.asyncio
async def test_user_directory_returns_active_users_only(db_session):
    from dao_notifications.models.database_models import UserAccount

    db_session.add_all(
        [
            UserAccount(id="b", email="b@test.com"),
            UserAccount(id="a", email="a@test.com", role="admin"),
            UserAccount(id="c", email="c@test.com", is_active=False),
        ]
    )
    db_session.commit()

    users = await UserDirectory().get_all_users()

    assert [u.id for u in users] == ["a", "b"]
    assert users[0].role == "admin"
