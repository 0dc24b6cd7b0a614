"""Dispatch project notifications to the resolved team, or to everyone."""
from __future__ import annotations

import logging

from dao_notifications.config import load_settings
from dao_notifications.models.schemas import (
    NotificationCreate,
    NotificationPayload,
    NotificationRecord,
    NotifyOptions,
    Project,
    ResolveOptions,
)
from dao_notifications.services.notification_service import NotificationService
from dao_notifications.services.recipient_resolver import resolve_project_recipients
from dao_notifications.services.user_directory import UserDirectory


logger = logging.getLogger(__name__)


def _broadcast(notifications: NotificationService, payload: NotificationPayload) -> NotificationRecord:
    return notifications.broadcast(
        payload.kind,
        payload.title,
        payload.message,
        payload.data,
    )


async def notify_team(
    project: Project | None,
    payload: NotificationPayload,
    options: NotifyOptions | None = None,
    *,
    directory: UserDirectory | None = None,
    notifications: NotificationService | None = None,
) -> NotificationRecord:
    """
    Notify everyone concerned by a project event.

    Loads the roster, resolves recipients and stores a targeted notification.
    Falls back to a broadcast when nobody resolves or when any step fails
    (directory fetch, resolution or the targeted store); errors are logged,
    never raised.

    Args:
        project: Project the event relates to (may be None)
        payload: Notification content
        options: Actor, extras, admin and scope options
        directory: User directory (defaults to the database-backed one)
        notifications: Notification store (defaults to the database-backed one)

    Returns:
        The stored notification, targeted or broadcast
    """
    options = options or NotifyOptions()
    directory = directory or UserDirectory()
    notifications = notifications or NotificationService()

    try:
        users = await directory.get_all_users()
        recipients = resolve_project_recipients(
            project,
            users,
            ResolveOptions(
                actor_id=options.actor_id,
                include_admin=options.include_admin,
                admin_email=load_settings().admin_email,
                include_assignments=options.include_assignments,
                extra_user_ids=options.extra_user_ids,
                scope=options.scope,
            ),
        )
        if recipients:
            return notifications.add(
                NotificationCreate(
                    kind=payload.kind,
                    title=payload.title,
                    message=payload.message,
                    data=payload.data,
                    recipients=recipients,
                )
            )
    except Exception as err:
        logger.warning("[NOTIF] notify_team fallback to broadcast: %s", err)
        return _broadcast(notifications, payload)

    # TODO: confirm with product whether fallback_to_all=False should skip
    # the broadcast; both values currently broadcast.
    logger.info(
        "[NOTIF] No recipients for project %s (fallback_to_all=%s); broadcasting",
        getattr(project, "id", None),
        options.fallback_to_all,
    )
    return _broadcast(notifications, payload)
