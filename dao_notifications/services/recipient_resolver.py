"""Recipient resolution for project (DAO) notifications."""
from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import ValidationError

from dao_notifications.config import load_settings
from dao_notifications.models.schemas import Project, ResolveOptions, User
from dao_notifications.services.email_sanitizer import normalize_email


logger = logging.getLogger(__name__)


class RecipientIndex:
    """Lookup of roster users by id and by normalised email."""

    def __init__(self, users: Iterable[User] | None) -> None:
        self.by_id: dict[str, User] = {}
        self.by_email: dict[str, User] = {}
        for user in users or []:
            user_id = getattr(user, "id", None)
            if not user_id:
                continue
            self.by_id.setdefault(user_id, user)
            key = normalize_email(getattr(user, "email", None))
            # First user wins when two entries share an address.
            if key and key not in self.by_email:
                self.by_email[key] = user

    def match_id(self, value: str | None) -> str | None:
        if not value:
            return None
        user = self.by_id.get(value)
        return user.id if user else None

    def match_email(self, value: str | None) -> str | None:
        key = normalize_email(value)
        if not key:
            return None
        user = self.by_email.get(key)
        return user.id if user else None

    def match_reference(self, value: str | None) -> list[str]:
        """Resolve a raw id-or-email reference to known user ids."""
        if not value or not isinstance(value, str):
            return []
        matches = []
        by_id = self.match_id(value)
        if by_id:
            matches.append(by_id)
        if "@" in value:
            by_email = self.match_email(value)
            if by_email:
                matches.append(by_email)
        return matches


def _configured_defaults() -> tuple[str, str | None]:
    try:
        settings = load_settings()
    except ValidationError:
        logger.warning("Invalid notification settings; using team scope without admin fallback")
        return "team", None
    return settings.notification_scope, settings.admin_email


def resolve_project_recipients(
    project: Project | None,
    users: Iterable[User] | None,
    options: ResolveOptions | None = None,
) -> list[str]:
    """
    Compute the unique user ids to notify about a project event.

    Sources are folded in order: roster (``all`` scope) or team members and
    task assignees (``team`` scope), then actor, extra ids and the admin.
    Every id added belongs to a user from ``users``; unknown references are
    skipped silently.

    Args:
        project: Project record, may be None
        users: Active user roster
        options: Resolution options (actor, extras, admin, scope)

    Returns:
        List of unique user ids, order not significant
    """
    options = options or ResolveOptions()
    configured_scope, configured_admin = _configured_defaults()
    scope = options.scope or configured_scope

    roster = list(users or [])
    index = RecipientIndex(roster)
    recipients: set[str] = set()

    if scope == "all":
        recipients.update(index.by_id)
    elif project is not None:
        for member in getattr(project, "team", None) or []:
            member_id = index.match_id(getattr(member, "id", None))
            if member_id:
                recipients.add(member_id)
            member_email = index.match_email(getattr(member, "email", None))
            if member_email:
                recipients.add(member_email)

        if options.include_assignments:
            for task in getattr(project, "tasks", None) or []:
                for assignee in getattr(task, "assigned_to", None) or []:
                    recipients.update(index.match_reference(assignee))

    if options.actor_id:
        recipients.update(index.match_reference(options.actor_id))

    for extra in options.extra_user_ids or []:
        recipients.update(index.match_reference(extra))

    if options.include_admin:
        admin_email = normalize_email(options.admin_email) or normalize_email(configured_admin)
        admin_id = index.match_email(admin_email)
        if admin_id:
            recipients.add(admin_id)

    logger.debug(
        "Resolved %d recipient(s) for project %s (scope=%s)",
        len(recipients),
        getattr(project, "id", None),
        scope,
    )
    return list(recipients)
