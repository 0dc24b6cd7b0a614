"""Pydantic models describing users, projects and notification payloads."""
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field


Scope = Literal["team", "all"]


class User(BaseModel):
    """A directory user as seen by the notification layer."""

    id: str
    email: str | None = None
    name: str | None = None
    role: str = "user"
    is_active: bool = True

    class Config:
        from_attributes = True


# Project Schemas
class TeamMember(BaseModel):
    """Member of a project team, identified by id and/or email."""

    id: str | None = None
    email: str | None = None
    name: str | None = None
    role: str | None = None


class Task(BaseModel):
    """Project task; assignees may be user ids or email addresses."""

    id: int | str | None = None
    name: str | None = None
    assigned_to: list[str] = []


class Project(BaseModel):
    """Project (DAO) record limited to the fields used for notifications."""

    id: str
    team: list[TeamMember] = []
    tasks: list[Task] = []


class ResolveOptions(BaseModel):
    """Knobs for recipient resolution."""

    actor_id: str | None = None
    include_admin: bool = True
    admin_email: str | None = None
    include_assignments: bool = True
    extra_user_ids: list[str] = []
    scope: Scope | None = Field(
        default=None,
        description="Overrides NOTIFICATION_SCOPE for a single call.",
    )


class NotifyOptions(BaseModel):
    """Options accepted by the team notification dispatcher."""

    actor_id: str | None = None
    include_admin: bool = True
    include_assignments: bool = True
    extra_user_ids: list[str] = []
    scope: Scope | None = None
    fallback_to_all: bool = True


# Notification Schemas
class NotificationPayload(BaseModel):
    """Content of a notification, independent of its audience."""

    kind: str
    title: str
    message: str
    data: dict[str, Any] | None = None


class NotificationCreate(NotificationPayload):
    """Targeted notification with an explicit recipient list."""

    recipients: list[str]


class NotificationRecord(NotificationPayload):
    """Schema for a stored notification."""

    id: int
    recipients: list[str] = []
    is_broadcast: bool
    created_at: datetime

    class Config:
        from_attributes = True


# Email Schemas
class SanitizeResult(BaseModel):
    """Partition of requested addresses into usable and rejected ones."""

    valid: list[str] = []
    invalid: list[str] = []


class InvalidEmailReport(BaseModel):
    """Summary handed to the invalid-address reporter after a send."""

    stage: str
    requested_count: int = Field(ge=0)
    valid_count: int = Field(ge=0)
    invalid: list[str]


class EmailSendResult(BaseModel):
    """Outcome of a transactional email send."""

    ok: bool
    detail: str
    recipients: list[str] = []
    invalid: list[str] = []


class EmailValidationRequest(BaseModel):
    """Request body for the address validation endpoint."""

    emails: list[str | None]


class ProjectNotificationRequest(BaseModel):
    """Request body for notifying a project's team."""

    project: Project | None = None
    payload: NotificationPayload
    options: NotifyOptions = NotifyOptions()
