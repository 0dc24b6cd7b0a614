"""Notification feed and email validation endpoints."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from dao_notifications.database import get_db
from dao_notifications.models.schemas import (
    EmailValidationRequest,
    NotificationRecord,
    ProjectNotificationRequest,
    SanitizeResult,
)
from dao_notifications.services.email_sanitizer import sanitize_emails
from dao_notifications.services.notification_dispatcher import notify_team
from dao_notifications.services.notification_service import query_recent


logger = logging.getLogger(__name__)


router = APIRouter(prefix="/api/notifications", tags=["notifications"])


@router.get("")
async def list_notifications(
    limit: int = 50,
    db: Session = Depends(get_db),
) -> dict:
    """
    List the most recent notifications.

    Args:
        limit: Maximum number of notifications to return (default: 50)
        db: Database session

    Returns:
        Dictionary with count and notifications, newest first
    """
    if limit < 1 or limit > 500:
        raise HTTPException(
            status_code=400,
            detail="limit parameter must be between 1 and 500"
        )

    records = query_recent(db, limit)
    return {
        "count": len(records),
        "notifications": [record.model_dump(mode="json") for record in records],
    }


@router.post("/email/validate", response_model=SanitizeResult)
async def validate_emails(request: EmailValidationRequest) -> SanitizeResult:
    """Preview how a list of addresses would be sanitised before sending."""
    return sanitize_emails(request.emails, log_invalid=False)


@router.post("/projects/notify", response_model=NotificationRecord)
async def notify_project_team(request: ProjectNotificationRequest) -> NotificationRecord:
    """Notify the team of a project, broadcasting when nobody resolves."""
    record = await notify_team(request.project, request.payload, request.options)
    logger.info(
        "Project notification %s delivered (broadcast=%s)",
        record.id,
        record.is_broadcast,
    )
    return record
