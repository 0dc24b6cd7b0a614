"""SQLAlchemy ORM models for the user directory and notification feed."""
from datetime import datetime
from sqlalchemy import Integer, DateTime, String, Boolean, Text, JSON, Index
from sqlalchemy.orm import Mapped, mapped_column

from dao_notifications.database import Base


class UserAccount(Base):
    """Directory entry for a person who can receive notifications."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True, index=True)
    role: Mapped[str] = mapped_column(String(50), default="user")  # user, admin, viewer
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class Notification(Base):
    """A notification delivered either to explicit recipients or to everyone."""

    __tablename__ = "notifications"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(50), nullable=False)  # dao_created, task_assigned, ...
    title: Mapped[str] = mapped_column(String(300), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    data: Mapped[dict | None] = mapped_column(JSON, nullable=True)

    # Empty list for broadcasts
    recipients: Mapped[list] = mapped_column(JSON, default=list)
    is_broadcast: Mapped[bool] = mapped_column(Boolean, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_notifications_created", "created_at"),
    )
