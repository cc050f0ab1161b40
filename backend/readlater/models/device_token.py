"""
Readlater Backend — User Device Token Model
=============================================

What:  ORM model for `user_device_tokens`: push-notification tokens registered
       by a user's devices.
Note:  No uniqueness on (user_id, token). A device that registers twice gets
       two rows; callers dedupe with find_device_token_by_token() if needed.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from readlater.database import Base


class UserDeviceToken(Base):

    __tablename__ = "user_device_tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    token: Mapped[str] = mapped_column(String(512), nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<UserDeviceToken(id={self.id}, user_id={self.user_id})>"
