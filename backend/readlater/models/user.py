"""
Readlater Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table.
Why:   Owner of every rule, device token and library item. Ownership is the
       sole authorization boundary, so every owned table has a user_id FK.
Who:   Read-only from the services in this package (ownership checks only).
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from readlater.database import Base


class User(Base):
    """An account. Profile fields are displayed by the profile screen."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    # Unique, lower-cased handle chosen on the create-profile screen
    username: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    profile_image_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
