"""
Readlater Backend — Library Item SQLAlchemy Model
===================================================

What:  ORM model for `library_items`: a saved link (article, feed entry,
       newsletter) in one user's library.
How:   `folder` moves the item between the inbox, the archive and the
       following feed. Archiving also bumps `saved_at` so the item sorts to
       the top of its new folder.

Table Design:
    - Unique (user_id, original_url): a URL is saved once per user. The
      following ingestion relies on it with ON CONFLICT DO NOTHING.
    - Index (user_id, folder, saved_at DESC): the library list query.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from readlater.database import Base


class LibraryItemFolder(str, enum.Enum):
    INBOX = "inbox"
    ARCHIVE = "archive"
    FOLLOWING = "following"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LibraryItem(Base):
    """A link saved to a user's library."""

    __tablename__ = "library_items"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(128), nullable=False)
    original_url: Mapped[str] = mapped_column(Text, nullable=False)

    author: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    links: Mapped[Optional[Any]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"), nullable=True
    )
    preview_content: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    preview_content_type: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    folder: Mapped[str] = mapped_column(
        String(20), nullable=False, default=LibraryItemFolder.INBOX.value
    )

    # Who put the item in "following" (a subscription name) and from where
    subscription: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    added_to_following_from: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)

    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    __table_args__ = (
        UniqueConstraint("user_id", "original_url", name="uq_library_items_user_id_original_url"),
    )

    def __repr__(self) -> str:
        return (
            f"<LibraryItem(id={self.id}, folder='{self.folder}', "
            f"user_id={self.user_id})>"
        )


Index(
    "idx_library_items_user_folder_saved_at",
    LibraryItem.user_id,
    LibraryItem.folder,
    LibraryItem.saved_at.desc(),
)
