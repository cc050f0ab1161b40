"""
Readlater Backend — Rule SQLAlchemy Model
===========================================

What:  ORM model for the `rules` table: a saved filter plus the actions that
       run on library items matching it.
How:   `actions` is a JSON list of {"type": ..., "params": [...]} objects
       (JSONB on PostgreSQL).

Table Design:
    - Unique (user_id, lower(name)): rule names are unique per owner,
      case-insensitively. create_rule() relies on it for find-or-create.
    - ON DELETE CASCADE from users: deleting an account removes its rules.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Index, String, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from readlater.database import Base


class RuleActionType(str, enum.Enum):
    ADD_LABEL = "ADD_LABEL"
    ARCHIVE = "ARCHIVE"
    DELETE = "DELETE"
    MARK_AS_READ = "MARK_AS_READ"
    SEND_NOTIFICATION = "SEND_NOTIFICATION"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Rule(Base):
    """A named filter with actions, owned by one user."""

    __tablename__ = "rules"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Search query in the library filter syntax, e.g. "in:inbox label:news"
    filter: Mapped[str] = mapped_column(Text, nullable=False)

    actions: Mapped[List[Dict[str, Any]]] = mapped_column(
        JSON().with_variant(JSONB(), "postgresql"),
        nullable=False,
        default=list,
    )

    enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        return f"<Rule(id={self.id}, name='{self.name}', user_id={self.user_id})>"


Index(
    "uq_rules_user_id_lower_name",
    Rule.user_id,
    func.lower(Rule.name),
    unique=True,
)
