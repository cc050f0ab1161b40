"""
Readlater Backend — Rule Schemas
==================================

What:  Request/response models for rules.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field, field_validator

from readlater.models.rule import RuleActionType
from readlater.schemas.common import CamelModel


class RuleAction(CamelModel):
    type: RuleActionType
    params: List[str] = Field(default_factory=list)


class RuleCreate(CamelModel):
    """Input of create_rule(). Equality of `name` is case-insensitive per owner."""

    name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    actions: List[RuleAction] = Field(default_factory=list)
    filter: str = Field(min_length=1)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped


class RuleResponse(CamelModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    actions: List[RuleAction]
    filter: str
    enabled: bool
    created_at: datetime
    updated_at: datetime
