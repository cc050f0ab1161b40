"""Readlater Backend — Device Token Schemas"""

import uuid
from datetime import datetime

from pydantic import Field

from readlater.schemas.common import CamelModel


class DeviceTokenCreate(CamelModel):
    token: str = Field(min_length=1, max_length=512)


class DeviceTokenResponse(CamelModel):
    id: uuid.UUID
    token: str
    created_at: datetime


class DeleteDeviceTokenResponse(CamelModel):
    deleted: bool
