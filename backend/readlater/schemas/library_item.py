"""
Readlater Backend — Library Item & Link Schemas
=================================================

What:  Partial-update input for library items and the setLinkArchived
       mutation contract.

setLinkArchived result:
    ArchiveLinkSuccess { linkId, message }
    ArchiveLinkError   { message, errorCodes: [BAD_REQUEST] }

    The resolver returns Ok(ArchiveLinkSuccess) | Err(ArchiveLinkError);
    the router adds the "__typename" discriminant when rendering JSON.
"""

import enum
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from readlater.models.library_item import LibraryItemFolder
from readlater.schemas.common import CamelModel


class LibraryItemUpdate(BaseModel):
    """Fields update_library_item() may change. Unset fields are left alone."""

    saved_at: Optional[datetime] = None
    folder: Optional[LibraryItemFolder] = None
    title: Optional[str] = None
    description: Optional[str] = None


class SetLinkArchivedInput(CamelModel):
    link_id: uuid.UUID
    archived: bool


class ArchiveLinkErrorCode(str, enum.Enum):
    BAD_REQUEST = "BAD_REQUEST"


class ArchiveLinkSuccess(CamelModel):
    link_id: uuid.UUID
    message: str


class ArchiveLinkError(CamelModel):
    message: str
    error_codes: List[ArchiveLinkErrorCode]
