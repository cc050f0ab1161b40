"""
Readlater Backend — Link Resolvers
====================================

What:  setLinkArchived: move a saved link to the archive or back to the inbox.
How:   Records link_archived / link_unarchived, then updates the item with a
       fresh saved_at and the target folder. Update failures are expected
       outcomes here (unknown or foreign link), so they are logged and
       returned as Err(ArchiveLinkError) instead of raised.
"""

import logging
from datetime import datetime, timezone

from readlater.auth import Claims
from readlater.dependencies import Services
from readlater.models.library_item import LibraryItemFolder
from readlater.result import Err, Ok, Result
from readlater.schemas.library_item import (
    ArchiveLinkError,
    ArchiveLinkErrorCode,
    ArchiveLinkSuccess,
    LibraryItemUpdate,
    SetLinkArchivedInput,
)

logger = logging.getLogger(__name__)


async def set_link_archived(
    services: Services,
    claims: Claims,
    params: SetLinkArchivedInput,
) -> Result[ArchiveLinkSuccess, ArchiveLinkError]:
    services.analytics.track(
        user_id=claims.uid,
        event="link_archived" if params.archived else "link_unarchived",
        properties={"env": services.config.server.api_env},
    )

    folder = LibraryItemFolder.ARCHIVE if params.archived else LibraryItemFolder.INBOX
    try:
        await services.library_items.update_library_item(
            params.link_id,
            LibraryItemUpdate(saved_at=datetime.now(timezone.utc), folder=folder),
            claims.uid,
        )
    except Exception as e:
        logger.warning(
            "setLinkArchived failed for %s (user=%s): %s",
            params.link_id,
            claims.uid,
            str(e),
        )
        return Err(
            ArchiveLinkError(
                message="An error occurred",
                error_codes=[ArchiveLinkErrorCode.BAD_REQUEST],
            )
        )

    return Ok(ArchiveLinkSuccess(link_id=params.link_id, message="Link Archived"))
