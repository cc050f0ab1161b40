"""
Readlater Backend — Library Item Service
==========================================

What:  Updates to saved items and the bulk ingestion of feed entries into
       the "following" folder.
How:   update_library_item() is an owner-scoped read-modify-write.
       save_feed_item_in_following() is one multi-row
       INSERT ... ON CONFLICT (user_id, original_url) DO NOTHING RETURNING id,
       so re-delivered feed entries never duplicate.
Who:   Link resolver (archive/unarchive) and the following-save service route.
"""

import logging
import re
import time
import uuid
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from readlater.exceptions import NotFoundError
from readlater.models.library_item import LibraryItem, LibraryItemFolder
from readlater.repository import TransactionManager
from readlater.schemas.following import SaveFollowingItemRequest
from readlater.schemas.library_item import LibraryItemUpdate

logger = logging.getLogger(__name__)

SLUG_MAX_LENGTH = 64

_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


def generate_slug(title: str) -> str:
    """
    URL slug for a title: lowercase alphanumerics joined by "-", cut to
    64 characters, then a hex millisecond suffix so equal titles differ.

    >>> generate_slug("Hello, World!")  # doctest: +SKIP
    'hello-world-18c1f2a9b3e'
    """
    base = _NON_SLUG_CHARS.sub("-", title.lower()).strip("-")
    base = base[:SLUG_MAX_LENGTH].rstrip("-")
    suffix = format(int(time.time() * 1000), "x")
    return f"{base}-{suffix}" if base else suffix


class LibraryItemService:
    def __init__(self, trx: TransactionManager):
        self.trx = trx

    async def update_library_item(
        self,
        item_id: uuid.UUID,
        changes: LibraryItemUpdate,
        user_id: uuid.UUID,
    ) -> LibraryItem:
        """
        Apply the fields set on `changes` to one of the user's items.

        Raises:
            NotFoundError: No such item for this owner.
        """
        fields = changes.model_dump(exclude_unset=True)

        async def unit_of_work(session: AsyncSession) -> LibraryItem:
            item = await session.scalar(
                select(LibraryItem).where(
                    LibraryItem.id == item_id,
                    LibraryItem.user_id == user_id,
                )
            )
            if item is None:
                raise NotFoundError(resource="library item", resource_id=str(item_id))

            for name, value in fields.items():
                if isinstance(value, LibraryItemFolder):
                    value = value.value
                setattr(item, name, value)
            await session.flush()
            return item

        item = await self.trx.run(unit_of_work, user_id=user_id)
        logger.info("Library item %s updated: %s", item_id, ", ".join(sorted(fields)))
        return item

    async def save_feed_item_in_following(
        self, request: SaveFollowingItemRequest
    ) -> List[uuid.UUID]:
        """
        Insert the feed entry into "following" for every user in the request.

        Runs as system work (no user claim): the request fans out to many
        owners at once.

        Returns:
            Ids of the rows actually inserted. Users who already have the URL
            are skipped, so the list can be shorter than `user_ids` or empty.
        """
        if not request.user_ids:
            return []

        now = datetime.now(timezone.utc)
        slug = generate_slug(request.title)
        rows = [
            {
                "id": uuid.uuid4(),
                "user_id": user_id,
                "title": request.title,
                "slug": slug,
                "original_url": request.url,
                "author": request.author,
                "description": request.description,
                "links": request.links,
                "preview_content": request.preview_content,
                "preview_content_type": request.preview_content_type,
                "folder": LibraryItemFolder.FOLLOWING.value,
                "subscription": request.added_to_following_by,
                "added_to_following_from": request.added_to_following_from,
                "published_at": request.published_at,
                "saved_at": request.saved_at or now,
                "created_at": now,
                "updated_at": now,
            }
            for user_id in request.user_ids
        ]

        insert = pg_insert if self.trx.engine.dialect.name == "postgresql" else sqlite_insert
        stmt = (
            insert(LibraryItem)
            .values(rows)
            .on_conflict_do_nothing(index_elements=["user_id", "original_url"])
            .returning(LibraryItem.id)
        )

        async def unit_of_work(session: AsyncSession) -> List[uuid.UUID]:
            result = await session.execute(stmt)
            return list(result.scalars())

        ids = await self.trx.run(unit_of_work)
        logger.info(
            "Saved feed item %s in following for %d/%d users",
            request.url,
            len(ids),
            len(request.user_ids),
        )
        return ids
