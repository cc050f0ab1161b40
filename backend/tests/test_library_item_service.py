"""
Readlater Backend — Library Item Service Tests
================================================

What we test:
    ✅ update_library_item applies only the given fields, owner-scoped
    ✅ save_feed_item_in_following inserts one "following" row per user
    ✅ Re-delivery of the same URL inserts nothing (ON CONFLICT DO NOTHING)
    ✅ Slugs: lowercase, dash-separated, bounded, unique suffix
"""

import re
import uuid
from datetime import datetime, timezone

import pytest
from sqlalchemy import select

from readlater.exceptions import NotFoundError
from readlater.models.library_item import LibraryItem, LibraryItemFolder
from readlater.schemas.following import SaveFollowingItemRequest
from readlater.schemas.library_item import LibraryItemUpdate
from readlater.services.library_item_service import (
    SLUG_MAX_LENGTH,
    LibraryItemService,
    generate_slug,
)

from conftest import ALICE_ID, BOB_ID, as_utc


async def _add_item(trx, user_id, url="https://example.com/a", **fields) -> LibraryItem:
    async def unit_of_work(session):
        item = LibraryItem(
            user_id=user_id,
            title=fields.pop("title", "An Article"),
            slug="an-article",
            original_url=url,
            **fields,
        )
        session.add(item)
        await session.flush()
        return item

    return await trx.run(unit_of_work)


async def _items(trx, **filters):
    async def unit_of_work(session):
        result = await session.scalars(select(LibraryItem).filter_by(**filters))
        return list(result)

    return await trx.run(unit_of_work)


def _feed_request(**overrides) -> SaveFollowingItemRequest:
    body = {
        "userIds": [str(ALICE_ID), str(BOB_ID)],
        "title": "Release Notes 1.2",
        "url": "https://blog.example.com/release-1-2",
        "addedToFollowingBy": "Example Blog",
        "addedToFollowingFrom": "feed",
        "author": "Jo",
    }
    body.update(overrides)
    return SaveFollowingItemRequest.model_validate(body)


class TestUpdateLibraryItem:
    @pytest.fixture(autouse=True)
    def _service(self, trx, users):
        self.trx = trx
        self.service = LibraryItemService(trx)

    @pytest.mark.asyncio
    async def test_applies_given_fields_only(self):
        item = await _add_item(self.trx, ALICE_ID, description="keep me")
        saved_at = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

        updated = await self.service.update_library_item(
            item.id,
            LibraryItemUpdate(saved_at=saved_at, folder=LibraryItemFolder.ARCHIVE),
            ALICE_ID,
        )

        assert updated.folder == "archive"
        assert as_utc(updated.saved_at) == saved_at
        assert updated.description == "keep me"

        [stored] = await _items(self.trx, id=item.id)
        assert stored.folder == "archive"

    @pytest.mark.asyncio
    async def test_unknown_item_raises_not_found(self):
        with pytest.raises(NotFoundError):
            await self.service.update_library_item(
                uuid.uuid4(), LibraryItemUpdate(title="x"), ALICE_ID
            )

    @pytest.mark.asyncio
    async def test_foreign_item_raises_not_found(self):
        item = await _add_item(self.trx, ALICE_ID)

        with pytest.raises(NotFoundError):
            await self.service.update_library_item(
                item.id, LibraryItemUpdate(folder=LibraryItemFolder.ARCHIVE), BOB_ID
            )

        [stored] = await _items(self.trx, id=item.id)
        assert stored.folder == "inbox"


class TestSaveFeedItemInFollowing:
    @pytest.fixture(autouse=True)
    def _service(self, trx, users):
        self.trx = trx
        self.service = LibraryItemService(trx)

    @pytest.mark.asyncio
    async def test_inserts_one_row_per_user(self):
        ids = await self.service.save_feed_item_in_following(_feed_request())

        assert len(ids) == 2
        rows = await _items(self.trx, original_url="https://blog.example.com/release-1-2")
        assert {r.user_id for r in rows} == {ALICE_ID, BOB_ID}
        for row in rows:
            assert row.folder == LibraryItemFolder.FOLLOWING.value
            assert row.subscription == "Example Blog"
            assert row.added_to_following_from == "feed"
            assert row.author == "Jo"
            assert row.slug.startswith("release-notes-1-2-")

    @pytest.mark.asyncio
    async def test_redelivery_inserts_nothing(self):
        await self.service.save_feed_item_in_following(_feed_request())

        again = await self.service.save_feed_item_in_following(_feed_request())

        assert again == []
        assert len(await _items(self.trx, original_url="https://blog.example.com/release-1-2")) == 2

    @pytest.mark.asyncio
    async def test_skips_users_who_already_saved_url(self):
        await _add_item(self.trx, ALICE_ID, url="https://blog.example.com/release-1-2")

        ids = await self.service.save_feed_item_in_following(_feed_request())

        assert len(ids) == 1
        [bobs] = await _items(self.trx, user_id=BOB_ID)
        assert bobs.id == ids[0]

    @pytest.mark.asyncio
    async def test_explicit_saved_at_is_kept(self):
        saved_at = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

        await self.service.save_feed_item_in_following(
            _feed_request(userIds=[str(ALICE_ID)], savedAt=saved_at.isoformat())
        )

        [row] = await _items(self.trx, user_id=ALICE_ID)
        assert as_utc(row.saved_at) == saved_at

    @pytest.mark.asyncio
    async def test_no_users_is_empty(self):
        assert await self.service.save_feed_item_in_following(_feed_request(userIds=[])) == []


class TestGenerateSlug:
    def test_basic(self):
        slug = generate_slug("Hello, World!")
        assert re.fullmatch(r"hello-world-[0-9a-f]+", slug)

    def test_long_titles_are_bounded(self):
        slug = generate_slug("word " * 100)
        base, _, suffix = slug.rpartition("-")
        assert len(base) <= SLUG_MAX_LENGTH
        assert re.fullmatch(r"[0-9a-f]+", suffix)

    def test_title_without_alphanumerics(self):
        assert re.fullmatch(r"[0-9a-f]+", generate_slug("!!!"))
