"""
Readlater Backend — setLinkArchived Resolver Tests
====================================================

What we test:
    ✅ archived=true → folder archive, saved_at bumped to "now"
    ✅ archived=false → folder inbox
    ✅ Analytics event name follows the flag and carries the env
    ✅ Unknown/foreign links and storage failures → Err(BAD_REQUEST)
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from readlater.auth import Claims
from readlater.dependencies import build_services
from readlater.models.library_item import LibraryItem
from readlater.resolvers.links import set_link_archived
from readlater.result import Err, Ok
from readlater.schemas.library_item import ArchiveLinkErrorCode, SetLinkArchivedInput

from conftest import ALICE_ID, BOB_ID, as_utc


async def _add_item(trx, user_id, folder="inbox") -> LibraryItem:
    async def unit_of_work(session):
        item = LibraryItem(
            user_id=user_id,
            title="Saved",
            slug="saved",
            original_url=f"https://example.com/{uuid.uuid4()}",
            folder=folder,
            saved_at=datetime(2020, 1, 1, tzinfo=timezone.utc),
        )
        session.add(item)
        await session.flush()
        return item

    return await trx.run(unit_of_work)


async def _reload(trx, item_id) -> LibraryItem:
    return await trx.run(lambda session: session.get(LibraryItem, item_id))


class TestSetLinkArchived:
    @pytest.fixture(autouse=True)
    def _services(self, config, engine, analytics, users):
        self.analytics = analytics
        self.services = build_services(config, engine, analytics)
        self.trx = self.services.trx

    @pytest.mark.asyncio
    async def test_archive(self):
        item = await _add_item(self.trx, ALICE_ID)
        before = datetime.now(timezone.utc)

        result = await set_link_archived(
            self.services,
            Claims(uid=ALICE_ID),
            SetLinkArchivedInput(link_id=item.id, archived=True),
        )

        assert isinstance(result, Ok)
        assert result.value.link_id == item.id
        assert result.value.message == "Link Archived"

        stored = await _reload(self.trx, item.id)
        assert stored.folder == "archive"
        assert as_utc(stored.saved_at) >= before.replace(microsecond=0)

        self.analytics.track.assert_called_once_with(
            user_id=ALICE_ID,
            event="link_archived",
            properties={"env": "test"},
        )

    @pytest.mark.asyncio
    async def test_unarchive(self):
        item = await _add_item(self.trx, ALICE_ID, folder="archive")

        result = await set_link_archived(
            self.services,
            Claims(uid=ALICE_ID),
            SetLinkArchivedInput(link_id=item.id, archived=False),
        )

        assert isinstance(result, Ok)
        assert (await _reload(self.trx, item.id)).folder == "inbox"
        assert self.analytics.track.call_args.kwargs["event"] == "link_unarchived"

    @pytest.mark.asyncio
    async def test_unknown_link_is_bad_request(self):
        result = await set_link_archived(
            self.services,
            Claims(uid=ALICE_ID),
            SetLinkArchivedInput(link_id=uuid.uuid4(), archived=True),
        )

        assert isinstance(result, Err)
        assert result.error.message == "An error occurred"
        assert result.error.error_codes == [ArchiveLinkErrorCode.BAD_REQUEST]

    @pytest.mark.asyncio
    async def test_foreign_link_is_bad_request_and_untouched(self):
        item = await _add_item(self.trx, ALICE_ID)

        result = await set_link_archived(
            self.services,
            Claims(uid=BOB_ID),
            SetLinkArchivedInput(link_id=item.id, archived=True),
        )

        assert isinstance(result, Err)
        assert (await _reload(self.trx, item.id)).folder == "inbox"

    @pytest.mark.asyncio
    async def test_storage_failure_is_bad_request(self, monkeypatch):
        failing = AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("db down")))
        monkeypatch.setattr(self.services.library_items, "update_library_item", failing)

        result = await set_link_archived(
            self.services,
            Claims(uid=ALICE_ID),
            SetLinkArchivedInput(link_id=uuid.uuid4(), archived=True),
        )

        assert isinstance(result, Err)
        assert result.error.error_codes == [ArchiveLinkErrorCode.BAD_REQUEST]
        # Analytics is recorded before the update is attempted
        self.analytics.track.assert_called_once()
