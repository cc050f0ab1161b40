"""
Readlater Backend — Device Token Service
==========================================

What:  Push-notification device tokens registered by a user's apps.
How:   Each call is one owner-scoped transaction. Creating and deleting a
       token also emits an analytics event tagged with the deployment env.
Who:   /api/device-tokens router; account cleanup.

Note: delete_device_token() records `device_token_deleted` before the delete
runs, so the event is sent even when no row matched.
"""

import logging
import uuid
from typing import Any, List, Mapping, Optional, Sequence, Union

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from readlater.exceptions import ValidationError
from readlater.models.device_token import UserDeviceToken
from readlater.repository import TransactionManager
from readlater.services.analytics import AnalyticsClient

logger = logging.getLogger(__name__)

# Columns delete_device_tokens() accepts in a mapping criteria
_FILTERABLE_COLUMNS = frozenset({"id", "token", "created_at"})

DeleteCriteria = Union[Sequence[uuid.UUID], Mapping[str, Any]]


class DeviceTokenService:
    def __init__(self, trx: TransactionManager, analytics: AnalyticsClient, api_env: str):
        self.trx = trx
        self.analytics = analytics
        self.api_env = api_env

    async def find_device_token_by_id(
        self, token_id: uuid.UUID, user_id: uuid.UUID
    ) -> Optional[UserDeviceToken]:
        async def unit_of_work(session: AsyncSession) -> Optional[UserDeviceToken]:
            return await session.scalar(
                select(UserDeviceToken).where(
                    UserDeviceToken.id == token_id,
                    UserDeviceToken.user_id == user_id,
                )
            )

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def find_device_token_by_token(
        self, token: str, user_id: uuid.UUID
    ) -> Optional[UserDeviceToken]:
        async def unit_of_work(session: AsyncSession) -> Optional[UserDeviceToken]:
            return await session.scalar(
                select(UserDeviceToken).where(
                    UserDeviceToken.token == token,
                    UserDeviceToken.user_id == user_id,
                )
            )

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def find_device_tokens_by_user_id(self, user_id: uuid.UUID) -> List[UserDeviceToken]:
        async def unit_of_work(session: AsyncSession) -> List[UserDeviceToken]:
            result = await session.scalars(
                select(UserDeviceToken)
                .where(UserDeviceToken.user_id == user_id)
                .order_by(UserDeviceToken.created_at)
            )
            return list(result)

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def create_device_token(self, user_id: uuid.UUID, token: str) -> UserDeviceToken:
        """Register `token` for the user. Duplicates are allowed."""
        self.analytics.track(
            user_id=user_id,
            event="device_token_created",
            properties={"env": self.api_env},
        )

        async def unit_of_work(session: AsyncSession) -> UserDeviceToken:
            device_token = UserDeviceToken(user_id=user_id, token=token)
            session.add(device_token)
            await session.flush()
            return device_token

        device_token = await self.trx.run(unit_of_work, user_id=user_id)
        logger.info("Device token created: %s (user=%s)", device_token.id, user_id)
        return device_token

    async def delete_device_token(self, token_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Delete one of the user's tokens. True only if a row was removed."""
        self.analytics.track(
            user_id=user_id,
            event="device_token_deleted",
            properties={"env": self.api_env},
        )

        async def unit_of_work(session: AsyncSession) -> bool:
            result = await session.execute(
                delete(UserDeviceToken).where(
                    UserDeviceToken.id == token_id,
                    UserDeviceToken.user_id == user_id,
                )
            )
            return bool(result.rowcount)

        return await self.trx.run(unit_of_work, user_id=user_id)

    async def delete_device_tokens(self, user_id: uuid.UUID, criteria: DeleteCriteria) -> None:
        """
        Bulk delete the user's tokens.

        Args:
            user_id: Owner; tokens of other users are never touched.
            criteria: Either a sequence of token ids, or a mapping of
                      column name to value, e.g. {"token": "abc"}.

        Raises:
            ValidationError: The mapping is empty or names a column that
                cannot be filtered on, or criteria is a bare string.
        """
        stmt = delete(UserDeviceToken).where(UserDeviceToken.user_id == user_id)

        if isinstance(criteria, (str, bytes)):
            raise ValidationError(
                message="Device token ids must be given as a list, not a string",
                field="criteria",
            )
        if isinstance(criteria, Mapping):
            if not criteria:
                # An unfiltered delete would remove every token the user has
                raise ValidationError(
                    message="At least one device token filter is required",
                    field="criteria",
                )
            unknown = sorted(set(criteria) - _FILTERABLE_COLUMNS)
            if unknown:
                raise ValidationError(
                    message=f"Cannot filter device tokens by: {', '.join(unknown)}",
                    field=unknown[0],
                )
            for column, value in criteria.items():
                stmt = stmt.where(getattr(UserDeviceToken, column) == value)
        else:
            ids = list(criteria)
            if not ids:
                return
            stmt = stmt.where(UserDeviceToken.id.in_(ids))

        async def unit_of_work(session: AsyncSession) -> None:
            result = await session.execute(stmt)
            logger.info("Deleted %d device tokens (user=%s)", result.rowcount or 0, user_id)

        await self.trx.run(unit_of_work, user_id=user_id)
