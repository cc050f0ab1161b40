"""
Readlater Client — Subscriptions Query
========================================

What:  Lists the viewer's RSS and newsletter subscriptions.
How:   SubscriptionsQuery keeps the last good result and the last error, in
       the stale-while-revalidate style the settings screens expect:

    query = SubscriptionsQuery(client, type=SubscriptionType.RSS)
    response = await query.load()       # fetches once, then served from cache
    ...
    response = await response.revalidate()

Errors never propagate out of load()/revalidate(); they are stored on
`response.error`. A server-side SubscriptionsError becomes
SubscriptionsQueryError carrying its error codes.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from readlater.client.graphql import GraphQLClient, GraphQLRequestError

logger = logging.getLogger(__name__)


class SubscriptionType(str, enum.Enum):
    RSS = "RSS"
    NEWSLETTER = "NEWSLETTER"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    DELETED = "DELETED"
    UNSUBSCRIBED = "UNSUBSCRIBED"


class Subscription(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: str
    type: SubscriptionType
    newsletter_email: Optional[str] = None
    url: Optional[str] = None
    description: Optional[str] = None
    status: SubscriptionStatus
    unsubscribe_mail_to: Optional[str] = None
    unsubscribe_http_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_fetched_at: Optional[datetime] = None
    auto_add_to_library: Optional[bool] = None
    is_private: Optional[bool] = None


class SubscriptionsQueryError(Exception):
    """The server answered with a SubscriptionsError union member."""

    def __init__(self, error_codes: List[str]):
        self.error_codes = error_codes
        super().__init__(f"Subscriptions query failed: {', '.join(error_codes) or 'unknown'}")


@dataclass
class SubscriptionsQueryResponse:
    error: Optional[Exception]
    is_loading: bool
    is_validating: bool
    subscriptions: List[Subscription] = field(default_factory=list)
    revalidate: Optional[Callable[[], Awaitable["SubscriptionsQueryResponse"]]] = None


SUBSCRIPTIONS_QUERY = """
query GetSubscriptions($type: SubscriptionType, $sort: SortParams) {
  subscriptions(type: $type, sort: $sort) {
    __typename
    ... on SubscriptionsSuccess {
      subscriptions {
        id
        name
        type
        newsletterEmail
        url
        description
        status
        unsubscribeMailTo
        unsubscribeHttpUrl
        createdAt
        updatedAt
        lastFetchedAt
        autoAddToLibrary
        isPrivate
      }
    }
    ... on SubscriptionsError {
      errorCodes
    }
  }
}
"""


class SubscriptionsQuery:
    def __init__(
        self,
        client: GraphQLClient,
        type: Optional[SubscriptionType] = None,
        sort_by: str = "UPDATED_TIME",
    ):
        self.client = client
        self.type = type
        self.sort_by = sort_by
        self._subscriptions: Optional[List[Subscription]] = None
        self._error: Optional[Exception] = None
        self._is_validating = False

    @property
    def variables(self) -> dict:
        return {
            "type": self.type.value if self.type else None,
            "sort": {"by": self.sort_by},
        }

    def snapshot(self) -> SubscriptionsQueryResponse:
        loaded = self._subscriptions is not None
        return SubscriptionsQueryResponse(
            error=self._error,
            is_loading=self._error is None and not loaded,
            is_validating=self._is_validating,
            subscriptions=list(self._subscriptions or []),
            revalidate=self.revalidate,
        )

    async def load(self) -> SubscriptionsQueryResponse:
        """Fetch on first use; afterwards return the cached result."""
        if self._subscriptions is None and self._error is None:
            await self._fetch()
        return self.snapshot()

    async def revalidate(self) -> SubscriptionsQueryResponse:
        """Re-fetch. The previous list stays visible if the refetch fails."""
        await self._fetch()
        return self.snapshot()

    async def _fetch(self) -> None:
        self._is_validating = True
        try:
            data = await self.client.execute(SUBSCRIPTIONS_QUERY, self.variables)
            self._subscriptions = self._parse(data.get("subscriptions") or {})
            self._error = None
        except (
            httpx.HTTPError,
            GraphQLRequestError,
            SubscriptionsQueryError,
            PydanticValidationError,
            ValueError,
        ) as e:
            logger.warning("Subscriptions query failed: %s", str(e))
            self._error = e
        finally:
            self._is_validating = False

    @staticmethod
    def _parse(payload: Any) -> List[Subscription]:
        if not isinstance(payload, dict):
            raise ValueError("subscriptions payload is not an object")
        if payload.get("__typename") == "SubscriptionsError" or "errorCodes" in payload:
            raise SubscriptionsQueryError(list(payload.get("errorCodes") or []))
        return [Subscription.model_validate(s) for s in payload.get("subscriptions") or []]
