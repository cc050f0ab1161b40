"""
Readlater Client — GraphQL Wrapper Tests
==========================================

What we test:
    ✅ GraphQLClient sends query + variables with the bearer token
    ✅ mergeHighlight: success parses; every failure mode returns None
    ✅ Subscriptions: load caches, revalidate refetches, errors are stored
       and a SubscriptionsError surfaces its codes

The server side is an httpx.MockTransport handler per test.
"""

import json

import httpx
import pytest

from readlater.client import (
    GraphQLClient,
    GraphQLRequestError,
    MergeHighlightInput,
    SubscriptionsQuery,
    SubscriptionsQueryError,
    SubscriptionType,
    merge_highlight_mutation,
)

BASE_URL = "https://api.readlater.test"


def _client(handler) -> GraphQLClient:
    return GraphQLClient(BASE_URL, auth_token="tok", transport=httpx.MockTransport(handler))


def _graphql(data=None, errors=None, status=200):
    """Handler that records requests and answers with a fixed body."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        body = {"data": data}
        if errors:
            body["errors"] = errors
        return httpx.Response(status, json=body)

    return handler, seen


MERGE_INPUT = MergeHighlightInput(
    id="hl-new",
    short_id="abc123",
    article_id="article-1",
    patch="@@ -1 +1 @@",
    quote="merged quote",
    overlap_highlight_id_list=["hl-1", "hl-2"],
)

HIGHLIGHT = {
    "id": "hl-new",
    "shortId": "abc123",
    "quote": "merged quote",
    "prefix": None,
    "suffix": None,
    "patch": "@@ -1 +1 @@",
    "createdAt": "2024-03-01T10:00:00Z",
    "updatedAt": None,
    "annotation": None,
    "sharedAt": None,
    "createdByMe": True,
}


class TestGraphQLClient:
    @pytest.mark.asyncio
    async def test_posts_query_and_returns_data(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"data": {"ok": True}})

        async with _client(handler) as client:
            data = await client.execute("query { ok }", {"a": 1})

        assert data == {"ok": True}
        request = requests[0]
        assert request.url.path == "/api/graphql"
        assert request.headers["Authorization"] == "Bearer tok"
        assert json.loads(request.content) == {"query": "query { ok }", "variables": {"a": 1}}

    @pytest.mark.asyncio
    async def test_errors_raise(self):
        handler, _ = _graphql(errors=[{"message": "boom"}])

        async with _client(handler) as client:
            with pytest.raises(GraphQLRequestError, match="boom"):
                await client.execute("query { ok }")

    @pytest.mark.asyncio
    async def test_http_status_raises(self):
        handler, _ = _graphql(status=502)

        async with _client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.execute("query { ok }")


class TestMergeHighlight:
    @pytest.mark.asyncio
    async def test_success(self):
        handler, seen = _graphql(
            data={
                "mergeHighlight": {
                    "__typename": "MergeHighlightSuccess",
                    "highlight": HIGHLIGHT,
                    "overlapHighlightIdList": ["hl-1", "hl-2"],
                }
            }
        )

        async with _client(handler) as client:
            result = await merge_highlight_mutation(client, MERGE_INPUT)

        assert result is not None
        assert result.highlight.short_id == "abc123"
        assert result.highlight.created_by_me is True
        assert result.overlap_highlight_id_list == ["hl-1", "hl-2"]

        sent = seen[0]["variables"]["input"]
        assert sent["articleId"] == "article-1"
        assert sent["overlapHighlightIdList"] == ["hl-1", "hl-2"]
        assert "annotation" not in sent

    @pytest.mark.asyncio
    async def test_merge_error_returns_none(self):
        handler, _ = _graphql(
            data={
                "mergeHighlight": {
                    "__typename": "MergeHighlightError",
                    "errorCodes": ["NOT_FOUND"],
                }
            }
        )

        async with _client(handler) as client:
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

    @pytest.mark.asyncio
    async def test_graphql_errors_return_none(self):
        handler, _ = _graphql(errors=[{"message": "unauthorized"}])

        async with _client(handler) as client:
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

    @pytest.mark.asyncio
    async def test_network_failure_returns_none(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("offline", request=request)

        async with _client(handler) as client:
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

    @pytest.mark.asyncio
    async def test_malformed_payload_returns_none(self):
        handler, _ = _graphql(data={"mergeHighlight": {"__typename": "MergeHighlightSuccess"}})

        async with _client(handler) as client:
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None


def _subscription(sub_id: str, name: str) -> dict:
    return {
        "id": sub_id,
        "name": name,
        "type": "RSS",
        "newsletterEmail": None,
        "url": f"https://{name}.example.com/feed",
        "description": None,
        "status": "ACTIVE",
        "unsubscribeMailTo": None,
        "unsubscribeHttpUrl": None,
        "createdAt": "2024-01-01T00:00:00Z",
        "updatedAt": "2024-02-01T00:00:00Z",
        "lastFetchedAt": None,
        "autoAddToLibrary": False,
        "isPrivate": False,
    }


class TestSubscriptionsQuery:
    @pytest.mark.asyncio
    async def test_load_fetches_once(self):
        handler, seen = _graphql(
            data={
                "subscriptions": {
                    "__typename": "SubscriptionsSuccess",
                    "subscriptions": [_subscription("s1", "blog")],
                }
            }
        )

        async with _client(handler) as client:
            query = SubscriptionsQuery(client, type=SubscriptionType.RSS)
            first = await query.load()
            second = await query.load()

        assert len(seen) == 1
        assert seen[0]["variables"] == {"type": "RSS", "sort": {"by": "UPDATED_TIME"}}
        assert first.error is None
        assert first.is_loading is False
        assert [s.name for s in second.subscriptions] == ["blog"]

    @pytest.mark.asyncio
    async def test_revalidate_refetches(self):
        handler, seen = _graphql(data={"subscriptions": {"subscriptions": []}})

        async with _client(handler) as client:
            response = await SubscriptionsQuery(client).load()
            await response.revalidate()

        assert len(seen) == 2
        assert seen[0]["variables"]["type"] is None

    @pytest.mark.asyncio
    async def test_subscriptions_error_is_stored(self):
        handler, _ = _graphql(
            data={
                "subscriptions": {
                    "__typename": "SubscriptionsError",
                    "errorCodes": ["UNAUTHORIZED"],
                }
            }
        )

        async with _client(handler) as client:
            response = await SubscriptionsQuery(client).load()

        assert isinstance(response.error, SubscriptionsQueryError)
        assert response.error.error_codes == ["UNAUTHORIZED"]
        assert response.is_loading is False
        assert response.subscriptions == []

    @pytest.mark.asyncio
    async def test_failed_revalidate_keeps_previous_list(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            if len(calls) > 1:
                return httpx.Response(500, json={})
            return httpx.Response(
                200,
                json={"data": {"subscriptions": {"subscriptions": [_subscription("s1", "blog")]}}},
            )

        async with _client(handler) as client:
            query = SubscriptionsQuery(client)
            await query.load()
            response = await query.revalidate()

        assert isinstance(response.error, httpx.HTTPStatusError)
        assert [s.id for s in response.subscriptions] == ["s1"]


class TestMalformedResponses:
    """Response shapes that are valid JSON but not what the schema promises."""

    @pytest.mark.asyncio
    async def test_errors_not_a_list(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"errors": "boom"})

        async with _client(handler) as client:
            with pytest.raises(GraphQLRequestError, match="boom"):
                await client.execute("query { ok }")
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

    @pytest.mark.asyncio
    async def test_data_not_an_object(self):
        handler, _ = _graphql(data=["oops"])

        async with _client(handler) as client:
            with pytest.raises(GraphQLRequestError):
                await client.execute("query { ok }")
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

            response = await SubscriptionsQuery(client).load()

        assert isinstance(response.error, GraphQLRequestError)
        assert response.subscriptions == []

    @pytest.mark.asyncio
    async def test_merge_result_not_an_object(self):
        handler, _ = _graphql(data={"mergeHighlight": "oops"})

        async with _client(handler) as client:
            assert await merge_highlight_mutation(client, MERGE_INPUT) is None

    @pytest.mark.asyncio
    async def test_subscriptions_result_not_an_object(self):
        handler, _ = _graphql(data={"subscriptions": "oops"})

        async with _client(handler) as client:
            response = await SubscriptionsQuery(client).load()

        assert isinstance(response.error, ValueError)
        assert response.is_loading is False
