"""
Readlater Client — GraphQL Transport
======================================

What:  Minimal async GraphQL-over-HTTP client for the Readlater API.
How:   POSTs {"query", "variables"} to {base_url}/api/graphql with httpx and
       returns the `data` object. Server-reported `errors` become
       GraphQLRequestError; transport and HTTP status failures surface as the
       httpx exceptions.

    async with GraphQLClient("https://api.example.com", auth_token=token) as client:
        data = await client.execute(QUERY, {"input": {...}})
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)

GRAPHQL_PATH = "/api/graphql"


class GraphQLRequestError(Exception):
    """The server answered with a non-empty `errors` list."""

    def __init__(self, errors: List[Dict[str, Any]]):
        self.errors = errors
        messages = "; ".join(
            str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors
        ) or "unknown error"
        super().__init__(f"GraphQL request failed: {messages}")


class GraphQLClient:
    def __init__(
        self,
        base_url: str,
        auth_token: str = "",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.auth_token = auth_token
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "GraphQLClient":
        self._open()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.aclose()

    def _open(self) -> httpx.AsyncClient:
        if self._client is None:
            headers = {"Content-Type": "application/json"}
            if self.auth_token:
                # The API accepts the raw token or "Bearer <token>"
                headers["Authorization"] = f"Bearer {self.auth_token}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=headers,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def execute(
        self, query: str, variables: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Run one operation and return its `data`.

        Raises:
            httpx.HTTPError: Transport failure or non-2xx status.
            GraphQLRequestError: `errors` present, or the body or its `data`
                is not a JSON object.
        """
        client = self._open()
        response = await client.post(
            GRAPHQL_PATH, json={"query": query, "variables": variables or {}}
        )
        response.raise_for_status()
        body = response.json()
        if not isinstance(body, dict):
            raise GraphQLRequestError([{"message": "response is not a JSON object"}])

        errors = body.get("errors")
        if errors:
            if not isinstance(errors, list):
                errors = [{"message": str(errors)}]
            raise GraphQLRequestError(errors)

        data = body.get("data")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise GraphQLRequestError([{"message": "`data` is not a JSON object"}])
        return data
