"""
Readlater Client — Highlight Mutations
========================================

What:  mergeHighlight: replace several overlapping highlights with one.
How:   The caller sends the merged highlight plus the ids it absorbs
       (overlap_highlight_id_list); the server answers with the surviving
       highlight and the ids it removed.

merge_highlight_mutation() never raises. Network, HTTP status, GraphQL
errors, MergeHighlightError and unparseable payloads all come back as None
(logged); the reader UI then keeps the old highlights.
"""

import logging
from datetime import datetime
from typing import List, Optional

import httpx
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from readlater.client.graphql import GraphQLClient, GraphQLRequestError

logger = logging.getLogger(__name__)


class _ClientModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MergeHighlightInput(_ClientModel):
    id: str
    short_id: str
    article_id: str
    patch: str
    quote: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    annotation: Optional[str] = None
    overlap_highlight_id_list: List[str]


class Highlight(_ClientModel):
    id: str
    short_id: str
    quote: str
    prefix: Optional[str] = None
    suffix: Optional[str] = None
    patch: str
    annotation: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    shared_at: Optional[datetime] = None
    created_by_me: bool


class MergeHighlightOutput(_ClientModel):
    highlight: Highlight
    overlap_highlight_id_list: List[str]


MERGE_HIGHLIGHT_MUTATION = """
mutation MergeHighlight($input: MergeHighlightInput!) {
  mergeHighlight(input: $input) {
    __typename
    ... on MergeHighlightSuccess {
      highlight {
        id
        shortId
        quote
        prefix
        suffix
        patch
        createdAt
        updatedAt
        annotation
        sharedAt
        createdByMe
      }
      overlapHighlightIdList
    }
    ... on MergeHighlightError {
      errorCodes
    }
  }
}
"""


async def merge_highlight_mutation(
    client: GraphQLClient, params: MergeHighlightInput
) -> Optional[MergeHighlightOutput]:
    variables = {"input": params.model_dump(mode="json", by_alias=True, exclude_none=True)}
    try:
        data = await client.execute(MERGE_HIGHLIGHT_MUTATION, variables)
    except (httpx.HTTPError, GraphQLRequestError, ValueError) as e:
        logger.warning("mergeHighlight %s failed: %s", params.id, str(e))
        return None

    payload = data.get("mergeHighlight")
    if not isinstance(payload, dict):
        logger.warning("mergeHighlight %s returned no result object", params.id)
        return None
    if payload.get("__typename") == "MergeHighlightError" or "errorCodes" in payload:
        logger.warning("mergeHighlight %s rejected: %s", params.id, payload.get("errorCodes"))
        return None

    try:
        return MergeHighlightOutput.model_validate(payload)
    except PydanticValidationError as e:
        logger.warning("mergeHighlight %s returned an unexpected payload: %s", params.id, str(e))
        return None
