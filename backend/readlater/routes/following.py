"""
Readlater Backend — Following Service Route
=============================================

What:  POST /svc/following/save: the feed fetcher pushes one new feed entry
       for a set of subscribers.
Who:   Internal Pub/Sub push subscription (not end users).

Responses are plain text, which is what the push sender inspects:
    403                            token missing or wrong
    400 INVALID_REQUEST_BODY       body is not a valid SaveFollowingItemRequest
    500 ERROR_SAVING_FEED_ITEM     feed entry inserted for nobody
    200 OK                         saved, or a source that needs no work
"""

import hmac
import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import PlainTextResponse

from readlater.dependencies import Services, get_services
from readlater.result import Err
from readlater.schemas.following import SOURCE_FEED, parse_save_following_request

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/svc/following", tags=["Following"])


def _token_matches(supplied: Optional[str], expected: str) -> bool:
    if not supplied or not expected:
        return False
    return hmac.compare_digest(supplied.encode(), expected.encode())


@router.post(
    "/save",
    response_class=PlainTextResponse,
    summary="Save a feed entry into subscribers' following folder",
)
async def save_following_item(
    request: Request,
    token: Optional[str] = Query(default=None),
    services: Services = Depends(get_services),
) -> PlainTextResponse:
    if not _token_matches(token, services.config.server.pubsub_verification_token):
        logger.warning("Following save rejected: invalid verification token")
        return PlainTextResponse("Forbidden", status_code=403)

    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        body = None

    parsed = parse_save_following_request(body)
    if isinstance(parsed, Err):
        logger.error("Invalid following save request: %s", parsed.error)
        return PlainTextResponse("INVALID_REQUEST_BODY", status_code=400)
    save_request = parsed.value

    logger.info(
        "Following save request: %s from %s for %d users",
        save_request.url,
        save_request.added_to_following_from,
        len(save_request.user_ids),
    )

    if save_request.added_to_following_from != SOURCE_FEED:
        return PlainTextResponse("OK", status_code=200)

    try:
        ids = await services.library_items.save_feed_item_in_following(save_request)
    except Exception as e:
        logger.error("Error saving feed item %s: %s", save_request.url, str(e), exc_info=True)
        ids = []

    if not ids:
        logger.error("Feed item %s was not saved in following", save_request.url)
        return PlainTextResponse("ERROR_SAVING_FEED_ITEM", status_code=500)

    logger.info("Feed item %s saved in following (%d rows)", save_request.url, len(ids))
    return PlainTextResponse("OK", status_code=200)
