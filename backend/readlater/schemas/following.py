"""
Readlater Backend — Following Ingestion Schemas
=================================================

What:  The body of POST /svc/following/save and its boundary validator.
How:   parse_save_following_request() evaluates the shape once and returns
       Ok(SaveFollowingItemRequest) or Err(reason). The route never touches
       the raw body after that.

Required keys: userIds, addedToFollowingBy, addedToFollowingFrom, url, title.
`addedToFollowingFrom` is kept as a free string: unknown sources are a valid
request that the route acknowledges without doing anything.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import ValidationError as PydanticValidationError

from readlater.result import Err, Ok, Result
from readlater.schemas.common import CamelModel

SOURCE_FEED = "feed"


class SaveFollowingItemRequest(CamelModel):
    user_ids: List[uuid.UUID]
    title: str
    url: str
    item_id: Optional[str] = None
    added_to_following_by: str
    added_to_following_from: str
    author: Optional[str] = None
    description: Optional[str] = None
    links: Optional[Any] = None
    preview_content: Optional[str] = None
    preview_content_type: Optional[str] = None
    published_at: Optional[datetime] = None
    saved_at: Optional[datetime] = None


def parse_save_following_request(body: Any) -> Result[SaveFollowingItemRequest, str]:
    """Validate a decoded JSON body. Err carries a short, log-friendly reason."""
    if not isinstance(body, dict):
        return Err(f"expected a JSON object, got {type(body).__name__}")
    try:
        return Ok(SaveFollowingItemRequest.model_validate(body))
    except PydanticValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        return Err(f"invalid fields: {', '.join(fields)}")
