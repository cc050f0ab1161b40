"""
Readlater Backend — Link Routes
=================================

What:  POST /api/links/archive, the HTTP face of the setLinkArchived mutation.
How:   The resolver's Ok | Err result is rendered with a "__typename"
       discriminant so existing GraphQL-style clients can switch on it:

    {"__typename": "ArchiveLinkSuccess", "linkId": "...", "message": "Link Archived"}
    {"__typename": "ArchiveLinkError", "message": "...", "errorCodes": ["BAD_REQUEST"]}

Both outcomes are HTTP 200; only authentication failures are 401.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from readlater.auth import Claims
from readlater.dependencies import Services, get_claims, get_services
from readlater.resolvers.links import set_link_archived
from readlater.result import Ok, Result
from readlater.schemas.library_item import SetLinkArchivedInput

router = APIRouter(prefix="/api/links", tags=["Links"])


def render_union(result: Result[BaseModel, BaseModel]) -> Dict[str, Any]:
    payload = result.value if isinstance(result, Ok) else result.error
    return {
        "__typename": type(payload).__name__,
        **payload.model_dump(mode="json", by_alias=True),
    }


@router.post("/archive", summary="Archive or unarchive a saved link")
async def archive_link(
    params: SetLinkArchivedInput,
    claims: Claims = Depends(get_claims),
    services: Services = Depends(get_services),
) -> Dict[str, Any]:
    result = await set_link_archived(services, claims, params)
    return render_union(result)
