"""
Readlater Backend — Device Token Routes
=========================================

What:  /api/device-tokens for the authenticated user.

    GET    /api/device-tokens[?token=...]   list (or look up one token)
    GET    /api/device-tokens/{id}          one token, 404 if not yours
    POST   /api/device-tokens               register a token
    DELETE /api/device-tokens/{id}          {"deleted": true|false}
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from readlater.dependencies import Services, get_current_user_id, get_services
from readlater.exceptions import NotFoundError
from readlater.schemas.common import ErrorResponse
from readlater.schemas.device_token import (
    DeleteDeviceTokenResponse,
    DeviceTokenCreate,
    DeviceTokenResponse,
)

router = APIRouter(
    prefix="/api/device-tokens",
    tags=["Device Tokens"],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=List[DeviceTokenResponse])
async def list_device_tokens(
    token: Optional[str] = Query(default=None, description="Return only this token"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> List[DeviceTokenResponse]:
    if token is not None:
        found = await services.device_tokens.find_device_token_by_token(token, user_id)
        tokens = [found] if found else []
    else:
        tokens = await services.device_tokens.find_device_tokens_by_user_id(user_id)
    return [DeviceTokenResponse.model_validate(t) for t in tokens]


@router.get(
    "/{token_id}",
    response_model=DeviceTokenResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_device_token(
    token_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeviceTokenResponse:
    found = await services.device_tokens.find_device_token_by_id(token_id, user_id)
    if found is None:
        raise NotFoundError(resource="device token", resource_id=str(token_id))
    return DeviceTokenResponse.model_validate(found)


@router.post("", response_model=DeviceTokenResponse, status_code=201)
async def create_device_token(
    params: DeviceTokenCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeviceTokenResponse:
    created = await services.device_tokens.create_device_token(user_id, params.token)
    return DeviceTokenResponse.model_validate(created)


@router.delete("/{token_id}", response_model=DeleteDeviceTokenResponse)
async def delete_device_token(
    token_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeleteDeviceTokenResponse:
    deleted = await services.device_tokens.delete_device_token(token_id, user_id)
    return DeleteDeviceTokenResponse(deleted=deleted)
