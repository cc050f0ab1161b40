"""
Readlater Backend — Rule Routes
=================================

What:  /api/rules CRUD for the authenticated user.

    GET    /api/rules          list rules (by name)
    POST   /api/rules          find-or-create by case-insensitive name
    DELETE /api/rules/{id}     delete one; returns the deleted rule
    DELETE /api/rules          delete all; returns {"affected": n}
"""

import uuid
from typing import List

from fastapi import APIRouter, Depends

from readlater.dependencies import Services, get_current_user_id, get_services
from readlater.schemas.common import DeleteResult, ErrorResponse
from readlater.schemas.rule import RuleCreate, RuleResponse

router = APIRouter(
    prefix="/api/rules",
    tags=["Rules"],
    responses={401: {"model": ErrorResponse}},
)


@router.get("", response_model=List[RuleResponse])
async def list_rules(
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> List[RuleResponse]:
    rules = await services.rules.find_rules(user_id)
    return [RuleResponse.model_validate(rule) for rule in rules]


@router.post("", response_model=RuleResponse)
async def create_rule(
    params: RuleCreate,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> RuleResponse:
    rule = await services.rules.create_rule(user_id, params)
    return RuleResponse.model_validate(rule)


@router.delete(
    "/{rule_id}",
    response_model=RuleResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_rule(
    rule_id: uuid.UUID,
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> RuleResponse:
    rule = await services.rules.delete_rule(rule_id, user_id)
    return RuleResponse.model_validate(rule)


@router.delete("", response_model=DeleteResult)
async def delete_rules(
    user_id: uuid.UUID = Depends(get_current_user_id),
    services: Services = Depends(get_services),
) -> DeleteResult:
    return await services.rules.delete_rules(user_id)
