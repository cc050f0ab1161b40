"""
Readlater Backend — Service Container & FastAPI Dependencies
==============================================================

What:  The per-process Services bundle and the Depends() helpers that hand
       it (and the caller's Claims) to route handlers.
How:   create_app() calls build_services() once and stores the result on
       app.state.services; get_services() reads it back per request.
"""

import uuid
from dataclasses import dataclass

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncEngine

from readlater.auth import Claims, parse_authorization_header
from readlater.config import AppConfig
from readlater.repository import TransactionManager
from readlater.services.analytics import AnalyticsClient
from readlater.services.device_token_service import DeviceTokenService
from readlater.services.library_item_service import LibraryItemService
from readlater.services.rule_service import RuleService


@dataclass(frozen=True)
class Services:
    config: AppConfig
    trx: TransactionManager
    analytics: AnalyticsClient
    rules: RuleService
    device_tokens: DeviceTokenService
    library_items: LibraryItemService


def build_services(
    config: AppConfig, engine: AsyncEngine, analytics: AnalyticsClient
) -> Services:
    trx = TransactionManager(engine)
    return Services(
        config=config,
        trx=trx,
        analytics=analytics,
        rules=RuleService(trx),
        device_tokens=DeviceTokenService(trx, analytics, config.server.api_env),
        library_items=LibraryItemService(trx),
    )


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_config(request: Request) -> AppConfig:
    return request.app.state.config


def get_claims(request: Request, config: AppConfig = Depends(get_config)) -> Claims:
    """Raises UnauthorizedError (401) without a valid bearer token."""
    return parse_authorization_header(
        request.headers.get("Authorization"), config.server.jwt_secret
    )


def get_current_user_id(claims: Claims = Depends(get_claims)) -> uuid.UUID:
    return claims.uid
