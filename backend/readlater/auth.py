"""
Readlater Backend — Bearer Token Authentication
=================================================

What:  Turns `Authorization: Bearer <jwt>` into Claims for /api/* routes.
How:   HS256 tokens signed with server.jwt_secret; the `uid` claim is the
       user id. Expired, malformed or unsigned tokens all map to
       UnauthorizedError (401).
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from readlater.exceptions import UnauthorizedError

JWT_ALGORITHM = "HS256"
TOKEN_TTL = timedelta(hours=24)


class Claims(BaseModel):
    uid: uuid.UUID


def encode_token(uid: uuid.UUID, secret: str, ttl: Optional[timedelta] = TOKEN_TTL) -> str:
    """Issue a token for `uid` (used by internal tooling and tests)."""
    now = datetime.now(timezone.utc)
    payload = {"uid": str(uid), "iat": now}
    if ttl is not None:
        payload["exp"] = now + ttl
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_token(token: str, secret: str) -> Claims:
    try:
        payload = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token expired")
    except jwt.InvalidTokenError:
        raise UnauthorizedError("Invalid token")

    try:
        return Claims.model_validate(payload)
    except PydanticValidationError:
        raise UnauthorizedError("Token has no valid uid claim")


def parse_authorization_header(value: Optional[str], secret: str) -> Claims:
    if not value:
        raise UnauthorizedError()
    scheme, _, token = value.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Expected a Bearer token")
    return decode_token(token.strip(), secret)
