"""
Authentication for the functions service.

Callers present the project's anon or service key, a JWT signed with
JWT_SECRET carrying a `role` claim, either as `Authorization: Bearer`
or in the `apikey` header.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated

import jwt
from fastapi import Header, HTTPException, status

from backend.config import settings
from backend.models.auth import Caller


def create_jwt(role: str = "anon", expires_in_hours: int | None = None) -> str:
    """
    Create a project key.

    Args:
        role: Role claim, "anon" or "service_role"
        expires_in_hours: Lifetime; defaults to JWT_EXPIRY_HOURS

    Returns:
        Signed JWT string
    """
    now = datetime.now(UTC)
    hours = settings.JWT_EXPIRY_HOURS if expires_in_hours is None else expires_in_hours
    payload = {
        "role": role,
        "iss": "leitor",
        "iat": now,
        "exp": now + timedelta(hours=hours),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and verify a JWT.

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key expired.",
        ) from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
        ) from e


async def require_caller(
    authorization: Annotated[str | None, Header()] = None,
    apikey: Annotated[str | None, Header()] = None,
) -> Caller:
    """
    FastAPI dependency that authenticates the caller.

    Tries the Bearer token first, then the apikey header.
    """
    token = None
    if authorization and authorization.startswith("Bearer "):
        token = authorization.removeprefix("Bearer ").strip()
    elif apikey:
        token = apikey.strip()

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing API key.",
        )

    payload = decode_jwt(token)
    role = payload.get("role")
    if not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key.",
        )
    return Caller(role=role)
