"""Security and authentication utilities.

Users sign in with the external auth provider, which hands out HS256 JWTs
signed with the shared ``SECRET_KEY``. The token subject is the user's UUID.
"""
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request

from app.core import config
from app.core.constants import AUTHENTICATED_ROLE
from app.core.exceptions import AuthenticationRequiredError

ACCESS_TOKEN_COOKIE = "access_token"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create a JWT access token shaped like the ones the auth provider issues."""
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.setdefault("role", AUTHENTICATED_ROLE)
    to_encode.setdefault("aud", config.settings.JWT_AUDIENCE)
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)
    return encoded_jwt


def create_user_token(user_id: uuid.UUID, expires_delta: Optional[timedelta] = None) -> str:
    """Create an access token for the given user."""
    return create_access_token({"sub": str(user_id)}, expires_delta)


def get_token_from_request(request: Request) -> Optional[str]:
    """Read the bearer token from the Authorization header, falling back to the cookie."""
    authorization = request.headers.get("Authorization")
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()

    return request.cookies.get(ACCESS_TOKEN_COOKIE)


def decode_user_token(token: str) -> uuid.UUID:
    """
    Verify a JWT and return the authenticated user's id.

    Raises:
        AuthenticationRequiredError: If the token is expired, malformed or
            does not belong to an authenticated user
    """
    try:
        payload = jwt.decode(
            token,
            config.settings.SECRET_KEY,
            algorithms=[config.settings.ALGORITHM],
            audience=config.settings.JWT_AUDIENCE,
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationRequiredError("Token expired")
    except jwt.PyJWTError:
        raise AuthenticationRequiredError("Invalid token")

    if payload.get("role") != AUTHENTICATED_ROLE:
        raise AuthenticationRequiredError("Invalid token")

    try:
        return uuid.UUID(str(payload.get("sub")))
    except ValueError:
        raise AuthenticationRequiredError("Invalid token")


def get_optional_user_id(request: Request) -> Optional[uuid.UUID]:
    """Dependency: the caller's user id, or None when no token was sent.

    A token that is present but invalid is still rejected.
    """
    token = get_token_from_request(request)
    if not token:
        return None
    return decode_user_token(token)


def get_current_user_id(request: Request) -> uuid.UUID:
    """Dependency: the caller's user id. Raises if the caller is anonymous."""
    user_id = get_optional_user_id(request)
    if user_id is None:
        raise AuthenticationRequiredError()
    return user_id
