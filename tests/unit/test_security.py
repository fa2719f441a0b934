"""Unit tests for security functions."""
import uuid
from datetime import timedelta
from unittest.mock import Mock

import jwt
import pytest

from app.core.config import settings
from app.core.exceptions import AuthenticationRequiredError
from app.core.security import (
    create_access_token,
    create_user_token,
    decode_user_token,
    get_current_user_id,
    get_optional_user_id,
    get_token_from_request,
)


def request_with(headers=None, cookies=None):
    request = Mock()
    request.headers = headers or {}
    request.cookies = cookies or {}
    return request


@pytest.mark.unit
class TestAccessTokens:
    """Test JWT creation and verification."""

    def test_round_trip_user_id(self):
        user_id = uuid.uuid4()

        assert decode_user_token(create_user_token(user_id)) == user_id

    def test_token_claims(self):
        token = create_user_token(uuid.uuid4())
        payload = jwt.decode(
            token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM], audience=settings.JWT_AUDIENCE
        )

        assert payload["role"] == "authenticated"
        assert payload["aud"] == "authenticated"
        assert "exp" in payload

    def test_expired_token(self):
        token = create_user_token(uuid.uuid4(), expires_delta=timedelta(seconds=-10))

        with pytest.raises(AuthenticationRequiredError, match="Token expired"):
            decode_user_token(token)

    def test_wrong_secret(self):
        token = jwt.encode(
            {"sub": str(uuid.uuid4()), "role": "authenticated", "aud": "authenticated"},
            "some-other-secret",
            algorithm="HS256",
        )

        with pytest.raises(AuthenticationRequiredError, match="Invalid token"):
            decode_user_token(token)

    def test_non_authenticated_role(self):
        token = create_access_token({"sub": str(uuid.uuid4()), "role": "anon"})

        with pytest.raises(AuthenticationRequiredError):
            decode_user_token(token)

    def test_subject_must_be_uuid(self):
        token = create_access_token({"sub": "not-a-uuid"})

        with pytest.raises(AuthenticationRequiredError, match="Invalid token"):
            decode_user_token(token)


@pytest.mark.unit
class TestRequestIdentity:
    def test_bearer_header(self):
        assert get_token_from_request(request_with(headers={"Authorization": "Bearer abc"})) == "abc"

    def test_cookie_fallback(self):
        assert get_token_from_request(request_with(cookies={"access_token": "xyz"})) == "xyz"

    def test_anonymous_caller(self):
        request = request_with()

        assert get_optional_user_id(request) is None
        with pytest.raises(AuthenticationRequiredError):
            get_current_user_id(request)

    def test_invalid_token_rejected_even_when_optional(self):
        request = request_with(headers={"Authorization": "Bearer garbage"})

        with pytest.raises(AuthenticationRequiredError):
            get_optional_user_id(request)

    def test_current_user(self):
        user_id = uuid.uuid4()
        request = request_with(headers={"Authorization": f"Bearer {create_user_token(user_id)}"})

        assert get_current_user_id(request) == user_id
