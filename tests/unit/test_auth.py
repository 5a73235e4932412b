"""
Unit tests for authentication module.
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException

from shared.auth import User, create_access_token, decode_token, get_current_user
from shared.auth.jwt import TokenData, is_token_expired


ORG_ID = "22222222-2222-2222-2222-222222222222"


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_access_token(self) -> None:
        """Test access token creation."""
        token = create_access_token({"sub": "user123", "organization_id": ORG_ID})

        assert isinstance(token, str)
        assert len(token) > 50

    def test_decode_access_token(self) -> None:
        """Test access token decoding."""
        data = {"sub": "user123", "organization_id": ORG_ID, "role": "admin", "email": "test@example.com"}
        token = create_access_token(data)

        decoded = decode_token(token, verify_type="access")

        assert decoded is not None
        assert decoded.sub == "user123"
        assert decoded.organization_id == ORG_ID
        assert decoded.role == "admin"
        assert decoded.email == "test@example.com"
        assert decoded.token_type == "access"

    def test_decode_wrong_token_type(self) -> None:
        """Test that decoding with wrong type returns None."""
        token = create_access_token({"sub": "user123", "organization_id": ORG_ID})

        assert decode_token(token, verify_type="refresh") is None

    def test_decode_invalid_token(self) -> None:
        """Test that invalid token returns None."""
        assert decode_token("invalid.token.string") is None

    def test_token_without_organization_rejected(self) -> None:
        """Tokens must carry an organization claim."""
        token = create_access_token({"sub": "user123"})

        assert decode_token(token) is None

    def test_expired_token_rejected(self) -> None:
        """Expired tokens fail signature validation."""
        token = create_access_token(
            {"sub": "user123", "organization_id": ORG_ID},
            expires_delta=timedelta(minutes=-5),
        )

        assert decode_token(token) is None

    def test_is_token_expired(self) -> None:
        """Test expiry check on decoded data."""
        token_data = TokenData(
            sub="user123",
            organization_id=ORG_ID,
            exp=datetime.now(UTC) - timedelta(seconds=1),
        )

        assert is_token_expired(token_data) is True
        assert token_data.role == "user"


class TestCurrentUser:
    """Tests for the request identity dependency."""

    @pytest.mark.asyncio
    async def test_resolves_identity(self) -> None:
        token = create_access_token({"sub": "user123", "organization_id": ORG_ID, "role": "auditor"})

        user = await get_current_user(token)

        assert user.id == "user123"
        assert user.organization_id == uuid.UUID(ORG_ID)
        assert user.role == "auditor"

    @pytest.mark.asyncio
    async def test_missing_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_non_uuid_organization(self) -> None:
        token = create_access_token({"sub": "user123", "organization_id": "acme"})

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(token)

        assert exc_info.value.status_code == 401

    def test_belongs_to(self) -> None:
        user = User(id="u", organization_id=uuid.UUID(ORG_ID))

        assert user.belongs_to(uuid.UUID(ORG_ID)) is True
        assert user.belongs_to(uuid.uuid4()) is False
