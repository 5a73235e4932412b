"""
FastAPI Authentication Dependencies
===================================

Resolves the authenticated identity for a request. The assessment service
trusts the identity it is given and only enforces organization scoping.

Version: 0.1.0
"""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel, Field

from shared.auth.jwt import decode_token
from shared.logging import bind_context, get_logger


logger = get_logger(__name__)

# OAuth2 scheme for token extraction from Authorization header
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/auth/token",
    auto_error=False,
)


class User(BaseModel):
    """Authenticated caller identity."""

    id: str = Field(..., description="User ID")
    organization_id: uuid.UUID = Field(..., description="Organization the caller acts for")
    role: str = Field(default="user", description="Role within the organization")
    email: str | None = Field(default=None, description="User email")

    def belongs_to(self, organization_id: uuid.UUID) -> bool:
        """Check whether the caller acts for the given organization."""
        return self.organization_id == organization_id


async def get_current_user(
    token: Annotated[str | None, Depends(oauth2_scheme)],
) -> User:
    """
    Extract and validate the caller identity from the JWT.

    Raises:
        HTTPException: 401 if the token is missing, invalid, or its
            organization claim is not a UUID
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if token is None:
        logger.warning("auth_token_missing")
        raise credentials_exception

    token_data = decode_token(token, verify_type="access")

    if token_data is None:
        logger.warning("auth_token_invalid")
        raise credentials_exception

    try:
        organization_id = uuid.UUID(token_data.organization_id)
    except ValueError:
        logger.warning("auth_token_bad_organization", user_id=token_data.sub)
        raise credentials_exception from None

    bind_context(user_id=token_data.sub, organization_id=str(organization_id))
    logger.debug("user_authenticated", user_id=token_data.sub)

    return User(
        id=token_data.sub,
        organization_id=organization_id,
        role=token_data.role,
        email=token_data.email,
    )


CurrentUser = Annotated[User, Depends(get_current_user)]
