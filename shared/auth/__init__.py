"""
Authentication Module
=====================

JWT-based caller identity for the assessment service.

Features:
- JWT decoding into an (organization_id, user_id, role) identity
- FastAPI dependency for route protection

Usage:
    from shared.auth import CurrentUser, create_access_token

    token = create_access_token({"sub": user_id, "organization_id": org_id, "role": "auditor"})

    @router.get("/protected")
    async def protected(user: CurrentUser):
        return {"organization_id": str(user.organization_id)}
"""

from shared.auth.dependencies import (
    CurrentUser,
    User,
    get_current_user,
    oauth2_scheme,
)
from shared.auth.jwt import (
    TokenData,
    create_access_token,
    decode_token,
)


__all__ = [
    # JWT
    "create_access_token",
    "decode_token",
    "TokenData",
    # Dependencies
    "CurrentUser",
    "User",
    "get_current_user",
    "oauth2_scheme",
]
