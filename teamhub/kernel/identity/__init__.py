"""
Identity Core - user records and access token verification.
"""

from teamhub.kernel.identity.jwt import (
    JWTManager,
    AccessTokenPayload,
    create_access_token,
    verify_access_token,
)
from teamhub.kernel.identity.identity_service import IdentityService

__all__ = [
    "JWTManager",
    "AccessTokenPayload",
    "create_access_token",
    "verify_access_token",
    "IdentityService",
]
