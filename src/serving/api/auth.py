"""
Bearer Authentication

Tokens are issued by the external auth provider (Supabase-style HS256 JWTs
whose ``sub`` claim is the user id). This service only verifies them.
"""

from typing import Optional

import structlog
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from src.analytics.errors import Unauthenticated
from src.config import get_settings
from src.config.settings import SecuritySettings

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


class TokenVerifier:
    """Resolve a bearer token to a user id"""

    def __init__(self, settings: Optional[SecuritySettings] = None):
        self.settings = settings or get_settings().security

    def verify(self, token: str) -> str:
        """
        Raises:
            Unauthenticated: Signature, expiry or audience check failed, or no subject
        """
        audience = self.settings.jwt_audience
        try:
            payload = jwt.decode(
                token,
                self.settings.jwt_secret_key.get_secret_value(),
                algorithms=[self.settings.jwt_algorithm],
                audience=audience,
                options={"verify_aud": bool(audience)},
            )
        except JWTError as e:
            logger.info("Bearer token rejected", reason=str(e))
            raise Unauthenticated() from e

        user_id = payload.get("sub")
        if not user_id:
            raise Unauthenticated()
        return str(user_id)


def get_token_verifier() -> TokenVerifier:
    return TokenVerifier()


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> str:
    """FastAPI dependency returning the authenticated user id."""
    if credentials is None or not credentials.credentials:
        raise Unauthenticated()
    return verifier.verify(credentials.credentials)
