"""
Service Account Assertion

Builds the header and claim set of the OAuth 2.0 JWT-bearer assertion a
service account would exchange for a Google access token. The assertion is
NOT signed and no exchange happens: reports are synthesized locally. Signing
with the account's private key belongs to a real GA4 integration.
"""

import json
import time
from dataclasses import dataclass
from typing import Any, Dict, Optional

from jose.utils import base64url_encode


@dataclass(frozen=True)
class UnsignedAssertion:
    header: Dict[str, Any]
    claims: Dict[str, Any]

    @property
    def signing_input(self) -> str:
        """``base64url(header).base64url(claims)``, the bytes a signer would sign"""
        return ".".join(
            base64url_encode(json.dumps(part, separators=(",", ":")).encode()).decode()
            for part in (self.header, self.claims)
        )

    @property
    def issuer(self) -> Optional[str]:
        return self.claims.get("iss")


def build_assertion(
    credentials: Dict[str, Any],
    scope: str,
    audience: str,
    now: Optional[int] = None,
    lifetime_seconds: int = 3600,
) -> UnsignedAssertion:
    """
    Assemble the assertion for a service-account credential payload.

    Args:
        credentials: Parsed service-account JSON (``client_email``, ``private_key_id``...)
        scope: OAuth scope to request
        audience: Token endpoint URL
        now: Issue time in epoch seconds (defaults to the current time)
        lifetime_seconds: Validity window of the assertion
    """
    issued_at = int(time.time()) if now is None else now

    header = {"alg": "RS256", "typ": "JWT"}
    if credentials.get("private_key_id"):
        header["kid"] = credentials["private_key_id"]

    claims = {
        "iss": credentials.get("client_email"),
        "scope": scope,
        "aud": audience,
        "exp": issued_at + lifetime_seconds,
        "iat": issued_at,
    }
    return UnsignedAssertion(header=header, claims=claims)
