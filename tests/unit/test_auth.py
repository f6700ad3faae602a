"""
Unit Tests - Bearer Tokens and Service Account Assertions
"""
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from jose.utils import base64url_decode

from src.analytics.credentials import build_assertion
from src.analytics.errors import Unauthenticated
from src.config.settings import SecuritySettings
from src.serving.api.auth import TokenVerifier

SECRET = "unit-test-secret"


def mint(payload, secret=SECRET):
    return jwt.encode(payload, secret, algorithm="HS256")


def expiry(delta=timedelta(hours=1)):
    return datetime.now(timezone.utc) + delta


class TestTokenVerifier:
    """Tests for TokenVerifier"""

    @pytest.fixture
    def verifier(self):
        return TokenVerifier(SecuritySettings(jwt_secret_key=SECRET))

    def test_valid_token_returns_subject(self, verifier):
        token = mint({"sub": "u1", "exp": expiry()})

        assert verifier.verify(token) == "u1"

    def test_wrong_signature(self, verifier):
        token = mint({"sub": "u1", "exp": expiry()}, secret="someone-else")

        with pytest.raises(Unauthenticated) as exc:
            verifier.verify(token)

        assert exc.value.status_code == 401
        assert exc.value.message == "Unauthorized"

    def test_expired_token(self, verifier):
        token = mint({"sub": "u1", "exp": expiry(-timedelta(minutes=5))})

        with pytest.raises(Unauthenticated):
            verifier.verify(token)

    def test_garbage_token(self, verifier):
        with pytest.raises(Unauthenticated):
            verifier.verify("not-a-jwt")

    def test_missing_subject(self, verifier):
        with pytest.raises(Unauthenticated):
            verifier.verify(mint({"exp": expiry()}))

    def test_audience_ignored_when_not_configured(self, verifier):
        token = mint({"sub": "u1", "aud": "authenticated", "exp": expiry()})

        assert verifier.verify(token) == "u1"

    def test_audience_enforced_when_configured(self):
        verifier = TokenVerifier(SecuritySettings(jwt_secret_key=SECRET, jwt_audience="authenticated"))

        assert verifier.verify(mint({"sub": "u1", "aud": "authenticated", "exp": expiry()})) == "u1"
        with pytest.raises(Unauthenticated):
            verifier.verify(mint({"sub": "u1", "aud": "anon", "exp": expiry()}))


class TestServiceAccountAssertion:
    """Tests for build_assertion"""

    CREDENTIALS = {
        "type": "service_account",
        "private_key_id": "key-1",
        "client_email": "reporter@demo.iam.gserviceaccount.com",
    }

    def test_header_and_claims(self):
        assertion = build_assertion(
            self.CREDENTIALS,
            scope="https://www.googleapis.com/auth/analytics.readonly",
            audience="https://oauth2.googleapis.com/token",
            now=1_700_000_000,
        )

        assert assertion.header == {"alg": "RS256", "typ": "JWT", "kid": "key-1"}
        assert assertion.issuer == "reporter@demo.iam.gserviceaccount.com"
        assert assertion.claims["iat"] == 1_700_000_000
        assert assertion.claims["exp"] == 1_700_003_600
        assert assertion.claims["aud"] == "https://oauth2.googleapis.com/token"

    def test_signing_input_encodes_both_parts(self):
        assertion = build_assertion(self.CREDENTIALS, scope="s", audience="a", now=0)

        header_part, claims_part = assertion.signing_input.split(".")

        assert json.loads(base64url_decode(header_part.encode())) == assertion.header
        assert json.loads(base64url_decode(claims_part.encode())) == assertion.claims

    def test_without_key_id(self):
        assertion = build_assertion({"client_email": "x@y"}, scope="s", audience="a", now=0)

        assert "kid" not in assertion.header
