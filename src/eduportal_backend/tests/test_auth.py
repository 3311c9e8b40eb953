"""
Token issuing and verification, password hashing.
"""

import pytest
from jose import jwt

from eduportal_backend.auth.passwords import (
    TEMP_PASSWORD_ALPHABET,
    generate_temp_password,
    hash_password,
    verify_password,
)
from eduportal_backend.auth.tokens import (
    PROVIDER,
    TENANT_USER,
    TokenExpired,
    TokenInvalid,
    issue_provider_token,
    issue_tenant_token,
    verify_token,
)
from eduportal_backend.settings import settings


class TestTokens:

    def test_tenant_token(self):
        claims = verify_token(issue_tenant_token("user-1", "tenant-1"))

        assert claims["sub"] == "user-1"
        assert claims["tenant_id"] == "tenant-1"
        assert claims["type"] == TENANT_USER
        assert claims["exp"] - claims["iat"] == settings.TENANT_TOKEN_TTL

    def test_provider_token(self):
        claims = verify_token(issue_provider_token("manager-1"))

        assert claims["sub"] == "manager-1"
        assert claims["type"] == PROVIDER
        assert claims["exp"] - claims["iat"] == settings.PROVIDER_TOKEN_TTL

    def test_token_without_type_is_a_tenant_token(self):
        token = jwt.encode({"sub": "user-1"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        assert verify_token(token)["type"] == TENANT_USER

    def test_expired(self):
        with pytest.raises(TokenExpired):
            verify_token(issue_tenant_token("user-1", "tenant-1", ttl_seconds=-60))

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "user-1"}, "another-secret", algorithm="HS256")
        with pytest.raises(TokenInvalid):
            verify_token(token)

    def test_garbage(self):
        with pytest.raises(TokenInvalid):
            verify_token("not-a-token")

    def test_missing_subject(self):
        token = jwt.encode({"type": PROVIDER}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)
        with pytest.raises(TokenInvalid):
            verify_token(token)


class TestPasswords:

    def test_hash_and_verify(self):
        password_hash = hash_password("correct horse")

        assert password_hash != "correct horse"
        assert verify_password("correct horse", password_hash)
        assert not verify_password("wrong horse", password_hash)

    def test_unusable_hashes(self):
        assert not verify_password("anything", None)
        assert not verify_password("anything", "not-a-bcrypt-hash")
        assert not verify_password("", hash_password("x"))

    def test_temp_password(self):
        password = generate_temp_password()

        assert len(password) == 12
        assert set(password) <= set(TEMP_PASSWORD_ALPHABET)
