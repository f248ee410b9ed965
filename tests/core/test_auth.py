"""
Token verification: the shared-secret default and the JWKS provider path.
"""
import time

import pytest
import requests
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from fastapi import HTTPException
from jose import jwk, jwt

from landlord_reports.core import auth
from landlord_reports.core.config import settings


@pytest.fixture
def rsa_keys():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "portal-1"
    return private_pem, {"keys": [public_jwk]}


class FakeResponse:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        return None

    def json(self):
        return self._payload


@pytest.fixture
def jwks_provider(monkeypatch, rsa_keys):
    """Point auth at a JWKS URL and serve the generated key set from it."""
    private_pem, key_set = rsa_keys
    calls = []

    def fake_get(url, timeout=None):
        calls.append(url)
        return FakeResponse(key_set)

    monkeypatch.setattr(settings, "JWT_JWKS_URL", "https://idp.example.com/.well-known/jwks.json")
    monkeypatch.setattr(auth, "_jwks_cache", None)
    monkeypatch.setattr(auth.requests, "get", fake_get)
    return private_pem, calls


class TestSharedSecret:
    def test_valid_token(self):
        token = jwt.encode({"id": "u-1"}, settings.JWT_SECRET, algorithm="HS256")
        assert auth.verify_token(token)["id"] == "u-1"

    def test_expired_token(self):
        token = jwt.encode({"id": "u-1", "exp": int(time.time()) - 60}, settings.JWT_SECRET, algorithm="HS256")
        with pytest.raises(HTTPException) as excinfo:
            auth.verify_token(token)
        assert excinfo.value.status_code == 401
        assert excinfo.value.detail == "Token has expired"


class TestJwksProvider:
    def test_rs256_token_verified_against_key_set(self, jwks_provider):
        private_pem, calls = jwks_provider
        token = jwt.encode({"sub": "u-42"}, private_pem, algorithm="RS256", headers={"kid": "portal-1"})
        assert auth.verify_token(token)["sub"] == "u-42"
        assert calls == ["https://idp.example.com/.well-known/jwks.json"]

    def test_key_set_is_fetched_once(self, jwks_provider):
        private_pem, calls = jwks_provider
        token = jwt.encode({"sub": "u-42"}, private_pem, algorithm="RS256", headers={"kid": "portal-1"})
        auth.verify_token(token)
        auth.verify_token(token)
        assert len(calls) == 1

    def test_shared_secret_token_is_rejected(self, jwks_provider):
        token = jwt.encode({"id": "u-1"}, settings.JWT_SECRET, algorithm="HS256")
        with pytest.raises(HTTPException) as excinfo:
            auth.verify_token(token)
        assert excinfo.value.status_code == 401

    def test_provider_unreachable(self, monkeypatch):
        def failing_get(url, timeout=None):
            raise requests.ConnectionError("connection refused")

        monkeypatch.setattr(settings, "JWT_JWKS_URL", "https://idp.example.com/.well-known/jwks.json")
        monkeypatch.setattr(auth, "_jwks_cache", None)
        monkeypatch.setattr(auth.requests, "get", failing_get)
        with pytest.raises(HTTPException) as excinfo:
            auth.verify_token("anything")
        assert excinfo.value.status_code == 500
        assert "Failed to fetch JWKS" in excinfo.value.detail
