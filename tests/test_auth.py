"""
Tests for Google sign-in, service tokens and the auth dependency.
"""
import io
import json
import time
import urllib.error
import urllib.request
from datetime import timedelta

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from jose import JWTError, jwk, jwt

from app.main import app
from app.core import config
from app.core.exceptions import AuthenticationError, UpstreamError
from app.core.google_auth import (
    UNKNOWN_KID_REFRESH_SECONDS,
    GoogleIdentity,
    GoogleTokenVerifier,
    get_google_verifier,
)
from app.core.security import create_access_token, decode_access_token
from app.db.models.user import User

CLIENT_ID = "prepwise-test.apps.googleusercontent.com"


class StubVerifier:
    def __init__(self, identity=None, error=None):
        self.identity = identity or GoogleIdentity(google_id="g-123", email="ada@example.com", name="Ada Lovelace")
        self.error = error

    def verify(self, id_token):
        if self.error:
            raise self.error
        return self.identity


@pytest.fixture
def verifier():
    stub = StubVerifier()
    app.dependency_overrides[get_google_verifier] = lambda: stub
    return stub


@pytest.fixture(scope="module")
def signing_key():
    """RSA key pair plus its public JWK, as Google would publish it."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = private_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.PKCS8,
        serialization.NoEncryption(),
    ).decode()
    public_pem = private_key.public_key().public_bytes(
        serialization.Encoding.PEM,
        serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    public_jwk = jwk.construct(public_pem, "RS256").to_dict()
    public_jwk["kid"] = "key-1"
    return private_pem, public_jwk


def google_token(private_pem, kid="key-1", **claims):
    payload = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "g-123",
        "email": "ada@example.com",
        "name": "Ada Lovelace",
        "iat": int(time.time()),
        "exp": int(time.time()) + 600,
    }
    payload.update(claims)
    return jwt.encode(payload, private_pem, algorithm="RS256", headers={"kid": kid})


class FakeCerts:
    """Serves a JWKS document in place of urllib's urlopen, counting fetches."""

    def __init__(self, keys=None, error=None):
        self.keys = keys or []
        self.error = error
        self.fetches = 0

    def __call__(self, request, *args, **kwargs):
        self.fetches += 1
        if self.error:
            raise self.error
        return io.BytesIO(json.dumps({"keys": self.keys}).encode())


@pytest.fixture
def google_certs(monkeypatch, signing_key):
    certs = FakeCerts(keys=[signing_key[1]])
    monkeypatch.setattr(urllib.request, "urlopen", certs)
    return certs


def make_verifier() -> GoogleTokenVerifier:
    return GoogleTokenVerifier(client_id=CLIENT_ID, certs_url="https://google.test/certs")


def test_access_token_round_trip():
    token = create_access_token(42)

    assert decode_access_token(token) == 42


def test_expired_access_token():
    token = create_access_token(42, expires_delta=timedelta(seconds=-1))

    with pytest.raises(JWTError):
        decode_access_token(token)


def test_signup_creates_user(client, verifier, db_session):
    response = client.post("/api/auth/signup", json={"idToken": "google-token"})

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "User signed up successfully"
    assert body["data"]["user"]["email"] == "ada@example.com"
    user = db_session.query(User).filter(User.google_id == "g-123").one()
    assert decode_access_token(body["data"]["token"]) == user.id


def test_signup_twice_conflicts(client, verifier):
    client.post("/api/auth/signup", json={"idToken": "google-token"})

    response = client.post("/api/auth/signup", json={"idToken": "google-token"})

    assert response.status_code == 409
    assert response.json()["message"] == "User already exists"


def test_signin(client, verifier):
    response = client.post("/api/auth/signin", json={"idToken": "google-token"})
    assert response.status_code == 404
    assert response.json()["message"] == "User not found"

    client.post("/api/auth/signup", json={"idToken": "google-token"})
    response = client.post("/api/auth/signin", json={"idToken": "google-token"})

    assert response.status_code == 200
    assert response.json()["message"] == "User signed in successfully"
    token = response.json()["data"]["token"]
    profile = client.get("/api/user/profile", headers={"Authorization": f"Bearer {token}"})
    assert profile.json()["data"]["name"] == "Ada Lovelace"


def test_signin_with_rejected_google_token(client, verifier):
    verifier.error = AuthenticationError("Invalid Google token")

    response = client.post("/api/auth/signin", json={"idToken": "forged"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid Google token"}


def test_signin_requires_id_token(client, verifier):
    response = client.post("/api/auth/signin", json={})

    assert response.status_code == 400
    assert response.json()["message"].startswith("idToken:")


def test_auth_endpoints_are_rate_limited(client, verifier):
    verifier.error = AuthenticationError("Invalid Google token")
    for _ in range(20):
        assert client.post("/api/auth/signin", json={"idToken": "x"}).status_code == 401

    response = client.post("/api/auth/signin", json={"idToken": "x"})

    assert response.status_code == 429
    assert response.json()["message"].startswith("Rate limit exceeded")


def test_invalid_bearer_token(client):
    response = client.get("/api/user/profile", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401
    assert response.json()["message"] == "Invalid or expired token"


def test_token_for_missing_user(client):
    response = client.get("/api/user/profile", headers={"Authorization": f"Bearer {create_access_token(999)}"})

    assert response.status_code == 401
    assert response.json()["message"] == "User not found"


def test_bypass_auth_uses_mock_user(client, monkeypatch, db_session):
    """With BYPASS_AUTH on, requests without a token run as the mock user."""
    monkeypatch.setattr(config, "BYPASS_AUTH", True)

    first = client.get("/api/user/profile")
    second = client.get("/api/user/profile")

    assert first.status_code == 200
    assert first.json()["data"]["email"] == config.MOCK_USER_EMAIL
    assert second.json()["data"]["id"] == first.json()["data"]["id"]
    assert db_session.query(User).count() == 1


def test_google_verifier_accepts_valid_token(signing_key, google_certs):
    private_pem, _ = signing_key

    identity = make_verifier().verify(google_token(private_pem))

    assert identity == GoogleIdentity(google_id="g-123", email="ada@example.com", name="Ada Lovelace")


def test_google_verifier_caches_keys(signing_key, google_certs):
    private_pem, _ = signing_key
    verifier = make_verifier()

    verifier.verify(google_token(private_pem))
    verifier.verify(google_token(private_pem, sub="g-456"))

    assert google_certs.fetches == 1


@pytest.mark.parametrize("claims", [
    {"aud": "someone-else.apps.googleusercontent.com"},
    {"iss": "https://evil.example.com"},
    {"exp": int(time.time()) - 60},
])
def test_google_verifier_rejects_bad_claims(signing_key, google_certs, claims):
    private_pem, _ = signing_key

    with pytest.raises(AuthenticationError):
        make_verifier().verify(google_token(private_pem, **claims))


def test_google_verifier_unknown_key(signing_key, google_certs):
    private_pem, _ = signing_key

    with pytest.raises(AuthenticationError):
        make_verifier().verify(google_token(private_pem, kid="rotated-away"))


def test_unknown_key_ids_refetch_at_most_once_per_window(signing_key, google_certs):
    private_pem, _ = signing_key
    verifier = make_verifier()
    verifier.verify(google_token(private_pem))
    assert google_certs.fetches == 1

    for kid in ("forged-1", "forged-2", "forged-3"):
        with pytest.raises(AuthenticationError):
            verifier.verify(google_token(private_pem, kid=kid))

    assert google_certs.fetches == 2
    verifier.verify(google_token(private_pem))
    assert google_certs.fetches == 2


def test_unknown_key_id_refreshes_again_after_window(signing_key, google_certs):
    private_pem, _ = signing_key
    verifier = make_verifier()
    with pytest.raises(AuthenticationError):
        verifier.verify(google_token(private_pem, kid="forged"))
    fetches = google_certs.fetches

    verifier._forced_refresh_at -= UNKNOWN_KID_REFRESH_SECONDS + 1
    with pytest.raises(AuthenticationError):
        verifier.verify(google_token(private_pem, kid="forged"))

    assert google_certs.fetches == fetches + 1


def test_google_verifier_garbage_token(google_certs):
    with pytest.raises(AuthenticationError):
        make_verifier().verify("not.a.token")

    assert google_certs.fetches == 0


def test_google_verifier_certs_unreachable(signing_key, google_certs):
    private_pem, _ = signing_key
    google_certs.error = urllib.error.URLError("connection refused")

    with pytest.raises(UpstreamError):
        make_verifier().verify(google_token(private_pem))


def test_google_verifier_requires_client_id(monkeypatch):
    monkeypatch.setattr("app.core.google_auth.GOOGLE_CLIENT_ID", None)
    verifier = GoogleTokenVerifier(client_id=None)

    with pytest.raises(AuthenticationError) as exc_info:
        verifier.verify("anything")

    assert exc_info.value.message == "Google sign-in is not configured"
