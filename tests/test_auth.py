"""Identity context, token handling, passwords and the authorization guard."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from bookmarkd.auth.context import Viewer, extract_credential, sign_token, viewer_from_token
from bookmarkd.auth.guard import require_viewer, require_viewer_is, viewer_is
from bookmarkd.auth.jwt_handler import create_access_token, verify_token
from bookmarkd.auth.password import hash_password, verify_password
from bookmarkd.config import get_settings
from bookmarkd.exceptions import Forbidden, Unauthenticated

ALICE = Viewer(id=1, username="alice", email="alice@readers.org")


class TestCredentialExtraction:
    def test_header_wins_over_query_and_body(self):
        token = extract_credential(
            authorization="Bearer header-token",
            query_token="query-token",
            body_token="body-token",
        )
        assert token == "header-token"

    def test_query_used_when_no_header(self):
        assert extract_credential(query_token="query-token", body_token="body-token") == "query-token"

    def test_body_used_last(self):
        assert extract_credential(body_token="body-token") == "body-token"

    def test_nothing_present(self):
        assert extract_credential() is None
        assert extract_credential(authorization="", query_token="  ") is None


class TestTokens:
    def test_round_trip_carries_identity_only(self):
        token = create_access_token(7, "alice", "alice@readers.org")
        payload = verify_token(token)

        assert payload["sub"] == "7"
        assert payload["username"] == "alice"
        assert payload["email"] == "alice@readers.org"
        assert "role" not in payload

    def test_expires_after_four_hours(self):
        payload = verify_token(create_access_token(7, "alice", "alice@readers.org"))
        assert payload["exp"] - payload["iat"] == 4 * 3600

    def test_viewer_from_valid_token(self):
        token = create_access_token(7, "alice", "alice@readers.org")
        assert viewer_from_token(token) == Viewer(id=7, username="alice", email="alice@readers.org")

    def test_garbage_token_is_anonymous(self):
        assert viewer_from_token("not-a-jwt") is None
        assert viewer_from_token(None) is None

    def test_bad_signature_is_anonymous(self):
        settings = get_settings()
        forged = jwt.encode(
            {"sub": "7", "username": "alice", "email": "a@readers.org"},
            "some-other-secret",
            algorithm=settings.jwt_algorithm,
        )
        assert viewer_from_token(forged) is None

    def test_expired_token_is_anonymous(self):
        settings = get_settings()
        past = datetime.now(timezone.utc) - timedelta(hours=5)
        expired = jwt.encode(
            {
                "sub": "7",
                "username": "alice",
                "email": "a@readers.org",
                "iat": past,
                "exp": past + timedelta(hours=4),
            },
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
        )
        assert viewer_from_token(expired) is None

    def test_missing_claims_is_anonymous(self):
        settings = get_settings()
        token = jwt.encode({"sub": "7"}, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)
        assert viewer_from_token(token) is None

    @pytest.mark.asyncio
    async def test_sign_token_for_user(self, alice):
        viewer = viewer_from_token(sign_token(alice))
        assert viewer.id == alice.id
        assert viewer.username == "alice"


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("SecurePass123")
        assert hashed != "SecurePass123"
        assert verify_password("SecurePass123", hashed)
        assert not verify_password("WrongPass123", hashed)


class TestGuard:
    def test_require_viewer(self):
        assert require_viewer(ALICE) is ALICE
        with pytest.raises(Unauthenticated):
            require_viewer(None)

    def test_require_viewer_is(self):
        assert require_viewer_is(ALICE, 1) is ALICE
        with pytest.raises(Forbidden):
            require_viewer_is(ALICE, 2)
        with pytest.raises(Unauthenticated):
            require_viewer_is(None, 1)

    def test_viewer_is_never_raises(self):
        assert viewer_is(ALICE, 1)
        assert not viewer_is(ALICE, 2)
        assert not viewer_is(None, 1)
        assert not viewer_is(ALICE, None)

    def test_errors_carry_stable_codes(self):
        with pytest.raises(Unauthenticated) as exc:
            require_viewer(None)
        assert exc.value.extensions == {"code": "UNAUTHENTICATED"}
        assert str(exc.value) == "Could not authenticate user."
