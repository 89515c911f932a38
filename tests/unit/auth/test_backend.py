"""Unit tests for auth backend (passwords and tokens)."""

from datetime import timedelta

import pytest

from juris.core.auth.backend import (
    create_link_token,
    create_session_token,
    decode_link_token,
    decode_session_token,
    hash_password,
    verify_password,
)


pytestmark = pytest.mark.unit


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_returns_hash(self):
        """hash_password should return a bcrypt hash."""
        hashed = hash_password("mysecretpassword")

        assert hashed != "mysecretpassword"
        assert hashed.startswith("$2b$")

    def test_hash_password_different_each_time(self):
        """Different hashes due to random salt."""
        assert hash_password("mysecretpassword") != hash_password("mysecretpassword")

    def test_verify_password(self):
        hashed = hash_password("mysecretpassword")

        assert verify_password("mysecretpassword", hashed) is True
        assert verify_password("wrongpassword", hashed) is False


class TestSessionTokens:
    """Tests for session tokens and the amr claim."""

    def test_round_trip_keeps_method(self):
        token = create_session_token("u1", ["otp"])
        data = decode_session_token(token)

        assert data is not None
        assert data.user_id == "u1"
        assert data.amr == ["otp"]
        assert data.jti

    def test_expired_token_is_rejected(self):
        token = create_session_token("u1", ["pwd"], expires_delta=timedelta(seconds=-1))
        assert decode_session_token(token) is None

    def test_garbage_is_rejected(self):
        assert decode_session_token("not-a-token") is None

    def test_link_token_is_not_a_session_token(self):
        token = create_link_token("u1", "a@example.com")
        assert decode_session_token(token) is None


class TestLinkTokens:
    """Tests for one-time link tokens."""

    def test_round_trip_normalises_email(self):
        token = create_link_token("u1", "  A@Example.com ")
        data = decode_link_token(token)

        assert data is not None
        assert data.email == "a@example.com"
        assert data.user_id == "u1"

    def test_each_link_has_its_own_id(self):
        first = decode_link_token(create_link_token("u1", "a@example.com"))
        second = decode_link_token(create_link_token("u1", "a@example.com"))

        assert first is not None and second is not None
        assert first.jti != second.jti

    def test_session_token_is_not_a_link(self):
        assert decode_link_token(create_session_token("u1", ["pwd"])) is None

    def test_expired_link_is_rejected(self):
        token = create_link_token("u1", "a@example.com", expires_delta=timedelta(minutes=-1))
        assert decode_link_token(token) is None
