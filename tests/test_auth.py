"""Tests for email/password authentication."""

from datetime import datetime

import pytest

from jasaoseo.auth import AuthService, hash_password
from jasaoseo.errors import AuthError


@pytest.fixture
def auth(user_store) -> AuthService:
    return AuthService(user_store)


class TestSignUp:
    def test_new_user_defaults(self, auth):
        profile = auth.sign_up("New@Example.com ", "secret123", now=datetime(2025, 12, 10))
        assert profile.email == "new@example.com"
        assert profile.subscription_status == "free"
        assert profile.points == 0
        assert profile.free_monthly_used == 0
        assert profile.free_monthly_reset_date == datetime(2026, 1, 1)

    def test_display_name(self, auth):
        assert auth.sign_up("a@b.com", "secret123", display_name="홍길동").display_name == "홍길동"

    def test_duplicate_email(self, auth):
        auth.sign_up("a@b.com", "secret123")
        with pytest.raises(AuthError, match="이미 가입된"):
            auth.sign_up("A@B.com", "other123")

    def test_short_password(self, auth):
        with pytest.raises(AuthError):
            auth.sign_up("a@b.com", "12345")

    def test_invalid_email(self, auth):
        with pytest.raises(AuthError):
            auth.sign_up("not-an-email", "secret123")


class TestSignIn:
    def test_round_trip(self, auth):
        created = auth.sign_up("a@b.com", "secret123")
        assert auth.sign_in("a@b.com", "secret123").uid == created.uid

    def test_wrong_password(self, auth):
        auth.sign_up("a@b.com", "secret123")
        with pytest.raises(AuthError):
            auth.sign_in("a@b.com", "wrong-password")

    def test_unknown_email(self, auth):
        with pytest.raises(AuthError):
            auth.sign_in("nobody@b.com", "secret123")

    def test_password_not_stored_in_plain_text(self, auth, user_store):
        auth.sign_up("a@b.com", "secret123")
        _, stored_hash, salt = user_store.get_credentials("a@b.com")
        assert stored_hash != "secret123"
        assert stored_hash == hash_password("secret123", salt)


class TestHashPassword:
    def test_salt_changes_hash(self):
        assert hash_password("pw", "salt-a") != hash_password("pw", "salt-b")
