"""Email/password authentication against the local user store."""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
import secrets
import sqlite3
from datetime import datetime

from jasaoseo.credit.gate import first_of_next_month
from jasaoseo.errors import AuthError
from jasaoseo.models.user import UserProfile
from jasaoseo.storage.user_store import UserStore

logger = logging.getLogger(__name__)

PBKDF2_ITERATIONS = 190_000
MIN_PASSWORD_LENGTH = 6
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def hash_password(password: str, salt: str) -> str:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt.encode("utf-8"), PBKDF2_ITERATIONS
    ).hex()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthService:
    def __init__(self, store: UserStore):
        self.store = store

    def sign_up(
        self,
        email: str,
        password: str,
        display_name: str | None = None,
        now: datetime | None = None,
    ) -> UserProfile:
        """Create a free-plan account; the first free reset is the 1st of next month."""
        email = normalize_email(email)
        if not _EMAIL_RE.match(email):
            raise AuthError("유효한 이메일 주소를 입력해주세요.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(f"비밀번호는 {MIN_PASSWORD_LENGTH}자 이상이어야 합니다.")

        salt = secrets.token_hex(16)
        try:
            profile = self.store.create(
                email,
                hash_password(password, salt),
                salt,
                display_name=display_name,
                free_monthly_reset_date=first_of_next_month(now or datetime.now()),
            )
        except sqlite3.IntegrityError as e:
            raise AuthError("이미 가입된 이메일입니다.") from e
        logger.info("New user signed up: %s", profile.uid)
        return profile

    def sign_in(self, email: str, password: str) -> UserProfile:
        credentials = self.store.get_credentials(normalize_email(email))
        if credentials is None:
            raise AuthError("이메일 또는 비밀번호가 올바르지 않습니다.")
        uid, password_hash, salt = credentials
        if not hmac.compare_digest(hash_password(password, salt), password_hash):
            raise AuthError("이메일 또는 비밀번호가 올바르지 않습니다.")
        profile = self.store.get(uid)
        if profile is None:
            raise AuthError("이메일 또는 비밀번호가 올바르지 않습니다.")
        return profile
