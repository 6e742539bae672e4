from __future__ import annotations

import logging
from dataclasses import dataclass
from uuid import UUID

from app.backend.backends.base import PersistenceBackend
from app.backend.core.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.backend.core.security import hash_password, verify_password
from app.backend.core.tokens import create_access_token
from app.backend.models.user import User
from app.backend.schemas.auth import UserRead
from app.db.local_store import SessionPointerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    user: UserRead
    token: str


def _required(value: str | None, field: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f"Please add {'an' if field[0] in 'aeiou' else 'a'} {field}")
    return value


class AuthStore:
    """
    signup / login / logout over a PersistenceBackend.

    - passwords are stored as salted one-way hashes only
    - tokens are signed JWTs with an expiry (see core/tokens.py)
    - when built with a SessionPointerStore, signup/login persist
      {token, user} and logout clears it; the user record is never deleted
    """

    def __init__(
        self,
        backend: PersistenceBackend,
        pointers: SessionPointerStore | None = None,
    ) -> None:
        self._backend = backend
        self._pointers = pointers

    def _issue(self, user: User) -> AuthResult:
        result = AuthResult(
            user=UserRead.model_validate(user, from_attributes=True),
            token=create_access_token(user.id),
        )
        if self._pointers is not None:
            self._pointers.save(result.token, result.user.model_dump(mode="json"))
        return result

    def signup(self, email: str, password: str, name: str) -> AuthResult:
        email = _required(email, "email")
        name = _required(name, "name")
        if not password or not password.strip():
            raise ValidationError("Please add a password")

        if self._backend.find_user_by_email(email) is not None:
            logger.info("signup rejected: email already registered")
            raise DuplicateEmailError()

        user = User(name=name, email=email, credential_secret=hash_password(password))
        user = self._backend.insert_user(user)
        logger.info("signup ok | user_id=%s", user.id)
        return self._issue(user)

    def login(self, email: str, password: str) -> AuthResult:
        email = (email or "").strip()
        user = self._backend.find_user_by_email(email) if email else None
        # 이메일 존재 여부를 노출하지 않도록 같은 메시지/같은 검증 비용
        if not verify_password(password or "", user.credential_secret if user else None):
            logger.info("login rejected")
            raise InvalidCredentialsError()
        logger.info("login ok | user_id=%s", user.id)
        return self._issue(user)

    def logout(self) -> None:
        if self._pointers is not None:
            self._pointers.clear()

    def current_user(self, user_id: UUID) -> UserRead:
        user = self._backend.find_user_by_id(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return UserRead.model_validate(user, from_attributes=True)
