# app/client/session.py

"""
Session controller: presentation-facing auth state for one client process.

    uninitialized ──start()──▶ authenticated | anonymous
    anonymous ──login()/signup()──▶ loading ──▶ authenticated | anonymous(+error)
    authenticated ──logout()──▶ anonymous

No business validation happens here; everything is delegated to the auth
gateway (AuthStore in-process, or RemoteAuth over HTTP). State only changes
after the gateway call returns.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from app.backend.core.tokens import token_expired
from app.backend.schemas.auth import UserRead
from app.backend.services.auth_service import AuthResult
from app.db.local_store import SessionPointerStore

logger = logging.getLogger(__name__)


class AuthGateway(Protocol):
    def signup(self, email: str, password: str, name: str) -> Union[AuthResult, Awaitable[AuthResult]]: ...
    def login(self, email: str, password: str) -> Union[AuthResult, Awaitable[AuthResult]]: ...
    def logout(self) -> None: ...


class SessionPhase(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase = SessionPhase.UNINITIALIZED
    user: UserRead | None = None
    token: str | None = None
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        return self.phase is SessionPhase.AUTHENTICATED

    @property
    def is_loading(self) -> bool:
        return self.phase in (SessionPhase.UNINITIALIZED, SessionPhase.LOADING)


class SessionController:
    def __init__(
        self,
        auth: AuthGateway,
        pointers: SessionPointerStore,
        on_change: Callable[[SessionState], Any] | None = None,
    ) -> None:
        self._auth = auth
        self._pointers = pointers
        self._on_change = on_change
        self._state = SessionState()

    @property
    def state(self) -> SessionState:
        return self._state

    def _set(self, state: SessionState) -> None:
        self._state = state
        if self._on_change is not None:
            self._on_change(state)

    # ---- startup ----

    def start(self) -> SessionState:
        """Rehydrate from the persisted pointer; expired or unreadable pointers are dropped."""
        stored = self._pointers.load()
        if stored is None:
            self._set(SessionState(phase=SessionPhase.ANONYMOUS))
            return self._state

        token, raw_user = stored
        try:
            user = UserRead.model_validate(raw_user)
        except PydanticValidationError:
            logger.warning("stored session has a malformed user; discarding")
            user = None

        if user is None or token_expired(token):
            self._pointers.clear()
            self._set(SessionState(phase=SessionPhase.ANONYMOUS))
            return self._state

        self._set(SessionState(phase=SessionPhase.AUTHENTICATED, user=user, token=token))
        return self._state

    # ---- actions ----

    async def _authenticate(self, call: Callable[[], Any], fallback_message: str) -> UserRead:
        self._set(replace(self._state, phase=SessionPhase.LOADING, error=None))
        try:
            result = call()
            if inspect.isawaitable(result):
                result = await result
            self._pointers.save(result.token, result.user.model_dump(mode="json"))
        except Exception as e:
            message = str(e) or fallback_message
            logger.warning("%s | %s", fallback_message, message)
            self._set(SessionState(phase=SessionPhase.ANONYMOUS, error=message))
            raise

        self._set(SessionState(phase=SessionPhase.AUTHENTICATED, user=result.user, token=result.token))
        return result.user

    async def login(self, email: str, password: str) -> UserRead:
        return await self._authenticate(lambda: self._auth.login(email, password), "Login failed")

    async def signup(self, email: str, password: str, name: str) -> UserRead:
        return await self._authenticate(lambda: self._auth.signup(email, password, name), "Signup failed")

    def logout(self) -> None:
        self._auth.logout()
        self._pointers.clear()
        self._set(SessionState(phase=SessionPhase.ANONYMOUS))
