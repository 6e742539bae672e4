import asyncio
from datetime import timedelta
from uuid import uuid4

import pytest

from app.backend.core.errors import InvalidCredentialsError, NetworkOrStorageError
from app.backend.core.tokens import create_access_token
from app.backend.schemas.auth import UserRead
from app.backend.services.auth_service import AuthResult, AuthStore
from app.client.session import SessionController, SessionPhase
from app.db.local_store import LocalKeyValueStore, SessionPointerStore


class FakeAsyncAuth:
    """Async gateway double; records the phase seen while the call is in flight."""

    def __init__(self, controller_ref: dict, fail: Exception | None = None):
        self._ref = controller_ref
        self._fail = fail
        self.seen_phase = None
        self.logged_out = False
        self.user = UserRead(id=uuid4(), email="a@x.com", name="Ann")

    async def login(self, email, password):
        self.seen_phase = self._ref["controller"].state.phase
        await asyncio.sleep(0)
        if self._fail:
            raise self._fail
        return AuthResult(user=self.user, token=create_access_token(self.user.id))

    async def signup(self, email, password, name):
        return await self.login(email, password)

    def logout(self):
        self.logged_out = True


@pytest.fixture
def pointers():
    return SessionPointerStore(LocalKeyValueStore(None, namespace="browser"))


def test_initial_state_is_uninitialized_and_loading(pointers, backend):
    controller = SessionController(AuthStore(backend), pointers)

    assert controller.state.phase is SessionPhase.UNINITIALIZED
    assert controller.state.is_loading
    assert not controller.state.is_authenticated


def test_start_without_pointer_is_anonymous(pointers, backend):
    controller = SessionController(AuthStore(backend), pointers)

    state = controller.start()

    assert state.phase is SessionPhase.ANONYMOUS
    assert not state.is_loading
    assert state.user is None and state.token is None


def test_start_rehydrates_stored_session(pointers, backend):
    user_id = uuid4()
    token = create_access_token(user_id)
    pointers.save(token, {"id": str(user_id), "email": "a@x.com", "name": "Ann"})

    state = SessionController(AuthStore(backend), pointers).start()

    assert state.is_authenticated
    assert state.token == token
    assert state.user.id == user_id


def test_start_discards_expired_pointer(pointers, backend):
    user_id = uuid4()
    token = create_access_token(user_id, expires_delta=timedelta(seconds=-1))
    pointers.save(token, {"id": str(user_id), "email": "a@x.com", "name": "Ann"})

    state = SessionController(AuthStore(backend), pointers).start()

    assert state.phase is SessionPhase.ANONYMOUS
    assert pointers.load() is None


def test_start_discards_malformed_pointer(pointers, backend):
    pointers.save(create_access_token(uuid4()), {"email": "a@x.com"})

    state = SessionController(AuthStore(backend), pointers).start()

    assert state.phase is SessionPhase.ANONYMOUS
    assert pointers.load() is None


def test_login_with_sync_store_persists_pointer(pointers, backend):
    store = AuthStore(backend)
    created = store.signup("a@x.com", "pw", "Ann")
    controller = SessionController(store, pointers)
    controller.start()

    user = asyncio.run(controller.login("a@x.com", "pw"))

    assert user.id == created.user.id
    assert controller.state.is_authenticated
    assert controller.state.error is None
    token, stored_user = pointers.load()
    assert token == controller.state.token
    assert stored_user["id"] == str(created.user.id)


def test_signup_with_sync_store(pointers, backend):
    controller = SessionController(AuthStore(backend), pointers)
    controller.start()

    user = asyncio.run(controller.signup("a@x.com", "pw", "Ann"))

    assert controller.state.user == user
    assert pointers.load()[1]["name"] == "Ann"


def test_failed_login_goes_anonymous_with_error_and_reraises(pointers, backend):
    controller = SessionController(AuthStore(backend), pointers)
    controller.start()

    with pytest.raises(InvalidCredentialsError):
        asyncio.run(controller.login("ghost@x.com", "pw"))

    assert controller.state.phase is SessionPhase.ANONYMOUS
    assert controller.state.error == "Invalid email or password"
    assert not controller.state.is_loading
    assert pointers.load() is None


def test_state_is_loading_while_call_is_in_flight(pointers):
    ref: dict = {}
    auth = FakeAsyncAuth(ref)
    controller = SessionController(auth, pointers)
    ref["controller"] = controller
    controller.start()

    asyncio.run(controller.login("a@x.com", "pw"))

    assert auth.seen_phase is SessionPhase.LOADING
    assert controller.state.is_authenticated


def test_network_failure_is_reported(pointers):
    ref: dict = {}
    controller = SessionController(FakeAsyncAuth(ref, fail=NetworkOrStorageError("Network error: ConnectError")), pointers)
    ref["controller"] = controller
    controller.start()

    with pytest.raises(NetworkOrStorageError):
        asyncio.run(controller.signup("a@x.com", "pw", "Ann"))

    assert controller.state.error == "Network error: ConnectError"


def test_logout_clears_pointer_and_state(pointers):
    ref: dict = {}
    auth = FakeAsyncAuth(ref)
    changes = []
    controller = SessionController(auth, pointers, on_change=changes.append)
    ref["controller"] = controller
    controller.start()
    asyncio.run(controller.login("a@x.com", "pw"))

    controller.logout()

    assert auth.logged_out
    assert controller.state.phase is SessionPhase.ANONYMOUS
    assert pointers.load() is None
    assert [s.phase for s in changes] == [
        SessionPhase.ANONYMOUS,
        SessionPhase.LOADING,
        SessionPhase.AUTHENTICATED,
        SessionPhase.ANONYMOUS,
    ]


class ReadOnlyPointers(SessionPointerStore):
    def save(self, token, user):
        raise NetworkOrStorageError("Local storage is not writable")


def test_pointer_write_failure_ends_anonymous_with_error(backend):
    store = AuthStore(backend)
    store.signup("a@x.com", "pw", "Ann")
    controller = SessionController(store, ReadOnlyPointers(LocalKeyValueStore(None)))
    controller.start()

    with pytest.raises(NetworkOrStorageError):
        asyncio.run(controller.login("a@x.com", "pw"))

    assert controller.state.phase is SessionPhase.ANONYMOUS
    assert controller.state.error == "Local storage is not writable"
    assert controller.state.token is None
