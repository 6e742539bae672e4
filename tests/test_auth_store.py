from datetime import timedelta
from uuid import uuid4

import pytest

from app.backend.core.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationError,
)
from app.backend.core.tokens import create_access_token, decode_access_token, token_expired
from app.backend.services.auth_service import AuthStore
from app.db.local_store import LocalKeyValueStore, SessionPointerStore


@pytest.fixture
def auth(backend):
    return AuthStore(backend)


def test_signup_returns_public_user_and_token(auth):
    result = auth.signup("a@x.com", "pw", "Ann")

    assert result.user.email == "a@x.com"
    assert result.user.name == "Ann"
    assert "credential_secret" not in result.user.model_dump()
    payload = decode_access_token(result.token)
    assert payload["sub"] == str(result.user.id)
    assert payload["exp"] > payload["iat"]


def test_signup_stores_salted_hash_not_password(auth, backend):
    auth.signup("a@x.com", "pw", "Ann")
    auth.signup("b@x.com", "pw", "Bob")

    a = backend.find_user_by_email("a@x.com")
    b = backend.find_user_by_email("b@x.com")
    assert a.credential_secret != "pw"
    assert a.credential_secret.startswith("$pbkdf2-sha256$")
    # same password, different salt
    assert a.credential_secret != b.credential_secret


def test_signup_twice_with_same_email_fails_and_keeps_first_user(auth, backend):
    first = auth.signup("a@x.com", "pw", "Ann")
    before = backend.find_user_by_email("a@x.com")

    with pytest.raises(DuplicateEmailError):
        auth.signup("a@x.com", "other", "Impostor")

    after = backend.find_user_by_email("a@x.com")
    assert after.id == first.user.id
    assert after.name == "Ann"
    assert after.credential_secret == before.credential_secret


def test_email_match_is_exact(auth):
    auth.signup("a@x.com", "pw", "Ann")

    # case differs → a different account
    other = auth.signup("A@x.com", "pw", "Other Ann")
    assert other.user.email == "A@x.com"


@pytest.mark.parametrize(
    ("email", "password", "name"),
    [("", "pw", "Ann"), ("a@x.com", "", "Ann"), ("a@x.com", "pw", "  ")],
)
def test_signup_requires_all_fields(auth, email, password, name):
    with pytest.raises(ValidationError):
        auth.signup(email, password, name)


def test_login_returns_same_user(auth):
    signed_up = auth.signup("a@x.com", "pw", "Ann")

    logged_in = auth.login("a@x.com", "pw")

    assert logged_in.user.id == signed_up.user.id
    assert decode_access_token(logged_in.token)["sub"] == str(signed_up.user.id)


def test_login_failures_do_not_reveal_whether_email_exists(auth):
    auth.signup("a@x.com", "pw", "Ann")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        auth.login("a@x.com", "nope")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        auth.login("ghost@x.com", "pw")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_current_user(auth):
    result = auth.signup("a@x.com", "pw", "Ann")

    assert auth.current_user(result.user.id) == result.user
    with pytest.raises(NotFoundError):
        auth.current_user(uuid4())


def test_pointer_is_persisted_on_login_and_cleared_on_logout(backend):
    pointers = SessionPointerStore(LocalKeyValueStore(None, namespace="browser"))
    auth = AuthStore(backend, pointers)

    signed_up = auth.signup("a@x.com", "pw", "Ann")
    token, user = pointers.load()
    assert token == signed_up.token
    assert user == {"id": str(signed_up.user.id), "email": "a@x.com", "name": "Ann"}

    auth.logout()
    assert pointers.load() is None
    # the user record survives logout
    assert auth.login("a@x.com", "pw").user.id == signed_up.user.id
    assert pointers.load()[1]["email"] == "a@x.com"


def test_expired_token_is_rejected():
    token = create_access_token(uuid4(), expires_delta=timedelta(seconds=-5))

    assert decode_access_token(token) is None
    assert token_expired(token) is True
    assert token_expired(create_access_token(uuid4())) is False
    assert token_expired("garbage") is True
