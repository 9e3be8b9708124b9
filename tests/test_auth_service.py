from concurrent.futures import ThreadPoolExecutor

import pytest

from leadbook.errors import Conflict, InvalidToken, Unauthorized, ValidationError
from leadbook.services import auth_service


def test_signup_returns_token_for_new_user(user_store, issuer):
    result = auth_service.signup(user_store, issuer, name="Jane", email="jane@x.com", password="password1")
    assert issuer.verify(result.token) == result.user.id
    assert result.to_dict()["user"] == {"id": result.user.id, "name": "Jane", "email": "jane@x.com"}
    assert result.user.password_hash != "password1"


@pytest.mark.parametrize(
    "fields",
    [
        {"name": "", "email": "jane@x.com", "password": "password1"},
        {"name": "Jane", "email": None, "password": "password1"},
        {"name": "Jane", "email": "jane@x.com", "password": ""},
        {"name": "   ", "email": "jane@x.com", "password": "password1"},
    ],
)
def test_signup_requires_all_fields(user_store, issuer, fields):
    with pytest.raises(ValidationError) as exc:
        auth_service.signup(user_store, issuer, **fields)
    assert exc.value.message == "All fields are required"


def test_second_signup_conflicts(user_store, issuer):
    auth_service.signup(user_store, issuer, name="Jane", email="jane@x.com", password="password1")
    with pytest.raises(Conflict) as exc:
        auth_service.signup(user_store, issuer, name="Jane", email="jane@x.com", password="password1")
    assert exc.value.message == "User already exists"


def test_concurrent_signups_single_winner(user_store, issuer):
    def attempt(_):
        try:
            return auth_service.signup(
                user_store, issuer, name="Jane", email="jane@x.com", password="password1"
            )
        except Conflict:
            return None

    with ThreadPoolExecutor(max_workers=4) as pool:
        results = list(pool.map(attempt, range(4)))

    winners = [r for r in results if r is not None]
    assert len(winners) == 1
    assert user_store.count() == 1


def test_login_token_verifies_to_user(user_store, issuer):
    created = auth_service.signup(user_store, issuer, name="Jane", email="jane@x.com", password="password1")
    result = auth_service.login(user_store, issuer, email="jane@x.com", password="password1")
    assert issuer.verify(result.token) == created.user.id


def test_login_wrong_password(user_store, issuer):
    auth_service.signup(user_store, issuer, name="Jane", email="jane@x.com", password="password1")
    with pytest.raises(Unauthorized) as exc:
        auth_service.login(user_store, issuer, email="jane@x.com", password="wrong")
    assert exc.value.message == "Invalid credentials"


def test_login_unknown_user(user_store, issuer):
    with pytest.raises(Unauthorized) as exc:
        auth_service.login(user_store, issuer, email="ghost@x.com", password="password1")
    assert exc.value.message == "Invalid credentials"


def test_login_requires_fields(user_store, issuer):
    with pytest.raises(ValidationError) as exc:
        auth_service.login(user_store, issuer, email="", password="password1")
    assert exc.value.message == "Email and password required"


def test_resolve_user_rejects_unknown_subject(user_store, issuer):
    with pytest.raises(InvalidToken):
        auth_service.resolve_user(user_store, issuer, issuer.issue("user-deleted"))
