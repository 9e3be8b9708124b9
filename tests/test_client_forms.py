import httpx
import pytest

from leadbook.client.api import ApiError, LeadbookApi, Ok
from leadbook.client.forms import AuthForm, logout, restore_session, validate
from leadbook.client.session import SessionStore
from leadbook.client.token_cache import TokenCache


class Notices:
    def __init__(self):
        self.items = []

    def __call__(self, title, description):
        self.items.append((title, description))


def _mock_api(handler):
    return LeadbookApi(http=httpx.Client(transport=httpx.MockTransport(handler), base_url="http://leadbook.test"))


def _never_called(request):
    raise AssertionError(f"unexpected request to {request.url}")


# ------------------ local validation ------------------


def test_bad_email_blocks_network_call():
    form = AuthForm("login", _mock_api(_never_called), SessionStore())
    outcome = form.submit(email="bad", password="password1")
    assert not outcome.ok
    assert not outcome.sent
    assert outcome.field_errors == {"email": "Enter a valid email"}
    assert form.field_errors["email"] == "Enter a valid email"


@pytest.mark.parametrize(
    "mode, email, password, name, expected",
    [
        ("login", "", "password1", "", {"email": "Email is required"}),
        ("login", "jane@x.com", "", "", {"password": "Password is required"}),
        ("login", "jane@x.com", "short", "", {"password": "Must be at least 8 characters"}),
        ("signup", "jane@x.com", "password1", "", {"name": "Name is required"}),
        ("signup", "jane@x.com", "password1", "J", {"name": "Name must be at least 2 characters"}),
        ("login", "jane@x.com", "password1", "", {}),
        ("login", " jane@x.com ", "password1", "", {}),
    ],
)
def test_validate(mode, email, password, name, expected):
    _, errors = validate(mode, email, password, name)
    assert errors == expected


def test_name_ignored_in_login_mode():
    values, errors = validate("login", "jane@x.com", "password1", "")
    assert errors == {}
    assert values.name == ""


def test_unknown_mode():
    with pytest.raises(ValueError):
        AuthForm("reset", _mock_api(_never_called), SessionStore())


# ------------------ against the real app ------------------


def test_signup_updates_session_and_cache(client, tmp_path):
    session, notices = SessionStore(), Notices()
    cache = TokenCache(tmp_path / "token.yml")
    form = AuthForm("signup", LeadbookApi(http=client), session, token_cache=cache, notify=notices)

    outcome = form.submit(name="Jane", email="jane@x.com", password="password1")

    assert outcome.ok and outcome.sent
    assert session.user.email == "jane@x.com"
    assert session.user.name == "Jane"
    assert cache.load() == session.token
    assert notices.items == [("Success", "Redirecting...")]
    assert form.submitting is False


def test_duplicate_signup_surfaces_server_message(client):
    api = LeadbookApi(http=client)
    AuthForm("signup", api, SessionStore()).submit(name="Jane", email="jane@x.com", password="password1")

    session, notices = SessionStore(), Notices()
    form = AuthForm("signup", api, session, notify=notices)
    outcome = form.submit(name="Jane", email="jane@x.com", password="password1")

    assert not outcome.ok
    assert outcome.error == "User already exists"
    assert form.error == "User already exists"
    assert session.current is None
    assert notices.items == [("Error", "User already exists")]


def test_wrong_password_surfaces_invalid_credentials(client):
    api = LeadbookApi(http=client)
    AuthForm("signup", api, SessionStore()).submit(name="Jane", email="jane@x.com", password="password1")

    form = AuthForm("login", api, SessionStore())
    outcome = form.submit(email="jane@x.com", password="wrongpass1")
    assert outcome.error == "Invalid credentials"
    assert form.error == "Invalid credentials"


def test_restore_session_and_logout(client, tmp_path):
    api = LeadbookApi(http=client)
    cache = TokenCache(tmp_path / "token.yml")
    AuthForm("signup", api, SessionStore(), token_cache=cache).submit(
        name="Jane", email="jane@x.com", password="password1"
    )

    session = SessionStore()
    assert restore_session(api, session, cache)
    assert session.user.email == "jane@x.com"
    assert isinstance(api.list_leads(session.token), Ok)

    logout(session, cache)
    assert session.current is None
    assert cache.load() is None
    assert not restore_session(api, session, cache)


def test_restore_discards_rejected_token(client, tmp_path):
    cache = TokenCache(tmp_path / "token.yml")
    cache.save("stale-token")
    assert not restore_session(LeadbookApi(http=client), SessionStore(), cache)
    assert cache.load() is None


# ------------------ failure shapes ------------------


def test_server_error_without_message_uses_fallback():
    form = AuthForm("login", _mock_api(lambda r: httpx.Response(500, text="oops")), SessionStore())
    outcome = form.submit(email="jane@x.com", password="password1")
    assert outcome.error == "Server error"
    # Only 400/401 answers set the form-level message.
    assert form.error == ""


def test_transport_failure_becomes_api_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    api = _mock_api(handler)
    result = api.authenticate("login", {"email": "jane@x.com", "password": "password1"})
    assert isinstance(result, ApiError)
    assert result.status is None
    assert "connection refused" in result.message


def test_success_without_token_is_an_error():
    form = AuthForm("login", _mock_api(lambda r: httpx.Response(200, json={})), SessionStore())
    outcome = form.submit(email="jane@x.com", password="password1")
    assert not outcome.ok
    assert outcome.error == "Server error"


def test_resubmit_while_in_flight_is_rejected():
    session = SessionStore()
    nested = []
    calls = []

    def handler(request):
        calls.append(request)
        nested.append(form.submit(email="jane@x.com", password="password1"))
        return httpx.Response(200, json={"token": "t", "user": {"id": "user-1", "name": "Jane", "email": "jane@x.com"}})

    form = AuthForm("login", _mock_api(handler), session)
    outcome = form.submit(email="jane@x.com", password="password1")

    assert outcome.ok
    assert len(calls) == 1
    assert nested[0].busy and not nested[0].sent
    assert form.submitting is False


def test_authenticate_rejects_unknown_mode():
    with pytest.raises(ValueError):
        _mock_api(_never_called).authenticate("reset", {})
