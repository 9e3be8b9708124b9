from concurrent.futures import ThreadPoolExecutor

import pytest
import yaml

from leadbook.auth.users import DuplicateEmail, UserStore


def test_insert_and_find(user_store):
    u = user_store.insert(name="Jane", email="Jane@X.com ", password_hash="h")
    assert u.id.startswith("user-")
    assert u.email == "jane@x.com"
    assert user_store.find_by_email("JANE@x.com") == u
    assert user_store.get(u.id) == u
    assert u.summary() == {"id": u.id, "name": "Jane", "email": "jane@x.com"}


def test_missing_lookups_return_none(user_store):
    assert user_store.find_by_email("nobody@x.com") is None
    assert user_store.find_by_email("") is None
    assert user_store.get("user-missing") is None


def test_duplicate_email_rejected(user_store):
    user_store.insert(name="Jane", email="jane@x.com", password_hash="h")
    with pytest.raises(DuplicateEmail):
        user_store.insert(name="Other", email="JANE@x.com", password_hash="h2")
    assert user_store.count() == 1


def test_persisted_as_yaml(settings, user_store):
    u = user_store.insert(name="Jane", email="jane@x.com", password_hash="h")
    raw = yaml.safe_load(settings.users_path.read_text(encoding="utf-8"))
    assert raw["version"] == 1
    assert raw["users"]["jane@x.com"]["id"] == u.id

    with UserStore(settings.users_path) as reopened:
        assert reopened.find_by_email("jane@x.com") == u


def test_concurrent_inserts_same_email_yield_one_record(user_store):
    def attempt(i):
        try:
            user_store.insert(name=f"Jane {i}", email="jane@x.com", password_hash="h")
            return True
        except DuplicateEmail:
            return False

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(16)))

    assert results.count(True) == 1
    assert user_store.count() == 1


def test_store_must_be_opened(settings):
    store = UserStore(settings.users_path)
    with pytest.raises(RuntimeError):
        store.find_by_email("jane@x.com")
