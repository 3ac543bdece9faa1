import pytest

from localauth.auth.strategies import login, signup
from localauth.auth.users import MemoryUserStore
from localauth.errors import FailureKind, InvalidInputError, StoreError

from conftest import BrokenUserStore


def test_signup_then_login(users):
    r = signup(users, "a@x.com", "pw1")
    assert r.ok
    assert r.user.email == "a@x.com"
    assert r.failure is None

    r2 = login(users, "a@x.com", "pw1")
    assert r2.ok
    assert r2.user == r.user


def test_signup_stores_hash_not_plaintext(users):
    r = signup(users, "a@x.com", "pw1")
    assert r.user.password_hash != "pw1"
    assert "pw1" not in r.user.password_hash


def test_duplicate_signup_performs_no_write(users):
    signup(users, "a@x.com", "pw1")
    assert users.creates == 1

    r = signup(users, "A@x.com", "pw2")
    assert not r.ok
    assert r.failure.kind is FailureKind.DUPLICATE_EMAIL
    assert r.failure.message == "This email is already in use!"
    assert users.creates == 1
    assert len(users) == 1


def test_login_unknown_email(users):
    r = login(users, "ghost@x.com", "pw")
    assert r.failure.kind is FailureKind.NOT_FOUND
    assert r.failure.message == "no user found."
    assert users.creates == 0


def test_login_wrong_password_does_not_mutate(users):
    created = signup(users, "a@x.com", "pw1").user
    r = login(users, "a@x.com", "wrong")
    assert not r.ok
    assert r.failure.kind is FailureKind.INVALID_CREDENTIALS
    assert r.failure.message == "oops, wrong password!"
    assert users.creates == 1
    assert users.find_by_id(created.id) == created


def test_signup_race_is_reported_as_duplicate():
    class RacyStore(MemoryUserStore):
        # The pre-check misses a record another request is creating.
        def find_by_email(self, email):
            return None

    store = RacyStore()
    assert signup(store, "a@x.com", "pw1").ok
    r = signup(store, "a@x.com", "pw2")
    assert r.failure.kind is FailureKind.DUPLICATE_EMAIL
    assert len(store) == 1


def test_store_errors_propagate():
    store = BrokenUserStore()
    with pytest.raises(StoreError):
        signup(store, "a@x.com", "pw1")
    with pytest.raises(StoreError):
        login(store, "a@x.com", "pw1")


def test_create_error_propagates(users, monkeypatch):
    def _fail(draft):
        raise StoreError("disk full")

    monkeypatch.setattr(users, "create", _fail)
    with pytest.raises(StoreError, match="disk full"):
        signup(users, "a@x.com", "pw1")


@pytest.mark.parametrize("email", ["", "   "])
def test_signup_rejects_blank_email(users, email):
    with pytest.raises(InvalidInputError):
        signup(users, email, "pw1")
    assert users.creates == 0
    assert len(users) == 0
