from localauth.auth.session import MemorySessionStore, SessionSerializer, sign_session_key, unsign_session_key
from localauth.auth.strategies import login, signup
from localauth.auth.users import MemoryUserStore
from localauth.errors import FailureKind
from localauth.guards import LOGIN_URL, Policy, check_access

SECRET = "test-secret"
SALT = "localauth.session.v1"


def test_establish_then_reconstitute(serializer, users):
    user = signup(users, "a@x.com", "pw1").user
    key = serializer.establish(user)
    assert key
    assert serializer.reconstitute(key).id == user.id


def test_keys_are_unique(serializer, users):
    user = signup(users, "a@x.com", "pw1").user
    assert serializer.establish(user) != serializer.establish(user)


def test_terminate_removes_mapping_and_is_idempotent(serializer, users, sessions):
    user = signup(users, "a@x.com", "pw1").user
    key = serializer.establish(user)
    serializer.terminate(key)
    assert serializer.reconstitute(key) is None
    serializer.terminate(key)
    serializer.terminate(None)
    assert len(sessions) == 0


def test_reconstitute_absent_cases(serializer, sessions):
    assert serializer.reconstitute(None) is None
    assert serializer.reconstitute("") is None
    assert serializer.reconstitute("unknown") is None
    # key pointing to a user that no longer exists
    sessions.put("orphan", "deleted-user-id")
    assert serializer.reconstitute("orphan") is None


def test_memory_session_store_expires_entries():
    now = [1000.0]
    store = MemorySessionStore(max_age=60, clock=lambda: now[0])
    store.put("k", "uid")
    now[0] += 30
    assert store.get("k") == "uid"
    now[0] += 31
    assert store.get("k") is None
    assert len(store) == 0


def test_put_sweeps_expired_entries():
    now = [1000.0]
    store = MemorySessionStore(max_age=60, clock=lambda: now[0])
    for i in range(100):
        store.put(f"k{i}", "uid")
    now[0] += 10000
    store.put("fresh", "uid")
    assert len(store) == 1
    assert store.get("fresh") == "uid"


def test_put_keeps_live_entries():
    now = [1000.0]
    store = MemorySessionStore(max_age=60, clock=lambda: now[0])
    store.put("old", "u1")
    now[0] += 30
    store.put("new", "u2")
    assert len(store) == 2
    assert store.get("old") == "u1"


def test_signed_session_key_roundtrip():
    token = sign_session_key("abc", secret_key=SECRET, salt=SALT)
    assert token != "abc"
    assert unsign_session_key(token, secret_key=SECRET, salt=SALT, max_age=60) == "abc"


def test_tampered_or_foreign_tokens_are_rejected():
    token = sign_session_key("abc", secret_key=SECRET, salt=SALT)
    assert unsign_session_key(token + "x", secret_key=SECRET, salt=SALT, max_age=60) is None
    assert unsign_session_key(token, secret_key="other", salt=SALT, max_age=60) is None
    assert unsign_session_key("", secret_key=SECRET, salt=SALT, max_age=60) is None


def test_end_to_end_scenarios():
    users = MemoryUserStore()
    serializer = SessionSerializer(MemorySessionStore(), users)

    r1 = signup(users, "a@x.com", "pw1")
    assert r1.ok and r1.user.email == "a@x.com"

    r2 = signup(users, "a@x.com", "pw2")
    assert not r2.ok
    assert r2.failure.kind is FailureKind.DUPLICATE_EMAIL

    r3 = login(users, "a@x.com", "wrong")
    assert not r3.ok
    assert r3.failure.kind is FailureKind.INVALID_CREDENTIALS

    r4 = login(users, "a@x.com", "pw1")
    key = serializer.establish(r4.user)
    assert serializer.reconstitute(key) == r1.user

    serializer.terminate(key)
    identity = serializer.reconstitute(key)
    assert identity is None
    decision = check_access(identity, Policy.REQUIRE_AUTHENTICATED)
    assert not decision.allowed
    assert decision.redirect_to == LOGIN_URL
