# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
import threading
import time
from typing import Dict, Optional, Protocol, Tuple

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from localauth.auth.users import User, UserStore


class SessionStore(Protocol):
    """Key/value store for session key -> user id. Failures raise StoreError."""

    def put(self, key: str, value: str) -> None:
        ...

    def get(self, key: str) -> Optional[str]:
        ...

    def delete(self, key: str) -> None:
        ...


class MemorySessionStore:
    def __init__(self, max_age: Optional[int] = None, clock=time.monotonic):
        self.max_age = max_age
        self._clock = clock
        self._lock = threading.Lock()
        self._data: Dict[str, Tuple[str, float]] = {}

    def __len__(self) -> int:
        return len(self._data)

    def _expired(self, stored_at: float, now: float) -> bool:
        return self.max_age is not None and now - stored_at > self.max_age

    def put(self, key: str, value: str) -> None:
        with self._lock:
            now = self._clock()
            for k in [k for k, (_, t) in self._data.items() if self._expired(t, now)]:
                del self._data[k]
            self._data[key] = (value, now)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            hit = self._data.get(key)
            if hit is None:
                return None
            value, stored_at = hit
            if self._expired(stored_at, self._clock()):
                del self._data[key]
                return None
            return value

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class SessionSerializer:
    """Maps users to opaque session keys and back."""

    def __init__(self, sessions: SessionStore, users: UserStore):
        self.sessions = sessions
        self.users = users

    def establish(self, user: User) -> str:
        key = secrets.token_urlsafe(32)
        self.sessions.put(key, user.id)
        return key

    def reconstitute(self, key: Optional[str]) -> Optional[User]:
        if not key:
            return None
        user_id = self.sessions.get(key)
        if not user_id:
            return None
        return self.users.find_by_id(user_id)

    def terminate(self, key: Optional[str]) -> None:
        if not key:
            return
        self.sessions.delete(key)


def _serializer(secret_key: str, salt: str) -> URLSafeTimedSerializer:
    if not secret_key:
        raise RuntimeError("Missing secret key for session signing")
    return URLSafeTimedSerializer(secret_key=secret_key, salt=salt)


def sign_session_key(key: str, *, secret_key: str, salt: str) -> str:
    return _serializer(secret_key, salt).dumps({"k": key})


def unsign_session_key(token: str, *, secret_key: str, salt: str, max_age: int) -> Optional[str]:
    """Return the session key inside a signed cookie value, or None if invalid/expired."""
    if not token:
        return None
    s = _serializer(secret_key, salt)
    try:
        data = s.loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    k = (data or {}).get("k") if isinstance(data, dict) else None
    k = str(k or "").strip()
    return k or None
