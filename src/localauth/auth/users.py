# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional, Protocol, Tuple

import yaml
from loguru import logger

from localauth.errors import DuplicateKeyError, InvalidInputError, StoreError


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


@dataclass(frozen=True)
class User:
    id: str
    email: str
    password_hash: str
    created_at: str = ""


@dataclass(frozen=True)
class UserDraft:
    email: str
    password_hash: str


class UserStore(Protocol):
    """Persistence boundary for user records.

    Implementations raise StoreError on I/O failure and DuplicateKeyError when
    `create` would produce a second record with the same email.
    `create` raises InvalidInputError for an empty email.
    """

    def find_by_email(self, email: str) -> Optional[User]:
        ...

    def find_by_id(self, user_id: str) -> Optional[User]:
        ...

    def create(self, draft: UserDraft) -> User:
        ...


def _new_user(draft: UserDraft) -> User:
    email = normalize_email(draft.email)
    if not email:
        raise InvalidInputError("User email must not be empty")
    return User(
        id=uuid.uuid4().hex,
        email=email,
        password_hash=draft.password_hash,
        created_at=datetime.now(timezone.utc).isoformat(timespec="seconds"),
    )


class MemoryUserStore:
    """Process-local store. Email uniqueness is checked under the lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._by_id: Dict[str, User] = {}

    def __len__(self) -> int:
        return len(self._by_id)

    def find_by_email(self, email: str) -> Optional[User]:
        e = normalize_email(email)
        if not e:
            return None
        with self._lock:
            for u in self._by_id.values():
                if u.email == e:
                    return u
        return None

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._by_id.get(user_id or "")

    def create(self, draft: UserDraft) -> User:
        user = _new_user(draft)
        with self._lock:
            if any(u.email == user.email for u in self._by_id.values()):
                raise DuplicateKeyError(f"Email already exists: {user.email}", key=user.email)
            self._by_id[user.id] = user
        return user


class YamlUserStore:
    """Users persisted in a YAML file.

    File layout:

        version: 1
        users:
          <id>:
            email: a@x.com
            password_hash: $argon2id$...
            created_at: 2026-01-01T00:00:00+00:00

    Reads are cached by file mtime; writes replace the file atomically.
    The lock only serialises writers inside one process: run a single app
    worker against a given file and do not seed it with scripts/create_user.py
    while the app is running, or concurrent creates can overwrite each other.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._lock = threading.Lock()
        self._cache: Tuple[float, Dict[str, User]] = (0.0, {})

    def _load(self) -> Dict[str, User]:
        try:
            mtime = self.path.stat().st_mtime if self.path.exists() else 0.0
            cached_mtime, cached_users = self._cache
            if mtime and mtime == cached_mtime:
                return cached_users
            if not self.path.exists():
                return {}
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            raise StoreError(f"Cannot read users file {self.path}: {e}") from e

        users = (raw.get("users") or {}) if isinstance(raw, dict) else {}
        out: Dict[str, User] = {}
        for uid, udata in users.items():
            if not isinstance(udata, dict):
                continue
            user_id = str(uid).strip()
            email = normalize_email(str(udata.get("email") or ""))
            if not user_id or not email:
                continue
            out[user_id] = User(
                id=user_id,
                email=email,
                password_hash=str(udata.get("password_hash") or "").strip(),
                created_at=str(udata.get("created_at") or ""),
            )
        self._cache = (mtime, out)
        return out

    def _dump(self, users: Dict[str, User]) -> None:
        raw = {
            "version": 1,
            "users": {
                u.id: {"email": u.email, "password_hash": u.password_hash, "created_at": u.created_at}
                for u in users.values()
            },
        }
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_text(yaml.safe_dump(raw, sort_keys=False, allow_unicode=True), encoding="utf-8")
            tmp.replace(self.path)
            self._cache = (self.path.stat().st_mtime, users)
        except OSError as e:
            raise StoreError(f"Cannot write users file {self.path}: {e}") from e

    def find_by_email(self, email: str) -> Optional[User]:
        e = normalize_email(email)
        if not e:
            return None
        with self._lock:
            for u in self._load().values():
                if u.email == e:
                    return u
        return None

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            return self._load().get(user_id or "")

    def create(self, draft: UserDraft) -> User:
        user = _new_user(draft)
        with self._lock:
            users = dict(self._load())
            if any(u.email == user.email for u in users.values()):
                raise DuplicateKeyError(f"Email already exists: {user.email}", key=user.email)
            users[user.id] = user
            self._dump(users)
        logger.debug("User {} written to {}", user.id, self.path)
        return user
