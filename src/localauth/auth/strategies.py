# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Local signup/login strategies.

Both return an `AuthResult`. Expected outcomes (duplicate email, unknown user,
wrong password) come back as an `AuthFailure` value; store failures raise
`StoreError` and are never masked.

Note: login reports "no user found" and "wrong password" separately, which
tells a caller whether an account exists for an email.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from localauth.auth.passwords import hash_password, needs_rehash, verify_password
from localauth.auth.users import User, UserDraft, UserStore, normalize_email
from localauth.errors import (
    DUPLICATE_EMAIL,
    INVALID_CREDENTIALS,
    NOT_FOUND,
    AuthFailure,
    DuplicateKeyError,
    InvalidInputError,
)


@dataclass(frozen=True)
class AuthResult:
    user: Optional[User] = None
    failure: Optional[AuthFailure] = None

    @property
    def ok(self) -> bool:
        return self.user is not None


def signup(store: UserStore, email: str, password: str) -> AuthResult:
    e = normalize_email(email)
    if not e:
        raise InvalidInputError("Email must not be empty")
    if store.find_by_email(e):
        logger.info("Signup rejected, email in use: {}", e)
        return AuthResult(failure=DUPLICATE_EMAIL)

    draft = UserDraft(email=e, password_hash=hash_password(password))
    try:
        user = store.create(draft)
    except DuplicateKeyError:
        # Lost the race against a concurrent signup for the same email.
        logger.info("Signup rejected by store uniqueness check: {}", e)
        return AuthResult(failure=DUPLICATE_EMAIL)

    logger.info("User signed up: {} ({})", user.email, user.id)
    return AuthResult(user=user)


def login(store: UserStore, email: str, password: str) -> AuthResult:
    e = normalize_email(email)
    user = store.find_by_email(e)
    if not user:
        logger.info("Login failed, no user: {}", e)
        return AuthResult(failure=NOT_FOUND)
    if not verify_password(user.password_hash, password):
        logger.info("Login failed, wrong password: {}", e)
        return AuthResult(failure=INVALID_CREDENTIALS)
    if needs_rehash(user.password_hash):
        logger.warning("Password hash for {} uses outdated argon2 parameters", user.id)
    logger.info("User logged in: {} ({})", user.email, user.id)
    return AuthResult(user=user)
