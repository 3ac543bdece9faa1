# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy.

Raised errors (`InvalidInputError`, `StoreError`) are failures the caller must
handle. `AuthFailure` is a plain value: an expected, user-facing outcome of a
signup/login attempt that the transport layer turns into a flash + redirect.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from localauth.guards import GuardDecision


class LocalAuthError(Exception):
    """Base exception for localauth"""


class InvalidInputError(LocalAuthError, ValueError):
    """Malformed input given to the credential hasher"""


class StoreError(LocalAuthError):
    """User or session store I/O failure"""


class DuplicateKeyError(StoreError):
    """A uniqueness constraint of the store was violated"""

    def __init__(self, message: str, key: str = ""):
        self.key = key
        super().__init__(message)


class GuardRedirect(LocalAuthError):
    """Raised by the FastAPI guard dependencies when a request must be redirected."""

    def __init__(self, decision: "GuardDecision"):
        self.decision = decision
        super().__init__(f"redirect to {decision.redirect_to}")


class FailureKind(str, Enum):
    DUPLICATE_EMAIL = "duplicate_email"
    NOT_FOUND = "not_found"
    INVALID_CREDENTIALS = "invalid_credentials"


@dataclass(frozen=True)
class AuthFailure:
    kind: FailureKind
    message: str


DUPLICATE_EMAIL = AuthFailure(FailureKind.DUPLICATE_EMAIL, "This email is already in use!")
NOT_FOUND = AuthFailure(FailureKind.NOT_FOUND, "no user found.")
INVALID_CREDENTIALS = AuthFailure(FailureKind.INVALID_CREDENTIALS, "oops, wrong password!")
