# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from fastapi import Request

from localauth.auth.users import User
from localauth.errors import GuardRedirect
from localauth.flash import FlashMessage, error

LOGIN_URL = "/login"
HOME_URL = "/"


class Policy(str, Enum):
    NONE = "none"
    REQUIRE_AUTHENTICATED = "require_authenticated"
    REQUIRE_UNAUTHENTICATED = "require_unauthenticated"


# Route table of the host app (path -> policy, GET and POST). Routes get their
# guard through `guard_for`.
ROUTE_POLICIES: Dict[str, Policy] = {
    "/": Policy.NONE,
    "/signup": Policy.REQUIRE_UNAUTHENTICATED,
    "/login": Policy.REQUIRE_UNAUTHENTICATED,
    "/logout": Policy.NONE,
    "/secret": Policy.REQUIRE_AUTHENTICATED,
}


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    redirect_to: Optional[str] = None
    flash: Optional[FlashMessage] = None


ALLOW = GuardDecision(allowed=True)


def check_access(identity: Optional[User], policy: Policy) -> GuardDecision:
    if policy is Policy.REQUIRE_AUTHENTICATED and identity is None:
        return GuardDecision(allowed=False, redirect_to=LOGIN_URL, flash=error("Login to access!"))
    if policy is Policy.REQUIRE_UNAUTHENTICATED and identity is not None:
        return GuardDecision(allowed=False, redirect_to=HOME_URL, flash=error("You are already logged in!"))
    return ALLOW


def current_user_optional(request: Request) -> Optional[User]:
    return getattr(request.state, "user", None)


def _enforce(request: Request, policy: Policy) -> Optional[User]:
    u = current_user_optional(request)
    decision = check_access(u, policy)
    if not decision.allowed:
        raise GuardRedirect(decision)
    return u


def guard_for(path: str):
    """FastAPI dependency enforcing the policy registered for `path`. Returns the current user, if any."""
    policy = ROUTE_POLICIES[path]

    def _dep(request: Request) -> Optional[User]:
        return _enforce(request, policy)

    return _dep
