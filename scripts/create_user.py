#!/usr/bin/env python3
from __future__ import annotations

import os
from getpass import getpass
from pathlib import Path

from localauth.auth.strategies import signup
from localauth.auth.users import YamlUserStore

USERS_PATH = Path(os.getenv("LOCALAUTH_USERS_PATH", "data/users.yml")).resolve()


def main() -> None:
    store = YamlUserStore(USERS_PATH)

    email = input("Email: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not email or not pw1:
        raise SystemExit("Email and password are required")

    result = signup(store, email, pw1)
    if not result.ok:
        raise SystemExit(result.failure.message)
    print(f"OK {result.user.email} ({result.user.id}) -> {USERS_PATH}")


if __name__ == "__main__":
    main()
