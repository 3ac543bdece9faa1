# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_TRUTHY = {"1", "true", "yes", "y"}


def _env(name: str, default: str = "") -> str:
    return os.getenv(f"LOCALAUTH_{name}", default)


def _env_bool(name: str, default: str = "false") -> bool:
    return _env(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    secret_key: str
    session_salt: str = "localauth.session.v1"
    flash_salt: str = "localauth.flash.v1"
    cookie_name: str = "localauth_session"
    flash_cookie_name: str = "localauth_flash"
    session_max_age: int = 28800  # 8 hours
    cookie_secure: bool = False
    users_path: Optional[Path] = None
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        secret = _env("SECRET_KEY") or os.getenv("SECRET_KEY")
        if not secret:
            raise RuntimeError("Missing LOCALAUTH_SECRET_KEY (or SECRET_KEY) in environment")
        users_path = _env("USERS_PATH").strip()
        return cls(
            secret_key=secret,
            session_salt=_env("SESSION_SALT", cls.session_salt),
            flash_salt=_env("FLASH_SALT", cls.flash_salt),
            cookie_name=_env("COOKIE_NAME", cls.cookie_name),
            flash_cookie_name=_env("FLASH_COOKIE", cls.flash_cookie_name),
            session_max_age=int(_env("SESSION_MAX_AGE", str(cls.session_max_age))),
            cookie_secure=_env_bool("COOKIE_SECURE"),
            users_path=Path(users_path).resolve() if users_path else None,
            log_level=_env("LOG_LEVEL", cls.log_level).upper(),
        )

    def cookie_settings(self) -> dict:
        return {"httponly": True, "samesite": "lax", "secure": self.cookie_secure}
