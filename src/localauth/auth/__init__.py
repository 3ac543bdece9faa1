# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication core.

This package provides:
- Password hashing/verification (argon2)
- User record stores (in-memory and data/users.yml)
- Signup/login strategies
- Server-side sessions behind signed cookies (itsdangerous)
"""
