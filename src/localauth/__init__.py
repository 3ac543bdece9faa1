# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Local email/password authentication for FastAPI apps."""

__version__ = "0.1.0"
