# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""One-shot flash messages carried across a redirect in a signed cookie."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request, Response
from itsdangerous import BadSignature, URLSafeSerializer

from localauth.config import Settings


@dataclass(frozen=True)
class FlashMessage:
    category: str
    message: str


def error(message: str) -> FlashMessage:
    return FlashMessage(category="error", message=message)


def info(message: str) -> FlashMessage:
    return FlashMessage(category="info", message=message)


def _serializer(settings: Settings) -> URLSafeSerializer:
    return URLSafeSerializer(secret_key=settings.secret_key, salt=settings.flash_salt)


def set_flash(response: Response, flash: FlashMessage, settings: Settings) -> None:
    token = _serializer(settings).dumps({"c": flash.category, "m": flash.message})
    response.set_cookie(settings.flash_cookie_name, token, **settings.cookie_settings())


def read_flash(request: Request, settings: Settings) -> Optional[FlashMessage]:
    token = request.cookies.get(settings.flash_cookie_name, "")
    if not token:
        return None
    try:
        data = _serializer(settings).loads(token)
    except BadSignature:
        return None
    if not isinstance(data, dict) or not data.get("m"):
        return None
    return FlashMessage(category=str(data.get("c") or "info"), message=str(data["m"]))


def consume_flash(request: Request, response: Response, settings: Settings) -> None:
    """Clear the flash cookie on the response that displays it."""
    if settings.flash_cookie_name in request.cookies:
        response.delete_cookie(settings.flash_cookie_name)
