# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import time
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from loguru import logger

from localauth.auth.session import (
    MemorySessionStore,
    SessionSerializer,
    SessionStore,
    sign_session_key,
    unsign_session_key,
)
from localauth.auth.strategies import AuthResult, login, signup
from localauth.auth.users import MemoryUserStore, UserStore, YamlUserStore
from localauth.config import Settings
from localauth.errors import GuardRedirect, StoreError
from localauth.flash import FlashMessage, consume_flash, error, read_flash, set_flash
from localauth.guards import HOME_URL, LOGIN_URL, guard_for
from localauth.log import configure_logging

BASE_DIR = Path(__file__).resolve().parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

SIGNUP_URL = "/signup"
MISSING_CREDENTIALS = "Missing credentials"


def _settings(request: Request) -> Settings:
    return request.app.state.settings


def _render(request: Request, template_name: str, ctx: Optional[dict] = None):
    """TemplateResponse wrapper injecting the current user and the pending flash message."""
    settings = _settings(request)
    base_ctx = {
        "current_user": getattr(request.state, "user", None),
        "flash": read_flash(request, settings),
    }
    resp = templates.TemplateResponse(request, template_name, {**base_ctx, **(ctx or {})})
    consume_flash(request, resp, settings)
    return resp


def _redirect(request: Request, url: str, flash: Optional[FlashMessage] = None) -> RedirectResponse:
    resp = RedirectResponse(url=url, status_code=303)
    if flash is not None:
        set_flash(resp, flash, _settings(request))
    return resp


def _start_session(request: Request, result: AuthResult) -> RedirectResponse:
    settings = _settings(request)
    key = request.app.state.serializer.establish(result.user)
    token = sign_session_key(key, secret_key=settings.secret_key, salt=settings.session_salt)
    resp = _redirect(request, HOME_URL)
    resp.set_cookie(settings.cookie_name, token, max_age=settings.session_max_age, **settings.cookie_settings())
    return resp


def create_app(
    settings: Optional[Settings] = None,
    users: Optional[UserStore] = None,
    sessions: Optional[SessionStore] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    configure_logging(settings.log_level)

    if users is None:
        users = YamlUserStore(settings.users_path) if settings.users_path else MemoryUserStore()
    if sessions is None:
        sessions = MemorySessionStore(max_age=settings.session_max_age)

    app = FastAPI()
    app.state.settings = settings
    app.state.users = users
    app.state.serializer = SessionSerializer(sessions, users)
    logger.info("localauth app created (user store: {})", type(users).__name__)

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        token = request.cookies.get(settings.cookie_name, "")
        key = unsign_session_key(
            token,
            secret_key=settings.secret_key,
            salt=settings.session_salt,
            max_age=settings.session_max_age,
        )
        try:
            request.state.user = app.state.serializer.reconstitute(key)
        except StoreError:
            logger.exception("Session lookup failed for {}", request.url.path)
            return PlainTextResponse("Internal error", status_code=500)
        request.state.session_key = key
        return await call_next(request)

    @app.middleware("http")
    async def _access_log(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info("{} {} {} {:.1f} ms", request.method, request.url.path, response.status_code, elapsed_ms)
        return response

    @app.exception_handler(GuardRedirect)
    async def _guard_redirect(request: Request, exc: GuardRedirect):
        return _redirect(request, exc.decision.redirect_to or HOME_URL, exc.decision.flash)

    @app.exception_handler(StoreError)
    async def _store_error(request: Request, exc: StoreError):
        logger.opt(exception=exc).error("Store failure on {} {}", request.method, request.url.path)
        return PlainTextResponse("Internal error", status_code=500)

    # ------------------ Routes ------------------

    @app.get("/", response_class=HTMLResponse)
    def home(request: Request):
        return _render(request, "home.html")

    @app.get("/signup", response_class=HTMLResponse, dependencies=[Depends(guard_for(SIGNUP_URL))])
    def signup_get(request: Request):
        return _render(request, "signup.html")

    @app.post("/signup", dependencies=[Depends(guard_for(SIGNUP_URL))])
    def signup_post(request: Request, email: str = Form(""), password: str = Form("")):
        if not email.strip() or not password:
            return _redirect(request, SIGNUP_URL, error(MISSING_CREDENTIALS))
        result = signup(request.app.state.users, email, password)
        if not result.ok:
            return _redirect(request, SIGNUP_URL, error(result.failure.message))
        return _start_session(request, result)

    @app.get("/login", response_class=HTMLResponse, dependencies=[Depends(guard_for(LOGIN_URL))])
    def login_get(request: Request):
        return _render(request, "login.html")

    @app.post("/login", dependencies=[Depends(guard_for(LOGIN_URL))])
    def login_post(request: Request, email: str = Form(""), password: str = Form("")):
        if not email.strip() or not password:
            return _redirect(request, LOGIN_URL, error(MISSING_CREDENTIALS))
        result = login(request.app.state.users, email, password)
        if not result.ok:
            return _redirect(request, LOGIN_URL, error(result.failure.message))
        return _start_session(request, result)

    @app.get("/logout")
    def logout(request: Request):
        app.state.serializer.terminate(getattr(request.state, "session_key", None))
        resp = _redirect(request, HOME_URL)
        resp.delete_cookie(settings.cookie_name)
        return resp

    @app.get("/secret", response_class=HTMLResponse)
    def secret(request: Request, user=Depends(guard_for("/secret"))):
        return _render(request, "secret.html", {"user": user})

    return app
