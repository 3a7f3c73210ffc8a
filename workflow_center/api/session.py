"""Browser-session wiring for the console token: cookie storage and bootstrap."""
from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional

from fastapi import Request
from fastapi.responses import RedirectResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from workflow_center.api.templating import templates
from workflow_center.config import Settings, get_settings
from workflow_center.core.security import display_name
from workflow_center.core.session import BootstrapOutcome, SessionContext

logger = logging.getLogger(__name__)

PUBLIC_PATHS = ("/health", "/docs", "/openapi.json")


def is_public_path(path: str) -> bool:
    return path.startswith("/static/") or path in PUBLIC_PATHS


class CookieTokenStorage:
    """Token storage backed by the request cookies.

    Writes are buffered and applied to the outgoing response with ``apply``.
    """

    def __init__(self, cookies: Mapping[str, str], secure: bool = False):
        self.cookies = dict(cookies)
        self.secure = secure
        self.pending: Dict[str, Optional[str]] = {}

    def get(self, key: str) -> Optional[str]:
        if key in self.pending:
            return self.pending[key]
        return self.cookies.get(key)

    def set(self, key: str, value: str) -> None:
        self.pending[key] = value

    def delete(self, key: str) -> None:
        self.pending[key] = None

    def apply(self, response: Response) -> Response:
        for key, value in self.pending.items():
            if value is None:
                response.delete_cookie(key)
            else:
                response.set_cookie(key, value, httponly=True, samesite="lax", secure=self.secure)
        self.pending.clear()
        return response


def login_required_response(request: Request, config: Settings) -> Response:
    """Visible notice that redirects to the external login after a short delay."""
    return templates.TemplateResponse(
        request,
        "login_required.html",
        {
            "login_url": config.login_redirect_url,
            "delay": config.login_redirect_delay_seconds,
        },
        status_code=401,
    )


class SessionBootstrapMiddleware(BaseHTTPMiddleware):
    """Resolve the console token before any protected route runs.

    A ``?token=`` bootstrap parameter is stored and scrubbed from the address
    with a redirect. Without any token the login notice is served and no
    backend call is made.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if is_public_path(request.url.path):
            return await call_next(request)

        config = get_settings()
        storage = CookieTokenStorage(request.cookies, secure=config.session_cookie_secure)
        session = SessionContext(storage, storage_key=config.token_storage_key)
        outcome = session.bootstrap(request.query_params.get(config.token_query_param))

        if outcome is BootstrapOutcome.CAPTURED:
            scrubbed = request.url.remove_query_params(config.token_query_param)
            return storage.apply(RedirectResponse(url=str(scrubbed), status_code=303))
        if outcome is BootstrapOutcome.LOGIN_REQUIRED:
            return login_required_response(request, config)

        request.state.session = session
        request.state.storage = storage
        request.state.user_name = display_name(session.token)
        response = await call_next(request)
        return storage.apply(response)
