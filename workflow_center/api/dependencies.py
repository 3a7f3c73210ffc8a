"""Shared route dependencies: the console session and a console bound to it."""
from __future__ import annotations

from typing import AsyncIterator

from fastapi import Depends, Request

from workflow_center.config import Settings, get_settings
from workflow_center.core.exceptions import UnauthorizedError
from workflow_center.core.session import SessionContext
from workflow_center.integrations.login_api import LoginApiClient
from workflow_center.integrations.workflow_api import WorkflowApiClient
from workflow_center.services.console import WorkflowConsole


def get_session(request: Request) -> SessionContext:
    session = getattr(request.state, "session", None)
    if session is None or not session.is_authenticated:
        raise UnauthorizedError("No console session token")
    return session


async def get_console(
    request: Request,
    session: SessionContext = Depends(get_session),
    config: Settings = Depends(get_settings),
) -> AsyncIterator[WorkflowConsole]:
    # Tests swap in an httpx.MockTransport here.
    transport = getattr(request.app.state, "backend_transport", None)
    async with LoginApiClient(
        session, config.login_api_base_url, timeout=config.login_api_timeout, transport=transport
    ) as login_api, WorkflowApiClient(
        session, config.workflow_api_base_url, timeout=config.workflow_api_timeout, transport=transport
    ) as workflow_api:
        yield WorkflowConsole(login_api, workflow_api)


__all__ = ["get_console", "get_session"]
