"""
AI Workflow Center - FastAPI Application
Browser console for workflow records and their execution relay
"""
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse, Response
from contextlib import asynccontextmanager
import logging
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from workflow_center import __version__
from workflow_center.config import settings
from workflow_center.core.exceptions import (
    ApiError,
    ExecutionInFlightError,
    PermissionDeniedError,
    UnauthorizedError,
    WorkflowNotFoundError,
)
from workflow_center.api.session import SessionBootstrapMiddleware
from workflow_center.api.templating import templates
from workflow_center.api.routes import health, workflows, execution

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logging.getLogger("workflow_center").setLevel(settings.log_level)
    logger.info("Starting AI Workflow Center...")
    logger.info(f"Workflow API: {settings.workflow_api_base_url}")
    logger.info(f"Login API: {settings.login_api_base_url}")
    logger.info(f"Console running on {settings.app_env} environment")
    yield
    logger.info("Shutting down AI Workflow Center...")


app = FastAPI(
    title=settings.app_name,
    description="Console for managing and executing workflow records",
    version=__version__,
    debug=settings.app_debug,
    lifespan=lifespan,
)
app.state.backend_transport = None

app.add_middleware(SessionBootstrapMiddleware)

# Forwarded proto/host for the token-scrubbing redirect.
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def error_page(request: Request, message: str, status_code: int) -> Response:
    return templates.TemplateResponse(
        request,
        "error.html",
        {"message": message, "status_code": status_code},
        status_code=status_code,
    )


@app.exception_handler(UnauthorizedError)
async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> Response:
    """Drop the stored token and send the browser back to the login surface."""
    logger.warning(f"Unauthorized on {request.url.path}: {exc}")
    response = RedirectResponse(url=settings.login_redirect_url, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.token_storage_key)
    return response


@app.exception_handler(PermissionDeniedError)
async def permission_denied_handler(request: Request, exc: PermissionDeniedError) -> Response:
    return error_page(request, "Only project admins can do that.", status.HTTP_403_FORBIDDEN)


@app.exception_handler(WorkflowNotFoundError)
async def not_found_handler(request: Request, exc: WorkflowNotFoundError) -> Response:
    return error_page(request, str(exc), status.HTTP_404_NOT_FOUND)


@app.exception_handler(ExecutionInFlightError)
async def in_flight_handler(request: Request, exc: ExecutionInFlightError) -> Response:
    return error_page(request, str(exc), status.HTTP_409_CONFLICT)


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> Response:
    logger.error(f"Unhandled backend error on {request.url.path}: {exc.message}")
    return error_page(request, exc.message, status.HTTP_502_BAD_GATEWAY)


app.include_router(health.router, tags=["Health"])
app.include_router(workflows.router, tags=["Workflows"])
app.include_router(execution.router, tags=["Execution"])
