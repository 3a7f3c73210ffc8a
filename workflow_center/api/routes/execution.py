from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, Response
from pydantic import ValidationError as ModelValidationError

from workflow_center.api.dependencies import get_console
from workflow_center.api.routes.workflows import load, page_context
from workflow_center.api.templating import templates
from workflow_center.core.security import redact_bearer
from workflow_center.schemas.workflow import ExecutionResult
from workflow_center.services.console import AppState, ExecuteWorkflow, OpenExecution, WorkflowConsole

logger = logging.getLogger(__name__)

router = APIRouter()


def render_execution(request: Request, state: AppState) -> Response:
    relay = state.relay
    headers = {name: redact_bearer(value) for name, value in relay.headers.items()}
    return templates.TemplateResponse(
        request,
        "execute.html",
        page_context(
            state,
            relay=relay,
            workflow=relay.workflow,
            headers=headers,
            result=relay.display(),
        ),
    )


@router.get("/workflows/{workflow_id}/execute", response_class=HTMLResponse)
async def execution_page(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    await load(console, project_id)
    state = await console.dispatch(OpenExecution(workflow_id=workflow_id))
    return render_execution(request, state)


def carried_result(text: Optional[str]) -> Optional[ExecutionResult]:
    """The last result the page was showing, posted back in a hidden field."""
    if not text:
        return None
    try:
        return ExecutionResult.model_validate_json(text)
    except ModelValidationError:
        logger.debug("Ignoring unreadable carried execution result")
        return None


@router.post("/workflows/{workflow_id}/execute", response_class=HTMLResponse)
async def execute_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    parameters: Optional[str] = Form(None),
    previous_result: Optional[str] = Form(None),
    console: WorkflowConsole = Depends(get_console),
):
    await load(console, project_id)
    await console.dispatch(OpenExecution(workflow_id=workflow_id))
    state = await console.dispatch(
        ExecuteWorkflow(parameters_text=parameters, previous_result=carried_result(previous_result))
    )
    return render_execution(request, state)
