from __future__ import annotations

from typing import Any, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from workflow_center.api.dependencies import get_console
from workflow_center.api.templating import templates
from workflow_center.schemas.workflow import HTTP_METHODS, TEMPLATE_NAMES, WORKFLOW_SOURCES
from workflow_center.services.console import (
    Action,
    AppState,
    DeleteWorkflow,
    HideWorkflow,
    LoadProjects,
    OpenCreateForm,
    OpenEditForm,
    ShareWorkflow,
    SubmitForm,
    WorkflowConsole,
)

router = APIRouter()


def list_url(project_id: Optional[str]) -> str:
    if not project_id:
        return "/workflows"
    return f"/workflows?{urlencode({'project_id': project_id})}"


def page_context(state: AppState, **extra: Any) -> dict[str, Any]:
    context: dict[str, Any] = {
        "state": state,
        "projects": state.projects,
        "selected_project": state.selected_project,
        "project_id": state.project_id,
        "error": state.error,
        "list_view": state.list_view(),
        "list_url": list_url(state.project_id),
    }
    context.update(extra)
    return context


def render_list(request: Request, state: AppState, status_code: int = 200) -> Response:
    return templates.TemplateResponse(request, "workflows.html", page_context(state), status_code=status_code)


def render_form(request: Request, state: AppState, status_code: int = 200) -> Response:
    return templates.TemplateResponse(
        request,
        "workflow_form.html",
        page_context(
            state,
            form=state.form,
            sources=WORKFLOW_SOURCES,
            template_names=TEMPLATE_NAMES,
            http_methods=HTTP_METHODS,
        ),
        status_code=status_code,
    )


async def load(console: WorkflowConsole, project_id: Optional[str]) -> AppState:
    return await console.dispatch(LoadProjects(preferred_project_id=project_id))


async def mutate(request: Request, console: WorkflowConsole, project_id: Optional[str], action: Action) -> Response:
    state = await load(console, project_id)
    if state.error:
        return render_list(request, state)
    state = await console.dispatch(action)
    if state.error:
        return render_list(request, state)
    return RedirectResponse(url=list_url(state.project_id), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", include_in_schema=False)
async def root() -> RedirectResponse:
    return RedirectResponse(url="/workflows", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/workflows", response_class=HTMLResponse)
async def workflow_list(
    request: Request,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    state = await load(console, project_id)
    return render_list(request, state)


@router.get("/workflows/new", response_class=HTMLResponse)
async def new_workflow(
    request: Request,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    await load(console, project_id)
    state = await console.dispatch(OpenCreateForm())
    return render_form(request, state)


@router.post("/workflows", response_class=HTMLResponse)
async def create_workflow(
    request: Request,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    values = dict(await request.form())
    await load(console, project_id)
    await console.dispatch(OpenCreateForm())
    return await submit(request, console, values)


@router.get("/workflows/{workflow_id}/edit", response_class=HTMLResponse)
async def edit_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    await load(console, project_id)
    state = await console.dispatch(OpenEditForm(workflow_id=workflow_id))
    return render_form(request, state)


@router.post("/workflows/{workflow_id}", response_class=HTMLResponse)
async def update_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    values = dict(await request.form())
    await load(console, project_id)
    await console.dispatch(OpenEditForm(workflow_id=workflow_id))
    return await submit(request, console, values)


async def submit(request: Request, console: WorkflowConsole, values: dict[str, Any]) -> Response:
    state = await console.dispatch(SubmitForm(values=values))
    if state.form is not None:
        code = status.HTTP_422_UNPROCESSABLE_ENTITY if state.form.errors else status.HTTP_502_BAD_GATEWAY
        return render_form(request, state, status_code=code)
    return RedirectResponse(url=list_url(state.project_id), status_code=status.HTTP_303_SEE_OTHER)


@router.post("/workflows/{workflow_id}/delete")
async def delete_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    console: WorkflowConsole = Depends(get_console),
):
    return await mutate(request, console, project_id, DeleteWorkflow(workflow_id=workflow_id))


@router.post("/workflows/{workflow_id}/share")
async def share_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    is_shared: bool = Form(...),
    console: WorkflowConsole = Depends(get_console),
):
    return await mutate(request, console, project_id, ShareWorkflow(workflow_id=workflow_id, is_shared=is_shared))


@router.post("/workflows/{workflow_id}/hide")
async def hide_workflow(
    request: Request,
    workflow_id: str,
    project_id: Optional[str] = None,
    is_hidden: bool = Form(True),
    console: WorkflowConsole = Depends(get_console),
):
    return await mutate(request, console, project_id, HideWorkflow(workflow_id=workflow_id, is_hidden=is_hidden))
