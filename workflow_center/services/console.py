"""
Console state and command interface.

Route handlers never mutate state directly: they build an ``Action`` and call
``WorkflowConsole.dispatch``, which talks to the backends and returns the
updated ``AppState``. Load failures land in ``AppState.error`` (the global
banner); form and execution failures stay on the form or relay.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Type

from workflow_center.core.exceptions import (
    ApiError,
    PermissionDeniedError,
    ValidationError,
    WorkflowNotFoundError,
)
from workflow_center.integrations.login_api import LoginApiClient
from workflow_center.integrations.workflow_api import WorkflowApiClient
from workflow_center.schemas.project import Project, Role
from workflow_center.schemas.workflow import ExecutionResult, Workflow
from workflow_center.services.execution_relay import ExecutionRelay
from workflow_center.services.workflow_form import WorkflowForm
from workflow_center.services.workflow_list import WorkflowListView, build_list

logger = logging.getLogger(__name__)


@dataclass
class AppState:
    projects: List[Project] = field(default_factory=list)
    selected_project: Optional[Project] = None
    workflows: List[Workflow] = field(default_factory=list)
    loading: bool = False
    error: Optional[str] = None
    form: Optional[WorkflowForm] = None
    relay: Optional[ExecutionRelay] = None

    @property
    def role(self) -> Role:
        return self.selected_project.role if self.selected_project else Role.MEMBER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @property
    def project_id(self) -> Optional[str]:
        return self.selected_project.project_id if self.selected_project else None

    def list_view(self) -> WorkflowListView:
        return build_list(self.workflows, self.role)


@dataclass(frozen=True)
class Action:
    pass


@dataclass(frozen=True)
class LoadProjects(Action):
    preferred_project_id: Optional[str] = None


@dataclass(frozen=True)
class SelectProject(Action):
    project_id: str


@dataclass(frozen=True)
class RefreshWorkflows(Action):
    pass


@dataclass(frozen=True)
class OpenCreateForm(Action):
    pass


@dataclass(frozen=True)
class OpenEditForm(Action):
    workflow_id: str


@dataclass(frozen=True)
class SubmitForm(Action):
    values: Mapping[str, Any]


@dataclass(frozen=True)
class CloseForm(Action):
    pass


@dataclass(frozen=True)
class OpenExecution(Action):
    workflow_id: str


@dataclass(frozen=True)
class ExecuteWorkflow(Action):
    parameters_text: Optional[str] = None
    previous_result: Optional[ExecutionResult] = None


@dataclass(frozen=True)
class CloseExecution(Action):
    pass


@dataclass(frozen=True)
class DeleteWorkflow(Action):
    workflow_id: str


@dataclass(frozen=True)
class ShareWorkflow(Action):
    workflow_id: str
    is_shared: bool


@dataclass(frozen=True)
class HideWorkflow(Action):
    workflow_id: str
    is_hidden: bool = True


@dataclass(frozen=True)
class DismissError(Action):
    pass


ADMIN_ONLY: tuple[Type[Action], ...] = (
    OpenCreateForm,
    OpenEditForm,
    SubmitForm,
    DeleteWorkflow,
    ShareWorkflow,
    HideWorkflow,
)


class WorkflowConsole:
    """Owns the ``AppState`` and applies actions to it one at a time."""

    def __init__(
        self,
        login_api: LoginApiClient,
        workflow_api: WorkflowApiClient,
        state: Optional[AppState] = None,
    ):
        self.login_api = login_api
        self.workflow_api = workflow_api
        self.state = state or AppState()
        self._handlers: Dict[Type[Action], Callable[[Any], Awaitable[None]]] = {
            LoadProjects: self._load_projects,
            SelectProject: self._select_project,
            RefreshWorkflows: self._refresh_workflows,
            OpenCreateForm: self._open_create_form,
            OpenEditForm: self._open_edit_form,
            SubmitForm: self._submit_form,
            CloseForm: self._close_form,
            OpenExecution: self._open_execution,
            ExecuteWorkflow: self._execute,
            CloseExecution: self._close_execution,
            DeleteWorkflow: self._delete_workflow,
            ShareWorkflow: self._share_workflow,
            HideWorkflow: self._hide_workflow,
            DismissError: self._dismiss_error,
        }

    async def dispatch(self, action: Action) -> AppState:
        handler = self._handlers.get(type(action))
        if handler is None:
            raise TypeError(f"Unsupported action: {type(action).__name__}")
        if isinstance(action, ADMIN_ONLY) and not self.state.is_admin:
            raise PermissionDeniedError(f"{type(action).__name__} requires the admin role")
        await handler(action)
        return self.state

    def find_workflow(self, workflow_id: str) -> Workflow:
        for workflow in self.state.workflows:
            if workflow.workflow_id == workflow_id:
                return workflow
        raise WorkflowNotFoundError(f"Workflow {workflow_id} not found")

    async def _load_projects(self, action: LoadProjects) -> None:
        self.state.loading = True
        try:
            self.state.projects = await self.login_api.get_projects()
        except ApiError as exc:
            self.state.error = exc.message or "Failed to load projects"
            return
        finally:
            self.state.loading = False

        if self.state.projects:
            preferred = next(
                (p for p in self.state.projects if p.project_id == action.preferred_project_id),
                self.state.projects[0],
            )
            await self._select(preferred)
        else:
            self.state.selected_project = None
            self.state.workflows = []

    async def _select_project(self, action: SelectProject) -> None:
        project = next((p for p in self.state.projects if p.project_id == action.project_id), None)
        if project is None:
            self.state.error = f"Project {action.project_id} is not available"
            return
        await self._select(project)

    async def _select(self, project: Project) -> None:
        self.state.selected_project = project
        self.state.form = None
        self.state.relay = None
        await self._refresh_workflows(RefreshWorkflows())

    async def _refresh_workflows(self, action: RefreshWorkflows) -> None:
        project_id = self.state.project_id
        if not project_id:
            self.state.workflows = []
            return
        self.state.loading = True
        try:
            self.state.workflows = await self.workflow_api.list_workflows(project_id)
        except ApiError as exc:
            self.state.error = exc.message or "Failed to load workflows"
        finally:
            self.state.loading = False

    async def _open_create_form(self, action: OpenCreateForm) -> None:
        self.state.relay = None
        self.state.form = WorkflowForm.for_create(self.state.project_id)

    async def _open_edit_form(self, action: OpenEditForm) -> None:
        workflow = self.find_workflow(action.workflow_id)
        self.state.relay = None
        self.state.form = WorkflowForm.from_workflow(workflow, self.state.project_id)

    async def _submit_form(self, action: SubmitForm) -> None:
        form = self.state.form
        if form is None:
            form = self.state.form = WorkflowForm.for_create(self.state.project_id)
        form.submit_error = None
        form.update(action.values)
        try:
            payload = form.to_payload()
        except ValidationError:
            return

        try:
            if form.is_edit:
                await self.workflow_api.update_workflow(form.workflow_id, payload)
            else:
                await self.workflow_api.create_workflow(payload)
        except ApiError as exc:
            form.submit_error = exc.message or "Failed to save workflow"
            return

        logger.info("Workflow %s saved", form.workflow_id or payload.workflow_name)
        self.state.form = None
        await self._refresh_workflows(RefreshWorkflows())

    async def _close_form(self, action: CloseForm) -> None:
        self.state.form = None

    async def _open_execution(self, action: OpenExecution) -> None:
        workflow = self.find_workflow(action.workflow_id)
        self.state.form = None
        self.state.relay = ExecutionRelay(workflow, self.workflow_api)

    async def _execute(self, action: ExecuteWorkflow) -> None:
        if self.state.relay is None:
            raise WorkflowNotFoundError("No workflow selected for execution")
        relay = self.state.relay
        if action.previous_result is not None and relay.result is None:
            relay.restore(action.previous_result)
        await relay.execute(action.parameters_text)

    async def _close_execution(self, action: CloseExecution) -> None:
        self.state.relay = None

    async def _delete_workflow(self, action: DeleteWorkflow) -> None:
        await self._mutate(
            self.workflow_api.delete_workflow(action.workflow_id),
            "Failed to delete workflow",
        )

    async def _share_workflow(self, action: ShareWorkflow) -> None:
        await self._mutate(
            self.workflow_api.share_workflow(action.workflow_id, action.is_shared),
            "Failed to share workflow",
        )

    async def _hide_workflow(self, action: HideWorkflow) -> None:
        project_id = self.state.project_id
        if not project_id:
            self.state.error = "Select a project first"
            return
        await self._mutate(
            self.workflow_api.hide_workflow(project_id, action.workflow_id, action.is_hidden),
            "Failed to hide workflow",
        )

    async def _mutate(self, call: Awaitable[Any], fallback: str) -> None:
        try:
            await call
        except ApiError as exc:
            self.state.error = exc.message or fallback
            return
        await self._refresh_workflows(RefreshWorkflows())

    async def _dismiss_error(self, action: DismissError) -> None:
        self.state.error = None
