from __future__ import annotations

import pytest

from conftest import ADMIN_PROJECT, MEMBER_PROJECT, fail, ok, workflow_record
from workflow_center.core.exceptions import PermissionDeniedError, WorkflowNotFoundError
from workflow_center.schemas.project import Role
from workflow_center.services.console import (
    DeleteWorkflow,
    DismissError,
    ExecuteWorkflow,
    HideWorkflow,
    LoadProjects,
    OpenCreateForm,
    OpenEditForm,
    OpenExecution,
    SelectProject,
    ShareWorkflow,
    SubmitForm,
    WorkflowConsole,
)
from workflow_center.services.workflow_list import EMPTY_STATE_MESSAGE

ADMIN_LIST = '/api/projects/p-admin/workflows'
MEMBER_LIST = '/api/projects/p-member/workflows'

VALID_FORM = {
    'workflow_name': 'New',
    'description': 'Fresh workflow',
    'source': 'n8n',
    'template_name': 'streamflow',
    'http_method': 'GET',
    'base_url': 'https://n8n.example/webhook/x',
    'bearer_token': 'tok',
    'external_workflow_id': 'x-1',
    'parameters': '{}',
    'headers': '{}',
}


@pytest.fixture
def console(login_api, workflow_api):
    return WorkflowConsole(login_api, workflow_api)


@pytest.fixture
def projects(backend):
    backend.on('GET', '/api/projects', ok([ADMIN_PROJECT, MEMBER_PROJECT]))
    backend.on('GET', ADMIN_LIST, ok([workflow_record()]))
    backend.on('GET', MEMBER_LIST, ok([workflow_record(workflow_id='wf-2', project_id='p-member')]))
    return backend


@pytest.mark.asyncio
async def test_first_project_is_selected_and_loaded(console, projects):
    state = await console.dispatch(LoadProjects())

    assert state.project_id == 'p-admin'
    assert state.role is Role.ADMIN
    assert [w.workflow_id for w in state.workflows] == ['wf-1']
    assert state.loading is False


@pytest.mark.asyncio
async def test_preferred_project_loads_only_that_list(console, projects):
    await console.dispatch(LoadProjects(preferred_project_id='p-member'))

    assert projects.requests('GET', ADMIN_LIST) == []
    assert len(projects.requests('GET', MEMBER_LIST)) == 1


@pytest.mark.asyncio
async def test_switching_project_re_evaluates_role(console, projects):
    await console.dispatch(LoadProjects())
    state = await console.dispatch(SelectProject('p-member'))

    assert state.role is Role.MEMBER
    view = state.list_view()
    assert not view.can_create
    assert all(card.action_names() == ['execute'] for card in view.cards)


@pytest.mark.asyncio
async def test_admin_sees_every_control(console, projects):
    state = await console.dispatch(LoadProjects())
    view = state.list_view()

    assert view.can_create
    assert view.cards[0].action_names() == ['execute', 'edit', 'share', 'hide', 'delete']


@pytest.mark.asyncio
@pytest.mark.parametrize(
    'action',
    [
        OpenCreateForm(),
        OpenEditForm('wf-2'),
        SubmitForm(VALID_FORM),
        DeleteWorkflow('wf-2'),
        ShareWorkflow('wf-2', True),
        HideWorkflow('wf-2'),
    ],
)
async def test_member_cannot_dispatch_admin_actions(console, projects, action):
    await console.dispatch(LoadProjects(preferred_project_id='p-member'))
    calls_before = len(projects.calls)

    with pytest.raises(PermissionDeniedError):
        await console.dispatch(action)
    assert len(projects.calls) == calls_before


@pytest.mark.asyncio
async def test_empty_project_is_not_an_error(console, backend):
    backend.on('GET', '/api/projects', ok([ADMIN_PROJECT]))
    backend.on('GET', ADMIN_LIST, ok([]))

    state = await console.dispatch(LoadProjects())

    assert state.error is None
    assert state.list_view().is_empty
    assert state.list_view().empty_message == EMPTY_STATE_MESSAGE


@pytest.mark.asyncio
async def test_no_projects_means_no_workflow_call(console, backend):
    backend.on('GET', '/api/projects', ok([]))

    state = await console.dispatch(LoadProjects())

    assert state.selected_project is None
    assert state.workflows == []
    assert [c.url.path for c in backend.calls] == ['/api/projects']


@pytest.mark.asyncio
async def test_load_failure_goes_to_global_banner(console, backend):
    backend.on('GET', '/api/projects', ok([ADMIN_PROJECT]))
    backend.on('GET', ADMIN_LIST, fail('Access denied to this project', 403))

    state = await console.dispatch(LoadProjects())
    assert state.error == 'Access denied to this project'

    state = await console.dispatch(DismissError())
    assert state.error is None


@pytest.mark.asyncio
async def test_create_then_refresh(console, projects):
    projects.on('POST', '/api/workflows', ok({'workflow_id': 'wf-3'}))
    await console.dispatch(LoadProjects())
    await console.dispatch(OpenCreateForm())

    state = await console.dispatch(SubmitForm(VALID_FORM))

    assert state.form is None
    body = projects.body('POST', '/api/workflows')
    assert body['project_id'] == 'p-admin'
    assert body['parameters'] == {}
    assert len(projects.requests('GET', ADMIN_LIST)) == 2


@pytest.mark.asyncio
async def test_invalid_submit_keeps_form_and_skips_network(console, projects):
    await console.dispatch(LoadProjects())
    await console.dispatch(OpenCreateForm())

    state = await console.dispatch(SubmitForm({**VALID_FORM, 'workflow_name': '', 'headers': '{'}))

    assert set(state.form.errors) == {'workflow_name', 'headers'}
    assert projects.requests('POST', '/api/workflows') == []


@pytest.mark.asyncio
async def test_save_failure_stays_on_the_form(console, projects):
    projects.on('PUT', '/api/workflows/wf-1', fail('Only admin or creator can update this workflow', 403))
    await console.dispatch(LoadProjects())
    await console.dispatch(OpenEditForm('wf-1'))

    state = await console.dispatch(SubmitForm({'description': 'changed'}))

    assert state.form.submit_error == 'Only admin or creator can update this workflow'
    assert state.error is None
    assert projects.body('PUT', '/api/workflows/wf-1')['description'] == 'changed'


@pytest.mark.asyncio
async def test_mutation_failure_goes_to_banner(console, projects):
    projects.on('DELETE', '/api/workflows/wf-1', fail('Failed to delete workflow', 500))
    await console.dispatch(LoadProjects())

    state = await console.dispatch(DeleteWorkflow('wf-1'))

    assert state.error == 'Failed to delete workflow'


@pytest.mark.asyncio
async def test_hide_uses_selected_project(console, projects):
    path = '/api/projects/p-admin/workflows/wf-1/hide'
    projects.on('PUT', path, ok({'is_hidden': True}))
    await console.dispatch(LoadProjects())

    await console.dispatch(HideWorkflow('wf-1'))

    assert projects.body('PUT', path) == {'is_hidden': True}


@pytest.mark.asyncio
async def test_member_can_execute(console, projects):
    execute_path = '/api/workflows/wf-2/execute'
    projects.on(
        'POST',
        execute_path,
        ok(
            {
                'request': {'headers': {'Authorization': 'Bearer secret-123'}},
                'response': {'status': 502, 'status_text': 'Bad Gateway', 'body': 'upstream down'},
            }
        ),
    )
    await console.dispatch(LoadProjects(preferred_project_id='p-member'))
    await console.dispatch(OpenExecution('wf-2'))

    state = await console.dispatch(ExecuteWorkflow('{"q": 1}'))

    assert state.relay.result.request.headers['Authorization'] == 'Bearer **********'
    assert state.relay.display()['is_success'] is False
    assert state.relay.display()['body'] == 'upstream down'


@pytest.mark.asyncio
async def test_unknown_workflow(console, projects):
    await console.dispatch(LoadProjects())
    with pytest.raises(WorkflowNotFoundError):
        await console.dispatch(OpenExecution('missing'))


@pytest.mark.asyncio
async def test_record_with_raw_json_stays_editable(console, backend):
    backend.on('GET', '/api/projects', ok([ADMIN_PROJECT]))
    backend.on(
        'GET',
        ADMIN_LIST,
        ok([workflow_record(workflow_id='wf-raw', parameters=[1, 2], headers='x'), workflow_record()]),
    )

    state = await console.dispatch(LoadProjects())
    assert state.error is None
    assert [w.workflow_id for w in state.workflows] == ['wf-raw', 'wf-1']

    state = await console.dispatch(OpenEditForm('wf-raw'))
    assert state.form.parameters == '[\n  1,\n  2\n]'
    assert state.form.headers == '"x"'
    assert state.form.validate() == {}
