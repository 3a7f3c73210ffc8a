import json
import os
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault('APP_ENV', 'test')
os.environ.setdefault('WORKFLOW_API_BASE_URL', 'http://workflow.test')
os.environ.setdefault('LOGIN_API_BASE_URL', 'http://login.test')
os.environ.setdefault('LOGIN_REDIRECT_URL', 'http://login.test/dashboard')

from workflow_center.core.session import MemoryTokenStorage, SessionContext  # noqa: E402
from workflow_center.integrations.login_api import LoginApiClient  # noqa: E402
from workflow_center.integrations.workflow_api import WorkflowApiClient  # noqa: E402

CONSOLE_TOKEN = 'console-token'

ADMIN_PROJECT = {'project_id': 'p-admin', 'project_name': 'Ops', 'role': 'admin'}
MEMBER_PROJECT = {'project_id': 'p-member', 'project_name': 'Sales', 'role': 'member'}


def workflow_record(**overrides):
    record = {
        'workflow_id': 'wf-1',
        'workflow_name': 'Daily digest',
        'description': 'Summarise yesterday',
        'source': 'coze',
        'template_name': 'workflow',
        'http_method': 'POST',
        'base_url': 'https://api.coze.example/v1/workflow/run',
        'bearer_token': 'secret-123',
        'external_workflow_id': '7345',
        'parameters': {'topic': 'news'},
        'headers': {'X-Trace': 'on'},
        'is_shared': False,
        'project_id': 'p-admin',
    }
    record.update(overrides)
    return record


def ok(data=None, status_code=200):
    return httpx.Response(status_code, json={'success': True, 'data': data})


def fail(message, status_code):
    return httpx.Response(status_code, json={'success': False, 'error': message})


class FakeBackend:
    """Routes (method, path) to canned responses and records every request."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def on(self, method, path, response):
        self.routes[(method, path)] = response
        return self

    def handle(self, request):
        self.calls.append(request)
        response = self.routes.get((request.method, request.url.path))
        if response is None:
            return fail('not found', 404)
        if callable(response):
            return response(request)
        return response

    @property
    def transport(self):
        return httpx.MockTransport(self.handle)

    def requests(self, method, path):
        return [c for c in self.calls if c.method == method and c.url.path == path]

    def body(self, method, path, index=-1):
        return json.loads(self.requests(method, path)[index].content)


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def session():
    storage = MemoryTokenStorage({'xzero_token': CONSOLE_TOKEN})
    ctx = SessionContext(storage)
    ctx.bootstrap()
    return ctx


@pytest.fixture
def workflow_api(session, backend):
    return WorkflowApiClient(session, 'http://workflow.test', transport=backend.transport)


@pytest.fixture
def login_api(session, backend):
    return LoginApiClient(session, 'http://login.test', transport=backend.transport)
