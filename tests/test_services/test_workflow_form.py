from __future__ import annotations

import pytest

from conftest import workflow_record
from workflow_center.core.exceptions import ValidationError
from workflow_center.schemas.workflow import Workflow
from workflow_center.services.workflow_form import REQUIRED_FIELDS, WorkflowForm


def filled_form(**overrides):
    values = {
        'workflow_name': 'Digest',
        'description': 'Daily digest',
        'base_url': 'https://n8n.example/webhook/digest',
        'bearer_token': 'tok',
        'external_workflow_id': 'abc',
        'parameters': '{"a": 1}',
        'headers': '{"X-Env": "prod"}',
    }
    values.update(overrides)
    form = WorkflowForm.for_create('p-admin')
    form.update(values)
    return form


def test_new_form_defaults():
    form = WorkflowForm.for_create('p-admin')
    assert (form.source, form.template_name, form.http_method) == ('coze', 'workflow', 'POST')
    assert form.parameters == '{}' and form.headers == '{}'
    assert not form.is_edit


def test_valid_form_builds_parsed_payload():
    payload = filled_form().to_payload()
    assert payload.parameters == {'a': 1}
    assert payload.headers == {'X-Env': 'prod'}
    assert payload.project_id == 'p-admin'


def test_empty_form_reports_every_required_field():
    form = WorkflowForm.for_create('p-admin')
    errors = form.validate()
    assert set(errors) == set(REQUIRED_FIELDS)


def test_all_violations_are_reported_together():
    form = filled_form(workflow_name='   ', bearer_token='', parameters='{', headers='[1,')
    errors = form.validate()
    assert set(errors) == {'workflow_name', 'bearer_token', 'parameters', 'headers'}
    assert errors['parameters'] == 'Invalid JSON format'
    with pytest.raises(ValidationError) as info:
        form.to_payload()
    assert set(info.value.errors) == set(errors)


@pytest.mark.parametrize('text', ['[]', '"text"', '42', 'null', 'true'])
def test_any_json_value_is_accepted(text):
    assert filled_form(parameters=text, headers=text).validate() == {}


def test_unknown_choice_is_flagged():
    errors = filled_form(http_method='DELETE').validate()
    assert list(errors) == ['http_method']


def test_editing_a_field_clears_its_error():
    form = filled_form(description='')
    form.validate()
    assert 'description' in form.errors
    form.update({'description': 'fixed'})
    assert 'description' not in form.errors


def test_edit_form_prefills_from_record():
    workflow = Workflow.model_validate(workflow_record())
    form = WorkflowForm.from_workflow(workflow)
    assert form.is_edit
    assert form.workflow_id == 'wf-1'
    assert form.parameters == '{\n  "topic": "news"\n}'
    assert form.to_payload().headers == {'X-Trace': 'on'}
