"""
Workflow form state: editable text fields, validation and payload building
for create and update.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from workflow_center.core.exceptions import ValidationError
from workflow_center.schemas.workflow import (
    HTTP_METHODS,
    TEMPLATE_NAMES,
    WORKFLOW_SOURCES,
    Workflow,
    WorkflowPayload,
)
from workflow_center.services.json_fields import parse_json_text, pretty_json

REQUIRED_FIELDS: Dict[str, str] = {
    "workflow_name": "Workflow name is required",
    "description": "Description is required",
    "base_url": "Base URL is required",
    "bearer_token": "Bearer token is required",
    "external_workflow_id": "Workflow ID is required",
}
JSON_FIELDS = ("parameters", "headers")
CHOICE_FIELDS: Dict[str, tuple[str, ...]] = {
    "source": WORKFLOW_SOURCES,
    "template_name": TEMPLATE_NAMES,
    "http_method": HTTP_METHODS,
}
INVALID_JSON = "Invalid JSON format"


@dataclass
class WorkflowForm:
    workflow_name: str = ""
    description: str = ""
    source: str = "coze"
    template_name: str = "workflow"
    http_method: str = "POST"
    base_url: str = ""
    bearer_token: str = ""
    external_workflow_id: str = ""
    parameters: str = "{}"
    headers: str = "{}"
    project_id: Optional[str] = None
    workflow_id: Optional[str] = None
    errors: Dict[str, str] = field(default_factory=dict)
    submit_error: Optional[str] = None

    @classmethod
    def for_create(cls, project_id: Optional[str]) -> "WorkflowForm":
        return cls(project_id=project_id)

    @classmethod
    def from_workflow(cls, workflow: Workflow, project_id: Optional[str] = None) -> "WorkflowForm":
        return cls(
            workflow_name=workflow.workflow_name,
            description=workflow.description,
            source=workflow.source,
            template_name=workflow.template_name,
            http_method=workflow.http_method,
            base_url=workflow.base_url,
            bearer_token=workflow.bearer_token,
            external_workflow_id=workflow.external_workflow_id,
            parameters=pretty_json(workflow.parameters),
            headers=pretty_json(workflow.headers),
            project_id=project_id or workflow.project_id,
            workflow_id=workflow.workflow_id,
        )

    @property
    def is_edit(self) -> bool:
        return bool(self.workflow_id)

    def update(self, values: Mapping[str, Any]) -> None:
        """Apply submitted text values; a changed field loses its previous error."""
        for name in self.editable_fields():
            if name in values and values[name] is not None:
                setattr(self, name, str(values[name]))
                self.errors.pop(name, None)

    @classmethod
    def editable_fields(cls) -> tuple[str, ...]:
        skip = {"project_id", "workflow_id", "errors", "submit_error"}
        return tuple(f.name for f in fields(cls) if f.name not in skip)

    def validate(self) -> Dict[str, str]:
        """Collect every field error at once and keep them on the form."""
        errors: Dict[str, str] = {}
        for name, message in REQUIRED_FIELDS.items():
            if not getattr(self, name).strip():
                errors[name] = message
        for name, allowed in CHOICE_FIELDS.items():
            if getattr(self, name) not in allowed:
                errors[name] = f"Must be one of: {', '.join(allowed)}"
        for name in JSON_FIELDS:
            if not parse_json_text(getattr(self, name)).ok:
                errors[name] = INVALID_JSON
        self.errors = errors
        return errors

    @property
    def is_valid(self) -> bool:
        return not self.validate()

    def to_payload(self) -> WorkflowPayload:
        errors = self.validate()
        if errors:
            raise ValidationError(errors)
        return WorkflowPayload(
            workflow_name=self.workflow_name,
            description=self.description,
            source=self.source,
            template_name=self.template_name,
            http_method=self.http_method,
            base_url=self.base_url,
            bearer_token=self.bearer_token,
            external_workflow_id=self.external_workflow_id,
            parameters=parse_json_text(self.parameters).value,
            headers=parse_json_text(self.headers).value,
            project_id=self.project_id,
        )
