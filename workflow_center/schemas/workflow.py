from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

WorkflowSource = Literal["coze", "n8n"]
TemplateName = Literal["workflow", "streamflow"]
HttpMethod = Literal["GET", "POST", "PUT"]

WORKFLOW_SOURCES: tuple[str, ...] = ("coze", "n8n")
TEMPLATE_NAMES: tuple[str, ...] = ("workflow", "streamflow")
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT")


class Workflow(BaseModel):
    """Workflow record as returned by the workflow service."""

    model_config = ConfigDict(extra="ignore")

    workflow_id: str
    workflow_name: str
    description: str = ""
    source: WorkflowSource = "coze"
    template_name: TemplateName = "workflow"
    http_method: HttpMethod = "POST"
    base_url: str
    bearer_token: str = ""
    external_workflow_id: str = ""
    # Stored as raw JSON; any JSON value may come back.
    parameters: Any = Field(default_factory=dict)
    headers: Any = Field(default_factory=dict)
    is_shared: bool = False
    is_hidden: bool = False
    project_id: str
    creator_did: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("parameters", "headers", mode="before")
    @classmethod
    def empty_mapping(cls, value: Any) -> Any:
        """The backend may send null for either field."""
        return {} if value is None else value

    @field_validator("headers")
    @classmethod
    def stringify_header_values(cls, value: Any) -> Any:
        if isinstance(value, dict):
            return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}
        return value


class WorkflowPayload(BaseModel):
    """Body of a create or update request built by the workflow form."""

    workflow_name: str
    description: str
    source: WorkflowSource
    template_name: TemplateName
    http_method: HttpMethod
    base_url: str
    bearer_token: str
    external_workflow_id: str
    parameters: Any = Field(default_factory=dict)
    headers: Any = Field(default_factory=dict)
    project_id: str | None = None


class ExecutionRequest(BaseModel):
    parameters: Any
    headers: dict[str, str]


class RequestInfo(BaseModel):
    method: str = ""
    url: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None


class ResponseInfo(BaseModel):
    status: int
    status_text: str = ""
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @property
    def is_success(self) -> bool:
        return self.status < 400


class ExecutionResult(BaseModel):
    request: RequestInfo
    response: ResponseInfo


class ShareRequest(BaseModel):
    is_shared: bool


class HideRequest(BaseModel):
    is_hidden: bool
