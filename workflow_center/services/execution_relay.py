"""
Execution relay: builds the execution request for a workflow, submits it
through the workflow service and keeps the last redacted request/response
trace for display.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

from workflow_center.core.exceptions import ApiError, ExecutionInFlightError
from workflow_center.core.security import bearer, is_authorization_header, redact_bearer
from workflow_center.integrations.workflow_api import WorkflowApiClient
from workflow_center.schemas.workflow import ExecutionRequest, ExecutionResult, Workflow
from workflow_center.services.json_fields import parse_json_text, pretty_json

logger = logging.getLogger(__name__)

INVALID_PARAMETERS = "Invalid JSON in parameters"
EXECUTION_FAILED = "Failed to execute workflow"


def build_headers(workflow: Workflow) -> Dict[str, str]:
    """Defaults, then the record's headers; Authorization always comes from bearer_token.

    Only a JSON object of stored headers is merged; any other stored value is ignored.
    """
    headers = {
        "Authorization": bearer(workflow.bearer_token),
        "Content-Type": "application/json",
    }
    stored = workflow.headers if isinstance(workflow.headers, dict) else {}
    for name, value in stored.items():
        if is_authorization_header(name):
            continue
        headers[name] = value
    return headers


def redact_result(result: ExecutionResult) -> ExecutionResult:
    """Mask the Authorization request header; nothing else is touched."""
    headers = {
        name: redact_bearer(value) if is_authorization_header(name) else value
        for name, value in result.request.headers.items()
    }
    request = result.request.model_copy(update={"headers": headers})
    return result.model_copy(update={"request": request})


class ExecutionRelay:
    """One execution surface for one workflow; at most one call in flight."""

    def __init__(self, workflow: Workflow, client: WorkflowApiClient):
        self.workflow = workflow
        self.client = client
        self.parameters_text = pretty_json(workflow.parameters)
        self.result: Optional[ExecutionResult] = None
        self.error: Optional[str] = None
        self.in_flight = False

    def restore(self, result: ExecutionResult) -> None:
        """Show a result carried over from an earlier page, redacted again."""
        self.result = redact_result(result)

    @property
    def can_execute(self) -> bool:
        return not self.in_flight

    @property
    def headers(self) -> Dict[str, str]:
        return build_headers(self.workflow)

    def build_request(self, parameters_text: Optional[str] = None) -> ExecutionRequest:
        """Raises ValueError when the parameter text is not JSON."""
        text = self.parameters_text if parameters_text is None else parameters_text
        parsed = parse_json_text(text)
        if not parsed.ok:
            raise ValueError(f"{INVALID_PARAMETERS}: {parsed.error}")
        return ExecutionRequest(parameters=parsed.value, headers=self.headers)

    async def execute(self, parameters_text: Optional[str] = None) -> Optional[ExecutionResult]:
        """Run the workflow once.

        Returns the redacted result, or None with ``error`` set. Invalid JSON never
        reaches the network. A failure leaves the previous ``result`` in place.
        ``UnauthorizedError`` is not handled here.
        """
        if self.in_flight:
            raise ExecutionInFlightError(f"Workflow {self.workflow.workflow_id} is already executing")
        if parameters_text is not None:
            self.parameters_text = parameters_text
        self.error = None

        try:
            request = self.build_request()
        except ValueError as exc:
            self.error = str(exc)
            return None

        self.in_flight = True
        try:
            result = await self.client.execute_workflow(self.workflow.workflow_id, request)
        except ApiError as exc:
            logger.error("Execution of workflow %s failed: %s", self.workflow.workflow_id, exc.message)
            self.error = exc.message or EXECUTION_FAILED
            return None
        finally:
            self.in_flight = False

        self.result = redact_result(result)
        return self.result

    def display(self) -> Dict[str, Any]:
        """Template-ready view of the last result."""
        if self.result is None:
            return {}
        response = self.result.response
        return {
            "request": pretty_json(self.result.request.model_dump(mode="json")),
            "status": response.status,
            "status_text": response.status_text,
            "is_success": response.is_success,
            "body": response.body if isinstance(response.body, str) else json.dumps(response.body, indent=2, ensure_ascii=False),
        }
