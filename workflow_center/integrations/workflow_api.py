from __future__ import annotations

import logging
from typing import Any, Dict, List

from workflow_center.core.exceptions import ApiError
from workflow_center.integrations.base import BaseApiClient
from workflow_center.schemas.workflow import (
    ExecutionRequest,
    ExecutionResult,
    HideRequest,
    ShareRequest,
    Workflow,
    WorkflowPayload,
)

logger = logging.getLogger(__name__)


class WorkflowApiClient(BaseApiClient):
    """Client for the workflow storage and execution service."""

    service_name = "workflow-api"

    async def list_workflows(self, project_id: str) -> List[Workflow]:
        """Readable records of the project; an unreadable record is logged and skipped."""
        data = await self._call("GET", f"/api/projects/{project_id}/workflows")
        workflows = []
        for item in data or []:
            try:
                workflows.append(self._parse(Workflow, item))
            except ApiError:
                record_id = item.get("workflow_id") if isinstance(item, dict) else None
                logger.warning("Skipping unreadable workflow record %s in project %s", record_id, project_id)
        return workflows

    async def create_workflow(self, payload: WorkflowPayload) -> Dict[str, Any]:
        body = await self._request("POST", "/api/workflows", json=payload.model_dump(mode="json"))
        return self._saved(body)

    async def update_workflow(self, workflow_id: str, payload: WorkflowPayload) -> Dict[str, Any]:
        data = payload.model_dump(mode="json", exclude={"project_id"})
        body = await self._request("PUT", f"/api/workflows/{workflow_id}", json=data)
        return self._saved(body)

    async def delete_workflow(self, workflow_id: str) -> Any:
        return await self._call("DELETE", f"/api/workflows/{workflow_id}")

    async def execute_workflow(self, workflow_id: str, request: ExecutionRequest) -> ExecutionResult:
        logger.info("Executing workflow %s", workflow_id)
        data = await self._call(
            "POST",
            f"/api/workflows/{workflow_id}/execute",
            json=request.model_dump(mode="json"),
        )
        result = self._parse(ExecutionResult, data)
        logger.info("Workflow %s responded with %s", workflow_id, result.response.status)
        return result

    async def share_workflow(self, workflow_id: str, is_shared: bool) -> Any:
        return await self._call(
            "PUT",
            f"/api/workflows/{workflow_id}/share",
            json=ShareRequest(is_shared=is_shared).model_dump(),
        )

    async def hide_workflow(self, project_id: str, workflow_id: str, is_hidden: bool) -> Any:
        return await self._call(
            "PUT",
            f"/api/projects/{project_id}/workflows/{workflow_id}/hide",
            json=HideRequest(is_hidden=is_hidden).model_dump(),
        )

    def _saved(self, body: Any) -> Dict[str, Any]:
        # Create/update count as saved on success=true or a returned workflow_id.
        if isinstance(body, dict):
            if body.get("workflow_id"):
                return body
            if body.get("success"):
                data = body.get("data")
                return data if isinstance(data, dict) else {}
            raise ApiError(body.get("error") or "Failed to save workflow", payload=body)
        raise ApiError("Failed to save workflow", payload=body)
