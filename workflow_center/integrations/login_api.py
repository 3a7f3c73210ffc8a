from __future__ import annotations

from typing import List

from workflow_center.integrations.base import BaseApiClient
from workflow_center.schemas.project import Project


class LoginApiClient(BaseApiClient):
    """Client for the external login service; only the project list is used."""

    service_name = "login-api"

    async def get_projects(self) -> List[Project]:
        data = await self._call("GET", "/api/projects")
        return [self._parse(Project, item) for item in data or []]
