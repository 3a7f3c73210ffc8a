"""Backend API clients."""

from .base import BaseApiClient
from .login_api import LoginApiClient
from .workflow_api import WorkflowApiClient

__all__ = [
    "BaseApiClient",
    "LoginApiClient",
    "WorkflowApiClient",
]
