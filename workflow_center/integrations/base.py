from __future__ import annotations

import logging
from typing import Any, Type, TypeVar

import httpx
from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from workflow_center.core.exceptions import ApiError, UnauthorizedError
from workflow_center.core.session import SessionContext
from workflow_center.schemas.envelope import ApiEnvelope

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def error_message(body: Any, status_code: int | None = None) -> str:
    """Pick the backend-provided message out of an error body, or a generic fallback."""
    if isinstance(body, dict):
        for key in ("error", "message", "detail"):
            value = body.get(key)
            if isinstance(value, str) and value.strip():
                return value
    if isinstance(body, str) and body.strip():
        return body.strip()
    if status_code is not None:
        return f"Request failed with status {status_code}"
    return "Request failed"


class BaseApiClient:
    """Async JSON client for one console backend.

    Every request carries the session bearer token. Non-2xx responses and
    transport failures become ``ApiError``; a 401 expires the session and raises
    ``UnauthorizedError`` instead.
    """

    service_name = "backend"

    def __init__(
        self,
        session: SessionContext,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.session = session
        self.base_url = base_url.rstrip("/")
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Content-Type": "application/json"},
            timeout=timeout,
            transport=transport,
        )

    def _headers(self) -> dict[str, str]:
        return self.session.authorization_header()

    async def _request(self, method: str, path: str, json: Any = None) -> Any:
        if not self.session.is_authenticated:
            raise UnauthorizedError("No console session token")

        logger.debug("%s %s %s", self.service_name, method, path)
        try:
            response = await self.client.request(method, path, json=json, headers=self._headers())
        except httpx.HTTPError as exc:
            logger.error("%s %s %s failed: %s", self.service_name, method, path, exc)
            raise ApiError(str(exc) or type(exc).__name__) from exc

        if response.status_code == 401:
            logger.warning("%s rejected the console token on %s %s", self.service_name, method, path)
            self.session.expire()
            raise UnauthorizedError(error_message(self._json_or_text(response), 401))

        body = self._json_or_text(response)
        if response.is_error:
            message = error_message(body, response.status_code)
            logger.error("%s %s %s returned %s: %s", self.service_name, method, path, response.status_code, message)
            raise ApiError(message, status_code=response.status_code, payload=body)
        return body

    async def _call(self, method: str, path: str, json: Any = None) -> Any:
        """Issue a request and unwrap the ``{success, data}`` envelope."""
        body = await self._request(method, path, json=json)
        envelope = self._envelope(body)
        if not envelope.success:
            raise ApiError(envelope.error or error_message(body), payload=body)
        return envelope.data

    def _parse(self, model: Type[ModelT], data: Any) -> ModelT:
        try:
            return model.model_validate(data)
        except ModelValidationError as exc:
            logger.error("%s returned a malformed %s: %s", self.service_name, model.__name__, exc)
            raise ApiError(f"Unexpected response from {self.service_name}", payload=data) from exc

    def _envelope(self, body: Any) -> ApiEnvelope:
        if not isinstance(body, dict):
            raise ApiError(f"Unexpected response from {self.service_name}", payload=body)
        return self._parse(ApiEnvelope, body)

    @staticmethod
    def _json_or_text(response: httpx.Response) -> Any:
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return response.text

    async def close(self) -> None:
        await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
