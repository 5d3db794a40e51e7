"""Async client for the remote CV API."""

from typing import Any, Dict, Optional

import httpx
from loguru import logger

from cvbuilder.config import get_settings
from cvbuilder.errors import RemoteAPIError
from cvbuilder.models.cv_models import CVContent

NETWORK_ERROR_MESSAGE = "Could not reach the CV service. Check your connection and try again."
SERVER_ERROR_MESSAGE = "The CV service is having trouble right now. Please try again later."


class CVApiClient:
    """
    Client for the CRUD endpoints under ``/api``.

    Every failure surfaces as ``RemoteAPIError`` carrying a message fit for
    the user; transport exceptions never escape.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the API client.

        Args:
            base_url: Server URL. Defaults to the configured api_base_url
            timeout: Request timeout in seconds
            transport: Optional httpx transport (e.g. ASGITransport in tests)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=self.transport)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.request(method, f"/api{path}", **kwargs)
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RemoteAPIError(None, NETWORK_ERROR_MESSAGE) from e

        if response.is_success:
            try:
                return response.json()
            except ValueError as e:
                logger.warning(f"{method} {path} returned a non-JSON body: {e}")
                raise RemoteAPIError(response.status_code, SERVER_ERROR_MESSAGE) from e

        raise self._error_for(response)

    @staticmethod
    def _error_for(response: httpx.Response) -> RemoteAPIError:
        status_code = response.status_code
        try:
            body = response.json()
        except ValueError:
            body = {}
        detail = body.get("detail") if isinstance(body, dict) else None
        if isinstance(detail, dict):
            message = detail.get("message")
            errors = detail.get("errors") or []
            if errors:
                message = f"{message}: {'; '.join(errors)}"
        else:
            message = detail

        logger.warning(f"CV API returned {status_code}: {message}")
        if status_code == 404:
            return RemoteAPIError(status_code, message or "CV not found")
        if 400 <= status_code < 500:
            return RemoteAPIError(status_code, message or "The request was rejected by the CV service")
        return RemoteAPIError(status_code, SERVER_ERROR_MESSAGE)

    async def create_cv(self, user_id: str, cv: CVContent, template: Optional[str] = None) -> str:
        """
        Save a new CV for ``user_id``.

        Returns:
            str: The id assigned by the server
        """
        payload = {"userId": user_id, "cvData": cv.content_dict()}
        if template:
            payload["template"] = template
        body = await self._request("POST", "/cvs", json=payload)
        return body["cvId"]

    async def get_cv(self, cv_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/cvs/{cv_id}")

    async def update_cv(self, cv_id: str, cv: CVContent, template: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"cvData": cv.content_dict()}
        if template:
            payload["template"] = template
        return await self._request("PUT", f"/cvs/{cv_id}", json=payload)

    async def delete_cv(self, cv_id: str) -> Dict[str, Any]:
        return await self._request("DELETE", f"/cvs/{cv_id}")

    async def list_user_cvs(self, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        return await self._request("GET", f"/users/{user_id}/cvs", params={"page": page, "limit": limit})
