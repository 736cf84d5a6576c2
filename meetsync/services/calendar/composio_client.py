"""
Composio API client for the Google Calendar integration.
Executes calendar actions on behalf of a user's entity and drives the OAuth
connection handshake. Low-level: returns raw dicts, raises ProviderError.
"""

import asyncio
from dataclasses import dataclass
from typing import Any

import httpx

from meetsync.config import Settings
from meetsync.infrastructure.observability.logging import get_logger
from meetsync.services.errors import ProviderError, ProviderGenericError

logger = get_logger(__name__)

MAX_RETRIES = 3
BACKOFF_FACTOR = 1.0
RETRY_STATUS_CODES = {500, 502, 503, 504}


@dataclass
class AuthorizationRequest:
    redirect_url: str
    connection_id: str
    status: str | None = None


class ComposioClient:
    """
    Client for Composio action execution and connected accounts.

    Retries transient 5xx/network failures with backoff; every other failure
    is raised as the matching ProviderError subclass for the classifier.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str,
        app_name: str = "googlecalendar",
        timeout: float = 30.0,
        max_retries: int = MAX_RETRIES,
        backoff_factor: float = BACKOFF_FACTOR,
    ):
        self.base_url = base_url.rstrip("/")
        self.app_name = app_name
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor
        self._client = self._create_client(api_key, timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "ComposioClient":
        return cls(
            api_key=settings.COMPOSIO_API_KEY,
            base_url=settings.COMPOSIO_BASE_URL,
            app_name=settings.COMPOSIO_APP_NAME,
            timeout=settings.COMPOSIO_TIMEOUT_SECONDS,
        )

    def _create_client(self, api_key: str, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=50),
            headers={
                "x-api-key": api_key,
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _request_with_retry(self, method: str, path: str, **kwargs) -> httpx.Response:
        url = f"{self.base_url}{path}"
        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self._client.request(method, url, **kwargs)
            except httpx.RequestError as e:
                if attempt >= self.max_retries:
                    raise ProviderGenericError(f"Calendar provider unreachable: {e}") from e
                backoff = self.backoff_factor * (2 ** (attempt - 1))
                logger.debug(
                    "Composio request error, retrying",
                    attempt=attempt,
                    error=str(e),
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
                continue

            if response.status_code in RETRY_STATUS_CODES and attempt < self.max_retries:
                backoff = self.backoff_factor * (2 ** (attempt - 1))
                logger.debug(
                    "Composio retrying request",
                    attempt=attempt,
                    status_code=response.status_code,
                    backoff_seconds=backoff,
                )
                await asyncio.sleep(backoff)
                continue
            return response

        raise RuntimeError("Composio retry loop exhausted")

    def _handle_api_response(self, response: httpx.Response, operation: str) -> dict:
        """
        Parse a Composio response.

        Raises:
            ProviderError: subclass chosen from status code and error code
        """
        if response.is_success:
            try:
                data = response.json() if response.text else {}
            except ValueError as e:
                raise ProviderGenericError(f"Invalid response format from {operation}: {e}") from e
            if not isinstance(data, dict):
                raise ProviderGenericError(
                    f"Invalid response format from {operation}: expected object, got {type(data).__name__}"
                )
            return data

        try:
            error_data = response.json() if response.text else {}
        except ValueError:
            error_data = {}
        if not isinstance(error_data, dict):
            error_data = {}

        error_info = error_data.get("error") if isinstance(error_data.get("error"), dict) else error_data
        error_code = error_info.get("errCode") or error_info.get("code")
        error_message = error_info.get("message") or f"HTTP {response.status_code}"

        logger.debug(
            f"Composio {operation} failed",
            status_code=response.status_code,
            error_code=error_code,
            error_message=error_message,
        )

        raise ProviderError.from_status(
            f"Composio {operation} failed: {error_message}",
            status_code=response.status_code,
            error_code=str(error_code) if error_code is not None else None,
            response_data=error_data,
        )

    async def execute_action(
        self, entity_id: str, action: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """Run one provider action for the entity and return the raw response body."""
        body = {"entityId": entity_id, "appName": self.app_name, "input": params}
        response = await self._request_with_retry(
            "POST", f"/v2/actions/{action}/execute", json=body
        )
        data = self._handle_api_response(response, action)

        # The v2 API spells it "successfull"
        successful = data.get("successful", data.get("successfull", True))
        if successful is False:
            raise ProviderGenericError(
                f"Composio action {action} reported failure: {data.get('error')}",
                response_data=data,
            )
        return data

    async def get_entity(self, entity_id: str) -> dict[str, Any]:
        """Connected accounts for the entity on this app."""
        response = await self._request_with_retry(
            "GET",
            "/v1/connectedAccounts",
            params={"user_uuid": entity_id, "appNames": self.app_name, "showActiveOnly": "true"},
        )
        data = self._handle_api_response(response, "get_entity")
        return {"entity_id": entity_id, "connections": data.get("items", [])}

    async def initiate_connection(self, entity_id: str, redirect_url: str) -> AuthorizationRequest:
        response = await self._request_with_retry(
            "POST",
            "/v1/connectedAccounts",
            json={"entityId": entity_id, "appName": self.app_name, "redirectUri": redirect_url},
        )
        data = self._handle_api_response(response, "initiate_connection")
        return AuthorizationRequest(
            redirect_url=data.get("redirectUrl", ""),
            connection_id=data.get("connectedAccountId", ""),
            status=data.get("connectionStatus"),
        )

    async def complete_connection(
        self, entity_id: str, code: str, connection_id: str | None
    ) -> dict[str, Any]:
        """Hand the OAuth code back and return the resulting connected account."""
        response = await self._request_with_retry(
            "GET",
            f"/v1/connectedAccounts/{connection_id}",
            params={"entityId": entity_id, "code": code},
        )
        return self._handle_api_response(response, "complete_connection")
