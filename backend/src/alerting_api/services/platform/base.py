"""Shared HTTP plumbing for clients of remote APIs."""

import logging
from typing import Any, ClassVar

import httpx

from alerting_api.exceptions import (
    ERRORS_BY_CODE,
    AlertingAPIError,
    ConflictError,
    ForbiddenError,
    InvalidArgumentError,
    NotFoundError,
    UnauthorizedError,
    UpstreamUnavailableError,
    error_from_code,
)
from alerting_api.utils.secure_logging import log_warning

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
CONNECT_TIMEOUT = 5.0

USER_AGENT = "NotificationRuleAPI/1.0"

_ERRORS_BY_STATUS: dict[int, type[AlertingAPIError]] = {
    400: InvalidArgumentError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
}


class PlatformClient:
    """Base class for JSON-over-HTTP clients.

    All instances share one connection pool unless a client is injected.
    Error responses are translated into the local error taxonomy: a
    ``{code, message}`` body keeps its code, other 4xx statuses map by status
    and anything else means the service is unavailable.
    """

    service_name: ClassVar[str] = "platform"

    # Shared HTTP client for connection reuse
    _http_client: ClassVar[httpx.AsyncClient | None] = None

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: API root, e.g. ``http://platform:8086/api/v2``
            token: Bearer token sent with every request
            timeout: Read timeout in seconds
            client: Client to use instead of the shared one
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = httpx.Timeout(timeout, connect=min(timeout, CONNECT_TIMEOUT))
        self._client = client

    @classmethod
    def _get_http_client(cls) -> httpx.AsyncClient:
        """Get or create shared HTTP client with connection pooling."""
        if PlatformClient._http_client is None or PlatformClient._http_client.is_closed:
            PlatformClient._http_client = httpx.AsyncClient(
                timeout=httpx.Timeout(DEFAULT_TIMEOUT, connect=CONNECT_TIMEOUT),
                limits=httpx.Limits(max_connections=50, max_keepalive_connections=20),
                headers={
                    "User-Agent": USER_AGENT,
                    "Accept": "application/json",
                },
            )
        return PlatformClient._http_client

    @classmethod
    async def close_client(cls) -> None:
        """Close the shared HTTP client."""
        if PlatformClient._http_client and not PlatformClient._http_client.is_closed:
            await PlatformClient._http_client.aclose()
        PlatformClient._http_client = None

    def _headers(self) -> dict[str, str]:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        json: Any = None,
    ) -> httpx.Response:
        """Send a request and raise on error responses.

        Raises:
            AlertingAPIError: Translated error response
            UpstreamUnavailableError: If the service cannot be reached
        """
        client = self._client or self._get_http_client()
        try:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                params=params,
                json=json,
                headers=self._headers(),
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            log_warning(logger, f"{self.service_name} request {method} {path} failed", e)
            raise UpstreamUnavailableError(self.service_name) from e

        if response.status_code >= 400:
            raise self._error_from_response(response)
        return response

    def _error_from_response(self, response: httpx.Response) -> AlertingAPIError:
        code: str | None = None
        message = f"{self.service_name} returned HTTP {response.status_code}"
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            code = body.get("code") if isinstance(body.get("code"), str) else None
            if isinstance(body.get("message"), str) and body["message"]:
                message = body["message"]

        if code in ERRORS_BY_CODE:
            return error_from_code(code, message)
        error_class = _ERRORS_BY_STATUS.get(response.status_code)
        if error_class is not None:
            return error_class(message)
        logger.warning(f"{self.service_name} returned HTTP {response.status_code}: {message}")
        return UpstreamUnavailableError(self.service_name, response.status_code)

    def _json(self, response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            logger.warning(f"{self.service_name} returned a body that is not JSON")
            raise UpstreamUnavailableError(self.service_name, response.status_code) from e
