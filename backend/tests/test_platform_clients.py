"""Tests for the platform API clients."""

import json

import httpx
import pytest

from fakes import ORG_ID, USER_ID
from alerting_api.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotificationEndpointNotFoundError,
    OrganizationNotFoundError,
    TaskNotFoundError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from alerting_api.models.domain.endpoint import EndpointType
from alerting_api.models.domain.task import TaskCreate, TaskStatus, TaskUpdate
from alerting_api.services.platform import (
    PlatformNotificationEndpointService,
    PlatformOrganizationService,
    PlatformTaskService,
    PlatformUserService,
)

BASE_URL = "http://platform.test/api/v2"
TASK_ID = "020f755c3c084000"


def mock_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestPlatformTaskService:
    """Test the task runtime client."""

    async def test_find_task(self) -> None:
        """Verify the snapshot is decoded and the token is sent."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "id": TASK_ID,
                    "status": "inactive",
                    "latestCompleted": "2024-05-01T12:00:00Z",
                    "lastRunStatus": "failed",
                    "lastRunError": "timeout",
                    "flux": "ignored",
                },
            )

        service = PlatformTaskService(BASE_URL, "platform-token", client=mock_client(handler))

        snapshot = await service.find_task_by_id(TASK_ID)

        assert snapshot.status == TaskStatus.INACTIVE
        assert snapshot.last_run_error == "timeout"
        assert snapshot.latest_completed is not None
        assert str(seen[0].url) == f"{BASE_URL}/tasks/{TASK_ID}"
        assert seen[0].headers["Authorization"] == "Bearer platform-token"

    async def test_missing_task(self) -> None:
        """Verify 404 maps to a missing task."""
        service = PlatformTaskService(
            BASE_URL,
            client=mock_client(lambda request: httpx.Response(404, json={"code": "not found", "message": "task not found"})),
        )

        with pytest.raises(TaskNotFoundError):
            await service.find_task_by_id(TASK_ID)

    async def test_create_task_body(self) -> None:
        """Verify tasks are created with the platform's field names."""
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(201, json={"id": TASK_ID, "status": "active"})

        service = PlatformTaskService(BASE_URL, client=mock_client(handler))

        snapshot = await service.create_task(
            TaskCreate(org_id=ORG_ID, owner_id=USER_ID, flux="package main", status=TaskStatus.ACTIVE)
        )

        assert snapshot.id == TASK_ID
        assert bodies == [
            {"orgID": ORG_ID, "ownerID": USER_ID, "flux": "package main", "status": "active"}
        ]

    async def test_update_sends_only_set_fields(self) -> None:
        """Verify unset task fields are not sent."""
        bodies: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "PATCH"
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"id": TASK_ID, "status": "inactive"})

        service = PlatformTaskService(BASE_URL, client=mock_client(handler))

        await service.update_task(TASK_ID, TaskUpdate(status=TaskStatus.INACTIVE))

        assert bodies == [{"status": "inactive"}]

    async def test_delete_missing_task(self) -> None:
        """Verify deleting an unknown task is reported as missing."""
        service = PlatformTaskService(BASE_URL, client=mock_client(lambda request: httpx.Response(404)))

        with pytest.raises(TaskNotFoundError):
            await service.delete_task(TASK_ID)


class TestErrorTranslation:
    """Test mapping of transport failures and error responses."""

    @pytest.mark.parametrize("status_code", [500, 502, 503])
    async def test_server_errors_are_unavailable(self, status_code: int) -> None:
        """Verify 5xx responses mean the service is unavailable."""
        service = PlatformTaskService(
            BASE_URL, client=mock_client(lambda request: httpx.Response(status_code, text="oops"))
        )

        with pytest.raises(UpstreamUnavailableError) as exc_info:
            await service.find_task_by_id(TASK_ID)

        assert exc_info.value.details["status_code"] == status_code

    async def test_connection_failure(self) -> None:
        """Verify transport errors mean the service is unavailable."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        service = PlatformTaskService(BASE_URL, client=mock_client(handler))

        with pytest.raises(UpstreamUnavailableError):
            await service.find_task_by_id(TASK_ID)

    async def test_error_body_code_is_kept(self) -> None:
        """Verify a ``{code, message}`` body keeps its code and message."""
        service = PlatformTaskService(
            BASE_URL,
            client=mock_client(
                lambda request: httpx.Response(409, json={"code": "conflict", "message": "task exists"})
            ),
        )

        with pytest.raises(ConflictError, match="task exists"):
            await service.create_task(TaskCreate(org_id=ORG_ID, owner_id=USER_ID, flux="x"))

    async def test_client_error_without_body(self) -> None:
        """Verify bare 4xx statuses map by status."""
        service = PlatformTaskService(BASE_URL, client=mock_client(lambda request: httpx.Response(400)))

        with pytest.raises(InvalidArgumentError):
            await service.find_task_by_id(TASK_ID)

    async def test_body_that_is_not_json(self) -> None:
        """Verify a success response that is not JSON is unavailable."""
        service = PlatformTaskService(
            BASE_URL, client=mock_client(lambda request: httpx.Response(200, text="<html>"))
        )

        with pytest.raises(UpstreamUnavailableError):
            await service.find_task_by_id(TASK_ID)


class TestDirectoryClients:
    """Test the endpoint, user and organization clients."""

    async def test_endpoint(self) -> None:
        """Verify endpoints decode with their platform field names."""
        service = PlatformNotificationEndpointService(
            BASE_URL,
            client=mock_client(
                lambda request: httpx.Response(
                    200,
                    json={
                        "id": TASK_ID,
                        "orgID": ORG_ID,
                        "name": "on call",
                        "type": "pagerduty",
                        "routingKey": "pd_key",
                        "clientURL": "https://alerts.example.com",
                    },
                )
            ),
        )

        endpoint = await service.find_notification_endpoint_by_id(TASK_ID)

        assert endpoint.type == EndpointType.PAGERDUTY
        assert endpoint.routing_key == "pd_key"

    async def test_missing_endpoint(self) -> None:
        """Verify 404 maps to a missing endpoint."""
        service = PlatformNotificationEndpointService(
            BASE_URL, client=mock_client(lambda request: httpx.Response(404))
        )

        with pytest.raises(NotificationEndpointNotFoundError):
            await service.find_notification_endpoint_by_id(TASK_ID)

    async def test_missing_user(self) -> None:
        """Verify 404 maps to a missing user."""
        service = PlatformUserService(BASE_URL, client=mock_client(lambda request: httpx.Response(404)))

        with pytest.raises(UserNotFoundError):
            await service.find_user_by_id(USER_ID)

    async def test_organization_by_name(self) -> None:
        """Verify organizations are looked up by exact name."""
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"orgs": [{"id": "020f755c3c085000", "name": "acme-labs"}, {"id": ORG_ID, "name": "acme"}]},
            )

        service = PlatformOrganizationService(BASE_URL, client=mock_client(handler))

        org = await service.find_organization_by_name("acme")

        assert org.id == ORG_ID
        assert seen[0].url.params["org"] == "acme"

    async def test_unknown_organization_name(self) -> None:
        """Verify an empty result means the organization does not exist."""
        service = PlatformOrganizationService(
            BASE_URL, client=mock_client(lambda request: httpx.Response(200, json={"orgs": []}))
        )

        with pytest.raises(OrganizationNotFoundError):
            await service.find_organization_by_name("acme")
