"""Shared fixtures for the notification rule API tests."""

import os

# Settings are read at import time by the application module
os.environ.setdefault("JWT_SECRET", "test-secret-0123456789abcdefghijklmnopqrstuvwxyz")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest

from fakes import (
    ENDPOINT_ID,
    HTTP_ENDPOINT_ID,
    ORG_ID,
    OTHER_USER_ID,
    PAGERDUTY_ENDPOINT_ID,
    USER_ID,
    FakeEndpointService,
    FakeOrganizationService,
    FakeTaskService,
    FakeUserService,
    InMemoryLabelService,
    InMemoryRuleStore,
    InMemoryUserResourceMappingService,
)
from alerting_api.models.domain.endpoint import EndpointType, NotificationEndpoint
from alerting_api.models.domain.user_resource_mapping import Organization, User
from alerting_api.services.notification_rule_service import NotificationRuleService
from alerting_api.services.rule_response_service import RuleResponseService


@pytest.fixture
def endpoint_service() -> FakeEndpointService:
    """Endpoint directory with one endpoint per family."""
    return FakeEndpointService(
        [
            NotificationEndpoint(
                id=ENDPOINT_ID,
                org_id=ORG_ID,
                name="ops slack",
                type=EndpointType.SLACK,
                url="https://hooks.slack.com/services/x",
            ),
            NotificationEndpoint(
                id=PAGERDUTY_ENDPOINT_ID,
                org_id=ORG_ID,
                name="on call",
                type=EndpointType.PAGERDUTY,
                routing_key="pagerduty_routing_key",
                client_url="https://alerts.example.com",
            ),
            NotificationEndpoint(
                id=HTTP_ENDPOINT_ID,
                org_id=ORG_ID,
                name="webhook",
                type=EndpointType.HTTP,
                url="https://hooks.example.com/alerts",
            ),
        ]
    )


@pytest.fixture
def task_service() -> FakeTaskService:
    return FakeTaskService()


@pytest.fixture
def label_service() -> InMemoryLabelService:
    return InMemoryLabelService()


@pytest.fixture
def user_resource_mapping_service() -> InMemoryUserResourceMappingService:
    return InMemoryUserResourceMappingService()


@pytest.fixture
def user_service() -> FakeUserService:
    return FakeUserService(
        [User(id=USER_ID, name="alice"), User(id=OTHER_USER_ID, name="bob")]
    )


@pytest.fixture
def organization_service() -> FakeOrganizationService:
    return FakeOrganizationService([Organization(id=ORG_ID, name="acme")])


@pytest.fixture
def rule_store(
    task_service: FakeTaskService,
    endpoint_service: FakeEndpointService,
    user_resource_mapping_service: InMemoryUserResourceMappingService,
) -> InMemoryRuleStore:
    return InMemoryRuleStore(task_service, endpoint_service, user_resource_mapping_service)


@pytest.fixture
def composer(task_service: FakeTaskService, label_service: InMemoryLabelService) -> RuleResponseService:
    return RuleResponseService(task_service, label_service)


@pytest.fixture
def rule_service(
    rule_store: InMemoryRuleStore,
    label_service: InMemoryLabelService,
    endpoint_service: FakeEndpointService,
    user_resource_mapping_service: InMemoryUserResourceMappingService,
    user_service: FakeUserService,
    composer: RuleResponseService,
) -> NotificationRuleService:
    """Notification rule service wired to in-memory collaborators."""
    return NotificationRuleService(
        rule_store,
        label_service,
        endpoint_service,
        user_resource_mapping_service,
        user_service,
        composer,
    )
