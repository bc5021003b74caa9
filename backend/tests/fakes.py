"""In-memory collaborators for service and API tests."""

import asyncio
from datetime import datetime, timezone
from typing import Any

from alerting_api.exceptions import (
    ConflictError,
    InternalError,
    LabelNotFoundError,
    MappingNotFoundError,
    NotificationEndpointNotFoundError,
    NotificationRuleNotFoundError,
    OrganizationNotFoundError,
    TaskNotFoundError,
    UpstreamUnavailableError,
    UserNotFoundError,
)
from alerting_api.models.domain.endpoint import NotificationEndpoint
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter
from alerting_api.models.domain.ids import generate_id
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE, Label, LabelMapping
from alerting_api.models.domain.notification_rule import (
    NotificationRuleBase,
    NotificationRuleCreate,
    NotificationRuleUpdate,
)
from alerting_api.models.domain.task import TaskCreate, TaskRunSnapshot, TaskStatus, TaskUpdate
from alerting_api.models.domain.user_resource_mapping import (
    Organization,
    User,
    UserResourceMapping,
    UserResourceMappingFilter,
    UserType,
)
from alerting_api.services.interfaces import (
    LabelService,
    NotificationEndpointService,
    NotificationRuleStore,
    OrganizationService,
    TaskService,
    UserResourceMappingService,
    UserService,
)

ORG_ID = "020f755c3c082000"
USER_ID = "020f755c3c082001"
OTHER_USER_ID = "020f755c3c082002"
ENDPOINT_ID = "020f755c3c082010"
PAGERDUTY_ENDPOINT_ID = "020f755c3c082011"
HTTP_ENDPOINT_ID = "020f755c3c082012"
MISSING_ID = "020f755c3c0820ff"

LATEST_COMPLETED = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def slack_rule_payload(**overrides: Any) -> dict[str, Any]:
    """Build a valid slack rule create body."""
    payload: dict[str, Any] = {
        "type": "slack",
        "name": "cpu alert",
        "orgID": ORG_ID,
        "endpointID": ENDPOINT_ID,
        "every": "10m",
        "offset": "30s",
        "channel": "#ops",
        "messageTemplate": "cpu is ${r._level}",
        "statusRules": [{"currentLevel": "CRIT"}],
        "tagRules": [{"key": "env", "value": "prod", "operator": "equal"}],
        "status": "active",
    }
    payload.update(overrides)
    return payload


class FakeTaskService(TaskService):
    """Task runtime keeping snapshots in a dict.

    Lookups yield to the event loop so concurrent callers interleave.
    """

    def __init__(self) -> None:
        self.tasks: dict[str, TaskRunSnapshot] = {}
        self.scripts: dict[str, str] = {}
        self.unavailable = False
        self.in_flight = 0
        self.max_in_flight = 0

    async def find_task_by_id(self, task_id: str) -> TaskRunSnapshot:
        if self.unavailable:
            raise UpstreamUnavailableError("task runtime")
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(0)
            if task_id not in self.tasks:
                raise TaskNotFoundError(task_id)
            return self.tasks[task_id]
        finally:
            self.in_flight -= 1

    async def create_task(self, task: TaskCreate) -> TaskRunSnapshot:
        snapshot = TaskRunSnapshot(
            id=generate_id(),
            status=task.status,
            latest_completed=LATEST_COMPLETED,
            last_run_status="success",
        )
        self.tasks[snapshot.id] = snapshot
        self.scripts[snapshot.id] = task.flux
        return snapshot

    async def update_task(self, task_id: str, update: TaskUpdate) -> TaskRunSnapshot:
        if task_id not in self.tasks:
            raise TaskNotFoundError(task_id)
        snapshot = self.tasks[task_id]
        if update.status is not None:
            snapshot = snapshot.model_copy(update={"status": update.status})
            self.tasks[task_id] = snapshot
        if update.flux is not None:
            self.scripts[task_id] = update.flux
        return snapshot

    async def delete_task(self, task_id: str) -> None:
        if self.tasks.pop(task_id, None) is None:
            raise TaskNotFoundError(task_id)
        self.scripts.pop(task_id, None)


class InMemoryLabelService(LabelService):
    """Label store with switchable failures."""

    def __init__(self) -> None:
        self.labels: dict[str, Label] = {}
        self.mappings: list[LabelMapping] = []
        self.failing_resources: set[str] = set()
        self.failing_label_ids: set[str] = set()

    def add_label(self, name: str, **properties: str) -> Label:
        label = Label(id=generate_id(), org_id=ORG_ID, name=name, properties=properties)
        self.labels[label.id] = label
        return label

    async def find_label_by_id(self, label_id: str) -> Label:
        if label_id not in self.labels:
            raise LabelNotFoundError(label_id)
        return self.labels[label_id]

    async def find_resource_labels(self, resource_id: str, resource_type: str) -> list[Label]:
        if resource_id in self.failing_resources:
            raise RuntimeError("label store connection reset")
        return [
            self.labels[m.label_id]
            for m in self.mappings
            if m.resource_id == resource_id and m.resource_type == resource_type
        ]

    async def create_label_mapping(self, mapping: LabelMapping) -> None:
        if mapping.label_id in self.failing_label_ids:
            raise InternalError("label mapping failed")
        if mapping.label_id not in self.labels:
            raise LabelNotFoundError(mapping.label_id)
        if mapping not in self.mappings:
            self.mappings.append(mapping)

    async def delete_label_mapping(self, mapping: LabelMapping) -> None:
        if mapping not in self.mappings:
            raise MappingNotFoundError("label mapping not found")
        self.mappings.remove(mapping)


class FakeEndpointService(NotificationEndpointService):
    def __init__(self, endpoints: list[NotificationEndpoint]) -> None:
        self.endpoints = {endpoint.id: endpoint for endpoint in endpoints}

    async def find_notification_endpoint_by_id(self, endpoint_id: str) -> NotificationEndpoint:
        if endpoint_id not in self.endpoints:
            raise NotificationEndpointNotFoundError(endpoint_id)
        return self.endpoints[endpoint_id]


class InMemoryUserResourceMappingService(UserResourceMappingService):
    def __init__(self) -> None:
        self.mappings: list[UserResourceMapping] = []

    async def find_user_resource_mappings(
        self, mapping_filter: UserResourceMappingFilter
    ) -> list[UserResourceMapping]:
        return [
            m
            for m in self.mappings
            if m.resource_type == mapping_filter.resource_type
            and (mapping_filter.resource_id is None or m.resource_id == mapping_filter.resource_id)
            and (mapping_filter.user_id is None or m.user_id == mapping_filter.user_id)
            and (mapping_filter.user_type is None or m.user_type == mapping_filter.user_type)
        ]

    async def create_user_resource_mapping(self, mapping: UserResourceMapping) -> None:
        for existing in self.mappings:
            if existing.resource_id == mapping.resource_id and existing.user_id == mapping.user_id:
                raise ConflictError("user resource mapping already exists")
        self.mappings.append(mapping)

    async def delete_user_resource_mapping(self, resource_id: str, user_id: str) -> None:
        for existing in self.mappings:
            if existing.resource_id == resource_id and existing.user_id == user_id:
                self.mappings.remove(existing)
                return
        raise MappingNotFoundError("user resource mapping not found")


class FakeUserService(UserService):
    def __init__(self, users: list[User]) -> None:
        self.users = {user.id: user for user in users}

    async def find_user_by_id(self, user_id: str) -> User:
        if user_id not in self.users:
            raise UserNotFoundError(user_id)
        return self.users[user_id]


class FakeOrganizationService(OrganizationService):
    def __init__(self, organizations: list[Organization]) -> None:
        self.organizations = {org.id: org for org in organizations}

    async def find_organization_by_id(self, org_id: str) -> Organization:
        if org_id not in self.organizations:
            raise OrganizationNotFoundError(org_id)
        return self.organizations[org_id]

    async def find_organization_by_name(self, name: str) -> Organization:
        for org in self.organizations.values():
            if org.name == name:
                return org
        raise OrganizationNotFoundError(name=name)


class InMemoryRuleStore(NotificationRuleStore):
    """Rule store keeping rules in insertion order."""

    def __init__(
        self,
        task_service: FakeTaskService,
        endpoint_service: FakeEndpointService,
        user_resource_mapping_service: InMemoryUserResourceMappingService,
    ) -> None:
        self.rules: dict[str, NotificationRuleBase] = {}
        self.task_service = task_service
        self.endpoint_service = endpoint_service
        self.user_resource_mapping_service = user_resource_mapping_service
        self.patch_calls = 0

    async def find_notification_rule_by_id(self, rule_id: str) -> NotificationRuleBase:
        if rule_id not in self.rules:
            raise NotificationRuleNotFoundError(rule_id)
        return self.rules[rule_id]

    async def find_notification_rules(
        self,
        rule_filter: NotificationRuleFilter,
        options: FindOptions | None = None,
    ) -> tuple[list[NotificationRuleBase], int]:
        options = options or FindOptions()
        matching = [
            rule
            for rule in self.rules.values()
            if (rule_filter.org_id is None or rule.org_id == rule_filter.org_id)
            and all(
                any(t.key == tag.key and t.value == tag.value for t in rule.tag_rules)
                for tag in rule_filter.tags
            )
        ]
        return matching[options.offset : options.offset + options.limit], len(matching)

    async def create_notification_rule(
        self, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        rule = rule_create.rule
        endpoint = await self.endpoint_service.find_notification_endpoint_by_id(rule.endpoint_id)
        now = datetime.now(timezone.utc)
        rule = rule.model_copy(
            update={"id": generate_id(), "owner_id": user_id, "created_at": now, "updated_at": now}
        )
        task = await self.task_service.create_task(
            TaskCreate(
                org_id=rule.org_id,
                owner_id=user_id,
                flux=rule.generate_query(endpoint),
                status=rule_create.status,
            )
        )
        rule = rule.model_copy(update={"task_id": task.id})
        self.rules[rule.id] = rule
        await self.user_resource_mapping_service.create_user_resource_mapping(
            UserResourceMapping(
                user_id=user_id,
                user_type=UserType.OWNER,
                resource_id=rule.id,
                resource_type=NOTIFICATION_RULE_RESOURCE_TYPE,
            )
        )
        rule_create.rule = rule
        return rule

    async def update_notification_rule(
        self, rule_id: str, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        current = await self.find_notification_rule_by_id(rule_id)
        rule = rule_create.rule.model_copy(
            update={
                "id": rule_id,
                "owner_id": current.owner_id,
                "task_id": current.task_id,
                "created_at": current.created_at,
                "updated_at": datetime.now(timezone.utc),
            }
        )
        await self.task_service.update_task(current.task_id or "", TaskUpdate(status=rule_create.status))
        self.rules[rule_id] = rule
        return rule

    async def patch_notification_rule(
        self, rule_id: str, update: NotificationRuleUpdate
    ) -> NotificationRuleBase:
        self.patch_calls += 1
        current = await self.find_notification_rule_by_id(rule_id)
        if update.is_empty():
            return current
        rule = update.apply(current).model_copy(update={"updated_at": datetime.now(timezone.utc)})
        if update.status is not None:
            await self.task_service.update_task(current.task_id or "", TaskUpdate(status=update.status))
        self.rules[rule_id] = rule
        return rule

    async def delete_notification_rule(self, rule_id: str) -> None:
        rule = await self.find_notification_rule_by_id(rule_id)
        await self.task_service.delete_task(rule.task_id or "")
        del self.rules[rule_id]


def make_task(task_service: FakeTaskService, status: TaskStatus = TaskStatus.ACTIVE) -> str:
    """Register a task snapshot and return its ID."""
    snapshot = TaskRunSnapshot(id=generate_id(), status=status, latest_completed=LATEST_COMPLETED)
    task_service.tasks[snapshot.id] = snapshot
    return snapshot.id
