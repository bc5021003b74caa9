"""Collaborator contracts consumed by the notification rule layer.

Each contract is implemented locally (database) or against the platform API
(httpx); the orchestrator only ever sees these interfaces.
"""

from abc import ABC, abstractmethod

from alerting_api.models.domain.endpoint import NotificationEndpoint
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter
from alerting_api.models.domain.label import Label, LabelMapping
from alerting_api.models.domain.notification_rule import (
    NotificationRuleBase,
    NotificationRuleCreate,
    NotificationRuleUpdate,
)
from alerting_api.models.domain.task import TaskCreate, TaskRunSnapshot, TaskUpdate
from alerting_api.models.domain.user_resource_mapping import (
    Organization,
    User,
    UserResourceMapping,
    UserResourceMappingFilter,
)


class NotificationRuleStore(ABC):
    """Persistence and query contract for notification rules."""

    @abstractmethod
    async def find_notification_rule_by_id(self, rule_id: str) -> NotificationRuleBase:
        """Get a rule by ID.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
        """

    @abstractmethod
    async def find_notification_rules(
        self,
        rule_filter: NotificationRuleFilter,
        options: FindOptions | None = None,
    ) -> tuple[list[NotificationRuleBase], int]:
        """List rules matching a filter.

        Returns:
            Tuple of (rules for the requested page, total matching count)
        """

    @abstractmethod
    async def create_notification_rule(
        self, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Create a rule and its backing task.

        The created rule (with ID, owner, task and timestamps set) is
        returned and also written back onto ``rule_create.rule``.
        """

    @abstractmethod
    async def update_notification_rule(
        self, rule_id: str, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Replace all mutable fields of a rule."""

    @abstractmethod
    async def patch_notification_rule(
        self, rule_id: str, update: NotificationRuleUpdate
    ) -> NotificationRuleBase:
        """Apply a changeset to a rule."""

    @abstractmethod
    async def delete_notification_rule(self, rule_id: str) -> None:
        """Delete a rule and its backing task.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
        """


class TaskService(ABC):
    """Task runtime contract."""

    @abstractmethod
    async def find_task_by_id(self, task_id: str) -> TaskRunSnapshot:
        """Get the run status snapshot of a task."""

    @abstractmethod
    async def create_task(self, task: TaskCreate) -> TaskRunSnapshot:
        """Create a task."""

    @abstractmethod
    async def update_task(self, task_id: str, update: TaskUpdate) -> TaskRunSnapshot:
        """Update a task."""

    @abstractmethod
    async def delete_task(self, task_id: str) -> None:
        """Delete a task."""


class LabelService(ABC):
    """Label store contract."""

    @abstractmethod
    async def find_label_by_id(self, label_id: str) -> Label:
        """Get a label by ID."""

    @abstractmethod
    async def find_resource_labels(self, resource_id: str, resource_type: str) -> list[Label]:
        """Get the labels mapped to a resource."""

    @abstractmethod
    async def create_label_mapping(self, mapping: LabelMapping) -> None:
        """Map a label to a resource."""

    @abstractmethod
    async def delete_label_mapping(self, mapping: LabelMapping) -> None:
        """Remove a label mapping."""


class NotificationEndpointService(ABC):
    """Endpoint store contract."""

    @abstractmethod
    async def find_notification_endpoint_by_id(self, endpoint_id: str) -> NotificationEndpoint:
        """Get an endpoint by ID."""


class UserResourceMappingService(ABC):
    """User-resource mapping contract."""

    @abstractmethod
    async def find_user_resource_mappings(
        self, mapping_filter: UserResourceMappingFilter
    ) -> list[UserResourceMapping]:
        """List mappings matching a filter."""

    @abstractmethod
    async def create_user_resource_mapping(self, mapping: UserResourceMapping) -> None:
        """Create a mapping."""

    @abstractmethod
    async def delete_user_resource_mapping(self, resource_id: str, user_id: str) -> None:
        """Delete the mapping between a resource and a user."""


class UserService(ABC):
    """User directory contract."""

    @abstractmethod
    async def find_user_by_id(self, user_id: str) -> User:
        """Get a user by ID."""


class OrganizationService(ABC):
    """Organization directory contract."""

    @abstractmethod
    async def find_organization_by_id(self, org_id: str) -> Organization:
        """Get an organization by ID."""

    @abstractmethod
    async def find_organization_by_name(self, name: str) -> Organization:
        """Get an organization by name."""
