"""Database backed notification rule store."""

import logging
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from alerting_api.exceptions import (
    InvalidArgumentError,
    NotificationRuleNotFoundError,
    TaskNotFoundError,
)
from alerting_api.models.domain.endpoint import NotificationEndpoint
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter, TagPredicate
from alerting_api.models.domain.ids import generate_id
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE
from alerting_api.models.domain.notification_rule import (
    RULE_TYPES,
    NotificationRuleBase,
    NotificationRuleCreate,
    NotificationRuleUpdate,
)
from alerting_api.models.domain.task import TaskCreate, TaskUpdate
from alerting_api.models.domain.user_resource_mapping import UserResourceMapping, UserType
from alerting_api.models.orm.base import utcnow
from alerting_api.models.orm.notification_rule import NotificationRuleORM
from alerting_api.repositories.notification_rule_repository import (
    SORT_COLUMNS,
    NotificationRuleRepository,
)
from alerting_api.services.interfaces import (
    NotificationEndpointService,
    NotificationRuleStore,
    OrganizationService,
    TaskService,
    UserResourceMappingService,
)

logger = logging.getLogger(__name__)

# Stored in columns rather than in the definition document
_COLUMN_FIELDS = {
    "id",
    "org_id",
    "owner_id",
    "task_id",
    "endpoint_id",
    "type",
    "name",
    "created_at",
    "updated_at",
}


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _matches_tags(rule: NotificationRuleBase, tags: list[TagPredicate]) -> bool:
    """Check that every tag predicate appears among the rule's tag rules."""
    return all(
        any(
            tag_rule.key == tag.key and tag_rule.value == tag.value and tag_rule.operator == tag.operator
            for tag_rule in rule.tag_rules
        )
        for tag in tags
    )


class DatabaseNotificationRuleStore(NotificationRuleStore):
    """Notification rules stored in the application database.

    Every rule is backed by a task in the task runtime whose script is the
    rule's rendered query; the store keeps both in sync.
    """

    def __init__(
        self,
        session: AsyncSession,
        task_service: TaskService,
        endpoint_service: NotificationEndpointService,
        organization_service: OrganizationService,
        user_resource_mapping_service: UserResourceMappingService,
    ) -> None:
        """Initialize store with database session and collaborators."""
        self.session = session
        self.repo = NotificationRuleRepository(session)
        self.task_service = task_service
        self.endpoint_service = endpoint_service
        self.organization_service = organization_service
        self.user_resource_mapping_service = user_resource_mapping_service

    @staticmethod
    def _to_domain(row: NotificationRuleORM) -> NotificationRuleBase:
        rule_class = RULE_TYPES[row.type]
        data = dict(row.definition or {})
        data.update(
            id=row.id,
            org_id=row.org_id,
            owner_id=row.owner_id,
            task_id=row.task_id,
            endpoint_id=row.endpoint_id,
            type=row.type,
            name=row.name,
            created_at=_as_utc(row.created_at),
            updated_at=_as_utc(row.updated_at),
        )
        return rule_class.model_validate(data)

    @staticmethod
    def _definition(rule: NotificationRuleBase) -> dict:
        return rule.model_dump(mode="json", exclude=_COLUMN_FIELDS, exclude_none=True)

    async def _get_row(self, rule_id: str) -> NotificationRuleORM:
        row = await self.repo.get_by_id(rule_id)
        if row is None:
            raise NotificationRuleNotFoundError(rule_id)
        return row

    async def _find_endpoint(self, rule: NotificationRuleBase) -> NotificationEndpoint:
        endpoint = await self.endpoint_service.find_notification_endpoint_by_id(rule.endpoint_id)
        if endpoint.org_id and endpoint.org_id != rule.org_id:
            raise InvalidArgumentError(
                "notification endpoint belongs to another organization", {"field": "endpointID"}
            )
        return endpoint

    async def find_notification_rule_by_id(self, rule_id: str) -> NotificationRuleBase:
        """Get a rule by ID.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
        """
        return self._to_domain(await self._get_row(rule_id))

    async def find_notification_rules(
        self,
        rule_filter: NotificationRuleFilter,
        options: FindOptions | None = None,
    ) -> tuple[list[NotificationRuleBase], int]:
        """List rules matching a filter.

        An organization selected by name is resolved first; an unknown name
        fails the call.

        Raises:
            InvalidArgumentError: If the sort field is unknown
            OrganizationNotFoundError: If the named organization does not exist
        """
        options = options or FindOptions()
        if options.sort_by and options.sort_by not in SORT_COLUMNS:
            raise InvalidArgumentError("sortBy is invalid", {"field": "sortBy"})

        org_id = rule_filter.org_id
        if not org_id and rule_filter.organization:
            org = await self.organization_service.find_organization_by_name(rule_filter.organization)
            org_id = org.id

        mapping_filter = rule_filter.user_resource_mapping
        criteria = {
            "org_id": org_id,
            "rule_id": mapping_filter.resource_id,
            "user_id": mapping_filter.user_id,
            "user_type": mapping_filter.user_type.value if mapping_filter.user_type else None,
        }

        if rule_filter.tags:
            # Tag rules live in the definition document, so match them here
            rows = await self.repo.find_rules(
                **criteria, sort_by=options.sort_by, descending=options.descending
            )
            matching = [
                rule for rule in map(self._to_domain, rows) if _matches_tags(rule, rule_filter.tags)
            ]
            return matching[options.offset : options.offset + options.limit], len(matching)

        rows = await self.repo.find_rules(
            **criteria,
            sort_by=options.sort_by,
            descending=options.descending,
            offset=options.offset,
            limit=options.limit,
        )
        total = await self.repo.count_rules(**criteria)
        return [self._to_domain(row) for row in rows], total

    async def create_notification_rule(
        self, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Create a rule, its task and the owner mapping of the creator.

        Raises:
            OrganizationNotFoundError: If the organization does not exist
            NotificationEndpointNotFoundError: If the endpoint does not exist
            InvalidArgumentError: If the rule cannot be rendered against its endpoint
        """
        rule = rule_create.rule
        await self.organization_service.find_organization_by_id(rule.org_id)
        endpoint = await self._find_endpoint(rule)

        now = utcnow()
        rule = rule.model_copy(
            update={"id": generate_id(), "owner_id": user_id, "created_at": now, "updated_at": now}
        )
        flux = rule.generate_query(endpoint)
        task = await self.task_service.create_task(
            TaskCreate(
                org_id=rule.org_id,
                owner_id=user_id,
                flux=flux,
                status=rule_create.status,
                description=rule.description,
            )
        )
        rule = rule.model_copy(update={"task_id": task.id})

        try:
            await self.repo.create(
                id=rule.id,
                org_id=rule.org_id,
                owner_id=user_id,
                task_id=task.id,
                endpoint_id=rule.endpoint_id,
                type=rule.endpoint_type.value,
                name=rule.name,
                definition=self._definition(rule),
                created_at=now,
                updated_at=now,
            )
            await self.user_resource_mapping_service.create_user_resource_mapping(
                UserResourceMapping(
                    user_id=user_id,
                    user_type=UserType.OWNER,
                    resource_id=rule.id,
                    resource_type=NOTIFICATION_RULE_RESOURCE_TYPE,
                )
            )
        except Exception:
            logger.warning(f"Rolling back task {task.id} of notification rule {rule.id}")
            await self.task_service.delete_task(task.id)
            raise

        rule_create.rule = rule
        return rule

    async def update_notification_rule(
        self, rule_id: str, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Replace all mutable fields of a rule.

        Organization, owner, task and creation time are kept. The endpoint
        cannot change through a replace.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
            InvalidArgumentError: If the endpoint differs or the rule cannot
                be rendered against it
        """
        row = await self._get_row(rule_id)
        current = self._to_domain(row)
        replacement = rule_create.rule
        if replacement.endpoint_id != current.endpoint_id:
            raise InvalidArgumentError(
                "endpointID cannot be changed when replacing a notification rule",
                {"field": "endpointID"},
            )

        rule = replacement.model_copy(
            update={
                "id": rule_id,
                "org_id": current.org_id,
                "owner_id": current.owner_id,
                "task_id": current.task_id,
                "created_at": current.created_at,
                "updated_at": max(utcnow(), current.updated_at or utcnow()),
            }
        )
        endpoint = await self._find_endpoint(rule)
        await self.task_service.update_task(
            current.task_id or "",
            TaskUpdate(
                flux=rule.generate_query(endpoint),
                status=rule_create.status,
                description=rule.description,
            ),
        )
        await self._save(row, rule)
        return rule

    async def patch_notification_rule(
        self, rule_id: str, update: NotificationRuleUpdate
    ) -> NotificationRuleBase:
        """Apply a changeset to a rule.

        An empty changeset returns the rule untouched.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
            InvalidArgumentError: If the patched rule is invalid or cannot be
                rendered against its endpoint
        """
        row = await self._get_row(rule_id)
        current = self._to_domain(row)
        if update.is_empty():
            return current

        rule = update.apply(current)
        rule = rule.model_copy(update={"updated_at": max(utcnow(), current.updated_at or utcnow())})
        endpoint = await self._find_endpoint(rule)
        await self.task_service.update_task(
            current.task_id or "",
            TaskUpdate(
                flux=rule.generate_query(endpoint),
                status=update.status,
                description=rule.description,
            ),
        )
        await self._save(row, rule)
        return rule

    async def _save(self, row: NotificationRuleORM, rule: NotificationRuleBase) -> None:
        row.endpoint_id = rule.endpoint_id
        row.type = rule.endpoint_type.value
        row.name = rule.name
        row.definition = self._definition(rule)
        row.updated_at = rule.updated_at or utcnow()
        await self.session.flush()

    async def delete_notification_rule(self, rule_id: str) -> None:
        """Delete a rule and its task.

        Label and user mappings of the rule are left in place.

        Raises:
            NotificationRuleNotFoundError: If no rule has this ID
        """
        row = await self._get_row(rule_id)
        try:
            await self.task_service.delete_task(row.task_id)
        except TaskNotFoundError:
            logger.warning(f"Task {row.task_id} of notification rule {rule_id} was already gone")
        await self.session.delete(row)
        await self.session.flush()
