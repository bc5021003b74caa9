"""Notification rule repository."""

from sqlalchemy import Select, func, select

from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE
from alerting_api.models.orm.notification_rule import NotificationRuleORM
from alerting_api.models.orm.user_resource_mapping import UserResourceMappingORM
from alerting_api.repositories.base import BaseRepository

# Sortable fields by their external name
SORT_COLUMNS = {
    "id": NotificationRuleORM.id,
    "name": NotificationRuleORM.name,
    "createdAt": NotificationRuleORM.created_at,
    "updatedAt": NotificationRuleORM.updated_at,
}


class NotificationRuleRepository(BaseRepository[NotificationRuleORM]):
    """Repository for notification rule operations."""

    model = NotificationRuleORM

    def _filtered(
        self,
        query: Select,
        org_id: str | None = None,
        rule_id: str | None = None,
        user_id: str | None = None,
        user_type: str | None = None,
    ) -> Select:
        if org_id:
            query = query.where(NotificationRuleORM.org_id == org_id)
        if rule_id:
            query = query.where(NotificationRuleORM.id == rule_id)
        if user_id:
            mapped = select(UserResourceMappingORM.resource_id).where(
                UserResourceMappingORM.user_id == user_id,
                UserResourceMappingORM.resource_type == NOTIFICATION_RULE_RESOURCE_TYPE,
            )
            if user_type:
                mapped = mapped.where(UserResourceMappingORM.user_type == user_type)
            query = query.where(NotificationRuleORM.id.in_(mapped))
        return query

    async def find_rules(
        self,
        org_id: str | None = None,
        rule_id: str | None = None,
        user_id: str | None = None,
        user_type: str | None = None,
        sort_by: str | None = None,
        descending: bool = False,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[NotificationRuleORM]:
        """Find rules with optional filters and paging.

        Args:
            org_id: Restrict to one organization
            rule_id: Restrict to one rule
            user_id: Restrict to rules the user holds a role on
            user_type: Restrict the user's role (owner or member)
            sort_by: External name of the sort field (see ``SORT_COLUMNS``)
            descending: Sort descending
            offset: Number of rules to skip, None for no paging
            limit: Maximum number of rules, None for no paging

        Returns:
            List of rules
        """
        column = SORT_COLUMNS.get(sort_by or "id", NotificationRuleORM.id)
        order = column.desc() if descending else column.asc()
        query = self._filtered(select(NotificationRuleORM), org_id, rule_id, user_id, user_type)
        query = query.order_by(order, NotificationRuleORM.id)
        if offset:
            query = query.offset(offset)
        if limit is not None:
            query = query.limit(limit)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_rules(
        self,
        org_id: str | None = None,
        rule_id: str | None = None,
        user_id: str | None = None,
        user_type: str | None = None,
    ) -> int:
        """Count rules matching the filters of ``find_rules``."""
        query = self._filtered(
            select(func.count()).select_from(NotificationRuleORM), org_id, rule_id, user_id, user_type
        )
        result = await self.session.execute(query)
        return result.scalar_one()
