"""Notification rule store backed by another instance of this API."""

import logging
from typing import Any

from pydantic import ValidationError

from alerting_api.exceptions import (
    InternalError,
    InvalidArgumentError,
    NotFoundError,
    NotificationRuleNotFoundError,
)
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter
from alerting_api.models.domain.notification_rule import (
    NotificationRuleBase,
    NotificationRuleCreate,
    NotificationRuleUpdate,
    decode_notification_rule,
    format_validation_error,
)
from alerting_api.models.domain.task import TaskRunSnapshot
from alerting_api.services.interfaces import NotificationRuleStore
from alerting_api.services.platform.base import PlatformClient
from alerting_api.services.rule_response_service import RuleResponseService

logger = logging.getLogger(__name__)

RULES_PATH = "/notificationRules"


class RemoteNotificationRuleStore(PlatformClient, NotificationRuleStore):
    """Rule store speaking the notification rule HTTP API.

    ``base_url`` is the API root of the remote instance (for example
    ``http://alerting:8000/api/v2``). Remote ``{code, message}`` error bodies
    are raised as the matching local errors.
    """

    service_name = "remote notification rule store"

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        # Task IDs never leave the remote, so keep the run status it reported
        self.run_snapshots: dict[str, TaskRunSnapshot] = {}

    def _decode_rule(self, data: Any) -> NotificationRuleBase:
        try:
            rule = decode_notification_rule(data)
            snapshot = TaskRunSnapshot.model_validate({**data, "id": rule.id or ""})
        except InvalidArgumentError as e:
            raise InternalError(f"decoding remote notification rule: {e.message}") from e
        except ValidationError as e:
            raise InternalError(f"decoding remote notification rule: {format_validation_error(e)}") from e
        if rule.id:
            self.run_snapshots[rule.id] = snapshot
        return rule

    @staticmethod
    def _rule_body(rule_create: NotificationRuleCreate) -> dict[str, Any]:
        body = rule_create.rule.model_dump(mode="json", by_alias=True, exclude_none=True)
        body["status"] = rule_create.status.value
        return body

    async def _rule_request(self, method: str, rule_id: str, **kwargs: Any) -> Any:
        try:
            response = await self._request(method, f"{RULES_PATH}/{rule_id}", **kwargs)
        except NotFoundError as e:
            raise NotificationRuleNotFoundError(rule_id) from e
        if response.status_code == 204 or not response.content:
            return None
        return self._json(response)

    async def find_notification_rule_by_id(self, rule_id: str) -> NotificationRuleBase:
        """Get a rule by ID.

        Raises:
            NotificationRuleNotFoundError: If the remote has no such rule
        """
        return self._decode_rule(await self._rule_request("GET", rule_id))

    async def find_notification_rules(
        self,
        rule_filter: NotificationRuleFilter,
        options: FindOptions | None = None,
    ) -> tuple[list[NotificationRuleBase], int]:
        """List rules matching a filter.

        The remote composes its own page, so the returned count is the number
        of rules it sent back.
        """
        options = options or FindOptions()
        params = rule_filter.query_params() + options.query_params()
        mapping_filter = rule_filter.user_resource_mapping
        if mapping_filter.user_id:
            params.append(("userID", mapping_filter.user_id))
        if mapping_filter.resource_id:
            params.append(("resourceID", mapping_filter.resource_id))

        response = await self._request("GET", RULES_PATH, params=params)
        body = self._json(response)
        items = body.get("items") if isinstance(body, dict) else None
        if not isinstance(items, list):
            raise InternalError("decoding remote notification rule list: items missing")
        rules = [self._decode_rule(item) for item in items]
        return rules, len(rules)

    async def create_notification_rule(
        self, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Create a rule on the remote.

        The remote assigns the ID; the decoded rule is written back onto
        ``rule_create.rule``.
        """
        response = await self._request("POST", RULES_PATH, json=self._rule_body(rule_create))
        rule = self._decode_rule(self._json(response))
        if not rule.id:
            raise InternalError("remote notification rule store returned a rule without ID")
        rule_create.rule = rule
        logger.debug(f"Created notification rule {rule.id} on remote store")
        return rule

    async def update_notification_rule(
        self, rule_id: str, rule_create: NotificationRuleCreate, user_id: str
    ) -> NotificationRuleBase:
        """Replace a rule on the remote."""
        return self._decode_rule(
            await self._rule_request("PUT", rule_id, json=self._rule_body(rule_create))
        )

    async def patch_notification_rule(
        self, rule_id: str, update: NotificationRuleUpdate
    ) -> NotificationRuleBase:
        """Send the set fields of a changeset to the remote."""
        body = update.model_dump(mode="json", by_alias=True, include=set(update.changes()))
        return self._decode_rule(await self._rule_request("PATCH", rule_id, json=body))

    async def delete_notification_rule(self, rule_id: str) -> None:
        """Delete a rule on the remote."""
        await self._rule_request("DELETE", rule_id)


class RemoteRuleResponseService(RuleResponseService):
    """Composer for rules read from a remote store.

    Run status comes from the remote's own documents instead of the task
    runtime, since the remote never discloses task IDs.
    """

    def __init__(self, rule_store: RemoteNotificationRuleStore, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.rule_store = rule_store

    async def find_run_snapshot(self, rule: NotificationRuleBase) -> TaskRunSnapshot:
        """Get the run status the remote reported for a rule."""
        snapshot = self.rule_store.run_snapshots.get(rule.id or "")
        if snapshot is None:
            raise InternalError("remote notification rule store reported no run status", {"id": rule.id})
        return snapshot
