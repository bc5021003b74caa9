"""Notification rule service orchestrating the store and its collaborators."""

import logging
from typing import Any

from pydantic import ValidationError

from alerting_api.exceptions import (
    AlertingAPIError,
    InternalError,
    InvalidArgumentError,
    UnauthorizedError,
    UpstreamUnavailableError,
)
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter
from alerting_api.models.domain.ids import decode_id
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE, Label, LabelMapping
from alerting_api.models.domain.notification_rule import (
    NotificationRuleBase,
    decode_notification_rule_create,
    decode_notification_rule_update,
    format_validation_error,
)
from alerting_api.models.domain.user_resource_mapping import (
    UserResourceMapping,
    UserResourceMappingFilter,
    UserType,
)
from alerting_api.models.dto.notification_rule import (
    AddResourceMemberRequest,
    LabelMappingRequest,
    LabelResponse,
    LabelsResponse,
    NotificationRuleResponse,
    QueryResponse,
    ResourceMember,
    ResourceMembersResponse,
)
from alerting_api.services.interfaces import (
    LabelService,
    NotificationEndpointService,
    NotificationRuleStore,
    UserResourceMappingService,
    UserService,
)
from alerting_api.services.label_association_service import LabelAssociationService
from alerting_api.services.rule_response_service import ComposedRuleList, RuleResponseService

logger = logging.getLogger(__name__)


def _decode_label_ids(data: Any) -> list[Any]:
    """Get the optional ``labels`` list of a create body."""
    labels = data.get("labels") if isinstance(data, dict) else None
    if labels is None:
        return []
    if not isinstance(labels, list):
        raise InvalidArgumentError("labels must be a list of label IDs")
    return labels


class NotificationRuleService:
    """Handles every notification rule operation.

    All collaborators are injected; the service holds no global state.
    """

    def __init__(
        self,
        rule_store: NotificationRuleStore,
        label_service: LabelService,
        endpoint_service: NotificationEndpointService,
        user_resource_mapping_service: UserResourceMappingService,
        user_service: UserService,
        composer: RuleResponseService,
    ) -> None:
        """Initialize service with its collaborators."""
        self.rule_store = rule_store
        self.label_service = label_service
        self.endpoint_service = endpoint_service
        self.user_resource_mapping_service = user_resource_mapping_service
        self.user_service = user_service
        self.composer = composer
        self.label_associations = LabelAssociationService(label_service)

    async def _rule_labels(self, rule_id: str) -> list[Label]:
        return await self.label_service.find_resource_labels(rule_id, NOTIFICATION_RULE_RESOURCE_TYPE)

    # =========================================================================
    # Rules
    # =========================================================================

    async def create_rule(self, data: Any, user_id: str | None) -> NotificationRuleResponse:
        """Create a rule, attach its labels and compose the response.

        Args:
            data: Decoded JSON body: the rule, its ``status`` and optional
                ``labels``
            user_id: ID of the authenticated principal

        Returns:
            Composed rule document

        Raises:
            InvalidArgumentError: If the body cannot be decoded
            UnauthorizedError: If there is no authenticated principal
        """
        rule_create = decode_notification_rule_create(data)
        label_ids = _decode_label_ids(data)
        if not user_id:
            raise UnauthorizedError()

        rule = await self.rule_store.create_notification_rule(rule_create, user_id)
        labels = await self.label_associations.attach_labels(rule.id or "", label_ids)
        logger.debug(
            f"Notification rule created: id={rule.id} type={rule.endpoint_type} "
            f"org={rule.org_id} labels={len(labels)}/{len(label_ids)}"
        )
        return await self.composer.compose(rule, labels)

    async def get_rule(self, raw_rule_id: str | None) -> NotificationRuleResponse:
        """Get a single composed rule.

        Raises:
            InvalidIDError: If the ID is malformed
            NotificationRuleNotFoundError: If the rule does not exist
        """
        rule_id = decode_id(raw_rule_id)
        rule = await self.rule_store.find_notification_rule_by_id(rule_id)
        labels = await self._rule_labels(rule.id or rule_id)
        return await self.composer.compose(rule, labels)

    async def list_rules(
        self, rule_filter: NotificationRuleFilter, options: FindOptions
    ) -> ComposedRuleList:
        """List and compose rules matching a filter.

        Rules that cannot be fully composed are degraded or dropped per item;
        see ``RuleResponseService.compose_all``.
        """
        rules, total = await self.rule_store.find_notification_rules(rule_filter, options)
        composed = await self.composer.compose_all(rules, rule_filter, options)
        if composed.dropped:
            logger.info(
                f"Listed {len(composed.items)} of {len(rules)} notification rules "
                f"({total} matching), {len(composed.dropped)} dropped"
            )
        return composed

    async def replace_rule(
        self, raw_rule_id: str | None, data: Any, user_id: str | None
    ) -> NotificationRuleResponse:
        """Replace every mutable field of a rule.

        The rule keeps its task and endpoint; labels are not changed.

        Raises:
            InvalidArgumentError: If the ID or body cannot be decoded
            UnauthorizedError: If there is no authenticated principal
            NotificationRuleNotFoundError: If the rule does not exist
        """
        rule_id = decode_id(raw_rule_id)
        rule_create = decode_notification_rule_create(data)
        rule_create.rule.id = rule_id
        if not user_id:
            raise UnauthorizedError()

        rule = await self.rule_store.update_notification_rule(rule_id, rule_create, user_id)
        logger.debug(f"Notification rule replaced: id={rule.id} status={rule_create.status}")
        labels = await self._rule_labels(rule_id)
        return await self.composer.compose(rule, labels)

    async def patch_rule(self, raw_rule_id: str | None, data: Any) -> NotificationRuleResponse:
        """Apply a partial update to a rule.

        Only fields present in the body are passed to the store. An empty or
        unrecognized body leaves the rule unchanged.

        Raises:
            InvalidArgumentError: If the ID or changeset is invalid
            NotificationRuleNotFoundError: If the rule does not exist
        """
        rule_id = decode_id(raw_rule_id)
        update = decode_notification_rule_update(data)
        rule = await self.rule_store.patch_notification_rule(rule_id, update)
        logger.debug(f"Notification rule patched: id={rule_id} fields={sorted(update.changes())}")
        labels = await self._rule_labels(rule_id)
        return await self.composer.compose(rule, labels)

    async def delete_rule(self, raw_rule_id: str | None) -> None:
        """Delete a rule and its task.

        Raises:
            InvalidIDError: If the ID is malformed
            NotificationRuleNotFoundError: If the rule does not exist
        """
        rule_id = decode_id(raw_rule_id)
        await self.rule_store.delete_notification_rule(rule_id)
        logger.debug(f"Notification rule deleted: id={rule_id}")

    async def get_rule_query(self, raw_rule_id: str | None) -> QueryResponse:
        """Render the task query of a rule against its endpoint.

        Private fields are cleared first, so an http rule renders without its
        extra headers.

        Raises:
            InvalidArgumentError: If the ID is malformed or the endpoint is not
                compatible with the rule
            InternalError: If the endpoint cannot be fetched
        """
        rule_id = decode_id(raw_rule_id)
        rule = await self.rule_store.find_notification_rule_by_id(rule_id)
        try:
            endpoint = await self.endpoint_service.find_notification_endpoint_by_id(rule.endpoint_id)
        except UpstreamUnavailableError:
            raise
        except AlertingAPIError as e:
            raise InternalError(
                f"failed to find notification endpoint: {e.message}", {"id": rule.endpoint_id}
            ) from e
        return QueryResponse(flux=rule.clear_private_data().generate_query(endpoint))

    async def _require_rule(self, raw_rule_id: str | None) -> NotificationRuleBase:
        rule_id = decode_id(raw_rule_id)
        return await self.rule_store.find_notification_rule_by_id(rule_id)

    # =========================================================================
    # Members and owners
    # =========================================================================

    async def add_resource_user(
        self, raw_rule_id: str | None, data: Any, user_type: UserType
    ) -> ResourceMember:
        """Grant a user a role on a rule.

        Raises:
            InvalidArgumentError: If the body or user ID is invalid
            NotificationRuleNotFoundError: If the rule does not exist
            UserNotFoundError: If the user does not exist
        """
        rule = await self._require_rule(raw_rule_id)
        try:
            request = AddResourceMemberRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidArgumentError(format_validation_error(e)) from e
        user_id = decode_id(request.id, "userID")
        user = await self.user_service.find_user_by_id(user_id)

        await self.user_resource_mapping_service.create_user_resource_mapping(
            UserResourceMapping(
                user_id=user.id,
                user_type=user_type,
                resource_id=rule.id or "",
                resource_type=NOTIFICATION_RULE_RESOURCE_TYPE,
            )
        )
        logger.debug(f"Added {user_type} {user.id} to notification rule {rule.id}")
        return ResourceMember(id=user.id, name=user.name, status=user.status, role=user_type)

    async def list_resource_users(
        self, raw_rule_id: str | None, user_type: UserType
    ) -> ResourceMembersResponse:
        """List the users holding a role on a rule."""
        rule = await self._require_rule(raw_rule_id)
        mappings = await self.user_resource_mapping_service.find_user_resource_mappings(
            UserResourceMappingFilter(
                resource_type=NOTIFICATION_RULE_RESOURCE_TYPE,
                resource_id=rule.id,
                user_type=user_type,
            )
        )
        users = []
        for mapping in mappings:
            user = await self.user_service.find_user_by_id(mapping.user_id)
            users.append(
                ResourceMember(id=user.id, name=user.name, status=user.status, role=mapping.user_type)
            )

        links = self.composer.rule_links(rule.id or "")
        self_link = links.owners if user_type == UserType.OWNER else links.members
        return ResourceMembersResponse(users=users, links={"self": self_link})

    async def remove_resource_user(
        self, raw_rule_id: str | None, raw_user_id: str | None, user_type: UserType
    ) -> None:
        """Revoke a user's role on a rule.

        Raises:
            InvalidIDError: If either ID is malformed
            NotificationRuleNotFoundError: If the rule does not exist
            MappingNotFoundError: If the user holds no role on the rule
        """
        rule = await self._require_rule(raw_rule_id)
        user_id = decode_id(raw_user_id, "userID")
        await self.user_resource_mapping_service.delete_user_resource_mapping(rule.id or "", user_id)
        logger.debug(f"Removed {user_type} {user_id} from notification rule {rule.id}")

    # =========================================================================
    # Labels
    # =========================================================================

    async def list_labels(self, raw_rule_id: str | None) -> LabelsResponse:
        """List the labels attached to a rule."""
        rule = await self._require_rule(raw_rule_id)
        labels = await self._rule_labels(rule.id or "")
        return LabelsResponse(labels=labels, links={"self": self.composer.rule_links(rule.id or "").labels})

    async def add_label(self, raw_rule_id: str | None, data: Any) -> LabelResponse:
        """Attach a label to a rule.

        Unlike labels sent on create, failures here are reported.

        Raises:
            InvalidArgumentError: If the body or label ID is invalid
            NotificationRuleNotFoundError: If the rule does not exist
            LabelNotFoundError: If the label does not exist
        """
        rule = await self._require_rule(raw_rule_id)
        try:
            request = LabelMappingRequest.model_validate(data)
        except ValidationError as e:
            raise InvalidArgumentError(format_validation_error(e)) from e
        label_id = decode_id(request.label_id, "labelID")
        label = await self.label_service.find_label_by_id(label_id)

        await self.label_service.create_label_mapping(
            LabelMapping(label_id=label.id, resource_id=rule.id or "", resource_type=NOTIFICATION_RULE_RESOURCE_TYPE)
        )
        logger.debug(f"Attached label {label.id} to notification rule {rule.id}")
        return LabelResponse(label=label, links={"self": f"{self.composer.rule_links(rule.id or '').labels}/{label.id}"})

    async def remove_label(self, raw_rule_id: str | None, raw_label_id: str | None) -> None:
        """Detach a label from a rule.

        Raises:
            InvalidIDError: If either ID is malformed
            NotificationRuleNotFoundError: If the rule does not exist
            MappingNotFoundError: If the label is not attached to the rule
        """
        rule = await self._require_rule(raw_rule_id)
        label_id = decode_id(raw_label_id, "labelID")
        await self.label_service.delete_label_mapping(
            LabelMapping(label_id=label_id, resource_id=rule.id or "", resource_type=NOTIFICATION_RULE_RESOURCE_TYPE)
        )
        logger.debug(f"Detached label {label_id} from notification rule {rule.id}")
