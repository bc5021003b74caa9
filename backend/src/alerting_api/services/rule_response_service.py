"""Composition of external notification rule documents."""

import asyncio
import logging
from enum import StrEnum
from urllib.parse import urlencode

from pydantic import BaseModel

from alerting_api.exceptions import AlertingAPIError, InternalError, UpstreamUnavailableError
from alerting_api.models.domain.filter import FindOptions, NotificationRuleFilter
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE, Label
from alerting_api.models.domain.notification_rule import NotificationRuleBase
from alerting_api.models.domain.task import TaskRunSnapshot
from alerting_api.models.dto.notification_rule import (
    NotificationRuleLinks,
    NotificationRuleListResponse,
    NotificationRuleResponse,
    PagingLinks,
)
from alerting_api.services.interfaces import LabelService, TaskService
from alerting_api.utils.secure_logging import sanitize_exception_message

logger = logging.getLogger(__name__)

DEFAULT_COMPOSE_CONCURRENCY = 8


class ComposeStatus(StrEnum):
    """How completely a rule could be composed."""

    OK = "ok"
    PARTIAL = "partial"  # composed without its labels
    FAILED = "failed"  # dropped from the list


class RuleComposeOutcome(BaseModel):
    """Per-rule result of list composition."""

    rule_id: str
    status: ComposeStatus
    reason: str | None = None


class ComposedRuleList(BaseModel):
    """Composed list page together with what happened to each rule."""

    items: list[NotificationRuleResponse]
    links: PagingLinks
    outcomes: list[RuleComposeOutcome]

    @property
    def dropped(self) -> list[RuleComposeOutcome]:
        """Outcomes of the rules missing from ``items``."""
        return [o for o in self.outcomes if o.status == ComposeStatus.FAILED]

    def to_response(self) -> NotificationRuleListResponse:
        """Get the collection wrapper returned to clients."""
        return NotificationRuleListResponse(items=self.items, links=self.links)


class RuleResponseService:
    """Builds the flat rule documents returned by the API."""

    def __init__(
        self,
        task_service: TaskService,
        label_service: LabelService,
        base_path: str = "/api/v2/notificationRules",
        concurrency: int = DEFAULT_COMPOSE_CONCURRENCY,
    ) -> None:
        """Initialize with the task runtime and label store.

        Args:
            task_service: Source of task run snapshots
            label_service: Source of rule labels for list composition
            base_path: Path of the rule collection, used for links
            concurrency: Maximum concurrent task lookups in ``compose_all``
        """
        self.task_service = task_service
        self.label_service = label_service
        self.base_path = base_path.rstrip("/")
        self.concurrency = max(1, concurrency)

    def rule_links(self, rule_id: str) -> NotificationRuleLinks:
        """Build the hyperlinks of a rule."""
        rule_path = f"{self.base_path}/{rule_id}"
        return NotificationRuleLinks(
            self_=rule_path,
            labels=f"{rule_path}/labels",
            members=f"{rule_path}/members",
            owners=f"{rule_path}/owners",
            query=f"{rule_path}/query",
        )

    async def find_run_snapshot(self, rule: NotificationRuleBase) -> TaskRunSnapshot:
        """Get the run snapshot of the task backing a rule."""
        if not rule.task_id:
            raise InternalError("notification rule has no task", {"id": rule.id})
        return await self.task_service.find_task_by_id(rule.task_id)

    async def compose(
        self, rule: NotificationRuleBase, labels: list[Label]
    ) -> NotificationRuleResponse:
        """Compose the external document of a single rule.

        The task run snapshot is mandatory: if it cannot be fetched the
        composition fails.

        Raises:
            InternalError: If the task snapshot cannot be fetched
            UpstreamUnavailableError: If the task runtime is unreachable
        """
        try:
            snapshot = await self.find_run_snapshot(rule)
        except UpstreamUnavailableError:
            raise
        except AlertingAPIError as e:
            raise InternalError(
                f"failed to find task for notification rule: {e.message}", {"id": rule.id}
            ) from e

        return NotificationRuleResponse(
            rule=rule.clear_private_data(),
            labels=list(labels),
            links=self.rule_links(rule.id or ""),
            status=snapshot.status,
            latest_completed=snapshot.latest_completed,
            latest_scheduled=snapshot.latest_scheduled,
            last_run_status=snapshot.last_run_status,
            last_run_error=snapshot.last_run_error,
        )

    async def compose_all(
        self,
        rules: list[NotificationRuleBase],
        rule_filter: NotificationRuleFilter,
        options: FindOptions,
    ) -> ComposedRuleList:
        """Compose a page of rules.

        A rule whose labels cannot be fetched is returned without labels. A
        rule whose task snapshot cannot be fetched is left out. Neither fails
        the page, and the remaining items keep the order of ``rules``.
        """
        links = self.paging_links(rule_filter, options, len(rules))

        # Labels come from the request-scoped session, so fetch them one at a time
        labels_by_rule: list[list[Label]] = []
        outcomes: list[RuleComposeOutcome] = []
        for rule in rules:
            try:
                labels = await self.label_service.find_resource_labels(
                    rule.id or "", NOTIFICATION_RULE_RESOURCE_TYPE
                )
                outcomes.append(RuleComposeOutcome(rule_id=rule.id or "", status=ComposeStatus.OK))
            except Exception as e:
                reason = sanitize_exception_message(e)
                logger.warning(f"Failed to fetch labels for notification rule {rule.id}: {reason}")
                labels = []
                outcomes.append(
                    RuleComposeOutcome(
                        rule_id=rule.id or "",
                        status=ComposeStatus.PARTIAL,
                        reason=f"labels unavailable: {reason}",
                    )
                )
            labels_by_rule.append(labels)

        semaphore = asyncio.Semaphore(self.concurrency)

        async def compose_one(rule: NotificationRuleBase, labels: list[Label]) -> NotificationRuleResponse:
            async with semaphore:
                return await self.compose(rule, labels)

        results = await asyncio.gather(
            *(compose_one(rule, labels) for rule, labels in zip(rules, labels_by_rule)),
            return_exceptions=True,
        )

        items: list[NotificationRuleResponse] = []
        for index, result in enumerate(results):
            if isinstance(result, asyncio.CancelledError):
                raise result
            if isinstance(result, BaseException):
                reason = sanitize_exception_message(result)
                logger.warning(f"Dropping notification rule {rules[index].id} from list: {reason}")
                outcomes[index] = RuleComposeOutcome(
                    rule_id=outcomes[index].rule_id,
                    status=ComposeStatus.FAILED,
                    reason=reason,
                )
                continue
            items.append(result)

        return ComposedRuleList(items=items, links=links, outcomes=outcomes)

    def paging_links(
        self, rule_filter: NotificationRuleFilter, options: FindOptions, count: int
    ) -> PagingLinks:
        """Build paging links.

        ``next`` is offered when the store returned a full page, ``prev``
        when the page does not start at zero.

        Args:
            rule_filter: Filter of the request, echoed in every link
            options: Paging options of the request
            count: Number of rules the store returned for this page
        """
        filter_params = rule_filter.query_params()

        def link(offset: int) -> str:
            params = filter_params + options.model_copy(update={"offset": offset}).query_params()
            params.sort(key=lambda item: item[0])
            return f"{self.base_path}?{urlencode(params)}"

        next_link = link(options.offset + options.limit) if count >= options.limit else None
        prev_link = link(max(options.offset - options.limit, 0)) if options.offset > 0 else None
        return PagingLinks(prev=prev_link, self_=link(options.offset), next=next_link)
