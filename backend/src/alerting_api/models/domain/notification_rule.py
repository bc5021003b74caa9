"""Notification rule domain models.

Rules form a closed tagged union on ``type``: one variant per delivery
endpoint family. Every variant shares the schedule and predicate fields of
``NotificationRuleBase`` and knows how to render itself into a task query
against an endpoint of its own family.
"""

from abc import abstractmethod
from datetime import datetime
from enum import StrEnum
from typing import Annotated, Any, ClassVar, Literal, Union

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    model_validator,
)

from alerting_api.exceptions import InvalidArgumentError, QueryRenderError
from alerting_api.models.domain.endpoint import EndpointType, NotificationEndpoint
from alerting_api.models.domain.flux import flux_string, render_rule_query
from alerting_api.models.domain.ids import Duration, PlatformID
from alerting_api.models.domain.task import TaskStatus


class CheckLevel(StrEnum):
    """Severity levels produced by checks."""

    UNKNOWN = "UNKNOWN"
    OK = "OK"
    INFO = "INFO"
    CRIT = "CRIT"
    WARN = "WARN"
    ANY = "ANY"


class TagRuleOperator(StrEnum):
    """Comparison operators for tag rules."""

    EQUAL = "equal"
    NOT_EQUAL = "notequal"
    EQUAL_REGEX = "equalregex"
    NOT_EQUAL_REGEX = "notequalregex"


class TagRule(BaseModel):
    """Tag predicate a status must satisfy."""

    key: str = Field(min_length=1)
    value: str
    operator: TagRuleOperator = TagRuleOperator.EQUAL


class StatusRule(BaseModel):
    """Status predicate: level, observation period and trigger count."""

    model_config = ConfigDict(populate_by_name=True)

    current_level: CheckLevel = Field(
        validation_alias=AliasChoices("currentLevel", "level", "current_level"),
        serialization_alias="currentLevel",
    )
    previous_level: CheckLevel | None = Field(default=None, alias="previousLevel")
    period: Duration | None = None
    count: int | None = Field(default=None, ge=0)


class NotificationRuleBase(BaseModel):
    """Fields and behaviour shared by every rule variant."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    endpoint_type: ClassVar[EndpointType]
    # Cleared before a rule leaves the service
    private_fields: ClassVar[tuple[str, ...]] = ("task_id",)

    id: PlatformID | None = None
    org_id: PlatformID = Field(alias="orgID")
    owner_id: PlatformID | None = Field(default=None, alias="ownerID")
    task_id: PlatformID | None = Field(default=None, alias="taskID")
    endpoint_id: PlatformID = Field(alias="endpointID")
    name: str = Field(min_length=1, max_length=255)
    description: str | None = None
    runbook_link: str | None = Field(default=None, alias="runbookLink")
    every: Duration
    offset: Duration | None = None
    sleep_until: datetime | None = Field(default=None, alias="sleepUntil")
    tag_rules: list[TagRule] = Field(default_factory=list, alias="tagRules")
    status_rules: list[StatusRule] = Field(min_length=1, alias="statusRules")
    limit_every: int | None = Field(default=None, ge=1, alias="limitEvery")
    limit: int | None = Field(default=None, ge=1)
    created_at: datetime | None = Field(default=None, alias="createdAt")
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    @model_validator(mode="after")
    def validate_limit_pair(self) -> "NotificationRuleBase":
        """Rate limit is either fully specified or absent."""
        if (self.limit_every is None) != (self.limit is None):
            raise ValueError("limitEvery and limit must be set together")
        return self

    def clear_private_data(self) -> "NotificationRuleBase":
        """Return a copy with private fields cleared."""
        return self.model_copy(update={name: None for name in self.private_fields})

    def generate_query(self, endpoint: NotificationEndpoint) -> str:
        """Render the task script for this rule against an endpoint.

        Raises:
            QueryRenderError: If the endpoint belongs to another family or
                lacks what the variant needs
        """
        if endpoint.type != self.endpoint_type:
            raise QueryRenderError(
                f"endpoint type {endpoint.type} is not compatible with "
                f"{self.endpoint_type} notification rule"
            )
        statements, call = self._endpoint_expression(endpoint)
        return render_rule_query(self, endpoint, self.endpoint_type.value, statements, call)

    @abstractmethod
    def _endpoint_expression(self, endpoint: NotificationEndpoint) -> tuple[list[str], str]:
        """Return the endpoint statements and the expression passed to notify."""


class SlackNotificationRule(NotificationRuleBase):
    """Rule delivering to a Slack webhook or app endpoint."""

    endpoint_type: ClassVar[EndpointType] = EndpointType.SLACK

    type: Literal["slack"] = "slack"
    channel: str | None = None
    message_template: str = Field(min_length=1, alias="messageTemplate")

    def _endpoint_expression(self, endpoint: NotificationEndpoint) -> tuple[list[str], str]:
        if not endpoint.url:
            raise QueryRenderError("slack endpoint has no url")
        arguments = f'url: "{flux_string(endpoint.url)}"'
        statements = []
        if endpoint.token_key:
            statements.append(f'slack_secret = secrets["get"](key: "{flux_string(endpoint.token_key)}")')
            arguments += ", token: slack_secret"
        statements.append(f'slack_endpoint = slack["endpoint"]({arguments})')
        call = (
            "slack_endpoint(mapFn: (r) => ({"
            f'channel: "{flux_string(self.channel)}", '
            f'text: "{flux_string(self.message_template)}", '
            'color: if r["_level"] == "crit" then "danger" '
            'else if r["_level"] == "warn" then "warning" else "good"}))'
        )
        return statements, call


class PagerDutyNotificationRule(NotificationRuleBase):
    """Rule raising PagerDuty events."""

    endpoint_type: ClassVar[EndpointType] = EndpointType.PAGERDUTY

    type: Literal["pagerduty"] = "pagerduty"
    message_template: str = Field(min_length=1, alias="messageTemplate")

    def _endpoint_expression(self, endpoint: NotificationEndpoint) -> tuple[list[str], str]:
        if not endpoint.routing_key:
            raise QueryRenderError("pagerduty endpoint has no routing key")
        statements = [
            f'pagerduty_secret = secrets["get"](key: "{flux_string(endpoint.routing_key)}")',
            'pagerduty_endpoint = pagerduty["endpoint"]()',
        ]
        call = (
            "pagerduty_endpoint(mapFn: (r) => ({"
            "routingKey: pagerduty_secret, "
            'client: "influxdata", '
            f'clientURL: "{flux_string(endpoint.client_url)}", '
            'class: r["_check_name"], '
            'group: r["_source_measurement"], '
            'severity: pagerduty["severityFromLevel"](level: r["_level"]), '
            'eventAction: pagerduty["actionFromLevel"](level: r["_level"]), '
            'source: notification["_notification_rule_name"], '
            f'summary: "{flux_string(self.message_template)}", '
            'timestamp: time(v: r["_source_timestamp"])}))'
        )
        return statements, call


class HTTPNotificationRule(NotificationRuleBase):
    """Rule posting status payloads to an HTTP endpoint."""

    endpoint_type: ClassVar[EndpointType] = EndpointType.HTTP
    private_fields: ClassVar[tuple[str, ...]] = ("task_id", "headers")

    type: Literal["http"] = "http"
    # Extra request headers, may carry credentials
    headers: dict[str, str] | None = None

    def _endpoint_expression(self, endpoint: NotificationEndpoint) -> tuple[list[str], str]:
        if not endpoint.url:
            raise QueryRenderError("http endpoint has no url")
        statements = [f'http_endpoint = http["endpoint"](url: "{flux_string(endpoint.url)}")']
        headers = {"Content-Type": "application/json", **(self.headers or {})}
        header_record = ", ".join(
            f'"{flux_string(key)}": "{flux_string(value)}"' for key, value in sorted(headers.items())
        )
        call = (
            "http_endpoint(mapFn: (r) => {\n"
            "        body = {r with _version: 1}\n"
            f"        return {{headers: {{{header_record}}}, "
            'data: json["encode"](v: body)}\n'
            "    })"
        )
        return statements, call


NotificationRule = Annotated[
    Union[SlackNotificationRule, PagerDutyNotificationRule, HTTPNotificationRule],
    Field(discriminator="type"),
]

RULE_TYPES: dict[str, type[NotificationRuleBase]] = {
    "slack": SlackNotificationRule,
    "pagerduty": PagerDutyNotificationRule,
    "http": HTTPNotificationRule,
}


def format_validation_error(error: ValidationError) -> str:
    """Summarize a pydantic validation error as a single message."""
    messages = []
    for item in error.errors()[:3]:
        location = ".".join(str(part) for part in item.get("loc", ()) if part != "__root__")
        message = item.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "invalid value"


def decode_notification_rule(data: Any) -> NotificationRuleBase:
    """Decode a rule document, dispatching on its ``type`` discriminator.

    Raises:
        InvalidArgumentError: If the body is not an object, the type is
            unknown or the variant fails validation
    """
    if not isinstance(data, dict):
        raise InvalidArgumentError("notification rule body must be a JSON object")
    rule_type = data.get("type")
    rule_class = RULE_TYPES.get(rule_type) if isinstance(rule_type, str) else None
    if rule_class is None:
        raise InvalidArgumentError(f"invalid notification rule type {rule_type!r}")
    try:
        return rule_class.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(format_validation_error(e)) from e


class NotificationRuleCreate(BaseModel):
    """A rule definition together with its initial task status."""

    rule: NotificationRule
    status: TaskStatus = TaskStatus.ACTIVE


def decode_status(data: dict[str, Any]) -> TaskStatus:
    """Decode the mandatory ``status`` field of a create or replace body."""
    raw = data.get("status")
    if raw is None:
        raise InvalidArgumentError("status is required")
    try:
        return TaskStatus(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"invalid status {raw!r}") from e


def decode_notification_rule_create(data: Any) -> NotificationRuleCreate:
    """Decode a create or replace body into rule + status."""
    rule = decode_notification_rule(data)
    return NotificationRuleCreate(rule=rule, status=decode_status(data))


class NotificationRuleUpdate(BaseModel):
    """Sparse changeset applied by PATCH.

    Every field is optional. An explicit null clears the optional fields in
    ``CLEARABLE_FIELDS`` and is ignored everywhere else.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    CLEARABLE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"description", "sleep_until", "runbook_link", "limit_every", "limit"}
    )

    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: TaskStatus | None = None
    every: Duration | None = None
    offset: Duration | None = None
    sleep_until: datetime | None = Field(default=None, alias="sleepUntil")
    runbook_link: str | None = Field(default=None, alias="runbookLink")
    tag_rules: list[TagRule] | None = Field(default=None, alias="tagRules")
    status_rules: list[StatusRule] | None = Field(default=None, min_length=1, alias="statusRules")
    endpoint_id: PlatformID | None = Field(default=None, alias="endpointID")
    limit_every: int | None = Field(default=None, ge=1, alias="limitEvery")
    limit: int | None = Field(default=None, ge=1)

    def changes(self) -> dict[str, Any]:
        """Get the fields that were actually set, keyed by field name."""
        result: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name not in self.CLEARABLE_FIELDS:
                continue
            result[name] = value
        return result

    def rule_changes(self) -> dict[str, Any]:
        """Get the set fields that live on the rule itself (all but status)."""
        return {k: v for k, v in self.changes().items() if k != "status"}

    def is_empty(self) -> bool:
        """Check whether applying the changeset would change nothing."""
        return not self.changes()

    def apply(self, rule: NotificationRuleBase) -> NotificationRuleBase:
        """Apply the rule fields of the changeset to a rule.

        The result is validated again so cross-field invariants still hold.

        Raises:
            InvalidArgumentError: If the patched rule is no longer valid
        """
        changes = self.rule_changes()
        if not changes:
            return rule
        data = rule.model_dump()
        data.update(self.model_dump(include=set(changes)))
        try:
            return type(rule).model_validate(data)
        except ValidationError as e:
            raise InvalidArgumentError(format_validation_error(e)) from e


def decode_notification_rule_update(data: Any) -> NotificationRuleUpdate:
    """Decode and validate a PATCH changeset.

    Raises:
        InvalidArgumentError: If the body is not an object or fails validation
    """
    if not isinstance(data, dict):
        raise InvalidArgumentError("notification rule update must be a JSON object")
    try:
        return NotificationRuleUpdate.model_validate(data)
    except ValidationError as e:
        raise InvalidArgumentError(format_validation_error(e)) from e
