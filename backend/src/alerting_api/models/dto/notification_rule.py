"""Notification rule DTOs."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_serializer

from alerting_api.models.domain.label import Label
from alerting_api.models.domain.notification_rule import NotificationRule
from alerting_api.models.domain.task import TaskStatus
from alerting_api.models.domain.user_resource_mapping import UserType


class NotificationRuleLinks(BaseModel):
    """Hyperlinks of a single rule."""

    model_config = ConfigDict(populate_by_name=True)

    self_: str = Field(alias="self")
    labels: str
    members: str
    owners: str
    query: str


class PagingLinks(BaseModel):
    """Paging hyperlinks of a list response."""

    model_config = ConfigDict(populate_by_name=True)

    prev: str | None = None
    self_: str = Field(alias="self")
    next: str | None = None


class NotificationRuleResponse(BaseModel):
    """External representation of a rule.

    Serializes to one flat object: the rule's own fields followed by labels,
    links and the run status of the backing task.
    """

    model_config = ConfigDict(populate_by_name=True)

    rule: NotificationRule
    labels: list[Label] = Field(default_factory=list)
    links: NotificationRuleLinks
    status: TaskStatus
    latest_completed: datetime | None = Field(default=None, alias="latestCompleted")
    latest_scheduled: datetime | None = Field(default=None, alias="latestScheduled")
    last_run_status: str | None = Field(default=None, alias="lastRunStatus")
    last_run_error: str | None = Field(default=None, alias="lastRunError")

    @model_serializer(mode="wrap")
    def _serialize_flat(self, handler: Any) -> dict[str, Any]:
        data = handler(self)
        rule = data.pop("rule")
        return {**rule, **data}

    def to_json(self) -> dict[str, Any]:
        """Render the JSON body of the document."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class NotificationRuleListResponse(BaseModel):
    """Collection wrapper for list responses."""

    items: list[NotificationRuleResponse]
    links: PagingLinks

    def to_json(self) -> dict[str, Any]:
        """Render the JSON body of the collection."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class QueryResponse(BaseModel):
    """Rendered task query of a rule."""

    flux: str


class AddResourceMemberRequest(BaseModel):
    """Request to add a member or owner to a rule."""

    id: str
    name: str | None = None


class ResourceMember(BaseModel):
    """A user holding a role on a rule."""

    id: str
    name: str
    status: str
    role: UserType


class ResourceMembersResponse(BaseModel):
    """Members or owners of a rule."""

    users: list[ResourceMember]
    links: dict[str, str]


class LabelMappingRequest(BaseModel):
    """Request to attach a label to a rule."""

    model_config = ConfigDict(populate_by_name=True)

    label_id: str = Field(alias="labelID")


class LabelResponse(BaseModel):
    """A label attached to a rule."""

    label: Label
    links: dict[str, str]


class LabelsResponse(BaseModel):
    """Labels attached to a rule."""

    labels: list[Label]
    links: dict[str, str]
