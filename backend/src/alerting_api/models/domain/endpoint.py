"""Notification endpoint domain model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class EndpointType(StrEnum):
    """Delivery channel families."""

    SLACK = "slack"
    PAGERDUTY = "pagerduty"
    HTTP = "http"


class NotificationEndpoint(BaseModel):
    """Delivery-channel definition a rule targets.

    Secret values (tokens, routing keys) are never carried here, only the
    key under which the platform stores them.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    org_id: str | None = Field(default=None, alias="orgID")
    name: str
    type: EndpointType
    status: str = "active"
    url: str | None = None
    method: str | None = None
    token_key: str | None = Field(default=None, alias="token")
    routing_key: str | None = Field(default=None, alias="routingKey")
    client_url: str | None = Field(default=None, alias="clientURL")
