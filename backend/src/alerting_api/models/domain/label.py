"""Label domain models."""

from pydantic import BaseModel, ConfigDict, Field

NOTIFICATION_RULE_RESOURCE_TYPE = "notificationRules"


class Label(BaseModel):
    """Label attached to resources through label mappings."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: str
    org_id: str | None = Field(default=None, alias="orgID")
    name: str
    properties: dict[str, str] = Field(default_factory=dict)


class LabelMapping(BaseModel):
    """Junction between a label and a resource."""

    model_config = ConfigDict(populate_by_name=True)

    label_id: str = Field(alias="labelID")
    resource_id: str = Field(alias="resourceID")
    resource_type: str = Field(default=NOTIFICATION_RULE_RESOURCE_TYPE, alias="resourceType")
