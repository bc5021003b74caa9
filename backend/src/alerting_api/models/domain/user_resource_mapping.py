"""User, organization and user-resource-mapping domain models."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class UserType(StrEnum):
    """Role a user holds on a resource."""

    OWNER = "owner"
    MEMBER = "member"


class User(BaseModel):
    """Platform user."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str
    status: str = "active"


class Organization(BaseModel):
    """Platform organization."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    name: str


class UserResourceMapping(BaseModel):
    """Mapping granting a user a role on a resource."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    user_id: str = Field(alias="userID")
    user_type: UserType = Field(alias="userType")
    resource_id: str = Field(alias="resourceID")
    resource_type: str = Field(alias="resourceType")


class UserResourceMappingFilter(BaseModel):
    """Filter over user-resource mappings."""

    resource_type: str
    resource_id: str | None = None
    user_id: str | None = None
    user_type: UserType | None = None
