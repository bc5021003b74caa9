"""Filters and paging options for listing notification rules."""

from pydantic import BaseModel, Field

from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE
from alerting_api.models.domain.user_resource_mapping import UserResourceMappingFilter

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class TagPredicate(BaseModel):
    """Tag predicate used to filter rules by their tag rules."""

    key: str
    value: str
    operator: str = "equal"

    def query_param(self) -> str:
        """Render the predicate back into its ``key:value`` query form."""
        return f"{self.key}:{self.value}"


class NotificationRuleFilter(BaseModel):
    """Filter for listing notification rules.

    ``org_id`` and ``organization`` are mutually exclusive; the decoder only
    binds the name when no ID was given.
    """

    org_id: str | None = None
    organization: str | None = None
    tags: list[TagPredicate] = Field(default_factory=list)
    user_resource_mapping: UserResourceMappingFilter = Field(
        default_factory=lambda: UserResourceMappingFilter(
            resource_type=NOTIFICATION_RULE_RESOURCE_TYPE
        )
    )

    def query_params(self) -> list[tuple[str, str]]:
        """Get the filter as query parameters for paging links."""
        params: list[tuple[str, str]] = []
        if self.org_id:
            params.append(("orgID", self.org_id))
        if self.organization:
            params.append(("org", self.organization))
        for tag in self.tags:
            params.append(("tag", tag.query_param()))
        return params


class FindOptions(BaseModel):
    """Pagination and sorting options."""

    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    offset: int = Field(default=0, ge=0)
    sort_by: str | None = None
    descending: bool = False

    def query_params(self) -> list[tuple[str, str]]:
        """Get the options as query parameters for paging links."""
        params = [("offset", str(self.offset)), ("limit", str(self.limit))]
        if self.sort_by:
            params.append(("sortBy", self.sort_by))
        params.append(("descending", "true" if self.descending else "false"))
        return params
