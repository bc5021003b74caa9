"""Decoding of list query parameters into rule filters and paging options."""

from typing import Protocol

from alerting_api.exceptions import InvalidArgumentError
from alerting_api.models.domain.filter import (
    MAX_PAGE_SIZE,
    FindOptions,
    NotificationRuleFilter,
    TagPredicate,
)
from alerting_api.models.domain.ids import decode_id, is_valid_id
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE
from alerting_api.models.domain.user_resource_mapping import UserResourceMappingFilter

_TRUE_VALUES = {"1", "t", "true"}
_FALSE_VALUES = {"0", "f", "false"}


class QueryParamSource(Protocol):
    """Multi-valued query parameters (e.g. starlette ``QueryParams``)."""

    def get(self, key: str, default: str | None = None) -> str | None: ...

    def getlist(self, key: str) -> list[str]: ...


def parse_tag(value: str) -> TagPredicate | None:
    """Parse a ``key:value`` tag parameter.

    Returns:
        TagPredicate, or None if the value is malformed
    """
    parts = value.split(":")
    if len(parts) != 2:
        return None
    key, tag_value = parts[0].strip(), parts[1].strip()
    if not key or not tag_value:
        return None
    return TagPredicate(key=key, value=tag_value)


def decode_user_resource_mapping_filter(
    params: QueryParamSource, resource_type: str
) -> UserResourceMappingFilter:
    """Decode the ``userID`` / ``resourceID`` sub-filter.

    Raises:
        InvalidIDError: If either identifier is malformed
    """
    mapping_filter = UserResourceMappingFilter(resource_type=resource_type)
    if resource_id := params.get("resourceID"):
        mapping_filter.resource_id = decode_id(resource_id, "resourceID")
    if user_id := params.get("userID"):
        mapping_filter.user_id = decode_id(user_id, "userID")
    return mapping_filter


def _parse_int(params: QueryParamSource, name: str) -> int | None:
    raw = params.get(name)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except ValueError as e:
        raise InvalidArgumentError(f"{name} is invalid") from e


def decode_find_options(params: QueryParamSource) -> FindOptions:
    """Decode pagination and sorting options.

    Raises:
        InvalidArgumentError: If offset, limit or descending cannot be decoded
    """
    options = FindOptions()

    offset = _parse_int(params, "offset")
    if offset is not None:
        if offset < 0:
            raise InvalidArgumentError("offset is invalid")
        options.offset = offset

    limit = _parse_int(params, "limit")
    if limit is not None:
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise InvalidArgumentError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        options.limit = limit

    if sort_by := params.get("sortBy"):
        options.sort_by = sort_by

    descending = params.get("descending")
    if descending:
        lowered = descending.lower()
        if lowered in _TRUE_VALUES:
            options.descending = True
        elif lowered in _FALSE_VALUES:
            options.descending = False
        else:
            raise InvalidArgumentError("descending is invalid")

    return options


def decode_notification_rule_filter(
    params: QueryParamSource,
) -> tuple[NotificationRuleFilter, FindOptions]:
    """Decode list query parameters.

    A malformed user/resource sub-filter falls back to the unrestricted
    resource-type filter and malformed tags are dropped; neither fails the
    call. A malformed ``orgID`` or paging option does.

    Returns:
        Tuple of (filter, paging options)

    Raises:
        InvalidArgumentError: If orgID or the paging options are invalid
    """
    rule_filter = NotificationRuleFilter()
    try:
        rule_filter.user_resource_mapping = decode_user_resource_mapping_filter(
            params, NOTIFICATION_RULE_RESOURCE_TYPE
        )
    except InvalidArgumentError:
        pass

    options = decode_find_options(params)

    if org_id := params.get("orgID"):
        if not is_valid_id(org_id):
            raise InvalidArgumentError("orgID is invalid", {"field": "orgID"})
        rule_filter.org_id = org_id
    elif org_name := params.get("org"):
        rule_filter.organization = org_name

    for raw_tag in params.getlist("tag"):
        tag = parse_tag(raw_tag)
        if tag is not None:
            rule_filter.tags.append(tag)

    return rule_filter, options
