"""Tests for decoding list query parameters."""

import pytest
from starlette.datastructures import QueryParams

from fakes import ORG_ID, USER_ID
from alerting_api.exceptions import InvalidArgumentError
from alerting_api.models.domain.filter import DEFAULT_PAGE_SIZE
from alerting_api.models.domain.label import NOTIFICATION_RULE_RESOURCE_TYPE
from alerting_api.utils.filters import decode_find_options, decode_notification_rule_filter, parse_tag


class TestParseTag:
    """Test ``key:value`` tag parsing."""

    def test_key_value_pair(self) -> None:
        """Verify a well-formed tag yields an equality predicate."""
        tag = parse_tag("env:prod")

        assert tag is not None
        assert (tag.key, tag.value, tag.operator) == ("env", "prod", "equal")

    @pytest.mark.parametrize("raw", ["not-a-kv-pair", "a:b:c", ":prod", "env:", ""])
    def test_malformed_tag_is_rejected(self, raw: str) -> None:
        """Verify malformed tags parse to None instead of raising."""
        assert parse_tag(raw) is None


class TestDecodeNotificationRuleFilter:
    """Test the list filter decoder."""

    def test_empty_query(self) -> None:
        """Verify defaults when no parameters are given."""
        rule_filter, options = decode_notification_rule_filter(QueryParams(""))

        assert rule_filter.org_id is None
        assert rule_filter.organization is None
        assert rule_filter.tags == []
        assert rule_filter.user_resource_mapping.resource_type == NOTIFICATION_RULE_RESOURCE_TYPE
        assert options.offset == 0
        assert options.limit == DEFAULT_PAGE_SIZE
        assert options.descending is False

    def test_org_id_takes_precedence_over_name(self) -> None:
        """Verify org name is ignored when an orgID is present."""
        rule_filter, _ = decode_notification_rule_filter(QueryParams(f"orgID={ORG_ID}&org=acme"))

        assert rule_filter.org_id == ORG_ID
        assert rule_filter.organization is None

    def test_org_name(self) -> None:
        """Verify the org name is bound when no ID is given."""
        rule_filter, _ = decode_notification_rule_filter(QueryParams("org=acme"))

        assert rule_filter.org_id is None
        assert rule_filter.organization == "acme"

    @pytest.mark.parametrize("org_id", ["xyz", "0000000000000000", "020F755C3C082000"])
    def test_invalid_org_id_fails(self, org_id: str) -> None:
        """Verify a malformed orgID rejects the whole request."""
        with pytest.raises(InvalidArgumentError):
            decode_notification_rule_filter(QueryParams(f"orgID={org_id}"))

    def test_malformed_tags_are_dropped(self) -> None:
        """Verify malformed tags are skipped while valid ones are kept."""
        rule_filter, _ = decode_notification_rule_filter(
            QueryParams("tag=not-a-kv-pair&tag=env:prod&tag=region:eu")
        )

        assert [(t.key, t.value) for t in rule_filter.tags] == [("env", "prod"), ("region", "eu")]

    def test_only_malformed_tag_leaves_filter_unrestricted(self) -> None:
        """Verify a lone malformed tag does not filter anything."""
        rule_filter, _ = decode_notification_rule_filter(QueryParams("tag=not-a-kv-pair"))

        assert rule_filter.tags == []

    def test_user_mapping_filter(self) -> None:
        """Verify userID restricts the user-resource mapping filter."""
        rule_filter, _ = decode_notification_rule_filter(QueryParams(f"userID={USER_ID}"))

        assert rule_filter.user_resource_mapping.user_id == USER_ID

    def test_malformed_user_id_falls_back(self) -> None:
        """Verify a malformed userID silently drops the mapping restriction."""
        rule_filter, _ = decode_notification_rule_filter(QueryParams("userID=bogus"))

        assert rule_filter.user_resource_mapping.user_id is None
        assert rule_filter.user_resource_mapping.resource_type == NOTIFICATION_RULE_RESOURCE_TYPE


class TestDecodeFindOptions:
    """Test paging option decoding."""

    def test_valid_options(self) -> None:
        """Verify offset, limit, sortBy and descending are decoded."""
        options = decode_find_options(
            QueryParams("offset=40&limit=10&sortBy=name&descending=true")
        )

        assert options.offset == 40
        assert options.limit == 10
        assert options.sort_by == "name"
        assert options.descending is True

    @pytest.mark.parametrize("value,expected", [("t", True), ("1", True), ("FALSE", False), ("0", False)])
    def test_descending_spellings(self, value: str, expected: bool) -> None:
        """Verify the accepted boolean spellings."""
        assert decode_find_options(QueryParams(f"descending={value}")).descending is expected

    @pytest.mark.parametrize(
        "query",
        ["limit=0", "limit=101", "limit=ten", "offset=-1", "offset=1.5", "descending=yes"],
    )
    def test_invalid_options(self, query: str) -> None:
        """Verify malformed paging options are rejected."""
        with pytest.raises(InvalidArgumentError):
            decode_find_options(QueryParams(query))
