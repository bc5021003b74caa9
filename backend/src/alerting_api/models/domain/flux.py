"""Rendering of notification rules into executable Flux task scripts."""

from typing import TYPE_CHECKING

from alerting_api.models.domain.ids import parse_duration

if TYPE_CHECKING:
    from alerting_api.models.domain.endpoint import NotificationEndpoint
    from alerting_api.models.domain.notification_rule import (
        NotificationRuleBase,
        StatusRule,
        TagRule,
    )

_TAG_OPERATORS = {
    "equal": '{ref} == "{value}"',
    "notequal": '{ref} != "{value}"',
    "equalregex": "{ref} =~ /{value}/",
    "notequalregex": "{ref} !~ /{value}/",
}


def flux_string(value: str | None) -> str:
    """Escape a value for use inside a double quoted Flux string."""
    if value is None:
        return ""
    return (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def flux_regex(value: str) -> str:
    """Escape a pattern for use inside a Flux regex literal."""
    return value.replace("/", "\\/").replace("\n", "\\n").replace("\r", "\\r")


def render_tag_filter(tag_rules: list["TagRule"]) -> str:
    """Render tag rules as a Flux predicate body."""
    if not tag_rules:
        return "true"
    clauses = []
    for tag in tag_rules:
        template = _TAG_OPERATORS[str(tag.operator)]
        ref = f'r["{flux_string(tag.key)}"]'
        value = flux_regex(tag.value) if "regex" in str(tag.operator) else flux_string(tag.value)
        clauses.append(template.format(ref=ref, value=value))
    return " and ".join(clauses)


def _status_variable(index: int, status_rule: "StatusRule") -> str:
    return f"{str(status_rule.current_level).lower()}_{index}"


def render_status_filters(status_rules: list["StatusRule"], every: str) -> tuple[list[str], list[str]]:
    """Render one stream per status rule.

    Returns:
        Tuple of (statements, stream variable names)
    """
    statements: list[str] = []
    names: list[str] = []
    for index, status_rule in enumerate(status_rules):
        name = _status_variable(index, status_rule)
        level = str(status_rule.current_level).lower()
        if status_rule.previous_level is not None:
            previous = str(status_rule.previous_level).lower()
            stream = (
                f"statuses\n"
                f'    |> monitor["stateChanges"](fromLevel: "{previous}", toLevel: "{level}")'
            )
        elif level == "any":
            stream = "statuses"
        else:
            stream = f'statuses\n    |> filter(fn: (r) => r["_level"] == "{level}")'
        window = status_rule.period or every
        stream += (
            f'\n    |> filter(fn: (r) => r["_time"] >= '
            f'experimental["subDuration"](from: now(), d: {window}))'
        )
        statements.append(f"{name} = {stream}")
        names.append(name)
    return statements, names


def lookback(rule: "NotificationRuleBase") -> str:
    """Pick the widest window the status streams need, as a duration literal."""
    every = rule.every or "1h"
    candidates = [every] + [sr.period for sr in rule.status_rules if sr.period]
    return max(candidates, key=parse_duration)


def render_rule_query(
    rule: "NotificationRuleBase",
    endpoint: "NotificationEndpoint",
    package: str,
    endpoint_statements: list[str],
    endpoint_call: str,
) -> str:
    """Assemble the task script shared by all rule variants.

    Args:
        rule: Rule being rendered
        endpoint: Endpoint the rule targets
        package: Flux package implementing the endpoint family
        endpoint_statements: Statements declaring the endpoint function
        endpoint_call: Expression passed as ``endpoint:`` to ``monitor.notify``

    Returns:
        Flux script
    """
    every = rule.every or "1h"
    offset = rule.offset or "0s"
    imports = [
        'import "influxdata/influxdb/monitor"',
        f'import "{package}"',
        'import "influxdata/influxdb/secrets"',
        'import "experimental"',
    ]
    if package == "http":
        imports.append('import "json"')

    status_statements, stream_names = render_status_filters(rule.status_rules, every)
    if not stream_names:
        all_statuses = "statuses"
    elif len(stream_names) == 1:
        all_statuses = stream_names[0]
    else:
        all_statuses = f"union(tables: [{', '.join(stream_names)}])\n    |> sort(columns: [\"_time\"])"

    lines = [
        "package main",
        f"// {flux_string(rule.name)}",
        *imports,
        "",
        f'option task = {{name: "{flux_string(rule.name)}", every: {every}, offset: {offset}}}',
        "",
        *endpoint_statements,
        "notification = {",
        f'    _notification_rule_id: "{rule.id or ""}",',
        f'    _notification_rule_name: "{flux_string(rule.name)}",',
        f'    _notification_endpoint_id: "{endpoint.id}",',
        f'    _notification_endpoint_name: "{flux_string(endpoint.name)}",',
        "}",
        f'statuses = monitor["from"](start: -{lookback(rule)}, fn: (r) => {render_tag_filter(rule.tag_rules)})',
        *status_statements,
        f"all_statuses = {all_statuses}",
        "",
        "all_statuses",
    ]
    if rule.limit_every and rule.limit:
        lines.append(
            f'    |> monitor["limit"](limit: {rule.limit}, every: {rule.limit_every}s)'
        )
    lines.append(f'    |> monitor["notify"](data: notification, endpoint: {endpoint_call})')
    return "\n".join(lines) + "\n"
