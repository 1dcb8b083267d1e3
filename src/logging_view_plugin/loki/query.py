"""LogQL text helpers: namespace and severity filters, durations."""

import math
import re
from collections.abc import Iterable

from logging_view_plugin.severity import Severity

NAMESPACE_LABEL = "kubernetes_namespace_name"
SEVERITY_LABEL = "level"

# first stream selector, e.g. {app="api", level=~"error|warn"}
_SELECTOR_RE = re.compile(r"\{(?P<matchers>(?:[^{}\"]|\"(?:[^\"\\]|\\.)*\")*)\}")

_DURATION_UNITS = (
    ("d", 86_400_000),
    ("h", 3_600_000),
    ("m", 60_000),
    ("s", 1_000),
    ("ms", 1),
)

HISTOGRAM_BUCKETS = 60


def escape_label_value(value: str) -> str:
    """Escape a value for use inside a double quoted LogQL string."""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def _has_equality_matcher(matchers: str, label: str, escaped_value: str) -> bool:
    pattern = rf'(^|,)\s*{re.escape(label)}\s*=\s*"{re.escape(escaped_value)}"\s*(,|$)'
    return re.search(pattern, matchers) is not None


def query_with_namespace(query: str, namespace: str | None = None) -> str:
    """Restrict a query to one namespace.

    The equality matcher is added to the first stream selector unless that
    selector already holds the same one. Other matchers on the namespace label
    stay in place; Loki ANDs them with the added one. A query without a
    namespace is returned unchanged.
    """
    if not namespace:
        return query

    escaped = escape_label_value(namespace)
    matcher = f'{NAMESPACE_LABEL}="{escaped}"'
    match = _SELECTOR_RE.search(query)
    if match is None:
        return f"{{ {matcher} }} {query.strip()}".strip()

    matchers = match.group("matchers")
    if _has_equality_matcher(matchers, NAMESPACE_LABEL, escaped):
        return query

    if matchers.strip():
        selector = f"{{ {matchers.strip()}, {matcher} }}"
    else:
        selector = f"{{ {matcher} }}"
    return query[: match.start()] + selector + query[match.end() :]


def query_with_severity(query: str, severities: Iterable[Severity] | None = None) -> str:
    """Append a level filter keeping only the selected severities.

    ``unknown`` keeps entries without a level label.
    """
    selected = sorted(set(severities or ()), key=lambda s: list(Severity).index(s))
    if not selected:
        return query

    values = [s.value for s in selected if s is not Severity.UNKNOWN]
    if Severity.UNKNOWN in selected:
        values.append("")
    return f'{query.rstrip()} | {SEVERITY_LABEL}=~"{"|".join(values)}"'


def duration_from_timestamp(milliseconds: float) -> str:
    """Render milliseconds as a LogQL duration, e.g. 90000 -> "1m30s"."""
    remaining = int(round(milliseconds))
    if remaining <= 0:
        return "0s"

    parts = []
    for unit, size in _DURATION_UNITS:
        amount, remaining = divmod(remaining, size)
        if amount:
            parts.append(f"{amount}{unit}")
    return "".join(parts)


def interval_from_range(start: float, end: float, buckets: int = HISTOGRAM_BUCKETS) -> int:
    """Histogram step in milliseconds for a time range, whole seconds and at least 1s."""
    span = max(end - start, 0)
    seconds = max(math.ceil(span / buckets / 1000), 1)
    return seconds * 1000


def nanoseconds(milliseconds: float) -> str:
    """Wire form of a timestamp given in epoch milliseconds."""
    return str(int(milliseconds * 1_000_000))
