from logging_view_plugin.loki.alerts import MissingTenantLabelError, rule_namespace, rule_tenant
from logging_view_plugin.loki.client import (
    DEFAULT_TENANT,
    LOKI_ENDPOINT,
    FetchConfig,
    LokiClient,
    LokiRequest,
    get_fetch_config,
    histogram_request,
    query_range_request,
    rules_request,
    tail_request,
)
from logging_view_plugin.loki.fetch import CancellableFetch, FetchError, RequestInit
from logging_view_plugin.loki.query import (
    duration_from_timestamp,
    interval_from_range,
    query_with_namespace,
    query_with_severity,
)
from logging_view_plugin.loki.tail import TailSocket

__all__ = [
    "DEFAULT_TENANT",
    "LOKI_ENDPOINT",
    "CancellableFetch",
    "FetchConfig",
    "FetchError",
    "LokiClient",
    "LokiRequest",
    "MissingTenantLabelError",
    "RequestInit",
    "TailSocket",
    "duration_from_timestamp",
    "get_fetch_config",
    "histogram_request",
    "interval_from_range",
    "query_range_request",
    "query_with_namespace",
    "query_with_severity",
    "rule_namespace",
    "rule_tenant",
    "rules_request",
    "tail_request",
]
