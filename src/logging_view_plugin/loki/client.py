"""Client for the log backend behind the console's plugin proxy.

The backend is reached through ``LOKI_ENDPOINT`` on the console host. The
tenant is carried either in the ``X-Scope-OrgID`` header or in the path,
depending on the plugin configuration (see ``get_fetch_config``).

Timestamps are epoch milliseconds; they are sent as nanoseconds.
"""

import logging
from dataclasses import dataclass
from urllib.parse import urlencode

import httpx

from logging_view_plugin.logger import LOGGER_NAME
from logging_view_plugin.loki.alerts import MissingTenantLabelError, rule_namespace, rule_tenant, tenant_label_key
from logging_view_plugin.loki.fetch import CancellableFetch, RequestInit, cancellable_fetch
from logging_view_plugin.loki.query import (
    duration_from_timestamp,
    interval_from_range,
    nanoseconds,
    query_with_namespace,
)
from logging_view_plugin.loki.tail import TailSocket, resolve_socket_url
from logging_view_plugin.schemas.config import PluginConfig
from logging_view_plugin.schemas.logs import Direction, QueryRangeResponse, Rule, RulesResponse

logger = logging.getLogger(LOGGER_NAME)

LOKI_ENDPOINT = "/api/proxy/plugin/logging-view-plugin/backend"
TENANT_HEADER = "X-Scope-OrgID"

DEFAULT_TENANT = "application"

DEFAULT_QUERY_LIMIT = 100
DEFAULT_TAIL_LIMIT = 200


@dataclass(frozen=True)
class FetchConfig:
    endpoint: str
    request_init: RequestInit | None = None


@dataclass(frozen=True)
class LokiRequest:
    url: str
    request_init: RequestInit | None = None


def get_fetch_config(tenant: str, config: PluginConfig | None = None) -> FetchConfig:
    if config is not None and config.use_tenant_in_header is True:
        return FetchConfig(
            endpoint=LOKI_ENDPOINT,
            request_init=RequestInit(headers={TENANT_HEADER: tenant}),
        )
    return FetchConfig(endpoint=f"{LOKI_ENDPOINT}/api/logs/v1/{tenant}")


def query_range_request(
    query: str,
    start: float,
    end: float,
    tenant: str,
    limit: int = DEFAULT_QUERY_LIMIT,
    direction: Direction | None = None,
    namespace: str | None = None,
    config: PluginConfig | None = None,
) -> LokiRequest:
    params = {
        "query": query_with_namespace(query, namespace),
        "start": nanoseconds(start),
        "end": nanoseconds(end),
        "limit": str(limit),
    }
    if direction:
        params["direction"] = direction

    fetch_config = get_fetch_config(tenant, config)
    return LokiRequest(
        url=f"{fetch_config.endpoint}/loki/api/v1/query_range?{urlencode(params)}",
        request_init=fetch_config.request_init,
    )


def histogram_query(query: str, interval: float, namespace: str | None = None) -> str:
    extended = query_with_namespace(query, namespace)
    return f"sum by (level) (count_over_time({extended} [{duration_from_timestamp(interval)}]))"


def histogram_request(
    query: str,
    start: float,
    end: float,
    interval: float,
    tenant: str,
    namespace: str | None = None,
    config: PluginConfig | None = None,
) -> LokiRequest:
    params = {
        "query": histogram_query(query, interval, namespace),
        "start": nanoseconds(start),
        "end": nanoseconds(end),
        "step": duration_from_timestamp(interval),
    }

    fetch_config = get_fetch_config(tenant, config)
    return LokiRequest(
        url=f"{fetch_config.endpoint}/loki/api/v1/query_range?{urlencode(params)}",
        request_init=fetch_config.request_init,
    )


def tail_request(
    query: str,
    start: float,
    tenant: str,
    limit: int = DEFAULT_TAIL_LIMIT,
    namespace: str | None = None,
    config: PluginConfig | None = None,
) -> LokiRequest:
    params = {
        "query": query_with_namespace(query, namespace),
        "start": nanoseconds(start),
        "limit": str(limit),
    }

    fetch_config = get_fetch_config(tenant, config)
    return LokiRequest(
        url=f"{fetch_config.endpoint}/loki/api/v1/tail?{urlencode(params)}",
        request_init=fetch_config.request_init,
    )


def rules_request(tenant: str, config: PluginConfig | None = None) -> LokiRequest:
    fetch_config = get_fetch_config(tenant, config)
    return LokiRequest(
        url=f"{fetch_config.endpoint}/prometheus/api/v1/rules",
        request_init=fetch_config.request_init,
    )


class LokiClient:
    """Issues log queries against the console host at ``base_url``.

    Every query method returns a CancellableFetch; nothing is sent until its
    ``request()`` is awaited.
    """

    def __init__(
        self,
        base_url: str,
        config: PluginConfig | None = None,
        http: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.config = config
        # no client side timeout unless the plugin configuration sets one
        self.http = http or httpx.AsyncClient(base_url=self.base_url, timeout=None)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def __aenter__(self) -> "LokiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _request_init(self, request: LokiRequest) -> RequestInit:
        init = request.request_init or RequestInit()
        timeout = init.timeout
        if timeout is None and self.config is not None and self.config.timeout:
            timeout = self.config.timeout.total_seconds()
        return RequestInit(headers=dict(init.headers), timeout=timeout)

    def _fetch(self, request: LokiRequest, response_model):
        return cancellable_fetch(self.http, request.url, response_model, self._request_init(request))

    def query_range(
        self,
        query: str,
        start: float,
        end: float,
        tenant: str = DEFAULT_TENANT,
        limit: int | None = None,
        direction: Direction | None = None,
        namespace: str | None = None,
    ) -> CancellableFetch[QueryRangeResponse]:
        if limit is None:
            limit = (self.config and self.config.logs_limit) or DEFAULT_QUERY_LIMIT
        request = query_range_request(
            query, start, end, tenant,
            limit=limit, direction=direction, namespace=namespace, config=self.config,
        )
        return self._fetch(request, QueryRangeResponse)

    def histogram(
        self,
        query: str,
        start: float,
        end: float,
        interval: float | None = None,
        tenant: str = DEFAULT_TENANT,
        namespace: str | None = None,
    ) -> CancellableFetch[QueryRangeResponse]:
        if interval is None:
            interval = interval_from_range(start, end)
        request = histogram_request(
            query, start, end, interval, tenant, namespace=namespace, config=self.config,
        )
        return self._fetch(request, QueryRangeResponse)

    def rules(self, tenant: str = DEFAULT_TENANT) -> CancellableFetch[RulesResponse]:
        return self._fetch(rules_request(tenant, self.config), RulesResponse)

    def alert_metrics(
        self,
        rule: Rule,
        start: float,
        end: float,
        interval: float | None = None,
    ) -> CancellableFetch[QueryRangeResponse]:
        """Histogram of the logs matched by an alerting rule.

        The tenant and namespace come from the rule's labels.
        """
        tenant = rule_tenant(rule, self.config)
        if not tenant:
            raise MissingTenantLabelError(tenant_label_key(self.config))
        return self.histogram(
            rule.query, start, end, interval=interval,
            tenant=tenant, namespace=rule_namespace(rule, self.config),
        )

    def tail(
        self,
        query: str,
        start: float,
        tenant: str = DEFAULT_TENANT,
        limit: int = DEFAULT_TAIL_LIMIT,
        namespace: str | None = None,
    ) -> TailSocket:
        request = tail_request(query, start, tenant, limit=limit, namespace=namespace, config=self.config)
        headers = request.request_init.headers if request.request_init else None
        url = resolve_socket_url(self.base_url, request.url)
        logger.debug("tailing %s", url)
        return TailSocket(url, headers=headers)
