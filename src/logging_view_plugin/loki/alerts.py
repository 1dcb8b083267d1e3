from logging_view_plugin.loki.query import NAMESPACE_LABEL
from logging_view_plugin.schemas.config import PluginConfig
from logging_view_plugin.schemas.logs import Rule

DEFAULT_TENANT_LABEL_KEY = "tenantId"


class MissingTenantLabelError(ValueError):
    def __init__(self, label_key: str):
        super().__init__(f"label '{label_key}' is required to display the alert metrics")
        self.label_key = label_key


def tenant_label_key(config: PluginConfig | None = None) -> str:
    return (config and config.alerting_rule_tenant_label_key) or DEFAULT_TENANT_LABEL_KEY


def namespace_label_key(config: PluginConfig | None = None) -> str:
    return (config and config.alerting_rule_namespace_label_key) or NAMESPACE_LABEL


def rule_tenant(rule: Rule, config: PluginConfig | None = None) -> str | None:
    return rule.labels.get(tenant_label_key(config)) or None


def rule_namespace(rule: Rule, config: PluginConfig | None = None) -> str | None:
    return rule.labels.get(namespace_label_key(config)) or None
