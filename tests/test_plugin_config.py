from datetime import timedelta

import pytest
import yaml
from pydantic import ValidationError

from logging_view_plugin.schemas.config import PluginConfig, parse_duration


class TestParseDuration:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("30s", timedelta(seconds=30)),
            ("1m30s", timedelta(seconds=90)),
            ("2h", timedelta(hours=2)),
            ("1h2m3s", timedelta(hours=1, minutes=2, seconds=3)),
            ("250ms", timedelta(milliseconds=250)),
            ("1.5s", timedelta(seconds=1.5)),
            ("0", timedelta(0)),
            ("-5s", timedelta(seconds=-5)),
        ],
    )
    def test_valid_durations(self, raw, expected):
        assert parse_duration(raw) == expected

    @pytest.mark.parametrize("raw", ["", "s", "10", "5 minutes", "1x", "1m30"])
    def test_invalid_durations(self, raw):
        with pytest.raises(ValueError):
            parse_duration(raw)


class TestPluginConfig:
    def test_camel_case_yaml(self):
        config = PluginConfig.from_yaml(
            "useTenantInHeader: true\n"
            "isStreamingEnabledInDefaultPage: true\n"
            "logsLimit: 250\n"
        )
        assert config.use_tenant_in_header is True
        assert config.is_streaming_enabled_in_default_page is True
        assert config.logs_limit == 250

    def test_unknown_keys_are_ignored(self):
        config = PluginConfig.from_yaml("somethingElse: 1\nlogsLimit: 3\n")
        assert config.logs_limit == 3

    def test_timeout_from_duration_string(self):
        config = PluginConfig.from_yaml("timeout: 45s\n")
        assert config.timeout == timedelta(seconds=45)
        assert config.to_json_dict() == {"timeout": 45.0}

    def test_timeout_serialized_as_seconds(self):
        # the JSON form served on /config carries seconds
        config = PluginConfig.from_yaml("timeout: 1m30s\n")
        assert config.to_json_dict() == {"timeout": 90.0}

    @pytest.mark.parametrize("raw", ["timeout: 30\n", "timeout: 1.5\n"])
    def test_numeric_timeout_rejected(self, raw):
        with pytest.raises(ValidationError):
            PluginConfig.from_yaml(raw)

    @pytest.mark.parametrize(
        "raw",
        [
            'useTenantInHeader: "true"\n',
            'isStreamingEnabledInDefaultPage: "yes"\n',
            'logsLimit: "500"\n',
            "logsLimit: 2.5\n",
        ],
    )
    def test_non_native_scalars_rejected(self, raw):
        with pytest.raises(ValidationError):
            PluginConfig.from_yaml(raw)

    def test_zero_values_are_omitted(self):
        config = PluginConfig.from_yaml(
            "useTenantInHeader: false\nalertingRuleTenantLabelKey: ''\nlogsLimit: 0\ntimeout: 0s\n"
        )
        assert config.to_json_dict() == {}

    def test_json_round_trip_through_front_end_form(self):
        config = PluginConfig.from_yaml("useTenantInHeader: true\nlogsLimit: 20\n")
        assert PluginConfig.model_validate(config.to_json_dict()) == config

    def test_empty_document_is_zero_config(self):
        assert PluginConfig.from_yaml("") == PluginConfig()

    def test_invalid_yaml_raises(self):
        with pytest.raises(yaml.YAMLError):
            PluginConfig.from_yaml("timeout: [1m\n")

    def test_non_mapping_document_raises(self):
        with pytest.raises(ValidationError):
            PluginConfig.from_yaml("- a\n- b\n")

    def test_invalid_timeout_raises(self):
        with pytest.raises(ValidationError):
            PluginConfig.from_yaml("timeout: soon\n")
