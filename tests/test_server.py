import logging
import ssl
from pathlib import Path
from unittest.mock import patch

import pytest

from logging_view_plugin.config import Settings
from logging_view_plugin.logger import TRACE, InvalidLogLevelError, parse_level
from logging_view_plugin.server import main, serve, settings_from_args
from logging_view_plugin.tls import DynamicServingCertificate

DATA = Path(__file__).parent / "data"


@pytest.fixture
def base_settings():
    return Settings(config_path="/opt/app-root/config", static_path="/opt/app-root/web/dist")


class TestSettingsFromArgs:
    def test_defaults_come_from_base(self, base_settings):
        cfg = settings_from_args([], base=base_settings)
        assert cfg.port == 9443
        assert cfg.log_level == "error"
        assert cfg.plugin_config_path == "/opt/app-root/config/config.yaml"
        assert cfg.tls_enabled is False

    def test_single_dash_flags(self, base_settings):
        cfg = settings_from_args(
            [
                "-port", "9001",
                "-cert", "/var/serving-cert/tls.crt",
                "-key", "/var/serving-cert/tls.key",
                "-features", "dev-console, alerts",
                "-static-path", "/srv/dist",
                "-plugin-config-path", "/etc/plugin/config.yaml",
                "-log-level", "debug",
            ],
            base=base_settings,
        )
        assert cfg.port == 9001
        assert cfg.tls_enabled is True
        assert cfg.features == {"dev-console": True, "alerts": True}
        assert cfg.static_path == "/srv/dist"
        assert cfg.plugin_config_path == "/etc/plugin/config.yaml"
        assert cfg.log_level == "debug"

    def test_double_dash_flags(self, base_settings):
        cfg = settings_from_args(["--port", "8080", "--log-level", "trace"], base=base_settings)
        assert cfg.port == 8080
        assert cfg.log_level == "trace"

    def test_config_path_moves_default_plugin_config(self, base_settings):
        cfg = settings_from_args(["-config-path", "/etc/logging"], base=base_settings)
        assert cfg.config_path == "/etc/logging"
        assert cfg.plugin_config_path == "/etc/logging/config.yaml"

    def test_explicit_plugin_config_kept_when_config_path_changes(self):
        base = Settings(config_path="/a", plugin_config_path="/b/plugin.yaml")
        cfg = settings_from_args(["-config-path", "/c"], base=base)
        assert cfg.plugin_config_path == "/b/plugin.yaml"


class TestSettings:
    def test_features_from_environment(self, monkeypatch):
        monkeypatch.setenv("FEATURES", "dev-console,alerts")
        assert Settings().features == {"dev-console": True, "alerts": True}

    def test_features_as_json_object(self, monkeypatch):
        monkeypatch.setenv("FEATURES", '{"dev-console": true, "alerts": false}')
        assert Settings().features == {"dev-console": True, "alerts": False}

    def test_tls_needs_both_files(self):
        assert Settings(cert_file="tls.crt").tls_enabled is False
        assert Settings(cert_file="tls.crt", private_key_file="tls.key").tls_enabled is True


class TestLogLevel:
    @pytest.mark.parametrize(
        "name, level",
        [
            ("trace", TRACE),
            ("debug", logging.DEBUG),
            ("INFO", logging.INFO),
            ("warn", logging.WARNING),
            ("error", logging.ERROR),
            ("fatal", logging.CRITICAL),
            ("panic", logging.CRITICAL),
        ],
    )
    def test_known_levels(self, name, level):
        assert parse_level(name) == level

    def test_unknown_level(self):
        with pytest.raises(InvalidLogLevelError):
            parse_level("verbose")


class TestServe:
    def test_plaintext(self, tmp_path, test_logger):
        cfg = Settings(static_path=str(tmp_path), config_path=str(tmp_path), port=9100)
        with patch("logging_view_plugin.server.uvicorn.Server") as server_cls:
            serve(cfg, test_logger)

        config = server_cls.call_args.args[0]
        assert config.port == 9100
        assert config.ssl is None
        server_cls.return_value.run.assert_called_once()

    def test_tls(self, tmp_path, test_logger):
        cfg = Settings(
            static_path=str(tmp_path),
            config_path=str(tmp_path),
            cert_file=str(DATA / "serving.crt"),
            private_key_file=str(DATA / "serving.key"),
        )
        with patch("logging_view_plugin.server.uvicorn.Server") as server_cls, \
                patch.object(DynamicServingCertificate, "start") as start:
            serve(cfg, test_logger)

        config = server_cls.call_args.args[0]
        assert isinstance(config.ssl, ssl.SSLContext)
        assert config.ssl.minimum_version == ssl.TLSVersion.TLSv1_2
        start.assert_called_once()

    def test_request_logging_follows_trace_level(self, tmp_path):
        cfg = Settings(static_path=str(tmp_path), config_path=str(tmp_path))
        log = logging.getLogger("logging_view_plugin.tests.trace")
        log.setLevel(TRACE)
        with patch("logging_view_plugin.server.uvicorn.Server"), \
                patch("logging_view_plugin.server.create_app") as create_app:
            serve(cfg, log)

        assert create_app.call_args.kwargs["log_requests"] is True


class TestMain:
    def test_invalid_log_level_exits(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["-log-level", "verbose"])
        assert exc_info.value.code == 1

    def test_invalid_certificate_exits(self, tmp_path):
        (tmp_path / "tls.crt").write_text("nope")
        (tmp_path / "tls.key").write_text("nope")
        with patch("logging_view_plugin.server.uvicorn.Server") as server_cls, \
                pytest.raises(SystemExit) as exc_info:
            main([
                "-cert", str(tmp_path / "tls.crt"),
                "-key", str(tmp_path / "tls.key"),
                "-static-path", str(tmp_path),
            ])

        assert exc_info.value.code == 1
        server_cls.return_value.run.assert_not_called()
