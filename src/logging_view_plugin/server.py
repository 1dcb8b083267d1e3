import argparse
import logging
import os
import sys

import uvicorn

from logging_view_plugin.config import Settings, parse_features, settings as default_settings
from logging_view_plugin.logger import TRACE, InvalidLogLevelError, configure_logging, parse_level
from logging_view_plugin.main import create_app
from logging_view_plugin.tls import CertificateError, DynamicServingCertificate

# Command line flag -> Settings field
_FLAGS = {
    "port": "port",
    "cert": "cert_file",
    "key": "private_key_file",
    "features": "features",
    "static-path": "static_path",
    "config-path": "config_path",
    "plugin-config-path": "plugin_config_path",
    "log-level": "log_level",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="logging-view-plugin-backend",
        description="Serve the logging view console plugin.",
    )
    parser.add_argument("-port", "--port", type=int, help="server port to listen on (default: 9443)")
    parser.add_argument("-cert", "--cert", help="cert file path to enable TLS (disabled by default)")
    parser.add_argument("-key", "--key", help="private key file path to enable TLS (disabled by default)")
    parser.add_argument("-features", "--features", help="comma separated list of features to enable")
    parser.add_argument("-static-path", "--static-path", help="static files path to serve frontend")
    parser.add_argument("-config-path", "--config-path", help="config files path")
    parser.add_argument("-plugin-config-path", "--plugin-config-path", help="plugin yaml configuration")
    parser.add_argument("-log-level", "--log-level", help="verbosity of logs (default: error)")
    return parser


def settings_from_args(argv: list[str] | None = None, base: Settings | None = None) -> Settings:
    """Apply command line flags on top of the environment-driven settings."""
    args = vars(build_parser().parse_args(argv))
    base = base or default_settings
    values = base.model_dump()
    for flag, field in _FLAGS.items():
        value = args.get(flag.replace("-", "_"))
        if value is None:
            continue
        if field == "features":
            value = parse_features(value)
        values[field] = value
    derived = os.path.join(base.config_path, "config.yaml")
    if args.get("config_path") is not None and args.get("plugin_config_path") is None and base.plugin_config_path == derived:
        # recompute the default from the new config directory
        values["plugin_config_path"] = ""
    return Settings(**values)


def serve(cfg: Settings, log: logging.Logger) -> None:
    log_requests = log.getEffectiveLevel() <= TRACE
    app = create_app(cfg, log=log, log_requests=log_requests)

    config = uvicorn.Config(
        app,
        host="0.0.0.0",
        port=cfg.port,
        log_config=None,
        access_log=False,
        timeout_keep_alive=30,
    )
    config.load()

    if cfg.tls_enabled:
        # The controller reloads the certificate and key whenever they change.
        certificate = DynamicServingCertificate("serving-cert", cfg.cert_file, cfg.private_key_file, log=log)
        # Check that the cert and key files are valid.
        certificate.run_once()
        config.ssl = certificate.server_context()
        certificate.start()
        log.info("listening on https://:%d", cfg.port)
    else:
        log.info("listening on http://:%d", cfg.port)

    uvicorn.Server(config).run()


def main(argv: list[str] | None = None) -> None:
    cfg = settings_from_args(argv)

    try:
        level = parse_level(cfg.log_level)
    except InvalidLogLevelError as e:
        logging.basicConfig()
        logging.getLogger(__name__).critical("unable to set the log level: %s", e)
        sys.exit(1)

    log = configure_logging(level)
    try:
        serve(cfg, log)
    except CertificateError as e:
        log.critical("invalid certificate/key files: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
