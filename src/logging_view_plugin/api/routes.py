import json
import logging

import yaml
from fastapi import APIRouter, Response
from fastapi.responses import PlainTextResponse
from pydantic import ValidationError

from logging_view_plugin.config import Settings
from logging_view_plugin.schemas.config import PluginConfig

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _json_response(body: bytes) -> Response:
    return Response(content=body, media_type="application/json")


def _features_endpoint(features: dict[str, bool], logger: logging.Logger):
    async def features_handler():
        try:
            body = json.dumps(features, separators=(",", ":")).encode()
        except (TypeError, ValueError) as e:
            logger.error("cannot marshall, features were: %r: %s", features, e)
            return PlainTextResponse(str(e), status_code=500)
        return _json_response(body)

    return features_handler


def _config_endpoint(plugin_config_path: str, logger: logging.Logger):
    """Read the plugin configuration once and return the handler serving it."""
    try:
        with open(plugin_config_path, "rb") as f:
            data = f.read()
    except OSError as e:
        logger.warning(
            "cannot read config file, serving plugin with default configuration, tried %s: %s",
            plugin_config_path,
            e,
        )

        async def default_config_handler():
            return _json_response(b"{}")

        return default_config_handler

    try:
        plugin_config = PluginConfig.from_yaml(data)
    except (yaml.YAMLError, ValidationError) as e:
        logger.error("unable to unmarshall config data: %s", e)

        async def broken_config_handler():
            return PlainTextResponse("unable to unmarshall config data", status_code=500)

        return broken_config_handler

    body = json.dumps(plugin_config.to_json_dict(), separators=(",", ":")).encode()
    logger.debug("serving plugin configuration from %s: %s", plugin_config_path, body)

    async def config_handler():
        return _json_response(body)

    return config_handler


async def health():
    return PlainTextResponse("ok")


def build_router(settings: Settings, logger: logging.Logger) -> APIRouter:
    """Routes for health, manifest, features and plugin configuration.

    Paths registered with a ``{rest:path}`` suffix match every path under the
    prefix, the same way the static file mount matches everything else.
    """
    router = APIRouter()

    router.add_api_route("/health{rest:path}", health, methods=ALL_METHODS)

    features_handler = _features_endpoint(settings.features, logger)
    # serve plugin manifest according to enabled features
    router.add_api_route("/plugin-manifest.json", features_handler, methods=["GET", "HEAD"])
    # serve enabled features list to the front-end
    router.add_api_route("/features{rest:path}", features_handler, methods=["GET", "HEAD"])

    # serve plugin configuration to the front-end
    router.add_api_route(
        "/config{rest:path}",
        _config_endpoint(settings.plugin_config_path, logger),
        methods=["GET", "HEAD"],
    )
    return router
