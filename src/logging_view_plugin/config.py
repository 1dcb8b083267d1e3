import json
import os
from typing import Annotated

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    # HTTP server
    port: int = 9443
    # TLS is enabled only when both files are set.
    cert_file: str = ""
    private_key_file: str = ""

    # Enabled features, served on /features and /plugin-manifest.json.
    # Accepts "dev-console,alerts", a JSON object or a mapping of feature name to bool.
    features: Annotated[dict[str, bool], NoDecode] = {}

    # Compiled front-end assets
    static_path: str = "./web/dist"

    # Directory holding the backend configuration files
    config_path: str = "./config"
    # Plugin configuration served on /config. Defaults to <config_path>/config.yaml
    plugin_config_path: str = ""

    # trace, debug, info, warning, error, fatal, panic
    log_level: str = "error"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    @field_validator("features", mode="before")
    @classmethod
    def _split_features(cls, value):
        if isinstance(value, str):
            if value.strip().startswith("{"):
                return json.loads(value)
            return parse_features(value)
        if isinstance(value, (list, tuple, set)):
            return {name: True for name in value}
        return value

    @model_validator(mode="after")
    def _default_plugin_config_path(self):
        if not self.plugin_config_path:
            self.plugin_config_path = os.path.join(self.config_path, "config.yaml")
        return self

    @property
    def tls_enabled(self) -> bool:
        return bool(self.cert_file and self.private_key_file)


def parse_features(raw: str) -> dict[str, bool]:
    """Turn a comma-separated feature list into the feature map."""
    return {name.strip(): True for name in raw.split(",") if name.strip()}


settings = Settings()
