import re
from datetime import timedelta

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

_DURATION_PART_RE = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def parse_duration(value: str) -> timedelta:
    """Parse a Go-style duration string such as "30s", "1m30s" or "250ms"."""
    raw = value.strip()
    sign = 1
    if raw[:1] in ("+", "-"):
        sign = -1 if raw[0] == "-" else 1
        raw = raw[1:]
    if raw == "0":
        return timedelta(0)
    if not raw:
        raise ValueError(f"invalid duration {value!r}")

    seconds = 0.0
    pos = 0
    for match in _DURATION_PART_RE.finditer(raw):
        if match.start() != pos:
            break
        number, unit = match.groups()
        seconds += float(number) * _UNIT_SECONDS[unit]
        pos = match.end()
    if pos != len(raw):
        raise ValueError(f"invalid duration {value!r}")
    return timedelta(seconds=sign * seconds)


class PluginConfig(BaseModel):
    """Operator supplied configuration, served to the front-end on /config.

    Flags and limits must be real YAML booleans and integers, and ``timeout``
    a duration string; quoted or bare-number stand-ins are rejected.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    use_tenant_in_header: bool = Field(False, strict=True)
    is_streaming_enabled_in_default_page: bool = Field(False, strict=True)
    alerting_rule_tenant_label_key: str = ""
    alerting_rule_namespace_label_key: str = ""
    timeout: timedelta = timedelta(0)
    logs_limit: int = Field(0, strict=True)

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        if value is None:
            return timedelta(0)
        if isinstance(value, (int, float)):
            raise ValueError(f"timeout must be a duration string such as 30s, got {value!r}")
        return value

    @field_serializer("timeout")
    def _timeout_seconds(self, value: timedelta) -> float:
        return value.total_seconds()

    @classmethod
    def from_yaml(cls, data: bytes | str) -> "PluginConfig":
        """Build the configuration from YAML text; an empty document is the zero config.

        Raises yaml.YAMLError or pydantic.ValidationError on bad input.
        """
        raw = yaml.safe_load(data)
        if raw is None:
            raw = {}
        return cls.model_validate(raw)

    def to_json_dict(self) -> dict:
        """JSON form with zero-valued fields left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_defaults=True)
