from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


Direction = Literal["forward", "backward"]
ResultType = Literal["streams", "matrix", "vector", "scalar"]


class StreamResult(BaseModel):
    stream: dict[str, str]
    values: list[tuple[str, str]] = []  # [nanosecond timestamp, log line]


class MetricResult(BaseModel):
    metric: dict[str, str]
    values: list[tuple[float, str]] = []  # [unix seconds, sample value]


class QueryRangeData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    result_type: ResultType = Field(alias="resultType")
    result: list[StreamResult] | list[MetricResult] = []
    stats: dict | None = None


class QueryRangeResponse(BaseModel):
    status: str
    data: QueryRangeData


class Rule(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    query: str
    type: Literal["alerting", "recording"] | None = None
    state: str | None = None
    duration: float | None = None
    labels: dict[str, str] = {}
    annotations: dict[str, str] = {}
    alerts: list[dict] = []


class RuleGroup(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    file: str = ""
    interval: float | None = None
    rules: list[Rule] = []


class RulesData(BaseModel):
    groups: list[RuleGroup] = []


class RulesResponse(BaseModel):
    status: str
    data: RulesData
