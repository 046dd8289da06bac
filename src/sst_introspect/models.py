import json
from datetime import datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SSTProject(BaseModel):
    root: Path
    stage: str
    server_url: str
    log_dir: Path

    def log_path(self, tab: str) -> Path:
        return self.log_dir / f"{tab}.log"


class LogFile(BaseModel):
    name: str
    path: Path
    size: int
    modified_at: datetime


class LogPage(BaseModel):
    """Window over a log's non-blank lines, newest line first."""

    lines: list[str]
    total: int
    has_more: bool


class Event(BaseModel):
    """One record of the dev server's event stream."""

    model_config = ConfigDict(extra="ignore")

    type: str
    event: dict[str, Any] = Field(default_factory=dict)

    @field_validator("event", mode="before")
    @classmethod
    def _null_payload(cls, v: Any) -> Any:
        return {} if v is None else v


def as_text(v: Any) -> Any:
    if v is None or isinstance(v, str):
        return v
    return json.dumps(v, default=str) if isinstance(v, (dict, list)) else str(v)


class InvocationError(BaseModel):
    type: str | None = None
    message: str | None = None
    trace: list[str] = Field(default_factory=list)

    @field_validator("type", "message", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return as_text(v)

    @field_validator("trace", mode="before")
    @classmethod
    def _trace_lines(cls, v: Any) -> Any:
        if v is None:
            return []
        if not isinstance(v, list):
            v = [v]
        return [as_text(frame) for frame in v]


class FunctionInvocation(BaseModel):
    function_id: str | None = None
    request_id: str
    worker_id: str | None = None
    # Payloads are forwarded as the dev server sent them
    input: Any = None
    output: Any = None
    error: InvocationError | None = None
    logs: list[str] = Field(default_factory=list)

    @field_validator("function_id", "worker_id", mode="before")
    @classmethod
    def _text(cls, v: Any) -> Any:
        return as_text(v)


class _WireModel(BaseModel):
    # The dev server speaks PascalCase; attributes stay snake_case.
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class DeploymentError(_WireModel):
    urn: str | None = Field(default=None, alias="URN")
    message: str | None = Field(default=None, alias="Message")


class DeployedResource(_WireModel):
    type: str | None = Field(default=None, alias="Type")
    urn: str | None = Field(default=None, alias="URN")
    outputs: dict[str, Any] | None = Field(default=None, alias="Outputs")


class CompletedDeployment(_WireModel):
    app: str | None = Field(default=None, alias="App")
    stage: str | None = Field(default=None, alias="Stage")
    finished: bool = Field(default=False, alias="Finished")
    errors: list[DeploymentError] = Field(default_factory=list, alias="Errors")
    outputs: dict[str, Any] = Field(default_factory=dict, alias="Outputs")
    hints: dict[str, Any] = Field(default_factory=dict, alias="Hints")
    resources: list[DeployedResource] = Field(
        default_factory=list, alias="Resources"
    )

    # Go encodes empty slices and maps as null
    @field_validator("errors", "resources", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("outputs", "hints", mode="before")
    @classmethod
    def _null_dict(cls, v: Any) -> Any:
        return {} if v is None else v
