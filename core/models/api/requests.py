"""Inbound WebSocket request models."""

import math
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from core.models.domain.task import TaskConfig


def resolve_interval(raw: Any, default: float, minimum: float) -> float:
    """Turn a client supplied interval into seconds.

    Non-numeric, non-finite and non-positive values fall back to ``default``;
    positive values below ``minimum`` are raised to it.
    """
    if raw is None or isinstance(raw, bool):
        return default
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(value) or value <= 0:
        return default
    return max(value, minimum)


class StartTaskRequest(BaseModel):
    """Request to create a recurring task."""

    model_config = ConfigDict(extra="ignore")

    type: Literal["start"] = "start"
    credentials: str = Field(
        ...,
        validation_alias=AliasChoices("credentials", "cookieContent"),
        description="Opaque credential blob",
    )
    items: list[str] = Field(
        ...,
        validation_alias=AliasChoices("items", "messageContent"),
        description="Work items, as newline separated text or a list",
    )
    prefix: str = Field(default="", validation_alias=AliasChoices("prefix", "hatersName"))
    suffix: str = Field(
        default="", validation_alias=AliasChoices("suffix", "lastHereName")
    )
    target: str = Field(default="", validation_alias=AliasChoices("target", "threadID"))
    interval: Any = Field(
        default=None,
        validation_alias=AliasChoices("interval", "delay"),
        description="Seconds between cycles",
    )

    @field_validator("credentials", mode="before")
    @classmethod
    def validate_credentials(cls, v: Any) -> str:
        """Credentials must be present and not blank."""
        if not isinstance(v, str) or not v.strip():
            raise ValueError("credentials must not be empty")
        return v

    @field_validator("items", mode="before")
    @classmethod
    def split_items(cls, v: Any) -> list[str]:
        """Split the item source into trimmed, non-blank lines."""
        if isinstance(v, str):
            lines = v.splitlines()
        elif isinstance(v, list):
            lines = [str(line) for line in v if line is not None]
        else:
            raise ValueError("items must be text or a list of strings")

        items = [line.strip() for line in lines if line.strip()]
        if not items:
            raise ValueError("items must contain at least one non-blank line")
        return items

    @field_validator("prefix", "suffix", "target", mode="before")
    @classmethod
    def normalize_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()

    def to_config(self, default_interval: float, min_interval: float) -> TaskConfig:
        """Freeze the request into a task configuration."""
        return TaskConfig(
            items=tuple(self.items),
            interval_seconds=resolve_interval(
                self.interval, default_interval, min_interval
            ),
            prefix=self.prefix,
            suffix=self.suffix,
            target=self.target,
            credentials=self.credentials,
        )


class TaskReferenceRequest(BaseModel):
    """Request that names an existing task (stop, view_details)."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    type: Literal["stop", "view_details"]
    task_id: str = Field(..., alias="taskId")

    @field_validator("task_id", mode="before")
    @classmethod
    def validate_task_id(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("taskId is required")
        return v.strip()
