"""Pydantic v2 schemas for generation requests and task status snapshots."""

from __future__ import annotations

import enum
import re
from typing import Any

from pydantic import BaseModel, Field, field_validator


class VideoModel(str, enum.Enum):
    """Supported Sora model variants."""

    SORA_2 = "sora-2"
    SORA_2_PRO = "sora-2-pro"


class GenerationMode(str, enum.Enum):
    TEXT_TO_VIDEO = "text-to-video"
    IMAGE_TO_VIDEO = "image-to-video"


class AspectRatio(str, enum.Enum):
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Duration(str, enum.Enum):
    """Clip length in seconds. Only honoured by ``sora-2-pro``."""

    SHORT = "10"
    LONG = "15"


class TaskState(str, enum.Enum):
    """Remote task lifecycle statuses."""

    NOT_START = "NOT_START"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"


_DATA_URL_PREFIX = re.compile(r"^data:[^,]*,")


def strip_data_url(image: str) -> str:
    """``data:image/png;base64,AAAA`` -> ``AAAA``. Raw base64 is returned as-is."""
    return _DATA_URL_PREFIX.sub("", image, count=1)


class GenerationRequest(BaseModel):
    """One video generation submission.

    Required-field rules (non-blank prompt, images in image-to-video mode) are
    checked by the service so they surface as ``ValidationError`` rather
    than schema errors.
    """

    prompt: str
    model: VideoModel = VideoModel.SORA_2
    mode: GenerationMode = GenerationMode.TEXT_TO_VIDEO
    images: list[str] = Field(default_factory=list)
    aspect_ratio: AspectRatio | None = AspectRatio.LANDSCAPE
    hd: bool = False
    duration: Duration | None = None
    notify_hook: str | None = None

    @property
    def is_pro(self) -> bool:
        return self.model is VideoModel.SORA_2_PRO


class TaskOutput(BaseModel):
    output: str | None = None

    model_config = {"frozen": True}

    @field_validator("output", mode="before")
    @classmethod
    def _output_url(cls, value: Any) -> Any:
        return value if isinstance(value, str) else None


class TaskStatus(BaseModel):
    """Snapshot returned by one status poll. Superseded, never merged."""

    task_id: str
    platform: str | None = None
    action: str | None = None
    status: TaskState
    fail_reason: str | None = None
    submit_time: float | None = None
    start_time: float | None = None
    finish_time: float | None = None
    progress: str | None = None
    data: TaskOutput = Field(default_factory=TaskOutput)
    search_item: str | None = None

    model_config = {"frozen": True}

    # Only task_id and status are essential; everything else is decoded leniently
    # so an oddly typed side field never makes a snapshot undecodable.

    @field_validator("task_id", mode="before")
    @classmethod
    def _task_id_as_text(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("platform", "action", "fail_reason", "progress", "search_item", mode="before")
    @classmethod
    def _as_text(cls, value: Any) -> str | None:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    @field_validator("submit_time", "start_time", "finish_time", mode="before")
    @classmethod
    def _as_timestamp(cls, value: Any) -> float | None:
        if isinstance(value, bool):
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    @field_validator("data", mode="before")
    @classmethod
    def _data_default(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def result_url(self) -> str | None:
        return self.data.output or None
