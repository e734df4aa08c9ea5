"""Service-wide settings."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from taskstream.models.state import ApprovalMode, TaskConfig


class Confidence(str, Enum):
    """How sure a question detection is."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _CONFIDENCE_RANK[self]


_CONFIDENCE_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


class WorkerBackend(str, Enum):
    """Which agent worker implementation serves turns."""

    ECHO = "echo"
    HTTP = "http"


def default_task_config() -> TaskConfig:
    return TaskConfig(
        model="gpt-oss:20b",
        max_turns=50,
        approval_mode=ApprovalMode.AUTO,
        base_url="http://localhost:11434/v1",
    )


class ServiceSettings(BaseModel):
    """Tunables for the API server, sweeper, transport and worker."""

    model_config = ConfigDict(frozen=True)

    host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "info"
    log_dir: str | None = None

    worker: WorkerBackend = WorkerBackend.ECHO
    worker_url: str | None = None
    worker_timeout: float = Field(default=300.0, gt=0)

    sweep_interval: float = Field(default=60.0, gt=0)
    retention: float = Field(default=3600.0, ge=0)
    heartbeat_interval: float = Field(default=30.0, gt=0)
    stream_queue_size: int = Field(default=0, ge=0)

    question_min_confidence: Confidence = Confidence.LOW
    task_defaults: TaskConfig = Field(default_factory=default_task_config)

    @field_validator("worker_url")
    @classmethod
    def worker_url_not_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("worker_url must not be blank")
        return v
