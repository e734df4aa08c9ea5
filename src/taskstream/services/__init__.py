# Services package

from taskstream.services.broadcaster import EventBroadcaster
from taskstream.services.driver import TaskDriver
from taskstream.services.echo_worker import EchoWorker
from taskstream.services.event_transform import EventTransformer, ToolCallInfo
from taskstream.services.http_worker import HttpWorker
from taskstream.services.log_service import (
    SizeAndTimeRotatingHandler,
    configure_logging,
    task_logger,
)
from taskstream.services.question_coordinator import QuestionCoordinator
from taskstream.services.question_detector import (
    DetectionMethod,
    QuestionDetection,
    QuestionDetector,
)
from taskstream.services.sweeper import LifecycleSweeper
from taskstream.services.task_registry import (
    InvalidTransitionError,
    QuestionAlreadyPendingError,
    QuestionNotPendingError,
    TaskRegistry,
)
from taskstream.services.task_store import (
    InMemoryTaskStore,
    TaskNotFoundError,
    TaskStore,
)
from taskstream.services.worker import AgentWorker, TurnRequest, WorkerError

__all__ = [
    "AgentWorker",
    "DetectionMethod",
    "EchoWorker",
    "EventBroadcaster",
    "EventTransformer",
    "HttpWorker",
    "InMemoryTaskStore",
    "InvalidTransitionError",
    "LifecycleSweeper",
    "QuestionAlreadyPendingError",
    "QuestionCoordinator",
    "QuestionDetection",
    "QuestionDetector",
    "QuestionNotPendingError",
    "SizeAndTimeRotatingHandler",
    "TaskDriver",
    "TaskNotFoundError",
    "TaskRegistry",
    "TaskStore",
    "ToolCallInfo",
    "TurnRequest",
    "WorkerError",
    "configure_logging",
    "task_logger",
]
