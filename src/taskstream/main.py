"""Main entry point for the task stream API server."""

import argparse
import logging
import os
import sys

import uvicorn

from taskstream.api.app import TaskStreamAPI
from taskstream.models.settings import Confidence, ServiceSettings, WorkerBackend
from taskstream.services.broadcaster import EventBroadcaster
from taskstream.services.driver import TaskDriver
from taskstream.services.echo_worker import EchoWorker
from taskstream.services.http_worker import HttpWorker
from taskstream.services.log_service import configure_logging
from taskstream.services.question_coordinator import QuestionCoordinator
from taskstream.services.sweeper import LifecycleSweeper
from taskstream.services.task_registry import TaskRegistry
from taskstream.services.task_store import InMemoryTaskStore
from taskstream.services.worker import AgentWorker

logger = logging.getLogger(__name__)


def create_worker(settings: ServiceSettings) -> AgentWorker:
    """Build the worker backend named in settings."""
    if settings.worker == WorkerBackend.HTTP:
        if not settings.worker_url:
            raise ValueError("worker_url is required for the http worker")
        return HttpWorker(settings.worker_url, timeout=settings.worker_timeout)
    return EchoWorker()


def create_app(
    settings: ServiceSettings | None = None, worker: AgentWorker | None = None
) -> "uvicorn.ASGIApplication":
    """Create FastAPI application with all dependencies."""
    settings = settings or ServiceSettings()
    worker = worker or create_worker(settings)

    store = InMemoryTaskStore()
    broadcaster = EventBroadcaster(store)
    registry = TaskRegistry(store, broadcaster)
    coordinator = QuestionCoordinator(registry)
    driver = TaskDriver(
        registry,
        coordinator,
        worker,
        defaults=settings.task_defaults,
        min_confidence=settings.question_min_confidence,
    )
    sweeper = LifecycleSweeper(
        registry, interval=settings.sweep_interval, retention=settings.retention
    )

    api = TaskStreamAPI(
        registry,
        driver,
        coordinator,
        sweeper,
        heartbeat_interval=settings.heartbeat_interval,
        stream_queue_size=settings.stream_queue_size,
    )
    return api.create_app()


def build_settings(argv: list[str] | None = None) -> ServiceSettings:
    """Parse command line arguments, falling back to the environment."""
    parser = argparse.ArgumentParser(description="Task Stream API Server")
    parser.add_argument(
        "--host",
        default=os.environ.get("HOST", "0.0.0.0"),
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", "3000")),
        help="Port to bind to (default: 3000)",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        default=os.environ.get("LOG_LEVEL", "info").lower(),
        help="Log level (default: info)",
    )
    parser.add_argument(
        "--log-dir",
        default=os.environ.get("LOG_DIR"),
        help="Directory for rotating log files (default: console only)",
    )
    parser.add_argument(
        "--worker",
        choices=[backend.value for backend in WorkerBackend],
        default=os.environ.get("TASKSTREAM_WORKER", WorkerBackend.ECHO.value),
        help="Agent worker backend (default: echo)",
    )
    parser.add_argument(
        "--worker-url",
        default=os.environ.get("TASKSTREAM_WORKER_URL"),
        help="Base URL of the HTTP agent worker",
    )
    parser.add_argument(
        "--worker-timeout",
        type=float,
        default=float(os.environ.get("TASKSTREAM_WORKER_TIMEOUT", "300")),
        help="Seconds to wait on the HTTP worker (default: 300)",
    )
    parser.add_argument(
        "--sweep-interval",
        type=float,
        default=float(os.environ.get("TASKSTREAM_SWEEP_INTERVAL", "60")),
        help="Seconds between cleanup sweeps (default: 60)",
    )
    parser.add_argument(
        "--retention",
        type=float,
        default=float(os.environ.get("TASKSTREAM_RETENTION", "3600")),
        help="Seconds finished tasks are kept (default: 3600)",
    )
    parser.add_argument(
        "--heartbeat-interval",
        type=float,
        default=float(os.environ.get("TASKSTREAM_HEARTBEAT_INTERVAL", "30")),
        help="Seconds between stream keep-alives (default: 30)",
    )
    parser.add_argument(
        "--stream-queue-size",
        type=int,
        default=int(os.environ.get("TASKSTREAM_STREAM_QUEUE_SIZE", "0")),
        help="Events buffered per stream, 0 for unbounded (default: 0)",
    )
    parser.add_argument(
        "--min-confidence",
        choices=[level.value for level in Confidence],
        default=os.environ.get("TASKSTREAM_MIN_CONFIDENCE", Confidence.LOW.value),
        help="Lowest confidence at which a detected question pauses a task",
    )
    args = parser.parse_args(argv)

    return ServiceSettings(
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        log_dir=args.log_dir,
        worker=WorkerBackend(args.worker),
        worker_url=args.worker_url,
        worker_timeout=args.worker_timeout,
        sweep_interval=args.sweep_interval,
        retention=args.retention,
        heartbeat_interval=args.heartbeat_interval,
        stream_queue_size=args.stream_queue_size,
        question_min_confidence=Confidence(args.min_confidence),
    )


def main() -> int:
    """Run the task stream API server."""
    settings = build_settings()

    configure_logging(
        level=getattr(logging, settings.log_level.upper()),
        log_dir=settings.log_dir,
    )

    logger.info("Starting task stream API server")
    logger.info(f"Worker: {settings.worker.value}")

    app = create_app(settings)
    uvicorn.run(
        app, host=settings.host, port=settings.port, log_level=settings.log_level
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
