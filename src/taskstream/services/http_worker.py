"""Worker that streams progress items from a remote agent over HTTP."""

import json
import logging
from collections.abc import AsyncIterator

import httpx
from pydantic import ValidationError

from taskstream.models.progress import ProgressItem, parse_progress_item
from taskstream.services.worker import TurnRequest, WorkerError

logger = logging.getLogger(__name__)


class HttpWorker:
    """Runs turns on a remote agent endpoint.

    ``POST {base_url}/turns`` must answer with newline-delimited JSON, one
    progress item per line, e.g. ``{"kind": "content", "text": "Hi"}``.
    """

    def __init__(self, base_url: str, timeout: float = 300.0):
        if not base_url or not base_url.strip():
            raise ValueError("base_url is required")
        if timeout <= 0:
            raise ValueError("timeout must be positive")
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def _payload(self, request: TurnRequest) -> dict:
        config = request.config.model_dump(
            mode="json", by_alias=True, exclude_none=True, exclude={"credentials"}
        )
        if request.config.credentials is not None:
            config["credentials"] = request.config.credentials.get_secret_value()
        return {
            "taskId": request.task_id,
            "turn": request.turn,
            "message": request.message,
            "config": config,
        }

    async def run_turn(self, request: TurnRequest) -> AsyncIterator[ProgressItem]:
        url = f"{self._base_url}/turns"

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                async with client.stream(
                    "POST", url, json=self._payload(request)
                ) as response:
                    if response.status_code >= 400:
                        body = (await response.aread()).decode(errors="replace")
                        raise WorkerError(f"HTTP {response.status_code}: {body}")

                    async for line in response.aiter_lines():
                        if request.token.cancelled:
                            logger.info(
                                f"Task {request.task_id}: stopping remote turn"
                            )
                            return
                        if not line.strip():
                            continue
                        yield self._parse_line(line)
        except httpx.ConnectError as e:
            raise WorkerError(f"Connection failed: {e}") from e
        except httpx.TimeoutException as e:
            raise WorkerError(f"Request timed out: {e}") from e
        except httpx.RequestError as e:
            raise WorkerError(f"Request failed: {e}") from e

    def _parse_line(self, line: str) -> ProgressItem:
        try:
            data = json.loads(line)
        except json.JSONDecodeError as e:
            raise WorkerError(f"Invalid progress item: {e}") from e
        if not isinstance(data, dict):
            raise WorkerError("Invalid progress item: expected a JSON object")
        try:
            return parse_progress_item(data)
        except ValidationError as e:
            raise WorkerError(f"Invalid progress item: {e}") from e

    async def aclose(self) -> None:
        return None
