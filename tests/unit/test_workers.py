"""Unit tests for the bundled agent workers."""

import json

import httpx
import pytest

from taskstream.models.progress import (
    ASK_QUESTION_TOOL,
    ContentDelta,
    OtherItem,
    ThoughtItem,
    ToolCallRequest,
    WorkerFailure,
)
from taskstream.models.state import TaskConfig
from taskstream.models.task import CancellationToken
from taskstream.services.echo_worker import EchoWorker
from taskstream.services.http_worker import HttpWorker
from taskstream.services.worker import TurnRequest, WorkerError

WORKER_URL = "http://agent.local"


async def no_answer(question, context=None):
    raise AssertionError("worker should not ask")


def create_request(message: str = "hello there", **kwargs) -> TurnRequest:
    kwargs.setdefault("config", TaskConfig(model="llama3"))
    kwargs.setdefault("token", CancellationToken())
    return TurnRequest(task_id="task-1", message=message, ask=no_answer, **kwargs)


async def collect(worker, request) -> list:
    return [item async for item in worker.run_turn(request)]


class TestEchoWorker:
    """Tests for EchoWorker."""

    def test_rejects_negative_delay(self):
        with pytest.raises(ValueError, match="delay must be non-negative"):
            EchoWorker(delay=-1)

    @pytest.mark.asyncio
    async def test_echoes_message(self):
        items = await collect(EchoWorker(), create_request("hello there"))

        assert items[0] == ThoughtItem(value="Turn 1: hello there")
        text = "".join(i.text for i in items if isinstance(i, ContentDelta))
        assert text == "Echo: hello there"
        assert items[-1] == OtherItem(name="finished")

    @pytest.mark.asyncio
    async def test_ask_prefix_leaves_question_call(self):
        items = await collect(EchoWorker(), create_request("ask: Which color?"))

        call = items[-1]
        assert isinstance(call, ToolCallRequest)
        assert call.name == ASK_QUESTION_TOOL
        assert call.args == {"question": "Which color?"}
        assert not any(isinstance(i, ContentDelta) for i in items)

    @pytest.mark.asyncio
    async def test_stops_when_cancelled(self):
        token = CancellationToken()
        token.cancel()

        items = await collect(EchoWorker(), create_request(token=token))

        assert not any(isinstance(i, ContentDelta) for i in items)


class TestHttpWorkerInit:
    """Tests for HttpWorker initialization."""

    def test_requires_base_url(self):
        with pytest.raises(ValueError, match="base_url is required"):
            HttpWorker("")

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValueError, match="timeout must be positive"):
            HttpWorker(WORKER_URL, timeout=0)


class TestHttpWorker:
    """Tests for HttpWorker.run_turn."""

    @pytest.mark.asyncio
    async def test_streams_progress_items(self, httpx_mock):
        lines = [
            {"kind": "thought", "value": "planning"},
            {"kind": "content", "text": "Hi"},
            {"kind": "retry"},
            {"kind": "error", "message": "quota exceeded"},
        ]
        httpx_mock.add_response(
            method="POST",
            url=f"{WORKER_URL}/turns",
            text="\n".join(json.dumps(line) for line in lines) + "\n\n",
        )

        items = await collect(HttpWorker(WORKER_URL + "/"), create_request())

        assert items == [
            ThoughtItem(value="planning"),
            ContentDelta(text="Hi"),
            OtherItem(name="retry", value={"kind": "retry"}),
            WorkerFailure(message="quota exceeded"),
        ]

    @pytest.mark.asyncio
    async def test_sends_turn_payload(self, httpx_mock):
        httpx_mock.add_response(method="POST", url=f"{WORKER_URL}/turns", text="")
        request = create_request(
            "Blue",
            config=TaskConfig(model="llama3", max_turns=2, credentials="s3cret"),
            turn=2,
        )

        await collect(HttpWorker(WORKER_URL), request)

        body = json.loads(httpx_mock.get_request().content)
        assert body == {
            "taskId": "task-1",
            "turn": 2,
            "message": "Blue",
            "config": {"model": "llama3", "maxTurns": 2, "credentials": "s3cret"},
        }

    @pytest.mark.asyncio
    async def test_error_status_raises(self, httpx_mock):
        httpx_mock.add_response(
            method="POST", url=f"{WORKER_URL}/turns", status_code=503, text="busy"
        )

        with pytest.raises(WorkerError, match="HTTP 503: busy"):
            await collect(HttpWorker(WORKER_URL), create_request())

    @pytest.mark.asyncio
    async def test_connection_error_raises(self, httpx_mock):
        httpx_mock.add_exception(httpx.ConnectError("Connection refused"))

        with pytest.raises(WorkerError, match="Connection failed"):
            await collect(HttpWorker(WORKER_URL), create_request())

    @pytest.mark.asyncio
    async def test_timeout_raises(self, httpx_mock):
        httpx_mock.add_exception(httpx.ReadTimeout("too slow"))

        with pytest.raises(WorkerError, match="timed out"):
            await collect(HttpWorker(WORKER_URL), create_request())

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self, httpx_mock):
        httpx_mock.add_response(
            method="POST", url=f"{WORKER_URL}/turns", text="not json\n"
        )

        with pytest.raises(WorkerError, match="Invalid progress item"):
            await collect(HttpWorker(WORKER_URL), create_request())

    @pytest.mark.asyncio
    async def test_stops_reading_after_cancel(self, httpx_mock):
        httpx_mock.add_response(
            method="POST",
            url=f"{WORKER_URL}/turns",
            text='{"kind": "content", "text": "Hi"}\n',
        )
        token = CancellationToken()
        token.cancel()

        items = await collect(HttpWorker(WORKER_URL), create_request(token=token))

        assert items == []
