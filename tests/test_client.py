"""
Tests for the DashScope transport client.

`requests` is patched at the client module so no network traffic happens.
"""

from __future__ import annotations

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

from ai_example.llm.client import DashScopeClient, DashScopeError, TaskFailedError


def _response(payload: dict | None = None, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload or {}
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(response=response)
    return response


def _task(status: str, **output) -> MagicMock:
    return _response({"output": {"task_status": status, **output}})


@pytest.fixture
def client() -> DashScopeClient:
    return DashScopeClient(
        api_key="sk-test",
        base_url="https://native.example/api/v1",
        compatible_url="https://compat.example/v1/",
        poll_interval=0.01,
        task_timeout=60,
    )


class TestChat:
    """Non-streaming chat completions."""

    def test_returns_stripped_content(self, client: DashScopeClient) -> None:
        reply = {"choices": [{"message": {"role": "assistant", "content": "  Hello!  "}}]}

        with patch("ai_example.llm.client.requests.post", return_value=_response(reply)) as post:
            text = client.chat([{"role": "user", "content": "hi"}], model="qwen-max")

        assert text == "Hello!"
        url = post.call_args.args[0]
        kwargs = post.call_args.kwargs
        assert url == "https://compat.example/v1/chat/completions"
        assert kwargs["json"]["model"] == "qwen-max"
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "hi"}]
        assert kwargs["json"]["stream"] is False
        assert kwargs["headers"]["Authorization"] == "Bearer sk-test"

    def test_malformed_body(self, client: DashScopeClient) -> None:
        with patch("ai_example.llm.client.requests.post", return_value=_response({"choices": []})):
            with pytest.raises(DashScopeError, match="choices/message/content"):
                client.chat([{"role": "user", "content": "hi"}])

    def test_http_error_is_sanitized(self, client: DashScopeClient) -> None:
        failing = _response({"error": "secret details"}, status_code=401)

        with patch("ai_example.llm.client.requests.post", return_value=failing):
            with pytest.raises(DashScopeError) as exc_info:
                client.chat([{"role": "user", "content": "hi"}])

        assert str(exc_info.value) == "DASHSCOPE HTTP ERROR (401)"
        assert exc_info.value.status_code == 401
        assert isinstance(exc_info.value.__cause__, requests.HTTPError)

    def test_connection_error(self, client: DashScopeClient) -> None:
        with patch(
            "ai_example.llm.client.requests.post",
            side_effect=requests.ConnectionError("refused"),
        ):
            with pytest.raises(DashScopeError, match="^DASHSCOPE HTTP ERROR$"):
                client.chat([{"role": "user", "content": "hi"}])

    def test_missing_key(self) -> None:
        keyless = DashScopeClient(api_key=None)

        with patch("ai_example.llm.client.config.load_key", return_value=None):
            with patch("ai_example.llm.client.requests.post") as post:
                with pytest.raises(DashScopeError, match="KEY NOT FOUND"):
                    keyless.chat([{"role": "user", "content": "hi"}])

        post.assert_not_called()


class TestStreamChat:
    """SSE parsing of streaming chat completions."""

    def _stream_response(self, lines: list[str]) -> MagicMock:
        response = _response()
        response.iter_lines.return_value = iter(lines)
        post = MagicMock()
        post.return_value.__enter__.return_value = response
        return post

    def test_yields_deltas_until_done(self, client: DashScopeClient) -> None:
        def chunk(text: str) -> str:
            return "data: " + json.dumps({"choices": [{"delta": {"content": text}}]})

        lines = [
            chunk("Hel"),
            "",
            "data: not-json",
            "data: " + json.dumps({"choices": [{"delta": {}}]}),
            chunk("lo"),
            "data: [DONE]",
            chunk("ignored"),
        ]
        post = self._stream_response(lines)

        with patch("ai_example.llm.client.requests.post", post):
            deltas = list(client.stream_chat([{"role": "user", "content": "hi"}]))

        assert deltas == ["Hel", "lo"]
        assert post.call_args.kwargs["stream"] is True
        assert post.call_args.kwargs["json"]["stream"] is True

    def test_stream_error_raised_while_iterating(self, client: DashScopeClient) -> None:
        with patch(
            "ai_example.llm.client.requests.post",
            side_effect=requests.ConnectionError("reset"),
        ):
            stream = client.stream_chat([{"role": "user", "content": "hi"}])
            with pytest.raises(DashScopeError):
                next(stream)


class TestEmbed:
    """Embedding vectors come back in input order."""

    def test_orders_by_index(self, client: DashScopeClient) -> None:
        body = {
            "data": [
                {"index": 1, "embedding": [3, 4]},
                {"index": 0, "embedding": [0.5, 1.5]},
            ]
        }

        with patch("ai_example.llm.client.requests.post", return_value=_response(body)) as post:
            vectors = client.embed(["a", "b"], model="text-embedding-v3")

        assert vectors == [[0.5, 1.5], [3.0, 4.0]]
        assert post.call_args.args[0] == "https://compat.example/v1/embeddings"
        assert post.call_args.kwargs["json"]["input"] == ["a", "b"]


class TestAsyncTasks:
    """Task submission and status polling."""

    def test_submit_sets_async_header(self, client: DashScopeClient) -> None:
        body = {"output": {"task_id": "t-1", "task_status": "PENDING"}}

        with patch("ai_example.llm.client.requests.post", return_value=_response(body)) as post:
            task_id = client.submit_task("/services/x", {"model": "m"})

        assert task_id == "t-1"
        assert post.call_args.args[0] == "https://native.example/api/v1/services/x"
        assert post.call_args.kwargs["headers"]["X-DashScope-Async"] == "enable"

    def test_submit_without_task_id(self, client: DashScopeClient) -> None:
        with patch("ai_example.llm.client.requests.post", return_value=_response({"output": {}})):
            with pytest.raises(DashScopeError, match="TASK ID"):
                client.submit_task("/services/x", {})

    def test_polls_until_succeeded(self, client: DashScopeClient) -> None:
        responses = [_task("PENDING"), _task("RUNNING"), _task("SUCCEEDED", results=[{"url": "u"}])]

        with patch("ai_example.llm.client.requests.get", side_effect=responses) as get, \
                patch("ai_example.llm.client.time.sleep") as sleep:
            output = client.wait_for_task("t-1")

        assert output["results"] == [{"url": "u"}]
        assert get.call_args.args[0] == "https://native.example/api/v1/tasks/t-1"
        assert sleep.call_count == 2

    def test_throttled_poll_is_not_fatal(self, client: DashScopeClient) -> None:
        responses = [_response(status_code=429), _task("SUCCEEDED")]

        with patch("ai_example.llm.client.requests.get", side_effect=responses), \
                patch("ai_example.llm.client.time.sleep"):
            output = client.wait_for_task("t-1")

        assert output["task_status"] == "SUCCEEDED"

    def test_other_poll_errors_propagate(self, client: DashScopeClient) -> None:
        with patch("ai_example.llm.client.requests.get", return_value=_response(status_code=500)), \
                patch("ai_example.llm.client.time.sleep"):
            with pytest.raises(DashScopeError) as exc_info:
                client.wait_for_task("t-1")

        assert exc_info.value.status_code == 500

    def test_failed_task(self, client: DashScopeClient) -> None:
        failed = _task("FAILED", message="bad prompt")

        with patch("ai_example.llm.client.requests.get", return_value=failed), \
                patch("ai_example.llm.client.time.sleep"):
            with pytest.raises(TaskFailedError) as exc_info:
                client.wait_for_task("t-1")

        assert exc_info.value.status == "FAILED"
        assert exc_info.value.task_id == "t-1"

    def test_timeout(self, client: DashScopeClient) -> None:
        client.task_timeout = 0

        with patch("ai_example.llm.client.requests.get", return_value=_task("RUNNING")), \
                patch("ai_example.llm.client.time.sleep") as sleep:
            with pytest.raises(TaskFailedError) as exc_info:
                client.wait_for_task("t-1")

        assert exc_info.value.status == "TIMEOUT"
        sleep.assert_not_called()

    def test_download_returns_bytes(self, client: DashScopeClient) -> None:
        response = _response()
        response.content = b"RIFF...."

        with patch("ai_example.llm.client.requests.get", return_value=response) as get:
            assert client.download("https://oss.example/a.wav") == b"RIFF...."

        assert "headers" not in get.call_args.kwargs
