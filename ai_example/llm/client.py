"""DashScope transport client.

Architectural role:
    Executes HTTP requests against the DashScope platform and normalizes response
    materialization for the capability services.

Invocation flow:
    service method -> `DashScopeClient.<call>` -> `requests` POST/GET ->
    parsed JSON, streamed text deltas, or finished async-task output.

Endpoints:
    - Chat and embeddings use the OpenAI-compatible root.
    - Image synthesis, speech synthesis, transcription, and task status use the
      native API root.

Retry behavior:
    No retry loop is implemented. Each HTTP call is attempted once. Async tasks are
    polled until they finish or `task_timeout` elapses; HTTP 429 during polling only
    delays the next poll.

Failure handling model:
    Every failure is raised as `DashScopeError` with a sanitized, provider-labelled
    message. Raw response bodies are logged, never put in the exception text.
"""

import json
import logging
import time

import requests

from ai_example.llm import provider_config as config


logger = logging.getLogger(__name__)

TERMINAL_TASK_STATES = {"SUCCEEDED", "FAILED", "CANCELED", "UNKNOWN"}


class DashScopeError(RuntimeError):
    """Raised when a DashScope call cannot produce a usable result."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class TaskFailedError(DashScopeError):
    """Raised when an async task ends in a non-success state or times out."""

    def __init__(self, task_id: str, status: str, message: str | None = None):
        super().__init__(message or f"DASHSCOPE TASK {task_id} ENDED WITH STATUS {status}")
        self.task_id = task_id
        self.status = status


def _build_sanitized_http_error(err: requests.exceptions.RequestException) -> DashScopeError:
    """Build a provider-labelled error without exposing raw response internals."""
    status_code = None
    if getattr(err, "response", None) is not None:
        status_code = getattr(err.response, "status_code", None)

    if status_code:
        return DashScopeError(f"DASHSCOPE HTTP ERROR ({status_code})", status_code)
    return DashScopeError("DASHSCOPE HTTP ERROR")


def _extract_delta(data: dict) -> str | None:
    """Pull incremental text out of one OpenAI-compatible stream chunk."""
    choices = data.get("choices") or []
    if not choices:
        return None

    choice = choices[0]
    if "delta" in choice and choice["delta"].get("content"):
        return choice["delta"]["content"]
    if "message" in choice and choice["message"].get("content"):
        return choice["message"]["content"]
    if choice.get("text"):
        return choice["text"]
    return None


class DashScopeClient:
    """Thin synchronous client over the DashScope REST APIs.

    Args:
        api_key: Explicit key. Resolved lazily through `provider_config.load_key`
            when omitted.
        base_url: Native API root.
        compatible_url: OpenAI-compatible API root.
        timeout: Per-request timeout in seconds.
        poll_interval: Delay between async-task status polls.
        task_timeout: Upper bound on total async-task wait.
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = config.DASHSCOPE_BASE_URL,
        compatible_url: str = config.DASHSCOPE_COMPATIBLE_URL,
        timeout: float = config.REQUEST_TIMEOUT,
        poll_interval: float = config.TASK_POLL_INTERVAL,
        task_timeout: float = config.TASK_TIMEOUT,
    ):
        self._api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.compatible_url = compatible_url.rstrip("/")
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.task_timeout = task_timeout

    # ------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------

    def _headers(self, extra: dict | None = None) -> dict:
        api_key = self._api_key or config.load_key()
        if not api_key:
            raise DashScopeError("DASHSCOPE KEY NOT FOUND")

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }
        if extra:
            headers.update(extra)
        return headers

    def native_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def compatible_endpoint(self, path: str) -> str:
        return f"{self.compatible_url}{path}"

    def post_json(self, url: str, payload: dict, async_task: bool = False) -> dict:
        """POST a JSON payload and return the decoded JSON body.

        Args:
            url: Absolute endpoint URL.
            payload: Request body.
            async_task: Adds `X-DashScope-Async: enable` so the endpoint returns a
                task handle instead of blocking.

        Raises:
            DashScopeError: on transport failure, non-2xx status, or non-JSON body.
        """
        extra = {"X-DashScope-Async": "enable"} if async_task else None
        headers = self._headers(extra)

        try:
            response = requests.post(url, headers=headers, json=payload, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as err:
            logger.error("DashScope POST %s failed: %s", url, err)
            raise _build_sanitized_http_error(err) from err

        try:
            return response.json()
        except ValueError as err:
            raise DashScopeError("DASHSCOPE RESPONSE IS NOT JSON") from err

    def get_json(self, url: str, authorized: bool = True) -> dict:
        """GET a URL and return the decoded JSON body.

        `authorized=False` skips the API key, for pre-signed result URLs.
        """
        headers = self._headers() if authorized else None

        try:
            response = requests.get(url, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as err:
            logger.error("DashScope GET %s failed: %s", url, err)
            raise _build_sanitized_http_error(err) from err

        try:
            return response.json()
        except ValueError as err:
            raise DashScopeError("DASHSCOPE RESPONSE IS NOT JSON") from err

    def download(self, url: str) -> bytes:
        """Fetch raw bytes from a (pre-signed) result URL."""
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as err:
            logger.error("DashScope download %s failed: %s", url, err)
            raise _build_sanitized_http_error(err) from err
        return response.content

    # ------------------------------------------------------------
    # Chat
    # ------------------------------------------------------------

    def chat(self, messages: list[dict], model: str = config.CHAT_MODEL, **params) -> str:
        """Run one non-streaming chat completion and return the reply text."""
        payload = {"model": model, "messages": messages, "stream": False, **params}
        data = self.post_json(self.compatible_endpoint(config.ENDPOINTS["chat"]), payload)

        try:
            text = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as err:
            raise DashScopeError("DASHSCOPE RESPONSE MISSING choices/message/content") from err

        if text is None:
            raise DashScopeError("DASHSCOPE RESPONSE EMPTY")
        return text.strip()

    def stream_chat(self, messages: list[dict], model: str = config.CHAT_MODEL, **params):
        """Yield incremental text deltas from a streaming chat completion.

        Behavior:
            - Parses line-delimited `data: {...}` SSE chunks.
            - Stops at the `[DONE]` sentinel.
            - Skips blank lines and undecodable chunks.

        Raises:
            DashScopeError: on transport failure (raised lazily, while iterating).
        """
        payload = {"model": model, "messages": messages, "stream": True, **params}
        url = self.compatible_endpoint(config.ENDPOINTS["chat"])
        headers = self._headers()

        try:
            with requests.post(
                url,
                headers=headers,
                json=payload,
                stream=True,
                timeout=self.timeout,
            ) as response:

                response.raise_for_status()
                response.encoding = "utf-8"

                for line in response.iter_lines(decode_unicode=True):

                    if not line:
                        continue

                    if line.startswith("data:"):
                        line = line[5:].strip()

                    if line == "[DONE]":
                        break

                    try:
                        data = json.loads(line)
                    except ValueError:
                        logger.debug("Skipping undecodable stream chunk: %r", line)
                        continue

                    delta = _extract_delta(data)
                    if delta:
                        yield delta
        except requests.exceptions.RequestException as err:
            logger.error("DashScope stream %s failed: %s", url, err)
            raise _build_sanitized_http_error(err) from err

    # ------------------------------------------------------------
    # Embeddings
    # ------------------------------------------------------------

    def embed(self, texts: list[str], model: str = config.EMBEDDING_MODEL) -> list[list[float]]:
        """Embed a batch of texts, preserving input order."""
        payload = {"model": model, "input": texts, "encoding_format": "float"}
        data = self.post_json(self.compatible_endpoint(config.ENDPOINTS["embeddings"]), payload)

        try:
            items = sorted(data["data"], key=lambda item: item.get("index", 0))
            return [[float(x) for x in item["embedding"]] for item in items]
        except (KeyError, TypeError) as err:
            raise DashScopeError("DASHSCOPE RESPONSE MISSING data/embedding") from err

    # ------------------------------------------------------------
    # Async tasks
    # ------------------------------------------------------------

    def submit_task(self, path: str, payload: dict) -> str:
        """Submit an async task on the native API and return its task id."""
        data = self.post_json(self.native_url(path), payload, async_task=True)
        task_id = (data.get("output") or {}).get("task_id")
        if not task_id:
            raise DashScopeError("DASHSCOPE DID NOT RETURN A TASK ID")
        return task_id

    def wait_for_task(self, task_id: str) -> dict:
        """Poll a task until it reaches a terminal state.

        Returns:
            The task `output` object of a `SUCCEEDED` task.

        Raises:
            TaskFailedError: on `FAILED`/`CANCELED`/`UNKNOWN` or when `task_timeout`
                elapses first.
        """
        status_url = self.native_url(config.ENDPOINTS["tasks"]) + task_id
        deadline = time.monotonic() + self.task_timeout

        while True:
            try:
                data = self.get_json(status_url)
            except DashScopeError as err:
                if err.status_code != 429:
                    raise
                logger.debug("Task %s poll throttled", task_id)
                data = None

            if data is not None:
                output = data.get("output") or {}
                status = output.get("task_status", "UNKNOWN")
                logger.debug("Task %s status %s", task_id, status)

                if status == "SUCCEEDED":
                    return output
                if status in TERMINAL_TASK_STATES:
                    raise TaskFailedError(task_id, status, output.get("message"))

            if time.monotonic() >= deadline:
                raise TaskFailedError(task_id, "TIMEOUT")

            time.sleep(self.poll_interval)

    def run_task(self, path: str, payload: dict) -> dict:
        """Submit an async task and block until its output is available."""
        task_id = self.submit_task(path, payload)
        logger.info("Submitted DashScope task %s", task_id)
        return self.wait_for_task(task_id)
