from __future__ import annotations  # LLM request gateway module

import logging
import time
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple

import httpx

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup

RETRYABLE_STATUS = frozenset({408, 429, 500, 502, 503, 504})


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class CompletionClient(Protocol):  # Provider-agnostic text generation boundary
    def generate(self, system_prompt: str, user_prompt: str) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class UpstreamUnavailable(LlmGatewayError):  # Service unreachable, timed out or overloaded
    pass


class UpstreamError(LlmGatewayError):  # Service answered with an error or an unusable envelope
    pass


class HttpCompletionClient:  # OpenAI-compatible chat completions client
    def __init__(
        self,
        route: LlmRoute,
        *,
        client: Optional[HttpClient] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.route = route
        self._client = client
        self._sleep = sleep

    def generate(self, system_prompt: str, user_prompt: str) -> str:
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]
        return self.chat(messages)

    def chat(self, messages: List[Dict[str, str]]) -> str:  # Send chat payload and return raw message text
        cfg = self.route
        payload: Dict[str, Any] = {
            "model": cfg.model,
            "temperature": cfg.temperature,
            "messages": _normalize_messages(messages),
        }
        headers = {"Content-Type": "application/json"}
        api_key = cfg.credential()
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        headers.update(cfg.extra_headers)
        url = f"{cfg.base_url.rstrip('/')}{cfg.endpoint}"
        attempts = cfg.max_retries + 1
        preview = _preview(payload["messages"])
        logger.info(
            "LLM request start route=%s model=%s attempts=%d preview=%s",
            cfg.name,
            cfg.model,
            attempts,
            preview,
        )
        last_error: Optional[UpstreamUnavailable] = None
        for attempt in range(attempts):
            if attempt > 0:
                delay = cfg.backoff_s * (2 ** (attempt - 1))
                logger.warning(
                    "LLM retry route=%s attempt=%d/%d delay=%.2fs reason=%s",
                    cfg.name,
                    attempt + 1,
                    attempts,
                    delay,
                    last_error,
                )
                if delay:
                    self._sleep(delay)
            try:
                data = self._send(url, payload, headers)
            except UpstreamUnavailable as exc:
                last_error = exc
                continue
            content = _extract_content(data)
            logger.info(
                "LLM request done route=%s model=%s attempt=%d chars=%d",
                cfg.name,
                cfg.model,
                attempt + 1,
                len(content),
            )
            return content
        raise UpstreamUnavailable(f"LLM route '{cfg.name}' unavailable after {attempts} attempts") from last_error

    def _send(self, url: str, payload: Dict[str, Any], headers: Dict[str, str]) -> Any:  # Single HTTP round trip
        try:
            response, close_cb = _post(url, payload, headers, self.route.timeout_s, self._client)
        except httpx.TimeoutException as exc:
            logger.error("LLM request timed out: %s", exc)
            raise UpstreamUnavailable("LLM request timed out") from exc
        except (httpx.TransportError, OSError) as exc:
            logger.error("LLM transport failure: %s", exc)
            raise UpstreamUnavailable("LLM transport failed") from exc
        try:
            if response.status_code in RETRYABLE_STATUS:
                logger.error("LLM retryable status: %s", response.status_code)
                raise UpstreamUnavailable(f"LLM returned status {response.status_code}")
            if response.status_code >= 400:
                logger.error("LLM error status: %s body=%s", response.status_code, _truncate(response.text))
                raise UpstreamError(f"LLM returned status {response.status_code}")
            try:
                return response.json()
            except ValueError as exc:
                logger.error("Invalid JSON envelope from LLM: %s", exc)
                raise UpstreamError("LLM payload was not JSON") from exc
        finally:
            _close_safely(close_cb)


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        response = client.post(url, json=payload, headers=headers, timeout=timeout)
        return response, None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _normalize_messages(messages: List[Dict[str, str]]) -> List[Dict[str, str]]:  # Ensure message payload shape
    normalized: List[Dict[str, str]] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = str(item.get("content", ""))
        if not role:
            raise ValueError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: List[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in messages:
        text = message.get("content", "").strip()
        if text:
            return _truncate(text.splitlines()[0], 120)
    return ""


def _truncate(text: str, limit: int = 200) -> str:
    if len(text) > limit:
        return text[: limit - 3] + "..."
    return text


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            if isinstance(message, dict):
                content = message.get("content")
                if content is None:
                    return ""
                if isinstance(content, str):
                    return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise UpstreamError("LLM response missing content")
