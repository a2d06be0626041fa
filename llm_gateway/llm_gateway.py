from __future__ import annotations  # LLM request gateway module

import asyncio
import json
import logging
import os
from typing import Any, Dict, List, Literal, Optional, Protocol, Sequence

import httpx
from langchain_core.messages import BaseMessage
from langchain_core.runnables import RunnableLambda
from pydantic import BaseModel

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup

TECHNICAL_APOLOGY = (
    "Désolé, je rencontre des difficultés techniques pour répondre à votre question. "
    "Veuillez réessayer plus tard."
)

FailureKind = Literal["transport", "status", "payload", "timeout", "cancelled"]


class LlmGatewayError(RuntimeError):  # Raised for malformed requests, never for remote failures
    pass


class LlmResult(BaseModel):  # Outcome of one completion call
    ok: bool
    text: str = ""
    failure: Optional[FailureKind] = None
    detail: str = ""

    @classmethod
    def success(cls, text: str) -> "LlmResult":
        return cls(ok=True, text=text)

    @classmethod
    def failed(cls, kind: FailureKind, detail: str = "") -> "LlmResult":
        return cls(ok=False, failure=kind, detail=detail)

    def text_or(self, fallback: str = TECHNICAL_APOLOGY) -> str:
        return self.text if self.ok else fallback


class ChatModel(Protocol):  # Anything able to complete a role-tagged conversation
    async def complete(
        self,
        messages: Sequence[Any],
        system_prompt: Optional[str] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> LlmResult: ...


class LlmClient:  # Chat-completion client bound to one route
    def __init__(self, route: LlmRoute, *, http: Optional[httpx.AsyncClient] = None) -> None:
        self._route = route
        self._http = http
        self._owns_http = http is None
        if route.api_key_env and not os.getenv(route.api_key_env):
            logger.warning("LLM api key env %s is not set; requests will be rejected", route.api_key_env)

    @property
    def route(self) -> LlmRoute:
        return self._route

    async def complete(
        self,
        messages: Sequence[Any],
        system_prompt: Optional[str] = None,
        *,
        cancel: Optional[asyncio.Event] = None,
    ) -> LlmResult:
        return await chat(
            messages,
            system_prompt=system_prompt,
            cfg=self._route,
            client=self._client(),
            cancel=cancel,
        )

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(timeout=self._route.timeout_s)
        return self._http


async def chat(
    messages: Sequence[Any],
    *,
    system_prompt: Optional[str] = None,
    cfg: LlmRoute,
    client: httpx.AsyncClient,
    cancel: Optional[asyncio.Event] = None,
) -> LlmResult:  # Send one completion request and classify the outcome
    payload_messages: List[Dict[str, str]] = []
    if system_prompt:
        payload_messages.append({"role": "system", "content": system_prompt})
    payload_messages.extend(_normalize_messages(messages))
    payload: Dict[str, Any] = {
        "model": cfg.model,
        "messages": payload_messages,
        "temperature": cfg.temperature,
        "max_tokens": cfg.max_tokens,
    }
    headers = {"Content-Type": "application/json"}
    if cfg.api_key_env:
        api_key = os.getenv(cfg.api_key_env)
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
    headers.update(cfg.extra_headers)

    preview = _preview(payload_messages)
    if len(preview) > 120:
        preview = preview[:117] + "..."
    logger.info("LLM request send route=%s model=%s preview=%s", cfg.name, cfg.model, preview)

    try:
        response = await _post_with_deadline(client, cfg, payload, headers, cancel)
    except asyncio.TimeoutError:
        logger.error("LLM request timed out after %.1fs", cfg.timeout_s)
        return LlmResult.failed("timeout", f"no reply within {cfg.timeout_s}s")
    except asyncio.CancelledError:
        if cancel is not None and cancel.is_set():
            logger.warning("LLM request cancelled route=%s", cfg.name)
            return LlmResult.failed("cancelled", "request cancelled by caller")
        raise
    except httpx.TimeoutException as exc:
        logger.error("LLM transport timeout: %s", exc)
        return LlmResult.failed("timeout", str(exc))
    except httpx.HTTPError as exc:
        logger.error("LLM transport failure: %s", exc)
        return LlmResult.failed("transport", str(exc))

    if response.status_code >= 400:
        logger.error("LLM error status: %s", response.status_code)
        return LlmResult.failed("status", f"LLM returned status {response.status_code}")
    try:
        data = response.json()
    except json.JSONDecodeError as exc:
        logger.error("Invalid JSON payload from LLM: %s", exc)
        return LlmResult.failed("payload", "LLM payload was not JSON")
    content = _extract_content(data)
    if content is None:
        logger.error("LLM response missing content")
        return LlmResult.failed("payload", "LLM response missing content")
    logger.info("LLM request done route=%s model=%s", cfg.name, cfg.model)
    return LlmResult.success(content)


def runnable(model: ChatModel, *, cancel: Optional[asyncio.Event] = None) -> RunnableLambda:  # Provide runnable interface for LangChain pipelines
    async def _invoke(payload: Any) -> LlmResult:
        messages = _coerce_messages(payload)
        system_prompt: Optional[str] = None
        if messages and messages[0]["role"] == "system":
            system_prompt = messages[0]["content"]
            messages = messages[1:]
        return await model.complete(messages, system_prompt, cancel=cancel)

    return RunnableLambda(_invoke)


async def _post_with_deadline(
    client: httpx.AsyncClient,
    cfg: LlmRoute,
    payload: Dict[str, Any],
    headers: Dict[str, str],
    cancel: Optional[asyncio.Event],
) -> httpx.Response:  # Race the HTTP call against the timeout and the cancel event
    request = asyncio.ensure_future(client.post(cfg.url, json=payload, headers=headers, timeout=cfg.timeout_s))
    if cancel is None:
        return await asyncio.wait_for(request, timeout=cfg.timeout_s)
    watcher = asyncio.ensure_future(cancel.wait())
    try:
        done, _ = await asyncio.wait({request, watcher}, timeout=cfg.timeout_s, return_when=asyncio.FIRST_COMPLETED)
    finally:
        watcher.cancel()
        if not request.done():
            request.cancel()
    if request in done:
        return request.result()
    if watcher in done:
        raise asyncio.CancelledError()
    raise asyncio.TimeoutError()


def _normalize_messages(messages: Sequence[Any]) -> List[Dict[str, str]]:  # Ensure message payload shape
    normalized: List[Dict[str, str]] = []
    for item in messages:
        if isinstance(item, dict):
            role = str(item.get("role", "")).strip()
            content = str(item.get("content", ""))
        else:
            role = str(getattr(item, "role", "")).strip()
            content = str(getattr(item, "content", ""))
        if not role:
            raise LlmGatewayError("Chat message missing role")
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Dict[str, str]]) -> str:  # Build preview string for logging
    for message in reversed(messages):
        text = message.get("content", "").strip()
        if text:
            return text.splitlines()[0]
    return ""


def _extract_content(data: Any) -> Optional[str]:  # Extract message content from completion response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    return None


def _coerce_messages(payload: Any) -> List[Dict[str, str]]:  # Convert LangChain payloads into dict messages
    if hasattr(payload, "to_messages"):
        payload = payload.to_messages()
    if isinstance(payload, dict):
        return _normalize_messages([payload])
    if isinstance(payload, BaseMessage):
        return [_message_dict(payload)]
    if isinstance(payload, (list, tuple)):
        return [_message_dict(item) if isinstance(item, BaseMessage) else _normalize_messages([item])[0] for item in payload]
    raise LlmGatewayError("Unsupported message payload for LLM runnable")


def _message_dict(message: BaseMessage) -> Dict[str, str]:  # Map LangChain BaseMessage to role/content dict
    role = message.type
    if role == "human":
        role = "user"
    elif role == "ai":
        role = "assistant"
    content = message.content
    if not isinstance(content, str):
        content = json.dumps(content)
    return {"role": role, "content": content}
