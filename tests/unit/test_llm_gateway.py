import asyncio
import json

import httpx
import pytest

from config import LlmRoute
from llm_gateway import TECHNICAL_APOLOGY, LlmClient, LlmGatewayError, chat, runnable
from llm_gateway.llm_gateway import _normalize_messages


def _route(timeout_s=5.0):
    return LlmRoute(
        name="test",
        base_url="https://llm.test/",
        endpoint="/v1/chat/completions",
        model="gpt-4o",
        timeout_s=timeout_s,
        api_key_env="TEST_LLM_KEY",
    )


def _call(handler, *, timeout_s=5.0, cancel_after=None, messages=None, system_prompt="Tu es un coach."):
    async def run():
        cancel = asyncio.Event() if cancel_after is not None else None
        if cancel is not None:
            asyncio.get_running_loop().call_later(cancel_after, cancel.set)
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            return await chat(
                messages or [{"role": "user", "content": "Bonjour"}],
                system_prompt=system_prompt,
                cfg=_route(timeout_s),
                client=client,
                cancel=cancel,
            )

    return asyncio.run(run())


def test_success_builds_expected_payload(monkeypatch):
    monkeypatch.setenv("TEST_LLM_KEY", "sk-test")
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        seen["auth"] = request.headers.get("Authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": "Salut"}}]})

    result = _call(handler)

    assert result.ok and result.text == "Salut"
    assert seen["url"] == "https://llm.test/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    body = seen["body"]
    assert body["model"] == "gpt-4o"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 1000
    assert body["messages"] == [
        {"role": "system", "content": "Tu es un coach."},
        {"role": "user", "content": "Bonjour"},
    ]


def test_error_status_is_classified():
    result = _call(lambda request: httpx.Response(500, json={"error": "boom"}))
    assert not result.ok
    assert result.failure == "status"
    assert result.text_or() == TECHNICAL_APOLOGY


def test_invalid_payloads_are_classified():
    assert _call(lambda request: httpx.Response(200, text="pas du json")).failure == "payload"
    assert _call(lambda request: httpx.Response(200, json={"choices": []})).failure == "payload"


def test_transport_error_is_classified():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    assert _call(handler).failure == "transport"


def test_timeout_is_enforced():
    async def slow(request):
        await asyncio.sleep(2)
        return httpx.Response(200, json={"choices": [{"message": {"content": "tard"}}]})

    result = _call(slow, timeout_s=0.1)
    assert result.failure == "timeout"


def test_cancel_event_stops_the_request():
    async def slow(request):
        await asyncio.sleep(2)
        return httpx.Response(200, json={"choices": [{"message": {"content": "tard"}}]})

    result = _call(slow, timeout_s=5.0, cancel_after=0.05)
    assert result.failure == "cancelled"


def test_messages_without_role_are_rejected():
    with pytest.raises(LlmGatewayError):
        _normalize_messages([{"content": "x"}])


def test_client_and_runnable_split_system_prompt():
    captured = {}

    def handler(request):
        captured["body"] = json.loads(request.content)
        return httpx.Response(200, json={"choices": [{"message": {"content": "ok"}}]})

    async def run():
        http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = LlmClient(_route(), http=http)
        try:
            return await runnable(client).ainvoke(
                [{"role": "system", "content": "Sys"}, {"role": "user", "content": "Question"}]
            )
        finally:
            await http.aclose()

    result = asyncio.run(run())

    assert result.text == "ok"
    assert captured["body"]["messages"] == [
        {"role": "system", "content": "Sys"},
        {"role": "user", "content": "Question"},
    ]


def test_caller_cancellation_also_stops_the_request():
    seen = {}

    async def slow(request):
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            seen["request_cancelled"] = True
            raise
        return httpx.Response(200, json={"choices": [{"message": {"content": "tard"}}]})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(slow)) as client:
            task = asyncio.ensure_future(
                chat(
                    [{"role": "user", "content": "Bonjour"}],
                    cfg=_route(5.0),
                    client=client,
                    cancel=asyncio.Event(),
                )
            )
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            await asyncio.sleep(0.05)
            return seen.get("request_cancelled", False)

    assert asyncio.run(run()) is True
