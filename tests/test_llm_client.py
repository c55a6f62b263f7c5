import asyncio
import json

import httpx
import pytest

from productflow.services.llm_client import (
    LlmChoice,
    LlmClient,
    LlmError,
    LlmMessage,
    LlmOutputError,
    LlmResponse,
    LlmTimeoutError,
    json_schema_format,
    parse_json_content,
)


def _response(content):
    return LlmResponse(choices=[LlmChoice(message=LlmMessage(role="assistant", content=content))])


@pytest.mark.unit
def test_json_schema_format_is_strict():
    fmt = json_schema_format("analysis_result", {"type": "object"})
    assert fmt["type"] == "json_schema"
    assert fmt["json_schema"]["name"] == "analysis_result"
    assert fmt["json_schema"]["strict"] is True


@pytest.mark.unit
def test_parse_json_string_content():
    assert parse_json_content(_response('{"a": 1}')) == {"a": 1}


@pytest.mark.unit
def test_parse_already_parsed_content():
    assert parse_json_content(_response({"a": 1})) == {"a": 1}


@pytest.mark.unit
@pytest.mark.parametrize(
    "response",
    [
        None,
        LlmResponse(choices=[]),
        _response(None),
        _response("not json"),
        _response("[1, 2]"),
        _response([{"type": "text", "text": "{}"}]),
    ],
)
def test_unusable_content_raises(response):
    with pytest.raises(LlmOutputError):
        parse_json_content(response)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invoke_posts_messages_and_response_format():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(
            200,
            json={
                "model": "test-model",
                "choices": [{"message": {"role": "assistant", "content": '{"ok": true}'}, "finish_reason": "stop"}],
            },
        )

    client = LlmClient(
        api_url="http://llm.test/v1/chat/completions",
        api_key="secret",
        model="test-model",
        timeout_seconds=5,
        transport=httpx.MockTransport(handler),
    )
    fmt = json_schema_format("x", {"type": "object"})
    response = await client.invoke([{"role": "user", "content": "hi"}], response_format=fmt)

    assert parse_json_content(response) == {"ok": True}
    assert seen["body"]["model"] == "test-model"
    assert seen["body"]["messages"] == [{"role": "user", "content": "hi"}]
    assert seen["body"]["response_format"] == fmt
    assert seen["auth"] == "Bearer secret"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invoke_error_status_raises():
    client = LlmClient(
        api_url="http://llm.test/v1/chat/completions",
        api_key="k",
        transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")),
    )
    with pytest.raises(LlmError) as exc_info:
        await client.invoke([{"role": "user", "content": "hi"}])
    assert "500" in str(exc_info.value)


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invoke_transport_error_raises_llm_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = LlmClient(api_url="http://llm.test/v1", api_key="k", transport=httpx.MockTransport(handler))
    with pytest.raises(LlmError):
        await client.invoke([{"role": "user", "content": "hi"}])


@pytest.mark.unit
@pytest.mark.asyncio
async def test_invoke_times_out(monkeypatch):
    client = LlmClient(api_url="http://llm.test/v1", api_key="k", timeout_seconds=0.05)

    async def slow_post(body):
        await asyncio.sleep(1)
        return {}

    monkeypatch.setattr(client, "_post", slow_post)
    with pytest.raises(LlmTimeoutError):
        await client.invoke([{"role": "user", "content": "hi"}])
