"""AnthropicProvider against a fake async SDK client."""
import asyncio
from datetime import datetime, timezone
from types import SimpleNamespace

import anthropic
import httpx
import pytest

from chatbridge.anthropic import AnthropicProvider
from chatbridge.anthropic.client import make_client
from chatbridge.anthropic.helpers import decode_stream_event, finish_reason_from
from chatbridge.base.errors import ErrorCode, UnsupportedModelError, UpstreamError, UpstreamProtocolError
from chatbridge.base.models import STREAM_SENTINEL, CanonicalChunk, ChatMessage, FinishReason
from chatbridge.tests.fakes import CallbackRecorder, FakeAnthropicClient, RecordingFactory, make_request

MODEL = "claude-3-5-sonnet-20241022"


def _message(text="Hello!", content=None):
    return SimpleNamespace(
        id="msg_01",
        model=MODEL,
        content=content if content is not None else [SimpleNamespace(type="text", text=text)],
        usage=SimpleNamespace(input_tokens=12, output_tokens=3),
        stop_reason="end_turn",
    )


def _delta(text):
    return {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": text}}


def _adapter(config, client, **kwargs):
    factory = RecordingFactory(client)
    return AnthropicProvider(config, client_factory=factory, **kwargs), factory


def test_complete_maps_params_and_response(anthropic_config):
    client = FakeAnthropicClient(message=_message())
    adapter, _ = _adapter(anthropic_config, client)
    request = make_request(MODEL, ChatMessage("system", "Terse."), ChatMessage("user", "Hi"), max_tokens=50)
    response = asyncio.run(adapter.complete(request))

    assert response.text == "Hello!"  # nosec B101
    assert response.usage.to_dict() == {"prompt_tokens": 12, "completion_tokens": 3, "total_tokens": 15}  # nosec B101
    assert client.calls == [  # nosec B101
        {
            "model": MODEL,
            "max_tokens": 50,
            "temperature": 0.7,
            "messages": [{"role": "user", "content": [{"type": "text", "text": "Hi"}]}],
            "system": "Terse.",
        }
    ]


def test_tool_blocks_are_ignored_in_text(anthropic_config):
    content = [
        SimpleNamespace(type="text", text="a"),
        SimpleNamespace(type="tool_use", id="t1", name="x", input={}),
        {"type": "text", "text": "b"},
    ]
    adapter, _ = _adapter(anthropic_config, FakeAnthropicClient(message=_message(content=content)))
    assert asyncio.run(adapter.complete(make_request(MODEL))).text == "ab"  # nosec B101


def test_empty_content_is_protocol_error(anthropic_config):
    adapter, _ = _adapter(anthropic_config, FakeAnthropicClient(message=_message(content=[])))
    with pytest.raises(UpstreamProtocolError):
        asyncio.run(adapter.complete(make_request(MODEL)))


def test_sdk_status_error_is_classified(anthropic_config):
    response = httpx.Response(429, request=httpx.Request("POST", "https://api.anthropic.com/v1/messages"))
    error = anthropic.RateLimitError("rate limited", response=response, body=None)
    adapter, _ = _adapter(anthropic_config, FakeAnthropicClient(error=error))
    with pytest.raises(UpstreamError) as ei:
        asyncio.run(adapter.complete(make_request(MODEL)))
    assert ei.value.code is ErrorCode.RATE_LIMIT  # nosec B101
    assert ei.value.message.startswith("[anthropic] RateLimitError")  # nosec B101


def test_model_family_is_enforced(anthropic_config):
    adapter, factory = _adapter(anthropic_config, FakeAnthropicClient(message=_message()))
    with pytest.raises(UnsupportedModelError):
        asyncio.run(adapter.complete(make_request("anthropic.claude-v2")))
    assert factory.configs == []  # nosec B101


def test_stream_max_tokens_is_length(anthropic_config):
    events = [
        {"type": "message_start", "message": {"id": "msg_01"}},
        {"type": "content_block_start", "index": 0, "content_block": {"type": "text", "text": ""}},
        _delta("Once"),
        _delta(" upon"),
        {"type": "content_block_stop", "index": 0},
        {"type": "message_delta", "delta": {"stop_reason": "max_tokens"}, "usage": {"output_tokens": 2}},
        {"type": "message_stop"},
    ]
    client = FakeAnthropicClient(events=events)
    adapter, _ = _adapter(anthropic_config, client)
    stream = asyncio.run(adapter.open_stream(make_request(MODEL, stream=True)))

    async def collect():
        return [item async for item in stream]

    items = asyncio.run(collect())
    assert items == [  # nosec B101
        CanonicalChunk("Once"),
        CanonicalChunk(" upon"),
        CanonicalChunk("", FinishReason.LENGTH),
        STREAM_SENTINEL,
    ]
    assert client.calls[0]["stream"] is True  # nosec B101
    assert client.stream.closed == 1  # nosec B101


def test_stream_end_turn_via_chat(anthropic_config):
    events = [_delta("Hi"), {"type": "message_delta", "delta": {"stop_reason": "end_turn"}}, {"type": "message_stop"}]
    client = FakeAnthropicClient(events=events)
    adapter, _ = _adapter(anthropic_config, client)
    recorder = CallbackRecorder()
    asyncio.run(adapter.chat(make_request(MODEL, stream=True), recorder.callbacks()))
    text, raw = recorder.finished[0]
    assert text == "Hi"  # nosec B101
    assert raw.raw == {"finish_reason": "stop"}  # nosec B101
    assert client.stream.closed == 1  # nosec B101


def test_decode_stream_event_variants():
    assert decode_stream_event({"type": "ping"}) == []  # nosec B101
    assert decode_stream_event({"type": "content_block_delta", "delta": {"type": "input_json_delta"}}) == []  # nosec B101
    assert decode_stream_event({"type": "message_delta", "delta": {}}) == []  # nosec B101
    assert finish_reason_from("stop_sequence") is FinishReason.STOP  # nosec B101


def test_models_listing(anthropic_config):
    created = datetime(2024, 10, 22, tzinfo=timezone.utc)
    items = [SimpleNamespace(id=MODEL, display_name="Claude 3.5 Sonnet", created_at=created, type="model")]
    adapter, _ = _adapter(anthropic_config, FakeAnthropicClient(model_items=items))
    models = asyncio.run(adapter.models())
    assert len(models) == 1  # nosec B101
    assert models[0].id == MODEL  # nosec B101
    assert models[0].name == "Claude 3.5 Sonnet"  # nosec B101
    assert models[0].created == int(created.timestamp())  # nosec B101
    assert models[0].provider == "anthropic"  # nosec B101


def test_caller_key_overrides_config(anthropic_config):
    client = FakeAnthropicClient(message=_message())
    adapter, factory = _adapter(anthropic_config, client, api_key="sk-ant-user")
    asyncio.run(adapter.complete(make_request(MODEL)))
    assert factory.configs[0]["api_key"] == "sk-ant-user"  # nosec B101


def test_make_client_disables_sdk_retries():
    client = make_client({"api_key": "sk-ant-test", "base_url": "https://proxy.example"})
    assert client.max_retries == 0  # nosec B101
    assert str(client.base_url).startswith("https://proxy.example")  # nosec B101


def test_sdk_client_closed_after_each_call(anthropic_config):
    client = FakeAnthropicClient(message=_message(), model_items=[SimpleNamespace(id=MODEL, display_name=None)])
    adapter, _ = _adapter(anthropic_config, client)
    asyncio.run(adapter.complete(make_request(MODEL)))
    assert client.close_calls == 1  # nosec B101
    asyncio.run(adapter.models())
    assert client.close_calls == 2  # nosec B101


def test_stream_failure_closes_stream_and_client(anthropic_config):
    client = FakeAnthropicClient(events=[_delta("par")], stream_error=ConnectionResetError("reset"))
    adapter, _ = _adapter(anthropic_config, client)
    recorder = CallbackRecorder()
    asyncio.run(adapter.chat(make_request(MODEL, stream=True), recorder.callbacks()))
    assert recorder.updates == [("par", "par")]  # nosec B101
    assert isinstance(recorder.errors[0], UpstreamError)  # nosec B101
    assert client.stream.closed == 1  # nosec B101
    assert client.is_closed()  # nosec B101
