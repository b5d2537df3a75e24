"""Test doubles for the backend SDK clients.

The fakes record every call and return canned bodies or event streams so
adapter tests never touch the network.
"""
import io
import json
from types import SimpleNamespace

from chatbridge.base.interfaces import ChatCallbacks
from chatbridge.base.models import ChatMessage, ChatRequest, ModelConfig

BEDROCK_MODEL = "anthropic.claude-3-sonnet-20240229-v1:0"


def make_request(model, *messages, stream=False, **config):
    msgs = list(messages) or [ChatMessage(role="user", content="Hello")]
    return ChatRequest(messages=msgs, config=ModelConfig(model=model, stream=stream, **config))


# ---- Bedrock (boto3 bedrock-runtime) ----


class FakeEventStream:
    """Stand-in for botocore's ``EventStream``: blocking iteration plus ``close``."""

    def __init__(self, events, error=None):
        self._events = list(events)
        self._error = error
        self.closed = 0

    def __iter__(self):
        yield from self._events
        if self._error is not None:
            raise self._error

    def close(self):
        self.closed += 1


def bedrock_event(doc):
    return {"chunk": {"bytes": json.dumps(doc).encode("utf-8")}}


def bedrock_text(text):
    return bedrock_event(
        {"type": "content_block_delta", "index": 0, "delta": {"type": "text_delta", "text": text}}
    )


def bedrock_stop(output_tokens=5):
    return bedrock_event(
        {
            "type": "message_stop",
            "amazon-bedrock-invocationMetrics": {"inputTokenCount": 3, "outputTokenCount": output_tokens},
        }
    )


class FakeBedrockRuntime:
    """Records ``invoke_model`` / ``invoke_model_with_response_stream`` calls."""

    def __init__(self, body=None, headers=None, events=(), error=None, stream_error=None):
        if body is None:
            body = {"content": [{"type": "text", "text": "Hi there"}], "usage": {"input_tokens": 3, "output_tokens": 2}}
        self.body = body if isinstance(body, bytes) else json.dumps(body).encode("utf-8")
        self.headers = headers or {}
        self.events = list(events)
        self.error = error
        self.stream_error = stream_error
        self.stream = None
        self.calls = []

    def invoke_model(self, **kwargs):
        self.calls.append(("invoke_model", kwargs))
        if self.error is not None:
            raise self.error
        return {"body": io.BytesIO(self.body), "ResponseMetadata": {"HTTPHeaders": dict(self.headers)}}

    def invoke_model_with_response_stream(self, **kwargs):
        self.calls.append(("invoke_model_with_response_stream", kwargs))
        if self.error is not None:
            raise self.error
        self.stream = FakeEventStream(self.events, self.stream_error)
        return {"body": self.stream, "ResponseMetadata": {"HTTPHeaders": {}}}

    def payload(self, index=-1):
        return json.loads(self.calls[index][1]["body"])


class RecordingFactory:
    """``client_factory`` that hands out one client and records the configs it saw."""

    def __init__(self, client):
        self.client = client
        self.configs = []

    def __call__(self, config):
        self.configs.append(dict(config))
        return self.client


# ---- SDK async streams (anthropic / openai) ----


class FakeAsyncStream:
    """Async iterable with an awaitable ``close``, like the SDKs' ``AsyncStream``."""

    def __init__(self, events, error=None):
        self._events = list(events)
        self._error = error
        self.closed = 0

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for event in self._events:
            yield event
        if self._error is not None:
            raise self._error

    async def close(self):
        self.closed += 1


class _FakeSDKClient:
    """Close bookkeeping shared by the SDK client fakes (``async with`` and ``close``)."""

    close_calls = 0

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.close()

    async def close(self):
        self.close_calls += 1

    def is_closed(self):
        return self.close_calls > 0


class FakeAnthropicClient(_FakeSDKClient):
    def __init__(self, message=None, events=(), model_items=(), error=None, stream_error=None):
        self.message = message
        self.events = list(events)
        self.model_items = list(model_items)
        self.error = error
        self.stream_error = stream_error
        self.stream = None
        self.calls = []
        self.messages = SimpleNamespace(create=self._create)
        self.models = SimpleNamespace(list=lambda: FakeAsyncStream(self.model_items))

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            self.stream = FakeAsyncStream(self.events, self.stream_error)
            return self.stream
        return self.message


class FakeOpenAIClient(_FakeSDKClient):
    def __init__(self, completion=None, chunks=(), model_items=(), audio_bytes=b"ID3", error=None):
        self.completion = completion
        self.chunks = list(chunks)
        self.model_items = list(model_items)
        self.error = error
        self.stream = None
        self.calls = []
        self.speech_calls = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
        self.models = SimpleNamespace(list=lambda: FakeAsyncStream(self.model_items))
        self.audio = SimpleNamespace(speech=SimpleNamespace(create=self._speech))
        self._audio_bytes = audio_bytes

    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        if kwargs.get("stream"):
            self.stream = FakeAsyncStream(self.chunks)
            return self.stream
        return self.completion

    async def _speech(self, **kwargs):
        self.speech_calls.append(kwargs)
        return SimpleNamespace(content=self._audio_bytes)


def openai_chunk(content=None, finish_reason=None):
    return {"choices": [{"index": 0, "delta": {"content": content}, "finish_reason": finish_reason}]}


class CallbackRecorder:
    """Collects every ``ChatCallbacks`` invocation in order."""

    def __init__(self, abort_after=None):
        self.controllers = []
        self.updates = []
        self.finished = []
        self.errors = []
        self._abort_after = abort_after

    def on_controller(self, controller):
        self.controllers.append(controller)

    def on_update(self, text, delta):
        self.updates.append((text, delta))
        if self._abort_after is not None and len(self.updates) >= self._abort_after:
            self.controllers[0].abort("user pressed stop")

    def on_finish(self, text, raw):
        self.finished.append((text, raw))

    def on_error(self, error):
        self.errors.append(error)

    def callbacks(self):
        return ChatCallbacks(
            on_controller=self.on_controller,
            on_update=self.on_update,
            on_finish=self.on_finish,
            on_error=self.on_error,
        )
