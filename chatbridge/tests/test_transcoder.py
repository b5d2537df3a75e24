"""Stream transcoder state machine and transport release."""
import asyncio
import json
import logging

import pytest

from chatbridge.base.cancellation import CancellationToken, CancelledError
from chatbridge.base.errors import UpstreamError, wrap_upstream
from chatbridge.base.models import STREAM_SENTINEL, CanonicalChunk, FinishReason
from chatbridge.base.streaming import ChunkStream, NativeDelta, NativeStop, StreamTranscoder, TransportHandle


def _decode(event):
    if event == "garbage":
        raise ValueError("cannot decode frame")
    return event


class _Transport:
    def __init__(self, events, error=None):
        self.events = list(events)
        self.error = error
        self.read = 0
        self.closes = 0

    async def _iterate(self):
        for event in self.events:
            self.read += 1
            yield event
        if self.error is not None:
            raise self.error

    def close(self):
        self.closes += 1

    def handle(self):
        return TransportHandle(self._iterate(), self.close)


def _transcoder(token=None):
    return StreamTranscoder(
        _decode,
        provider="bedrock",
        model="anthropic.claude-v2",
        token=token,
        wrap_error=lambda exc: wrap_upstream(exc, provider="bedrock", model="anthropic.claude-v2"),
    )


def _pump(events, error=None, emit=None, token=None):
    transport = _Transport(events, error)
    transcoder = _transcoder(token)
    items = []
    delivered = asyncio.run(transcoder.pump(transport.handle(), emit or items.append))
    return transcoder, transport, items, delivered


def test_deltas_then_stop_then_sentinel():
    transcoder, transport, items, delivered = _pump(
        [[NativeDelta("Hel")], [NativeDelta("lo"), NativeStop(FinishReason.STOP)], [NativeDelta("ignored")]]
    )
    assert items == [  # nosec B101
        CanonicalChunk("Hel"),
        CanonicalChunk("lo"),
        CanonicalChunk("", FinishReason.STOP),
        STREAM_SENTINEL,
    ]
    assert delivered  # nosec B101
    assert transcoder.text == "Hello"  # nosec B101
    assert transcoder.done  # nosec B101
    assert transport.read == 2  # nosec B101
    assert transport.closes == 1  # nosec B101


def test_empty_deltas_and_bad_frames_are_skipped(caplog):
    with caplog.at_level(logging.DEBUG, logger="chatbridge"):
        transcoder, _, items, _ = _pump([[NativeDelta("")], "garbage", [NativeDelta("x")], [NativeStop(FinishReason.STOP)]])
    assert items[0] == CanonicalChunk("x")  # nosec B101
    assert items.count(STREAM_SENTINEL) == 1  # nosec B101
    assert transcoder.metrics.skipped == 1  # nosec B101
    assert transcoder.metrics.emitted == 1  # nosec B101
    assert any("stream.frame.skipped" in r.getMessage() for r in caplog.records)  # nosec B101


def test_exhausted_transport_finishes_with_length():
    transcoder, transport, items, delivered = _pump([[NativeDelta("partial")]])
    assert items[-2:] == [CanonicalChunk("", FinishReason.LENGTH), STREAM_SENTINEL]  # nosec B101
    assert transcoder.finish_reason is FinishReason.LENGTH  # nosec B101
    assert delivered  # nosec B101
    assert transport.closes == 1  # nosec B101


def test_done_state_ignores_further_input():
    transcoder = _transcoder()
    assert transcoder.step([NativeStop(FinishReason.STOP)])[-1] is STREAM_SENTINEL  # nosec B101
    assert transcoder.step([NativeDelta("late")]) == []  # nosec B101
    assert transcoder.finish() == []  # nosec B101


def test_emit_failure_stops_and_releases_once():
    seen = []

    def emit(item):
        if len(seen) == 1:
            raise BrokenPipeError("client went away")
        seen.append(item)

    transcoder, transport, _, delivered = _pump(
        [[NativeDelta("a")], [NativeDelta("b")], [NativeDelta("c")], [NativeStop(FinishReason.STOP)]], emit=emit
    )
    assert not delivered  # nosec B101
    assert seen == [CanonicalChunk("a")]  # nosec B101
    assert isinstance(transcoder.emit_error, BrokenPipeError)  # nosec B101
    assert transport.read == 2  # nosec B101
    assert transport.closes == 1  # nosec B101


def test_async_emit_is_awaited():
    received = []

    async def emit(item):
        await asyncio.sleep(0)
        received.append(item)

    _, _, _, delivered = _pump([[NativeDelta("a"), NativeStop(FinishReason.STOP)]], emit=emit)
    assert delivered  # nosec B101
    assert received[-1] is STREAM_SENTINEL  # nosec B101


def test_backend_error_is_wrapped_after_release(caplog):
    transport = _Transport([[NativeDelta("a")]], error=ConnectionResetError("reset by peer"))
    transcoder = _transcoder()
    with caplog.at_level(logging.INFO, logger="chatbridge"):
        with pytest.raises(UpstreamError) as ei:
            asyncio.run(transcoder.pump(transport.handle(), lambda item: None))
    assert ei.value.message == "[bedrock] ConnectionResetError: reset by peer"  # nosec B101
    assert transport.closes == 1  # nosec B101
    ends = [json.loads(r.getMessage()) for r in caplog.records if '"stream.error"' in r.getMessage()]
    assert ends and ends[0]["phase"] == "finalize"  # nosec B101
    assert ends[0]["emitted"] is True  # nosec B101


def test_cancelled_token_stops_the_stream():
    token = CancellationToken()
    token.cancel("stop")
    transport = _Transport([[NativeDelta("a")], [NativeDelta("b")]])
    with pytest.raises(CancelledError):
        asyncio.run(_transcoder(token).pump(transport.handle(), lambda item: None))
    assert transport.closes == 1  # nosec B101
    assert transport.read == 1  # nosec B101


def test_iterate_yields_canonical_items_and_logs_end(caplog):
    transport = _Transport([[NativeDelta("a")], [NativeStop(FinishReason.STOP)]])
    stream = ChunkStream(_transcoder(), transport.handle())

    async def collect():
        return [item async for item in stream]

    with caplog.at_level(logging.INFO, logger="chatbridge"):
        items = asyncio.run(collect())
    assert items == [CanonicalChunk("a"), CanonicalChunk("", FinishReason.STOP), STREAM_SENTINEL]  # nosec B101
    assert transport.closes == 1  # nosec B101
    end = [json.loads(r.getMessage()) for r in caplog.records if '"stream.end"' in r.getMessage()][0]
    assert end["finish_reason"] == "stop"  # nosec B101
    assert end["emitted_count"] == 1  # nosec B101


def test_chunk_stream_aclose_mid_iteration_releases():
    transport = _Transport([[NativeDelta("a")], [NativeDelta("b")], [NativeStop(FinishReason.STOP)]])
    stream = ChunkStream(_transcoder(), transport.handle())

    async def first_then_close():
        iterator = stream.__aiter__()
        first = await iterator.__anext__()
        await stream.aclose()
        return first

    assert asyncio.run(first_then_close()) == CanonicalChunk("a")  # nosec B101
    assert transport.closes == 1  # nosec B101
    assert stream.transcoder.done  # nosec B101


def test_chunk_stream_aclose_before_iteration_releases():
    transport = _Transport([[NativeDelta("a")]])
    stream = ChunkStream(_transcoder(), transport.handle())
    asyncio.run(stream.aclose())
    asyncio.run(stream.aclose())
    assert transport.closes == 1  # nosec B101
    assert transport.read == 0  # nosec B101


def test_transport_handle_release_suppresses_close_errors():
    async def events():
        yield 1

    def close():
        raise OSError("already closed")

    handle = TransportHandle(events(), close)
    asyncio.run(handle.release())
    assert handle.released  # nosec B101
