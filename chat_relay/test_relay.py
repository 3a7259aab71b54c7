"""Tests for the ChatRelay response state machine."""

import asyncio

import pytest

from chat_relay.conftest import FakeProvider
from chat_relay.exceptions import ChatProcessingException, ResponseStateError, UpstreamError
from chat_relay.models import ChatRequest, DeltaEvent
from chat_relay.relay import ChatRelay, ResponseState


def run(coro):
    return asyncio.run(coro)


def test_start_stays_pending_until_streamed():
    provider = FakeProvider([DeltaEvent(content="Hel"), DeltaEvent(content="lo")])
    relay = ChatRelay(provider)

    async def scenario():
        await relay.start(ChatRequest(message="hi"))
        assert relay.state is ResponseState.PENDING
        # primed up to the first fragment only
        assert provider.pulled == 1
        seen = []
        async for chunk in relay.stream():
            seen.append((chunk, relay.state))
        return seen

    seen = run(scenario())
    assert seen == [("Hel", ResponseState.STREAMING), ("lo", ResponseState.STREAMING)]
    assert relay.state is ResponseState.CLOSED


def test_fail_while_pending_gives_500():
    relay = ChatRelay(FakeProvider([UpstreamError("boom", status_code=503, body="down")]))

    async def scenario():
        with pytest.raises(UpstreamError) as excinfo:
            await relay.start(ChatRequest(message="hi"))
        return excinfo.value

    error = relay.fail(run(scenario()))
    assert isinstance(error, ChatProcessingException)
    assert error.status_code == 500
    assert relay.state is ResponseState.CLOSED


def test_fail_after_streaming_is_illegal():
    relay = ChatRelay(FakeProvider([DeltaEvent(content="x")]))

    async def scenario():
        await relay.start(ChatRequest(message="hi"))
        body = relay.stream()
        await body.__anext__()
        assert relay.state is ResponseState.STREAMING
        with pytest.raises(ResponseStateError):
            relay.fail(RuntimeError("late"))
        await body.aclose()

    run(scenario())
    assert relay.state is ResponseState.CLOSED


def test_abandoned_stream_closes_upstream():
    provider = FakeProvider([DeltaEvent(content="a"), DeltaEvent(content="b"), DeltaEvent(content="c")])
    relay = ChatRelay(provider)

    async def scenario():
        await relay.start(ChatRequest(message="hi"))
        body = relay.stream()
        assert await body.__anext__() == "a"
        assert await body.__anext__() == "b"
        # client went away
        await body.aclose()

    run(scenario())
    assert provider.closed
    assert provider.pulled == 2
    assert relay.state is ResponseState.CLOSED
