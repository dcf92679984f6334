"""Tests for chatstream.transport (httpx mocked with MockTransport)."""

from __future__ import annotations

import json

import httpx
import pytest

from chatstream.core.conversation import ConversationLog
from chatstream.stream.session import SessionState, StreamSession
from chatstream.transport.base import ByteChunkSource, TransportError
from chatstream.transport.http import HttpChunkSource
from chatstream.types.config import DEFAULT_ERROR_MESSAGE, ChatConfig


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


async def _collect(source: HttpChunkSource) -> bytes:
    return b"".join([chunk async for chunk in source])


class TestHttpChunkSource:
    def test_is_byte_chunk_source(self):
        assert isinstance(HttpChunkSource("hi"), ByteChunkSource)

    def test_request_body(self):
        source = HttpChunkSource("Hello there", ChatConfig(model="mistral"))
        assert source.request_body() == {
            "model": "mistral",
            "messages": [{"role": "user", "content": "Hello there"}],
            "stream": True,
        }

    @pytest.mark.asyncio
    async def test_posts_prompt_and_yields_body(self, chat_body):
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=chat_body)

        config = ChatConfig(url="http://chat.test/api/chat", headers={"X-Trace": "1"})
        async with _client(handler) as client:
            body = await _collect(HttpChunkSource("Hi", config, client=client))

        assert body == chat_body
        request = seen[0]
        assert request.method == "POST"
        assert str(request.url) == "http://chat.test/api/chat"
        assert request.headers["X-Trace"] == "1"
        assert request.headers["User-Agent"].startswith("chatstream/")
        payload = json.loads(request.content)
        assert payload["stream"] is True
        assert payload["messages"] == [{"role": "user", "content": "Hi"}]

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, content=b"busy")

        async with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                await _collect(HttpChunkSource("Hi", client=client))
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_connection_error_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError, match="ConnectError"):
                await _collect(HttpChunkSource("Hi", client=client))

    @pytest.mark.asyncio
    async def test_session_over_http(self, chat_body):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, content=chat_body)

        log = ConversationLog()
        async with _client(handler) as client:
            session = StreamSession(log)
            message = await session.run(HttpChunkSource("Hi", client=client))
        assert message.content == "Hello world"
        assert session.state is SessionState.CLOSED

    @pytest.mark.asyncio
    async def test_session_over_failing_http(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500)

        log = ConversationLog()
        async with _client(handler) as client:
            session = StreamSession(log)
            message = await session.run(HttpChunkSource("Hi", client=client))
        assert message.content == DEFAULT_ERROR_MESSAGE
        assert session.state is SessionState.FAILED
        assert session.error.status_code == 500
