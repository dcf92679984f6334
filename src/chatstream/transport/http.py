"""Streaming HTTP chat request via httpx."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

import httpx

from chatstream.transport.base import TransportError
from chatstream.types.config import ChatConfig

logger = logging.getLogger(__name__)

USER_AGENT = "chatstream/0.1"


class HttpChunkSource:
    """POST a single user turn and yield the streamed response body.

    Parameters
    ----------
    prompt:
        The user's message; it is sent as the only entry of ``messages``.
    config:
        Endpoint, model and timeout settings.
    client:
        Optional shared :class:`httpx.AsyncClient`.  When omitted a client
        is created for the request and closed afterwards.
    """

    def __init__(
        self,
        prompt: str,
        config: ChatConfig | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._prompt = prompt
        self._config = config or ChatConfig()
        self._client = client

    def request_body(self) -> dict[str, Any]:
        return {
            "model": self._config.model,
            "messages": [{"role": "user", "content": self._prompt}],
            "stream": True,
        }

    @asynccontextmanager
    async def _client_context(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient(timeout=self._config.timeout) as client:
            yield client

    async def __aiter__(self) -> AsyncIterator[bytes]:
        headers = {"User-Agent": USER_AGENT, **self._config.headers}
        try:
            async with self._client_context() as client:
                async with client.stream(
                    "POST",
                    self._config.url,
                    json=self.request_body(),
                    headers=headers,
                    timeout=self._config.timeout,
                ) as response:
                    if response.is_error:
                        raise TransportError(
                            f"Chat endpoint returned HTTP {response.status_code}",
                            status_code=response.status_code,
                        )
                    logger.debug("Streaming response from %s", self._config.url)
                    async for chunk in response.aiter_bytes():
                        if chunk:
                            yield chunk
        except httpx.HTTPError as exc:
            raise TransportError(f"{type(exc).__name__}: {exc}") from exc
