"""httpx transports that route matching requests into the mock backend.

Usage::

    interceptor = RouteInterceptor(MockBackend())
    client = httpx.Client(base_url="http://api.test", transport=MockBackendTransport(interceptor))

Requests that match no mock route are forwarded to ``fallback`` (a real
network transport by default).
"""

from __future__ import annotations

from typing import Any

import anyio.to_thread
import httpx
import structlog

from prompt_mock.api.http import MockRequest, MockResponse
from prompt_mock.api.interceptor import RouteInterceptor

logger = structlog.get_logger()


def to_mock_request(request: httpx.Request, body: bytes) -> MockRequest:
    return MockRequest(
        method=request.method,
        path=request.url.path,
        query=dict(request.url.params),
        headers=dict(request.headers),
        body=body or None,
    )


def to_httpx_response(response: MockResponse, request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        status_code=response.status_code,
        headers=response.headers,
        content=response.body,
        request=request,
    )


class MockBackendTransport(httpx.BaseTransport):
    """Synchronous transport answering from a :class:`RouteInterceptor`."""

    def __init__(
        self,
        interceptor: RouteInterceptor,
        fallback: httpx.BaseTransport | None = None,
    ) -> None:
        self.interceptor = interceptor
        self._fallback = fallback

    @property
    def fallback(self) -> httpx.BaseTransport:
        if self._fallback is None:
            self._fallback = httpx.HTTPTransport()
        return self._fallback

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        response = self.interceptor.handle(to_mock_request(request, request.read()))
        if response is None:
            logger.info("mock.forwarded", method=request.method, url=str(request.url))
            return self.fallback.handle_request(request)
        return to_httpx_response(response, request)

    def close(self) -> None:
        if self._fallback is not None:
            self._fallback.close()


class AsyncMockBackendTransport(httpx.AsyncBaseTransport):
    """Async counterpart of :class:`MockBackendTransport`.

    The interceptor runs on a worker thread so its store lock never blocks
    the event loop.
    """

    def __init__(
        self,
        interceptor: RouteInterceptor,
        fallback: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.interceptor = interceptor
        self._fallback = fallback

    @property
    def fallback(self) -> httpx.AsyncBaseTransport:
        if self._fallback is None:
            self._fallback = httpx.AsyncHTTPTransport()
        return self._fallback

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        response = await anyio.to_thread.run_sync(
            self.interceptor.handle, to_mock_request(request, body)
        )
        if response is None:
            logger.info("mock.forwarded", method=request.method, url=str(request.url))
            return await self.fallback.handle_async_request(request)
        return to_httpx_response(response, request)

    async def aclose(self) -> None:
        if self._fallback is not None:
            await self._fallback.aclose()


def mock_client(
    interceptor: RouteInterceptor,
    base_url: str = "http://promptmock.test",
    fallback: httpx.BaseTransport | None = None,
    **kwargs: Any,
) -> httpx.Client:
    """An ``httpx.Client`` whose matching requests are served by the mock."""
    return httpx.Client(
        base_url=base_url,
        transport=MockBackendTransport(interceptor, fallback=fallback),
        **kwargs,
    )
